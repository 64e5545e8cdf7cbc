"""
Metadata feed sync.

Pulls popular and top-rated TV shows from TMDb, extracts their editing
crew and pushes every crew member through entity resolution and merging
with origin ``tmdb``. Shows are processed in parallel; one failing show
never stops the run.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from editor_finder.constants import DEFAULT_WORKERS
from editor_finder.entity_resolution.merger import MergeAction, ResultMerger
from editor_finder.entity_resolution.resolver import (
    EntityResolver,
    NoMatch,
    RecordIndex,
    Rejected,
)
from editor_finder.errors import FeedUnavailable
from editor_finder.sources.tmdb import TmdbClient, TmdbShow, crew_to_candidate, extract_editors
from editor_finder.storage.base import RecordStore
from editor_finder.utils.parallel import execute_parallel
from editor_finder.utils.stats import ExecutionStats

logger = logging.getLogger(__name__)


@dataclass
class SyncResult:
    """Counters for one sync run."""

    shows_processed: int = 0
    editors_processed: int = 0
    editors_added: int = 0
    editors_updated: int = 0
    editors_rejected: int = 0
    errors: list[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return not self.errors


class FeedSynchronizer:
    """Sync editors from the TMDb feed into the record store."""

    def __init__(
        self,
        store: RecordStore,
        client: TmdbClient,
        resolver: EntityResolver | None = None,
        max_workers: int = DEFAULT_WORKERS,
        show_progress: bool = True,
    ):
        self.store = store
        self.client = client
        self.resolver = resolver or EntityResolver()
        self.merger = ResultMerger(store, self.resolver)
        self.max_workers = max_workers
        self.show_progress = show_progress

    def fetch_shows(self, max_shows: int) -> list[TmdbShow]:
        """Popular then top-rated shows, deduplicated by id."""
        shows: dict[int, TmdbShow] = {}
        for show in self.client.popular_shows() + self.client.top_rated_shows():
            shows.setdefault(show.id, show)
        return list(shows.values())[:max_shows]

    def _sync_show(
        self, show: TmdbShow, index: RecordIndex, stats: ExecutionStats, dry_run: bool
    ) -> None:
        details = self.client.show_details(show.id)
        editors = extract_editors(self.client.crew(show.id))
        logger.debug(f"{details.name}: {len(editors)} editing crew")
        for member in editors:
            candidate = crew_to_candidate(member, details)
            stats.increment("editors_processed")
            if dry_run:
                match = self.resolver.resolve(candidate, index)
                if isinstance(match, Rejected):
                    stats.increment("editors_rejected")
                elif isinstance(match, NoMatch):
                    stats.increment("editors_added")
                else:
                    stats.increment("editors_updated")
                continue
            outcome = self.merger.merge(candidate, index)
            if outcome.action is MergeAction.CREATED:
                stats.increment("editors_added")
            elif outcome.action is MergeAction.UPDATED:
                stats.increment("editors_updated")
            elif outcome.action is MergeAction.REJECTED:
                stats.increment("editors_rejected")
        stats.increment("shows_processed")

    def sync(self, max_shows: int = 50, dry_run: bool = False) -> SyncResult:
        """
        Run a sync.

        Args:
            max_shows: Cap on shows pulled from the feed
            dry_run: Resolve crew but write nothing (counts are what would happen)

        Returns:
            SyncResult with per-run counters and error messages
        """
        result = SyncResult()
        try:
            shows = self.fetch_shows(max_shows)
        except FeedUnavailable as e:
            logger.error(f"Could not list TMDb shows: {e}")
            result.errors.append(f"TMDb sync failed: {e}")
            return result

        logger.info(f"Syncing editors from {len(shows)} TMDb shows")
        index = RecordIndex.from_store(self.store)
        stats = ExecutionStats()
        errors: list[str] = []

        def on_error(show: TmdbShow, error: Exception) -> None:
            logger.warning(f"Error syncing show {show.name}: {error}")
            errors.append(f"Error syncing show {show.name}: {error}")

        execute_parallel(
            shows,
            lambda show: self._sync_show(show, index, stats, dry_run),
            max_workers=self.max_workers,
            desc="Syncing TMDb shows",
            unit="show",
            show_progress=self.show_progress,
            error_handler=on_error,
            progress_postfix=lambda: {
                "added": stats.get("editors_added"),
                "updated": stats.get("editors_updated"),
            },
        )

        result.shows_processed = stats.get("shows_processed")
        result.editors_processed = stats.get("editors_processed")
        result.editors_added = stats.get("editors_added")
        result.editors_updated = stats.get("editors_updated")
        result.editors_rejected = stats.get("editors_rejected")
        result.errors = errors
        logger.info(
            f"TMDb sync: {result.shows_processed} shows, {result.editors_added} added, "
            f"{result.editors_updated} updated, {len(result.errors)} errors"
        )
        return result
