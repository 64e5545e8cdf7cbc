"""
CLI command entry points for editor_finder.

These functions are registered as console scripts in pyproject.toml.
"""

import argparse
import json
import sys

from editor_finder.cache import get_cache
from editor_finder.cli.args import add_execute_argument, add_filter_arguments, filter_from_args
from editor_finder.cli.logging import print_header, setup_logging
from editor_finder.config import Settings, get_settings
from editor_finder.discovery.providers import ApifyRagBrowserProvider
from editor_finder.entity_resolution.resolver import EntityResolver
from editor_finder.errors import ConfigurationError, StorageUnavailable
from editor_finder.retriever import HybridRetriever
from editor_finder.sources.tmdb import TmdbClient
from editor_finder.storage.sqlite import SqliteRecordStore
from editor_finder.sync import FeedSynchronizer


def build_provider(settings: Settings) -> ApifyRagBrowserProvider | None:
    """Discovery provider from settings, or None when no API token is configured."""
    if not settings.apify_api_token:
        return None
    return ApifyRagBrowserProvider(
        settings.apify_api_token, timeout=settings.discovery_timeout_seconds
    )


def run_search():
    """Entry point for the editor-search command."""
    settings = get_settings()
    parser = argparse.ArgumentParser(description="Search television editors")
    add_filter_arguments(parser, default_limit=settings.result_cap)
    parser.add_argument("--no-discovery", action="store_true", help="Local store only")
    parser.add_argument("--deadline", type=float, default=None, help="Time budget in seconds")
    parser.add_argument("--verbose", "-v", action="store_true")
    args = parser.parse_args()

    logger = setup_logging("editor_search", verbose=args.verbose)

    try:
        store = SqliteRecordStore(settings.sqlite_path)
    except StorageUnavailable as e:
        logger.error(str(e))
        sys.exit(1)

    provider = None
    if not args.no_discovery:
        provider = build_provider(settings)
        if provider is None:
            logger.info("APIFY_API_TOKEN not set; discovery disabled")

    retriever = HybridRetriever(store, provider=provider, settings=settings, cache=get_cache())
    result = retriever.search(filter_from_args(args), deadline_seconds=args.deadline)

    print(json.dumps(result.to_dict(), indent=2))
    if result.error:
        sys.exit(1)


def run_sync_tmdb():
    """Entry point for the editor-sync-tmdb command."""
    parser = argparse.ArgumentParser(description="Sync editors from the TMDb feed")
    add_execute_argument(parser)
    parser.add_argument("--max-shows", type=int, default=50)
    parser.add_argument("--workers", type=int, default=None)
    args = parser.parse_args()

    logger = setup_logging("editor_sync_tmdb", execute=args.execute)
    settings = get_settings()
    print_header("TMDb Editor Sync", dry_run=not args.execute, logger=logger)

    try:
        client = TmdbClient()
    except ConfigurationError as e:
        logger.error(str(e))
        sys.exit(1)

    synchronizer = FeedSynchronizer(
        SqliteRecordStore(settings.sqlite_path),
        client,
        resolver=EntityResolver(settings.fuzzy_threshold),
        max_workers=args.workers or settings.discovery_workers,
    )
    result = synchronizer.sync(max_shows=args.max_shows, dry_run=not args.execute)

    verb = "Added" if args.execute else "Would add"
    logger.info(f"Shows processed: {result.shows_processed}")
    logger.info(f"Editors processed: {result.editors_processed}")
    logger.info(f"{verb}: {result.editors_added}")
    logger.info(f"{'Updated' if args.execute else 'Would update'}: {result.editors_updated}")
    logger.info(f"Rejected: {result.editors_rejected}")
    for error in result.errors:
        logger.warning(error)
    if not args.execute:
        logger.info("Dry run complete. Use --execute to write records.")
    if not result.success:
        sys.exit(1)


def run_cache():
    """Entry point for the editor-cache command."""
    parser = argparse.ArgumentParser(description="Manage the discovery cache")
    parser.add_argument("command", choices=["stats", "list", "clear"])
    parser.add_argument("--namespace", "-n", help="Filter by namespace")
    parser.add_argument("--limit", type=int, default=20, help="Limit for list")
    parser.add_argument("--yes", "-y", action="store_true", help="Skip confirmation")
    args = parser.parse_args()

    cache = get_cache()

    if args.command == "stats":
        stats = cache.stats()
        print(f"Cache: {stats['cache_dir']}")
        print(f"  Total entries: {stats['total']}")
        print(f"  Size: {stats['size_mb']} MB")
        for ns, count in sorted(stats["by_namespace"].items()):
            print(f"    {ns}: {count}")

    elif args.command == "list":
        print(f"Keys ({args.namespace or 'all'}, limit {args.limit}):")
        for key in cache.keys(namespace=args.namespace, limit=args.limit):
            print(f"  {key}")

    elif args.command == "clear":
        if not args.namespace:
            print("Specify --namespace to clear (pages or search)")
            return
        if not args.yes:
            confirm = input(f"Clear all {args.namespace} entries? [y/N] ")
            if confirm.lower() != "y":
                print("Aborted")
                return
        count = cache.clear_namespace(args.namespace)
        print(f"Cleared {count} entries from {args.namespace}")
