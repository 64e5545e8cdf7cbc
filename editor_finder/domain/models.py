"""
Data models for editor records, discovery candidates and search filters.

Records are the persisted, resolved entities. Candidates are ephemeral
observations produced by discovery parsing or feed sync; they are either
merged into a Record or promoted to a new one.
"""

from __future__ import annotations

import copy
import dataclasses
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from enum import Enum
from typing import Any

from editor_finder.constants import (
    DEFAULT_RESULT_CAP,
    DISCOVERY_ORIGIN,
    EXPERIENCE_RANGE_MAX,
    EXPERIENCE_RANGE_MIN,
)

_FRESHNESS_STEP = timedelta(microseconds=1)


def utcnow() -> datetime:
    """Timezone-aware current time."""
    return datetime.now(UTC)


class UnionStatus(Enum):
    """Guild membership of an editor."""

    GUILD = "guild"
    NON_UNION = "non-union"
    UNKNOWN = "unknown"


class Availability(Enum):
    """Booking availability of an editor."""

    AVAILABLE = "available"
    BUSY = "busy"
    UNKNOWN = "unknown"


@dataclass
class Location:
    """Where an editor works."""

    city: str = "Unknown"
    state: str = "Unknown"
    country: str = "Unknown"
    remote: bool = False

    @property
    def label(self) -> str:
        """Facet label, e.g. "Los Angeles, CA"."""
        return f"{self.city}, {self.state}"


@dataclass(frozen=True)
class ProvenanceEntry:
    """One origin that contributed data to a record."""

    origin_id: str
    contributed_at: datetime


@dataclass
class Record:
    """
    A resolved editor.

    Invariants:
    - ``id`` is immutable once assigned
    - ``provenance`` is never empty for a persisted record (enforced by stores)
    - ``updated_at`` strictly increases on every mutation (see ``touch``)
    """

    id: str
    name: str
    tags: list[str] = field(default_factory=list)  # Specialties / genres
    affiliations: list[str] = field(default_factory=list)  # Networks
    years_active: int = 0
    start_year: int | None = None
    location: Location = field(default_factory=Location)
    union_status: UnionStatus = UnionStatus.UNKNOWN
    availability: Availability = Availability.UNKNOWN
    award_winner: bool = False
    provenance: list[ProvenanceEntry] = field(default_factory=list)
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)
    verified: bool = False

    def __setattr__(self, name: str, value: Any) -> None:
        if name == "id" and "id" in self.__dict__:
            raise AttributeError("Record.id is immutable once assigned")
        super().__setattr__(name, value)

    @property
    def origin_ids(self) -> list[str]:
        """Distinct origin ids, in contribution order."""
        seen: list[str] = []
        for entry in self.provenance:
            if entry.origin_id not in seen:
                seen.append(entry.origin_id)
        return seen

    def has_origin(self, origin_id: str) -> bool:
        return any(entry.origin_id == origin_id for entry in self.provenance)

    def add_origin(self, origin_id: str, when: datetime | None = None) -> bool:
        """Add an origin to provenance if absent. Returns True if added."""
        if self.has_origin(origin_id):
            return False
        self.provenance.append(ProvenanceEntry(origin_id, when or utcnow()))
        return True

    def add_tags(self, tags: list[str] | tuple[str, ...]) -> bool:
        """Union tags into the record (case-insensitive). Returns True if changed."""
        return _union_into(self.tags, tags)

    def add_affiliations(self, affiliations: list[str] | tuple[str, ...]) -> bool:
        """Union affiliations into the record. Returns True if changed."""
        return _union_into(self.affiliations, affiliations)

    def touch(self, now: datetime | None = None) -> None:
        """Bump freshness; never moves backwards, always moves forward."""
        now = now or utcnow()
        self.updated_at = max(now, self.updated_at + _FRESHNESS_STEP)

    def copy(self) -> Record:
        return copy.deepcopy(self)

    def to_dict(self) -> dict[str, Any]:
        """Persisted layout (ISO-8601 timestamps, provenance entries)."""
        return {
            "id": self.id,
            "name": self.name,
            "tags": list(self.tags),
            "affiliations": list(self.affiliations),
            "years_active": self.years_active,
            "start_year": self.start_year,
            "location": dataclasses.asdict(self.location),
            "union_status": self.union_status.value,
            "availability": self.availability.value,
            "award_winner": self.award_winner,
            "provenance": [
                {"origin_id": p.origin_id, "contributed_at": p.contributed_at.isoformat()}
                for p in self.provenance
            ],
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
            "verified": self.verified,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Record:
        """Rebuild a record from its persisted layout."""
        return cls(
            id=data["id"],
            name=data["name"],
            tags=list(data.get("tags") or []),
            affiliations=list(data.get("affiliations") or []),
            years_active=int(data.get("years_active") or 0),
            start_year=data.get("start_year"),
            location=Location(**(data.get("location") or {})),
            union_status=UnionStatus(data.get("union_status", "unknown")),
            availability=Availability(data.get("availability", "unknown")),
            award_winner=bool(data.get("award_winner", False)),
            provenance=[
                ProvenanceEntry(p["origin_id"], _parse_datetime(p["contributed_at"]))
                for p in data.get("provenance") or []
            ],
            created_at=_parse_datetime(data.get("created_at")),
            updated_at=_parse_datetime(data.get("updated_at")),
            verified=bool(data.get("verified", False)),
        )


@dataclass(frozen=True)
class Candidate:
    """An unresolved observation of an editor, not yet persisted."""

    name: str
    origin_url: str
    origin_id: str = DISCOVERY_ORIGIN
    tags: tuple[str, ...] = ()
    affiliations: tuple[str, ...] = ()
    years_active: int | None = None  # Rough estimate
    start_year: int | None = None
    confidence_hint: float = 0.5  # Parser's own confidence (0-1)


@dataclass
class ExperienceRange:
    """Inclusive years-active bounds. The default range means unconstrained."""

    min: int = EXPERIENCE_RANGE_MIN
    max: int = EXPERIENCE_RANGE_MAX

    @property
    def is_constrained(self) -> bool:
        return self.min > EXPERIENCE_RANGE_MIN or self.max < EXPERIENCE_RANGE_MAX


@dataclass
class SearchFilter:
    """Caller-facing query: free text plus structured constraints."""

    query: str = ""
    tags: list[str] = field(default_factory=list)
    affiliations: list[str] = field(default_factory=list)
    union_statuses: list[UnionStatus] = field(default_factory=list)
    availabilities: list[Availability] = field(default_factory=list)
    experience: ExperienceRange = field(default_factory=ExperienceRange)
    cities: list[str] = field(default_factory=list)
    states: list[str] = field(default_factory=list)
    remote_only: bool = False
    award_winners_only: bool = False
    limit: int = DEFAULT_RESULT_CAP

    @property
    def text(self) -> str:
        return (self.query or "").strip()

    @property
    def has_text(self) -> bool:
        return bool(self.text)

    @property
    def has_filters(self) -> bool:
        """True if any structured constraint is set."""
        return bool(
            self.tags
            or self.affiliations
            or self.union_statuses
            or self.availabilities
            or self.cities
            or self.states
            or self.remote_only
            or self.award_winners_only
            or self.experience.is_constrained
        )

    def replace(self, **changes: Any) -> SearchFilter:
        return dataclasses.replace(self, **changes)


def _union_into(target: list[str], values: list[str] | tuple[str, ...]) -> bool:
    existing = {v.lower() for v in target}
    changed = False
    for value in values:
        value = value.strip()
        if value and value.lower() not in existing:
            target.append(value)
            existing.add(value.lower())
            changed = True
    return changed


def _parse_datetime(value: Any) -> datetime:
    if isinstance(value, datetime):
        parsed = value
    elif value:
        parsed = datetime.fromisoformat(str(value))
    else:
        return utcnow()
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed
