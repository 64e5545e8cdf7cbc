"""Domain model: records, candidates and search filters."""

from editor_finder.domain.models import (
    Availability,
    Candidate,
    ExperienceRange,
    Location,
    ProvenanceEntry,
    Record,
    SearchFilter,
    UnionStatus,
    utcnow,
)

__all__ = [
    "Availability",
    "Candidate",
    "ExperienceRange",
    "Location",
    "ProvenanceEntry",
    "Record",
    "SearchFilter",
    "UnionStatus",
    "utcnow",
]
