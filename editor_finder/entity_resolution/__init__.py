"""
Entity resolution: matching Candidates to Records and merging them.
"""

from editor_finder.entity_resolution.merger import (
    ConflictTracker,
    KeyedLocks,
    MergeAction,
    MergeOutcome,
    ResultMerger,
    apply_candidate,
    blend,
    promote,
)
from editor_finder.entity_resolution.resolver import (
    EntityResolver,
    ExactMatch,
    FuzzyMatch,
    MatchResult,
    NoMatch,
    RecordIndex,
    Rejected,
)

__all__ = [
    "ConflictTracker",
    "EntityResolver",
    "ExactMatch",
    "FuzzyMatch",
    "KeyedLocks",
    "MatchResult",
    "MergeAction",
    "MergeOutcome",
    "NoMatch",
    "RecordIndex",
    "Rejected",
    "ResultMerger",
    "apply_candidate",
    "blend",
    "promote",
]
