"""
Reliability scoring for editor records.
"""

from editor_finder.reliability.scoring import (
    Recommendation,
    ReliabilityScore,
    ReliabilityScorer,
    ScoringFactors,
    ValidationStatus,
    validation_note,
    validation_status,
)

__all__ = [
    "Recommendation",
    "ReliabilityScore",
    "ReliabilityScorer",
    "ScoringFactors",
    "ValidationStatus",
    "validation_note",
    "validation_status",
]
