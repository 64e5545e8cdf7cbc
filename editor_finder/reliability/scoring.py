"""
Reliability Scoring Module.

Combines source quality, corroboration, freshness and verification into a
0-100 confidence score for a record. The scorer is pure: no I/O, no
mutation, and ``now`` is an explicit argument so identical inputs always
give identical scores.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from editor_finder.constants import RELIABILITY_WEIGHTS
from editor_finder.domain.models import Candidate, Record, utcnow
from editor_finder.sources.registry import SourceRegistry, load_registry


class Recommendation(Enum):
    """Coarse advice derived from the overall score."""

    TRUSTED = "trusted"
    CAUTION = "caution"
    VERIFY = "verify"
    REJECT = "reject"


class ValidationStatus(Enum):
    """Validation state of a record, as shown to curators."""

    VERIFIED = "verified"
    PENDING = "pending"
    DISPUTED = "disputed"
    INVALID = "invalid"


@dataclass(frozen=True)
class ScoringFactors:
    """Individual factors that contribute to the overall score (each 0-100)."""

    source_quality: int
    corroboration: int
    freshness: int
    verification: int


@dataclass(frozen=True)
class ReliabilityScore:
    """Result of reliability scoring."""

    overall: int  # 0-100
    factors: ScoringFactors
    recommendation: Recommendation
    status: ValidationStatus
    note: str
    origin_count: int  # distinct origins on the record
    counted_origins: int  # strongest origins the factors were computed over

    def to_dict(self) -> dict:
        return {
            "overall": self.overall,
            "recommendation": self.recommendation.value,
            "status": self.status.value,
            "note": self.note,
            "origin_count": self.origin_count,
            "counted_origins": self.counted_origins,
            "factors": {
                "source_quality": self.factors.source_quality,
                "corroboration": self.factors.corroboration,
                "freshness": self.factors.freshness,
                "verification": self.factors.verification,
            },
        }


# (max age in days, score); anything older scores FRESHNESS_FLOOR
FRESHNESS_BANDS = ((7, 100), (30, 80), (90, 60), (365, 40))
FRESHNESS_FLOOR = 20
FRESHNESS_UNKNOWN = 50

# distinct origin count -> score; 4+ origins score 100
CORROBORATION_SCORES = {0: 30, 1: 30, 2: 60, 3: 80}
CORROBORATION_MAX = 100

VERIFIED_SCORE = 100
UNVERIFIED_SCORE = 30
VERIFICATION_UNKNOWN = 50

TRUSTED_THRESHOLD = 85
CAUTION_THRESHOLD = 70
VERIFY_THRESHOLD = 50


class ReliabilityScorer:
    """
    Weighted reliability scorer.

    overall = 0.4*source_quality + 0.3*corroboration + 0.2*freshness + 0.1*verification
    """

    def __init__(
        self,
        registry: SourceRegistry | None = None,
        weights: dict[str, float] | None = None,
    ):
        """
        Initialize scorer.

        Args:
            registry: Origin registry (default: packaged table)
            weights: Custom factor weights (should sum to 1.0)
        """
        self.registry = registry or load_registry()
        self.weights = weights or RELIABILITY_WEIGHTS

    def score(self, record: Record, now: datetime | None = None) -> ReliabilityScore:
        """Score a persisted record from its provenance, freshness and verified flag."""
        return self.score_parts(
            origin_ids=record.origin_ids,
            updated_at=record.updated_at,
            verified=record.verified,
            now=now,
        )

    def score_candidate(self, candidate: Candidate, now: datetime | None = None) -> ReliabilityScore:
        """Score a candidate as if it were a fresh, unverified single-origin record."""
        now = now or utcnow()
        return self.score_parts([candidate.origin_id], updated_at=now, verified=False, now=now)

    def score_parts(
        self,
        origin_ids: list[str],
        updated_at: datetime | None,
        verified: bool | None,
        now: datetime | None = None,
    ) -> ReliabilityScore:
        """
        Score from raw parts.

        Origins are ranked by reliability and every top-k prefix is scored;
        the best prefix wins. A weak extra origin therefore adds
        corroboration only when it outweighs the drop in mean source
        quality, so adding an origin never lowers the score. The reported
        factors describe that prefix (``counted_origins``), while
        ``origin_count`` is the record's full distinct origin count.
        """
        distinct = list(dict.fromkeys(origin_ids))
        ranked = sorted(distinct, key=self.registry.reliability, reverse=True)
        freshness = freshness_score(updated_at, now or utcnow())
        verification = verification_score(verified)

        best: tuple[int, ScoringFactors, int] | None = None
        for k in range(1 if ranked else 0, len(ranked) + 1):
            factors = ScoringFactors(
                source_quality=self.source_quality(ranked[:k]),
                corroboration=corroboration_score(k),
                freshness=freshness,
                verification=verification,
            )
            overall = self._combine(factors)
            if best is None or overall > best[0]:
                best = (overall, factors, k)

        overall, factors, counted = best  # type: ignore[misc]
        known = sum(1 for origin_id in distinct if origin_id in self.registry)
        return ReliabilityScore(
            overall=overall,
            factors=factors,
            recommendation=recommendation_for(overall),
            status=validation_status(overall, known),
            note=validation_note(overall, len(distinct)),
            origin_count=len(distinct),
            counted_origins=counted,
        )

    def _combine(self, factors: ScoringFactors) -> int:
        overall = round(
            self.weights["source_quality"] * factors.source_quality
            + self.weights["corroboration"] * factors.corroboration
            + self.weights["freshness"] * factors.freshness
            + self.weights["verification"] * factors.verification
        )
        return max(0, min(100, overall))

    def source_quality(self, origin_ids: list[str]) -> int:
        """Mean static reliability of the contributing origins."""
        if not origin_ids:
            return 0
        weights = [self.registry.reliability(origin_id) for origin_id in origin_ids]
        return round(sum(weights) / len(weights))


def corroboration_score(distinct_origins: int) -> int:
    """Independent corroboration: 1 origin -> 30, 2 -> 60, 3 -> 80, 4+ -> 100."""
    return CORROBORATION_SCORES.get(distinct_origins, CORROBORATION_MAX)


def freshness_score(updated_at: datetime | None, now: datetime) -> int:
    """Decay in fixed bands by days since the last update."""
    if updated_at is None:
        return FRESHNESS_UNKNOWN
    days = (now - updated_at).days
    for max_days, score in FRESHNESS_BANDS:
        if days <= max_days:
            return score
    return FRESHNESS_FLOOR


def verification_score(verified: bool | None) -> int:
    if verified is True:
        return VERIFIED_SCORE
    if verified is False:
        return UNVERIFIED_SCORE
    return VERIFICATION_UNKNOWN


def recommendation_for(overall: int) -> Recommendation:
    if overall >= TRUSTED_THRESHOLD:
        return Recommendation.TRUSTED
    if overall >= CAUTION_THRESHOLD:
        return Recommendation.CAUTION
    if overall >= VERIFY_THRESHOLD:
        return Recommendation.VERIFY
    return Recommendation.REJECT


def validation_status(overall: int, known_origin_count: int) -> ValidationStatus:
    """
    Curator-facing validation status.

    "verified" additionally requires at least two origins known to the registry.
    """
    if overall >= TRUSTED_THRESHOLD and known_origin_count >= 2:
        return ValidationStatus.VERIFIED
    if overall >= CAUTION_THRESHOLD:
        return ValidationStatus.PENDING
    if overall >= VERIFY_THRESHOLD:
        return ValidationStatus.DISPUTED
    return ValidationStatus.INVALID


def validation_note(overall: int, origin_count: int) -> str:
    """Human-readable note for a validation status."""
    if overall >= TRUSTED_THRESHOLD:
        return f"High confidence data verified by {origin_count} reliable sources"
    if overall >= CAUTION_THRESHOLD:
        return (
            f"Moderate confidence data from {origin_count} sources, "
            "pending additional verification"
        )
    if overall >= VERIFY_THRESHOLD:
        return "Low confidence data, requires manual verification"
    return "Very low confidence data, recommend rejection or extensive verification"
