"""
Unit tests for editor_finder.reliability.scoring module.
"""

from datetime import UTC, datetime, timedelta

import pytest

from editor_finder.domain.models import Candidate
from editor_finder.reliability.scoring import (
    Recommendation,
    ReliabilityScorer,
    ValidationStatus,
    corroboration_score,
    freshness_score,
    recommendation_for,
    validation_note,
    validation_status,
    verification_score,
)

T0 = datetime(2025, 6, 1, 12, 0, tzinfo=UTC)

STRONG_ORIGINS = (
    "emmy-awards",
    "television-academy",
    "american-cinema-editors",
    "motion-picture-editors",
)


@pytest.fixture
def scorer():
    return ReliabilityScorer()


class TestFactors:
    """Test the individual scoring factors."""

    @pytest.mark.parametrize(
        "count,expected", [(0, 30), (1, 30), (2, 60), (3, 80), (4, 100), (9, 100)]
    )
    def test_corroboration(self, count, expected):
        assert corroboration_score(count) == expected

    @pytest.mark.parametrize(
        "age_days,expected",
        [(0, 100), (7, 100), (8, 80), (30, 80), (31, 60), (90, 60), (91, 40), (365, 40), (366, 20)],
    )
    def test_freshness_bands(self, age_days, expected):
        assert freshness_score(T0 - timedelta(days=age_days), T0) == expected

    def test_freshness_unknown(self):
        assert freshness_score(None, T0) == 50

    def test_verification(self):
        assert verification_score(True) == 100
        assert verification_score(False) == 30
        assert verification_score(None) == 50

    @pytest.mark.parametrize(
        "overall,expected",
        [
            (100, Recommendation.TRUSTED),
            (85, Recommendation.TRUSTED),
            (84, Recommendation.CAUTION),
            (70, Recommendation.CAUTION),
            (69, Recommendation.VERIFY),
            (50, Recommendation.VERIFY),
            (49, Recommendation.REJECT),
            (0, Recommendation.REJECT),
        ],
    )
    def test_recommendation_thresholds(self, overall, expected):
        assert recommendation_for(overall) is expected


class TestReliabilityScorer:
    """Test weighted scoring of records."""

    def test_single_scraped_origin_is_rejected(self, scorer, make_record):
        record = make_record("r1", "Kelley Dixon", origins=("web-discovery",), updated_at=T0)
        score = scorer.score(record, T0)
        # 0.4*30 + 0.3*30 + 0.2*100 + 0.1*30
        assert score.overall == 44
        assert score.recommendation is Recommendation.REJECT

    def test_two_strong_origins(self, scorer, make_record):
        record = make_record(
            "r1", "Margaret Sixel", origins=("emmy-awards", "american-cinema-editors"), updated_at=T0
        )
        score = scorer.score(record, T0)
        assert score.factors.corroboration == 60
        assert score.overall == 78
        assert score.recommendation is Recommendation.CAUTION

    def test_verified_well_corroborated_record_is_trusted(self, scorer, make_record):
        record = make_record(
            "r1", "Margaret Sixel", origins=STRONG_ORIGINS, updated_at=T0, verified=True
        )
        score = scorer.score(record, T0)
        assert score.recommendation is Recommendation.TRUSTED
        assert validation_status(score.overall, known_origin_count=4) is ValidationStatus.VERIFIED

    def test_adding_an_origin_never_lowers_score(self, scorer, make_record):
        base = make_record("r1", "Walter Murch", origins=("emmy-awards",), updated_at=T0)
        weaker = make_record(
            "r1", "Walter Murch", origins=("emmy-awards", "web-discovery"), updated_at=T0
        )
        assert scorer.score(weaker, T0).overall >= scorer.score(base, T0).overall

    def test_duplicate_origins_count_once(self, scorer, make_record):
        once = make_record("r1", "Walter Murch", origins=("tmdb",), updated_at=T0)
        twice = make_record("r1", "Walter Murch", origins=("tmdb", "tmdb"), updated_at=T0)
        assert scorer.score(once, T0) == scorer.score(twice, T0)

    def test_stale_record_scores_lower(self, scorer, make_record):
        fresh = make_record("r1", "Walter Murch", origins=("tmdb",), updated_at=T0)
        stale = make_record(
            "r1", "Walter Murch", origins=("tmdb",), updated_at=T0 - timedelta(days=400)
        )
        assert scorer.score(stale, T0).overall < scorer.score(fresh, T0).overall

    def test_deterministic(self, scorer, make_record):
        record = make_record("r1", "Walter Murch", origins=("tmdb", "variety"), updated_at=T0)
        assert scorer.score(record, T0) == scorer.score(record, T0)

    def test_score_candidate(self, scorer):
        candidate = Candidate(name="Kelley Dixon", origin_url="https://example.org/a")
        assert scorer.score_candidate(candidate, T0).overall == 44

    def test_to_dict(self, scorer, make_record):
        data = scorer.score(make_record("r1", "Walter Murch", updated_at=T0), T0).to_dict()
        assert set(data) == {
            "overall",
            "recommendation",
            "status",
            "note",
            "origin_count",
            "counted_origins",
            "factors",
        }
        assert set(data["factors"]) == {
            "source_quality",
            "corroboration",
            "freshness",
            "verification",
        }


class TestValidationStatus:
    """Test curator-facing status and notes."""

    def test_trusted_needs_two_known_origins(self, scorer, make_record):
        record = make_record(
            "r1", "Margaret Sixel", origins=STRONG_ORIGINS, updated_at=T0, verified=True
        )
        score = scorer.score(record, T0)
        assert validation_status(score.overall, known_origin_count=1) is ValidationStatus.PENDING

    def test_low_score_is_invalid(self, scorer, make_record):
        record = make_record("r1", "Kelley Dixon", origins=("web-discovery",), updated_at=T0)
        score = scorer.score(record, T0)
        assert validation_status(score.overall, known_origin_count=1) is ValidationStatus.INVALID
        assert "rejection" in validation_note(score.overall, 1)

    def test_score_carries_status_and_note(self, scorer, make_record):
        record = make_record(
            "r1", "Margaret Sixel", origins=STRONG_ORIGINS, updated_at=T0, verified=True
        )
        score = scorer.score(record, T0)
        assert score.status is ValidationStatus.VERIFIED
        assert score.note == "High confidence data verified by 4 reliable sources"

    def test_origin_count_is_the_full_distinct_count(self, scorer, make_record):
        record = make_record(
            "r1", "Walter Murch", origins=STRONG_ORIGINS + ("web-discovery",), updated_at=T0
        )
        score = scorer.score(record, T0)
        assert score.origin_count == 5
        assert 1 <= score.counted_origins <= 5
        assert score.factors.corroboration == corroboration_score(score.counted_origins)
