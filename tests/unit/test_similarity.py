"""
Unit tests for editor_finder.similarity.names module.
"""

import pytest

from editor_finder.similarity.names import name_key, name_similarity, normalize_name


class TestNormalization:
    """Test normalize_name and name_key."""

    def test_normalize_keeps_token_boundaries(self):
        assert normalize_name("  O'Neil,  Mary-Jo ") == "o neil mary jo"

    def test_name_key_strips_everything_but_alphanumerics(self):
        assert name_key("Mary-Jo O'Neil") == "maryjooneil"

    def test_empty_inputs(self):
        assert normalize_name("") == ""
        assert name_key("") == ""


class TestNameSimilarity:
    """Test length-normalized edit-distance similarity."""

    def test_identical_names(self):
        assert name_similarity("Margaret Sixel", "Margaret Sixel") == 1.0

    def test_case_and_punctuation_do_not_lower_score(self):
        assert name_similarity("margaret sixel", "MARGARET SIXEL") == 1.0
        assert name_similarity("Mary-Jo O'Neil", "Mary Jo ONeil") == 1.0

    def test_spelling_variant_is_close(self):
        """One or two edits in a typical name stay above the default threshold."""
        assert name_similarity("John Smith", "Jon Smyth") >= 0.8

    def test_unrelated_names_are_far(self):
        assert name_similarity("John Smith", "Maria Gonzales") < 0.3

    def test_empty_side_scores_zero(self):
        assert name_similarity("", "Walter Murch") == 0.0
        assert name_similarity("Walter Murch", "  ") == 0.0

    @pytest.mark.parametrize(
        "a,b",
        [
            ("Walter Murch", "Walter Murch"),
            ("Kelley Dixon", "Kelly Dixon"),
            ("Thelma Schoonmaker", "Telma Schonmaker"),
        ],
    )
    def test_symmetric_and_bounded(self, a, b):
        score = name_similarity(a, b)
        assert score == name_similarity(b, a)
        assert 0.0 <= score <= 1.0
