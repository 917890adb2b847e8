"""
Tests for confidence scoring.

Run with: pytest tests/test_confidence.py -v
"""

import pytest

from src.confidence import DEFAULT_FIELD_WEIGHTS, ConfidenceScorer
from src.resolver import FieldResolution, RECORD_FIELDS


def _resolutions(contribution):
    return {
        name: FieldResolution(value='x', strategy_tier=1, confidence_contribution=contribution)
        for name in RECORD_FIELDS
    }


class TestContribution:
    """Tests for tier multipliers."""

    @pytest.mark.parametrize("tier,expected", [(1, 1.0), (2, 0.8), (3, 0.6), (4, 0.4), (5, 0.2), (9, 0.2)])
    def test_tier_multipliers(self, scorer, tier, expected):
        """Tiers map to their multipliers, with a floor past tier 4."""
        assert scorer.contribution(tier) == expected

    def test_unresolved(self, scorer):
        """Tier 0 contributes nothing."""
        assert scorer.contribution(0) == 0.0

    def test_ambiguity_penalty(self, scorer):
        """Ambiguous values are halved."""
        assert scorer.contribution(4, ambiguous=True) == 0.2
        assert scorer.contribution(1, ambiguous=True) == 0.5

    def test_custom_multipliers(self):
        """Multipliers come from the constructor."""
        scorer = ConfidenceScorer(tier_multipliers={1: 0.9}, floor_multiplier=0.1)
        assert scorer.contribution(1) == 0.9
        assert scorer.contribution(2) == 0.1


class TestScore:
    """Tests for the weighted score."""

    def test_weights_cover_record_fields(self):
        """Every record field carries a weight."""
        assert set(DEFAULT_FIELD_WEIGHTS) == set(RECORD_FIELDS)
        assert sum(DEFAULT_FIELD_WEIGHTS.values()) == 100

    def test_all_direct(self, scorer):
        """All fields at tier 1 score 100."""
        assert scorer.score(_resolutions(1.0)) == 100.0

    def test_nothing_resolved(self, scorer):
        """An empty resolution map scores 0."""
        assert scorer.score({}) == 0.0

    def test_weighted_mix(self, scorer):
        """Only the identifier resolved scores its weight share."""
        resolutions = {'identifier_code': FieldResolution('5XYZT3LB0EG123456', 1, 1.0)}
        assert scorer.score(resolutions) == 25.0

    def test_rounded_to_one_decimal(self, scorer):
        """Scores are rounded to one decimal."""
        resolutions = {'location': FieldResolution('CA 90210', 3, 0.333)}
        assert scorer.score(resolutions) == 1.7

    def test_clamped(self):
        """Contributions above 1 cannot push the score past 100."""
        assert ConfidenceScorer().score(_resolutions(3.0)) == 100.0

    def test_zero_weights(self):
        """All-zero weights score 0."""
        assert ConfidenceScorer(weights={'model': 0}).score(_resolutions(1.0)) == 0.0

    def test_field_scores(self, scorer):
        """Per-field contributions are exposed, 0 for absent fields."""
        scores = scorer.field_scores({'model': FieldResolution('M3', 4, 0.2)})
        assert scores['model'] == 0.2
        assert scores['identifier_code'] == 0.0

    def test_deterministic(self, scorer):
        """Equal input gives an equal score."""
        assert scorer.score(_resolutions(0.6)) == scorer.score(_resolutions(0.6))
