"""
Confidence Scorer Module.

Turns per-field resolution tiers into a single 0-100 confidence score.
Each field carries a weight reflecting how much a wrong value would hurt
a downstream valuation; each resolution tier carries a trust multiplier.

    score = sum(weight * contribution) / sum(weight) * 100

where a field's contribution is its tier multiplier (0 when unresolved),
halved again for ambiguous submodel reconstructions.

Author: ML Engineering Team
"""

from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional

from src.utils.logger import get_logger

# Initialize module logger
logger = get_logger(__name__)


DEFAULT_FIELD_WEIGHTS: Mapping[str, float] = MappingProxyType({
    'identifier_code': 25,
    'model_year': 15,
    'manufacturer': 15,
    'model': 15,
    'odometer_reading': 10,
    'market_value': 10,
    'location': 5,
    'settlement_value': 5,
})

DEFAULT_TIER_MULTIPLIERS: Mapping[int, float] = MappingProxyType({
    1: 1.0,
    2: 0.8,
    3: 0.6,
    4: 0.4,
})

DEFAULT_FLOOR_MULTIPLIER = 0.2
DEFAULT_AMBIGUITY_PENALTY = 0.5


class ConfidenceScorer:
    """
    Weighted confidence scoring over field resolutions.

    Resolutions are read duck-typed: anything with a
    ``confidence_contribution`` attribute works.

    Attributes:
        weights: Field name to weight.
        tier_multipliers: Tier number to trust multiplier.
        floor_multiplier: Multiplier for tiers missing from the table.
        ambiguity_penalty: Extra factor for ambiguous resolutions.

    Example:
        >>> scorer = ConfidenceScorer()
        >>> scorer.contribution(2)
        0.8
        >>> scorer.contribution(4, ambiguous=True)
        0.2
    """

    MAX_SCORE = 100.0

    def __init__(
        self,
        weights: Optional[Mapping[str, float]] = None,
        tier_multipliers: Optional[Mapping[int, float]] = None,
        floor_multiplier: float = DEFAULT_FLOOR_MULTIPLIER,
        ambiguity_penalty: float = DEFAULT_AMBIGUITY_PENALTY
    ) -> None:
        self.weights = dict(weights if weights is not None else DEFAULT_FIELD_WEIGHTS)
        self.tier_multipliers = {
            int(tier): float(multiplier)
            for tier, multiplier in (tier_multipliers or DEFAULT_TIER_MULTIPLIERS).items()
        }
        self.floor_multiplier = floor_multiplier
        self.ambiguity_penalty = ambiguity_penalty

    def tier_multiplier(self, tier: int) -> float:
        """Return the trust multiplier for a tier; 0 for unresolved (tier 0)."""
        if tier <= 0:
            return 0.0
        return self.tier_multipliers.get(tier, self.floor_multiplier)

    def contribution(self, tier: int, ambiguous: bool = False) -> float:
        """
        Compute a field's confidence contribution.

        Args:
            tier: Effective resolution tier (1 = most trusted).
            ambiguous: Whether the value is an ambiguous reconstruction.

        Returns:
            Contribution in [0, 1].
        """
        multiplier = self.tier_multiplier(tier)
        if ambiguous:
            multiplier *= self.ambiguity_penalty
        return round(multiplier, 4)

    def field_scores(self, resolutions: Mapping[str, Any]) -> Dict[str, float]:
        """Return the contribution of every weighted field (0 when absent)."""
        scores = {}
        for field_name in self.weights:
            resolution = resolutions.get(field_name)
            scores[field_name] = getattr(resolution, 'confidence_contribution', 0.0) or 0.0
        return scores

    def score(self, resolutions: Mapping[str, Any]) -> float:
        """
        Compute the overall confidence score.

        Args:
            resolutions: Field name to resolution.

        Returns:
            Score in [0, 100] rounded to one decimal.
        """
        total_weight = sum(self.weights.values())
        if total_weight <= 0:
            logger.warning("Confidence weights sum to zero; scoring as 0")
            return 0.0

        contributions = self.field_scores(resolutions)
        weighted = sum(
            weight * contributions[field_name]
            for field_name, weight in self.weights.items()
        )

        score = weighted / total_weight * self.MAX_SCORE
        return round(min(self.MAX_SCORE, max(0.0, score)), 1)
