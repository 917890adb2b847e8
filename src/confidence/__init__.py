"""
Confidence Scoring Module.

Author: ML Engineering Team
"""

from .scorer import (
    ConfidenceScorer,
    DEFAULT_FIELD_WEIGHTS,
    DEFAULT_TIER_MULTIPLIERS
)

__all__ = [
    'ConfidenceScorer',
    'DEFAULT_FIELD_WEIGHTS',
    'DEFAULT_TIER_MULTIPLIERS'
]
