"""
Resolution Settings.

Snapshot of the configuration values the resolver depends on. The
snapshot is taken once when an engine is built, so a configuration
reload never changes an engine mid-run.

Author: ML Engineering Team
"""

from dataclasses import dataclass, field
from typing import Mapping, Optional

from config import get_config
from src.confidence.scorer import (
    DEFAULT_AMBIGUITY_PENALTY,
    DEFAULT_FIELD_WEIGHTS,
    DEFAULT_FLOOR_MULTIPLIER,
    DEFAULT_TIER_MULTIPLIERS
)
from src.dialect import Dialect, parse_dialect


@dataclass(frozen=True)
class ResolutionSettings:
    """
    Tunable parameters of a resolution run.

    Attributes:
        min_text_length: Non-whitespace characters required to resolve.
        lookahead_lines: Lines scanned after a label-only line.
        header_window_lines: Lines searched for an unlabeled identifier.
        default_dialect: Dialect used when classification fails.
        review_threshold: Score below which a record needs review.
        reference_year: Year used for model-year decoding (None = today).
        weights: Confidence weight per field.
        tier_multipliers: Trust multiplier per tier.
        floor_multiplier: Multiplier for tiers beyond the table.
        ambiguity_penalty: Factor for ambiguous reconstructions.
    """
    min_text_length: int = 20
    lookahead_lines: int = 4
    header_window_lines: int = 40
    default_dialect: Dialect = Dialect.MITCHELL
    review_threshold: float = 60.0
    reference_year: Optional[int] = None
    weights: Mapping[str, float] = field(default_factory=lambda: dict(DEFAULT_FIELD_WEIGHTS))
    tier_multipliers: Mapping[int, float] = field(
        default_factory=lambda: dict(DEFAULT_TIER_MULTIPLIERS)
    )
    floor_multiplier: float = DEFAULT_FLOOR_MULTIPLIER
    ambiguity_penalty: float = DEFAULT_AMBIGUITY_PENALTY

    @classmethod
    def from_config(cls) -> 'ResolutionSettings':
        """Build settings from the ``resolution`` and ``confidence`` config sections."""
        tier_multipliers = get_config('confidence.tier_multipliers') or DEFAULT_TIER_MULTIPLIERS
        reference_year = get_config('resolution.reference_year')

        return cls(
            min_text_length=int(get_config('resolution.min_text_length', 20)),
            lookahead_lines=int(get_config('resolution.lookahead_lines', 4)),
            header_window_lines=int(get_config('resolution.header_window_lines', 40)),
            default_dialect=parse_dialect(get_config('resolution.default_dialect')),
            review_threshold=float(get_config('resolution.review_threshold', 60)),
            reference_year=int(reference_year) if reference_year else None,
            weights=dict(get_config('confidence.weights') or DEFAULT_FIELD_WEIGHTS),
            tier_multipliers={int(k): float(v) for k, v in tier_multipliers.items()},
            floor_multiplier=float(
                get_config('confidence.floor_multiplier', DEFAULT_FLOOR_MULTIPLIER)
            ),
            ambiguity_penalty=float(
                get_config('confidence.ambiguity_penalty', DEFAULT_AMBIGUITY_PENALTY)
            ),
        )
