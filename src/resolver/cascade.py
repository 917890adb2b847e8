"""
Field Cascade Module.

A FieldCascade runs an ordered list of strategies over one field or a
group of fields that are resolved together (year, manufacturer and
model). Strategies run from most to least trusted; a field is filled by
the first strategy whose candidate passes validation, and strategies
whose fields are all filled are skipped.

build_cascades() assembles the strategy lists for each report dialect.

Author: ML Engineering Team
"""

from typing import Dict, List, Sequence

from src.confidence import ConfidenceScorer
from src.correction import FieldValidator
from src.dialect import Dialect
from src.utils.exceptions import FieldUnresolvedError, ResolutionError
from src.utils.logger import get_logger
from . import patterns
from .field_resolution import Candidate, FieldResolution, ResolutionContext
from .make_model import MakeModelSplitter
from .strategies import (
    CrossFieldIdentifierStrategy,
    LabeledComponentsStrategy,
    LabelLookaheadStrategy,
    LossVehicleLineStrategy,
    PatternStrategy,
    ResolutionStrategy,
    StandaloneAmountStrategy,
    SubmodelReconstructionStrategy,
    as_is,
    to_amount,
    to_identifier,
    to_location,
    to_mileage,
    to_scanned_identifier,
    to_trimmed_location,
    to_trimmed_mileage
)

# Initialize module logger
logger = get_logger(__name__)


class FieldCascade:
    """
    Ordered strategy fallback for a set of fields.

    Attributes:
        fields: Fields this cascade resolves, in report order.
        strategies: Strategies sorted by tier (stable within a tier).
        validator: Rejects candidates that fail field validation.
        scorer: Converts winning tiers into confidence contributions.

    Example:
        >>> cascade = FieldCascade(['odometer_reading'], strategies, validator, scorer)
        >>> cascade.resolve(context)['odometer_reading'].value
        85234
    """

    def __init__(
        self,
        fields: Sequence[str],
        strategies: Sequence[ResolutionStrategy],
        validator: FieldValidator,
        scorer: ConfidenceScorer
    ) -> None:
        self.fields = tuple(fields)
        self.strategies = sorted(strategies, key=lambda strategy: strategy.tier)
        self.validator = validator
        self.scorer = scorer

    def resolve(self, context: ResolutionContext) -> Dict[str, FieldResolution]:
        """
        Run the strategies until every field is filled or none remain.

        Accepted values are written to ``context.resolved`` immediately
        so later cross-field strategies can read them.

        Args:
            context: Per-document resolution context.

        Returns:
            Field name to FieldResolution for every field of the cascade.

        Raises:
            FieldUnresolvedError: If any field is still empty after the
                last strategy. ``partial`` carries all resolutions.
        """
        found: Dict[str, FieldResolution] = {}

        for strategy in self.strategies:
            pending = frozenset(name for name in self.fields if name not in found)
            if not pending:
                break
            if pending.isdisjoint(strategy.fields):
                continue

            try:
                candidates = strategy.propose(context, pending)
            except ResolutionError as e:
                logger.debug(f"Strategy {strategy.name} failed: {e}")
                context.add_warning(str(e))
                continue

            for field_name in self.fields:
                candidate = candidates.get(field_name)
                if field_name not in pending or candidate is None:
                    continue
                if not self.validator.is_valid(field_name, candidate.value):
                    logger.debug(f"{strategy.name} rejected {field_name}={candidate.value!r}")
                    continue

                found[field_name] = self._accept(strategy, candidate)
                context.resolved[field_name] = candidate.value
                if candidate.note:
                    context.add_warning(candidate.note)

        results = {
            name: found.get(name, FieldResolution.unresolved())
            for name in self.fields
        }

        missing = [name for name in self.fields if name not in found]
        if missing:
            raise FieldUnresolvedError(missing, partial=results)

        return results

    def _accept(self, strategy: ResolutionStrategy, candidate: Candidate) -> FieldResolution:
        tier = strategy.tier + candidate.tier_offset
        return FieldResolution(
            value=candidate.value,
            strategy_tier=tier,
            confidence_contribution=self.scorer.contribution(tier, candidate.ambiguous),
            strategy=strategy.name,
            notes=(candidate.note,) if candidate.note else ()
        )

    def __repr__(self) -> str:
        return f"FieldCascade(fields={self.fields}, strategies={len(self.strategies)})"


# =============================================================================
# DIALECT CASCADES
# =============================================================================

def _identifier_strategies() -> List[ResolutionStrategy]:
    field_name = 'identifier_code'
    return [
        PatternStrategy(1, field_name, [patterns.LABELED_IDENTIFIER], as_is,
                        name='labeled_identifier'),
        PatternStrategy(2, field_name, [patterns.TOLERANT_LABELED_IDENTIFIER], to_identifier,
                        name='corrected_identifier'),
        PatternStrategy(3, field_name, [patterns.UNLABELED_IDENTIFIER], to_scanned_identifier,
                        name='header_identifier', header_only=True),
        PatternStrategy(4, field_name, [patterns.ALPHABET_IDENTIFIER], to_scanned_identifier,
                        name='any_identifier'),
    ]


def _vehicle_strategies(dialect: Dialect, splitter: MakeModelSplitter) -> List[ResolutionStrategy]:
    if dialect is Dialect.CCC_ONE:
        direct = [
            LabeledComponentsStrategy(1, patterns.CCC_YEAR, patterns.CCC_MAKE,
                                      patterns.CCC_MODEL, splitter),
            LossVehicleLineStrategy(1, [patterns.CCC_LOSS_VEHICLE], splitter),
        ]
        tolerant = [
            LabeledComponentsStrategy(2, patterns.CCC_YEAR_CORRUPTED, patterns.CCC_MAKE_CORRUPTED,
                                      patterns.CCC_MODEL_CORRUPTED, splitter,
                                      name='corrected_components'),
        ]
    else:
        direct = [
            LossVehicleLineStrategy(1, [patterns.MITCHELL_LOSS_VEHICLE], splitter),
        ]
        tolerant = [
            LossVehicleLineStrategy(2, patterns.MITCHELL_LOSS_VEHICLE_CORRUPTED, splitter,
                                    name='corrected_loss_vehicle_line'),
        ]

    return direct + tolerant + [
        CrossFieldIdentifierStrategy(3, splitter),
        SubmodelReconstructionStrategy(4),
    ]


def _odometer_strategies(dialect: Dialect) -> List[ResolutionStrategy]:
    field_name = 'odometer_reading'
    if dialect is Dialect.CCC_ONE:
        direct = [patterns.CCC_ODOMETER]
    else:
        direct = [patterns.MITCHELL_MILEAGE, patterns.MITCHELL_MILES]

    return [
        PatternStrategy(1, field_name, direct, to_mileage),
        PatternStrategy(2, field_name, [patterns.ODOMETER_LABEL_CORRUPTED], to_trimmed_mileage,
                        name='odometer_corrected_label'),
        PatternStrategy(2, field_name, [patterns.MILES_CORRUPTED], to_mileage,
                        name='odometer_corrected_unit'),
    ]


def _location_strategies(dialect: Dialect) -> List[ResolutionStrategy]:
    field_name = 'location'
    if dialect is Dialect.CCC_ONE:
        direct = [patterns.CCC_LOCATION]
    else:
        direct = [patterns.MITCHELL_LOCATION, patterns.MITCHELL_LOCATION_LINE]

    return [
        PatternStrategy(1, field_name, direct, to_location),
        PatternStrategy(2, field_name, [patterns.LOCATION_LABEL_CORRUPTED], to_trimmed_location,
                        name='location_corrected_label'),
    ]


def _market_strategies(dialect: Dialect) -> List[ResolutionStrategy]:
    field_name = 'market_value'
    if dialect is Dialect.CCC_ONE:
        direct, tolerant = [patterns.CCC_ADJUSTED_VALUE], patterns.CCC_ADJUSTED_CORRUPTED
    else:
        direct, tolerant = [patterns.MITCHELL_MARKET_VALUE], patterns.MITCHELL_MARKET_CORRUPTED

    return [
        PatternStrategy(1, field_name, direct, to_amount, guard_pre_adjustment=True),
        PatternStrategy(2, field_name, tolerant, to_amount, name='market_value_corrected',
                        guard_pre_adjustment=True),
        LabelLookaheadStrategy(3, field_name, patterns.MARKET_LABEL_ONLY,
                               stop_pattern=patterns.SETTLEMENT_AMOUNT_LABEL),
    ]


def _settlement_strategies(dialect: Dialect) -> List[ResolutionStrategy]:
    field_name = 'settlement_value'
    if dialect is Dialect.CCC_ONE:
        direct, tolerant = [patterns.CCC_TOTAL], patterns.CCC_TOTAL_CORRUPTED
    else:
        direct, tolerant = [patterns.MITCHELL_SETTLEMENT_VALUE], patterns.MITCHELL_SETTLEMENT_CORRUPTED

    return [
        PatternStrategy(1, field_name, direct, to_amount, guard_pre_adjustment=True),
        PatternStrategy(2, field_name, tolerant, to_amount, name='settlement_value_corrected',
                        guard_pre_adjustment=True),
        LabelLookaheadStrategy(3, field_name, patterns.SETTLEMENT_LABEL_ONLY,
                               stop_pattern=patterns.MARKET_AMOUNT_LABEL),
        StandaloneAmountStrategy(3, field_name),
    ]


def build_cascades(
    dialect: Dialect,
    splitter: MakeModelSplitter,
    validator: FieldValidator,
    scorer: ConfidenceScorer
) -> List[FieldCascade]:
    """
    Build the cascades for a dialect in resolution order.

    The identifier cascade runs first because the vehicle cascade's
    cross-field strategy decodes the resolved identifier.

    Args:
        dialect: Known report dialect.
        splitter: Manufacturer/model splitter.
        validator: Field validator.
        scorer: Confidence scorer.

    Returns:
        List of FieldCascade objects.
    """
    def cascade(fields, strategies):
        return FieldCascade(fields, strategies, validator, scorer)

    return [
        cascade(['identifier_code'], _identifier_strategies()),
        cascade(['model_year', 'manufacturer', 'model'], _vehicle_strategies(dialect, splitter)),
        cascade(['odometer_reading'], _odometer_strategies(dialect)),
        cascade(['location'], _location_strategies(dialect)),
        cascade(['market_value'], _market_strategies(dialect)),
        cascade(['settlement_value'], _settlement_strategies(dialect)),
    ]
