"""
Field Resolution Strategies.

A strategy proposes values for one or more fields from the document
text. Strategies are grouped into tiers by how much their output can be
trusted:

    Tier 1: Exact labels and clean values
    Tier 2: Corrupted labels, repaired values
    Tier 3: Cross-field sources (identifier decoding, label lookahead)
    Tier 4: Submodel reconstruction

Strategies hold no per-document state; everything they read comes from
the ResolutionContext passed to propose().

Author: ML Engineering Team
"""

import re
from typing import Callable, Dict, FrozenSet, Iterable, Optional, Pattern, Sequence

from src.utils.exceptions import AmbiguousReconstructionError, IdentifierDecodeError
from src.utils.helpers import collapse_whitespace, parse_int
from src.utils.logger import get_logger
from . import patterns
from .field_resolution import Candidate, ResolutionContext
from .make_model import MakeModelSplitter, strip_artifacts

# Initialize module logger
logger = get_logger(__name__)

VEHICLE_FIELDS = ('model_year', 'manufacturer', 'model')

# Converts a matched token into a field value (None rejects the match)
Converter = Callable[[ResolutionContext, str], object]


# =============================================================================
# CONVERTERS
# =============================================================================

def as_is(context: ResolutionContext, token: str) -> Optional[str]:
    return token.strip() or None


def to_identifier(context: ResolutionContext, token: str) -> Optional[str]:
    """Run an identifier token through OCR correction."""
    return context.corrector.identifier.correct(token).text or None


def to_scanned_identifier(context: ResolutionContext, token: str) -> Optional[str]:
    """Correct an unlabeled token, rejecting words that carry too few digits."""
    if sum(char.isdigit() for char in token) < patterns.MIN_IDENTIFIER_DIGITS:
        return None
    return to_identifier(context, token)


def to_amount(context: ResolutionContext, token: str) -> Optional[float]:
    return context.corrector.amount.reconstruct(token)


def to_mileage(context: ResolutionContext, token: str) -> Optional[int]:
    return parse_int(token)


def to_trimmed_mileage(context: ResolutionContext, text: str) -> Optional[int]:
    """Take the leading digit group of a label remainder, after trimming artifacts."""
    text = strip_artifacts(text.strip(' :.'), context.tables.artifact_tokens)
    match = patterns.LEADING_MILEAGE.match(text)
    return parse_int(match.group(1)) if match else None


def to_location(context: ResolutionContext, token: str) -> Optional[str]:
    return collapse_whitespace(token).strip(' ,') or None


def to_trimmed_location(context: ResolutionContext, text: str) -> Optional[str]:
    """
    Cut a label remainder after its state and ZIP code.

    Remainders without a state and ZIP are rejected; a corrupted label is
    too weak a signal on its own.
    """
    match = patterns.STATE_ZIP.search(text)
    if match is None:
        return None
    location = re.sub(r'[^A-Za-z0-9 ,.\-]', ' ', text[:match.end()])
    location = strip_artifacts(collapse_whitespace(location), context.tables.artifact_tokens)
    return location.strip(' ,.:') or None


# =============================================================================
# BASE
# =============================================================================

class ResolutionStrategy:
    """
    Base class for all strategies.

    Attributes:
        tier: Trust tier of values proposed by this strategy.
        fields: Fields this strategy can propose.
        name: Short name recorded on winning resolutions.
    """

    name = 'strategy'

    def __init__(self, tier: int, fields: Sequence[str], name: Optional[str] = None) -> None:
        self.tier = tier
        self.fields = tuple(fields)
        if name:
            self.name = name

    def propose(
        self,
        context: ResolutionContext,
        pending: FrozenSet[str]
    ) -> Dict[str, Candidate]:
        """
        Propose candidates for the pending fields.

        Args:
            context: Per-document resolution context.
            pending: Fields of the cascade still unresolved.

        Returns:
            Field name to candidate; fields without a proposal are omitted.

        Raises:
            ResolutionError: When the strategy cannot run at all. The
                cascade records the error and moves on.
        """
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, tier={self.tier})"


# =============================================================================
# SINGLE-FIELD STRATEGIES
# =============================================================================

class PatternStrategy(ResolutionStrategy):
    """
    Matches regex patterns line by line for a single field.

    Patterns are tried in order; for each pattern every line is scanned
    top to bottom. The first match whose converted value passes the
    field validator wins.

    Args:
        tier: Trust tier.
        field_name: Field proposed.
        pattern_list: Compiled patterns; group 1 holds the value token.
        converter: Turns the token into a field value.
        name: Strategy name.
        guard_pre_adjustment: Reject matches that contain a base-value
            label.
        header_only: Only scan the configured header window.
    """

    def __init__(
        self,
        tier: int,
        field_name: str,
        pattern_list: Iterable[Pattern],
        converter: Converter = as_is,
        name: Optional[str] = None,
        guard_pre_adjustment: bool = False,
        header_only: bool = False
    ) -> None:
        super().__init__(tier, (field_name,), name or f"{field_name}_pattern")
        self.field_name = field_name
        self.pattern_list = tuple(pattern_list)
        self.converter = converter
        self.guard_pre_adjustment = guard_pre_adjustment
        self.header_only = header_only

    def propose(self, context, pending):
        lines = context.lines
        if self.header_only:
            lines = lines[:context.settings.header_window_lines]

        for pattern in self.pattern_list:
            for line in lines:
                for match in pattern.finditer(line):
                    if self.guard_pre_adjustment and patterns.PRE_ADJUSTMENT_LABEL.search(match.group(0)):
                        continue
                    value = self.converter(context, match.group(1))
                    if context.accepts(self.field_name, value):
                        return {self.field_name: Candidate(value)}
        return {}


class LabelLookaheadStrategy(ResolutionStrategy):
    """
    Finds an amount printed below a label-only line.

    Scans at most ``lookahead_lines`` lines after the label for the first
    token carrying a currency marker. The scan stops at a base-value
    line, and at any line matching ``stop_pattern`` (the label of a
    different amount), so neither is taken for this field.
    """

    def __init__(
        self,
        tier: int,
        field_name: str,
        label_pattern: Pattern,
        stop_pattern: Optional[Pattern] = None
    ) -> None:
        super().__init__(tier, (field_name,), f"{field_name}_lookahead")
        self.field_name = field_name
        self.label_pattern = label_pattern
        self.stop_pattern = stop_pattern

    def propose(self, context, pending):
        lines = context.lines
        window = context.settings.lookahead_lines

        for index, line in enumerate(lines):
            if not self.label_pattern.match(line):
                continue

            for following in lines[index + 1:index + 1 + window]:
                if patterns.PRE_ADJUSTMENT_LABEL.search(following):
                    break
                if self.stop_pattern is not None and self.stop_pattern.search(following):
                    break
                match = patterns.CURRENCY_AMOUNT.search(following)
                if match is None:
                    continue
                value = to_amount(context, match.group(1))
                if context.accepts(self.field_name, value):
                    return {self.field_name: Candidate(value)}
                break
        return {}


class StandaloneAmountStrategy(ResolutionStrategy):
    """
    Accepts a line holding only a dollar amount when a settlement label
    appears within the preceding lines.
    """

    CONTEXT_LINES = 3

    def __init__(self, tier: int, field_name: str = 'settlement_value') -> None:
        super().__init__(tier, (field_name,), f"{field_name}_standalone")
        self.field_name = field_name

    def propose(self, context, pending):
        lines = context.lines

        for index, line in enumerate(lines):
            match = patterns.STANDALONE_AMOUNT.match(line)
            if match is None:
                continue

            preceding = lines[max(0, index - self.CONTEXT_LINES):index]
            if any(patterns.PRE_ADJUSTMENT_LABEL.search(p) for p in preceding[-1:]):
                continue
            if not any(patterns.SETTLEMENT_CONTEXT.search(p) for p in preceding):
                continue

            value = to_amount(context, match.group(1))
            if context.accepts(self.field_name, value):
                return {self.field_name: Candidate(value)}
        return {}


# =============================================================================
# VEHICLE GROUP STRATEGIES
# =============================================================================

def _manufacturer_candidate(split) -> Candidate:
    """Unmatched manufacturers are kept but trusted one tier lower."""
    if split.matched:
        return Candidate(split.manufacturer)
    return Candidate(
        split.manufacturer,
        tier_offset=1,
        note=f"Manufacturer '{split.manufacturer}' not in known list"
    )


class LossVehicleLineStrategy(ResolutionStrategy):
    """
    Reads year, manufacturer and model from a single loss-vehicle line
    ("Loss vehicle: 2014 Hyundai Santa Fe Sport | 4 Door Utility").

    Group 1 of each pattern is the year, group 2 the manufacturer and
    model span.
    """

    def __init__(
        self,
        tier: int,
        pattern_list: Iterable[Pattern],
        splitter: MakeModelSplitter,
        name: str = 'loss_vehicle_line'
    ) -> None:
        super().__init__(tier, VEHICLE_FIELDS, name)
        self.pattern_list = tuple(pattern_list)
        self.splitter = splitter

    def propose(self, context, pending):
        for pattern in self.pattern_list:
            for line in context.lines:
                match = pattern.search(line)
                if match is None:
                    continue

                split = self.splitter.split(match.group(2))
                if split.manufacturer is None:
                    continue

                proposals = {'manufacturer': _manufacturer_candidate(split)}
                year = int(match.group(1))
                if context.accepts('model_year', year):
                    proposals['model_year'] = Candidate(year)
                if split.model:
                    proposals['model'] = Candidate(split.model)
                return proposals
        return {}


class LabeledComponentsStrategy(ResolutionStrategy):
    """
    Reads year, manufacturer and model from separate labeled lines
    ("Year 2010", "Make Toyota", "Model Prius Two").
    """

    MAX_MODEL_WORDS = 3

    def __init__(
        self,
        tier: int,
        year_pattern: Pattern,
        make_pattern: Pattern,
        model_pattern: Pattern,
        splitter: MakeModelSplitter,
        name: str = 'labeled_components'
    ) -> None:
        super().__init__(tier, VEHICLE_FIELDS, name)
        self.year_pattern = year_pattern
        self.make_pattern = make_pattern
        self.model_pattern = model_pattern
        self.splitter = splitter

    def propose(self, context, pending):
        proposals: Dict[str, Candidate] = {}
        artifacts = context.tables.artifact_tokens

        for line in context.lines:
            if 'model_year' not in proposals:
                match = self.year_pattern.match(line)
                if match and context.accepts('model_year', int(match.group(1))):
                    proposals['model_year'] = Candidate(int(match.group(1)))

            if 'manufacturer' not in proposals:
                match = self.make_pattern.match(line)
                if match:
                    split = self.splitter.split(strip_artifacts(match.group(1), artifacts))
                    if split.manufacturer:
                        proposals['manufacturer'] = _manufacturer_candidate(split)

            if 'model' not in proposals:
                match = self.model_pattern.match(line)
                if match and not match.group(1).lower().startswith('year'):
                    model = self._model_from(context, match.group(1), proposals)
                    if model:
                        proposals['model'] = Candidate(model)

        return proposals

    def _model_from(self, context, text: str, proposals: Dict[str, Candidate]) -> Optional[str]:
        manufacturer = proposals.get('manufacturer')
        manufacturer_name = manufacturer.value if manufacturer else context.resolved.get('manufacturer')
        model = self.splitter.clean_model(manufacturer_name, text)
        if not model:
            return None
        return ' '.join(model.split()[:self.MAX_MODEL_WORDS])


class CrossFieldIdentifierStrategy(ResolutionStrategy):
    """
    Fills vehicle fields from the decoded identifier.

    Year and manufacturer come straight from the identifier tables. The
    model is then looked for on any line that names the manufacturer.
    Uses the identifier already resolved for the record, or else the
    first identifier-shaped token anywhere in the text.

    Raises:
        IdentifierDecodeError: If no identifier decodes and nothing
            else could be proposed.
    """

    def __init__(self, tier: int, splitter: MakeModelSplitter) -> None:
        super().__init__(tier, VEHICLE_FIELDS, 'identifier_decode')
        self.splitter = splitter

    def propose(self, context, pending):
        identifier = context.resolved.get('identifier_code') or self._find_identifier(context)
        decoded = context.decoder.decode(identifier)
        proposals: Dict[str, Candidate] = {}

        if 'model_year' in pending and decoded.model_year is not None:
            proposals['model_year'] = Candidate(decoded.model_year)
        if 'manufacturer' in pending and decoded.manufacturer:
            proposals['manufacturer'] = Candidate(decoded.manufacturer)

        manufacturer = context.resolved.get('manufacturer') or decoded.manufacturer
        if 'model' in pending and manufacturer:
            model = self._model_near(context, manufacturer)
            if model:
                proposals['model'] = Candidate(model)

        if decoded.is_empty and not proposals:
            raise IdentifierDecodeError(identifier, "no prefix or year-code match")

        return proposals

    def _find_identifier(self, context) -> Optional[str]:
        for line in context.lines:
            for match in patterns.ALPHABET_IDENTIFIER.finditer(line):
                token = match.group(1)
                if sum(char.isdigit() for char in token) >= patterns.MIN_IDENTIFIER_DIGITS:
                    return token
        return None

    def _model_near(self, context, manufacturer: str) -> Optional[str]:
        pattern = re.compile(
            r'(?<![A-Za-z])' + re.escape(manufacturer) + r'(?![A-Za-z])', re.IGNORECASE
        )
        for line in context.lines:
            match = pattern.search(line)
            if match is None:
                continue
            model = self.splitter.clean_model(manufacturer, line[match.end():])
            if model and not patterns.ALPHABET_IDENTIFIER.search(model):
                return model
        return None


class SubmodelReconstructionStrategy(ResolutionStrategy):
    """
    Rebuilds performance submodels from a lone digit next to a trim
    keyword (BMW "3 | Competition" → "M3").

    The manufacturer must already be resolved and have a reconstruction
    rule. Results are always marked ambiguous.
    """

    def __init__(self, tier: int) -> None:
        super().__init__(tier, ('model',), 'submodel_reconstruction')

    def propose(self, context, pending):
        manufacturer = context.resolved.get('manufacturer')
        rule = context.tables.submodel_rules.get(manufacturer) if manufacturer else None
        if rule is None:
            return {}

        keywords = '|'.join(re.escape(keyword) for keyword in rule.keywords)
        pattern = re.compile(
            r'(?<![\w.])(\d)(?![\w.])\s*\|?\s*(' + keywords + r')\b', re.IGNORECASE
        )

        for line in context.lines:
            match = pattern.search(line)
            if match is None:
                continue

            model = f"{rule.marker}{match.group(1)}"
            warning = AmbiguousReconstructionError(manufacturer, model, match.group(2))
            logger.debug(f"Submodel reconstructed: {warning}")
            return {'model': Candidate(model, ambiguous=True, note=str(warning))}

        return {}
