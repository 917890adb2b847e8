"""
Resolution Engine Module.

Orchestrates a full resolution run over the OCR text of one valuation
report:

    1. Reject empty or unreadable text
    2. Classify the report dialect (falling back to the default)
    3. Run the field cascades in order
    4. Record warnings for unresolved fields and a failed check digit
    5. Score confidence and build the immutable record

Usage:
    from src.resolver import ResolutionEngine

    engine = ResolutionEngine()
    record = engine.resolve(ocr_text)

    print(record.to_json())

Author: ML Engineering Team
"""

from datetime import date
from typing import Iterable, Optional, Union

from src.confidence import ConfidenceScorer
from src.correction import FieldValidator, IdentifierValidator, NoiseCorrector
from src.decoding import IdentifierDecoder
from src.dialect import Dialect, DialectClassifier
from src.ingestion.raw_text import RawDocumentText
from src.lookup import LookupTables, default_tables
from src.utils.exceptions import (
    DialectUnrecognizedError,
    FieldUnresolvedError,
    InputEmptyOrUnreadableError
)
from src.utils.logger import get_logger
from .cascade import build_cascades
from .field_resolution import ResolutionContext
from .make_model import MakeModelSplitter
from .settings import ResolutionSettings
from .vehicle_record import StructuredVehicleRecord

# Initialize module logger
logger = get_logger(__name__)

RawInput = Union[RawDocumentText, str, Iterable[str]]


class ResolutionEngine:
    """
    Resolves OCR text into a StructuredVehicleRecord.

    All collaborators are built once in the constructor; resolve() keeps
    its per-run state in a ResolutionContext, so one engine can serve
    many documents and identical input always gives an equal record.

    Attributes:
        settings: Settings snapshot taken at construction.
        tables: Lookup tables.
        reference_year: Year used for model-year decoding.

    Example:
        >>> engine = ResolutionEngine(reference_year=2026)
        >>> record = engine.resolve(text)
        >>> record.model_year, record.manufacturer
        (2014, 'Hyundai')
    """

    KNOWN_DIALECTS = (Dialect.MITCHELL, Dialect.CCC_ONE)

    def __init__(
        self,
        tables: Optional[LookupTables] = None,
        settings: Optional[ResolutionSettings] = None,
        reference_year: Optional[int] = None
    ) -> None:
        """
        Initialize the engine.

        Args:
            tables: Lookup tables. Defaults to the shared tables.
            settings: Settings snapshot. Defaults to configuration.
            reference_year: Overrides the configured reference year.
        """
        self.settings = settings or ResolutionSettings.from_config()
        self.tables = tables or default_tables()
        self.reference_year = (
            reference_year or self.settings.reference_year or date.today().year
        )

        self.corrector = NoiseCorrector(self.tables)
        self.decoder = IdentifierDecoder(self.tables, self.reference_year)
        self.validator = FieldValidator(self.reference_year)
        self.identifier_validator = IdentifierValidator()
        self.classifier = DialectClassifier(self.settings.default_dialect)
        self.scorer = ConfidenceScorer(
            weights=self.settings.weights,
            tier_multipliers=self.settings.tier_multipliers,
            floor_multiplier=self.settings.floor_multiplier,
            ambiguity_penalty=self.settings.ambiguity_penalty
        )

        splitter = MakeModelSplitter(self.tables)
        self._cascades = {
            dialect: build_cascades(dialect, splitter, self.validator, self.scorer)
            for dialect in self.KNOWN_DIALECTS
        }

        logger.debug(f"ResolutionEngine initialized (reference year {self.reference_year})")

    def resolve(self, raw: RawInput) -> StructuredVehicleRecord:
        """
        Resolve one document.

        Args:
            raw: RawDocumentText, a string, or an iterable of lines.

        Returns:
            StructuredVehicleRecord. Fields that could not be resolved
            are None and explained in ``warnings``.

        Raises:
            InputEmptyOrUnreadableError: If the text has fewer
                non-whitespace characters than ``min_text_length``.
        """
        document = self._coerce(raw)

        if document.char_count < self.settings.min_text_length:
            logger.error(f"Unreadable document '{document.source}' ({document.char_count} chars)")
            raise InputEmptyOrUnreadableError(document.char_count, self.settings.min_text_length)

        warnings = []
        try:
            dialect = self.classifier.resolve(document)
        except DialectUnrecognizedError as e:
            logger.warning(str(e))
            dialect = e.fallback
            warnings.append(str(e))

        context = ResolutionContext(
            document=document,
            dialect=dialect,
            tables=self.tables,
            corrector=self.corrector,
            decoder=self.decoder,
            settings=self.settings,
            validator=self.validator,
            warnings=warnings
        )

        resolutions = {}
        for cascade in self._cascades[dialect]:
            try:
                resolutions.update(cascade.resolve(context))
            except FieldUnresolvedError as e:
                resolutions.update(e.partial)
                for field_name in e.fields:
                    context.add_warning(FieldUnresolvedError.describe(field_name))

        identifier = resolutions['identifier_code'].value
        if identifier:
            check_warning = self.identifier_validator.check_digit_warning(identifier)
            if check_warning:
                context.add_warning(check_warning)

        score = self.scorer.score(resolutions)
        record = StructuredVehicleRecord.from_resolutions(
            resolutions, dialect, score, tuple(context.warnings)
        )

        logger.info(
            f"Resolved {dialect.value} report: {record.model_year} {record.manufacturer} "
            f"{record.model} (confidence {score})"
        )
        if context.warnings:
            logger.debug(f"Resolution warnings: {context.warnings}")

        return record

    @staticmethod
    def _coerce(raw: RawInput) -> RawDocumentText:
        if isinstance(raw, RawDocumentText):
            return raw
        if raw is None:
            return RawDocumentText(lines=())
        if isinstance(raw, str):
            return RawDocumentText.from_text(raw)
        return RawDocumentText(lines=tuple(str(line) for line in raw))


def resolve(raw: RawInput) -> StructuredVehicleRecord:
    """
    Resolve one document with a freshly built engine.

    Convenience wrapper; build a ResolutionEngine directly when
    resolving many documents.
    """
    return ResolutionEngine().resolve(raw)
