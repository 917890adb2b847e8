"""
Field Resolution Data Classes.

Value objects passed between the field cascade, its strategies and the
confidence scorer.

Author: ML Engineering Team
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from src.correction import FieldValidator, NoiseCorrector
from src.decoding import IdentifierDecoder
from src.dialect import Dialect
from src.ingestion.raw_text import RawDocumentText
from src.lookup import LookupTables
from .settings import ResolutionSettings


@dataclass(frozen=True)
class FieldResolution:
    """
    Outcome of resolving one field.

    Attributes:
        value: Resolved value, or None when unresolved.
        strategy_tier: Tier that produced the value (0 when unresolved).
        confidence_contribution: Trust in [0, 1] fed to the scorer.
        strategy: Name of the winning strategy.
        notes: Notes attached by the winning strategy.
    """
    value: Any = None
    strategy_tier: int = 0
    confidence_contribution: float = 0.0
    strategy: Optional[str] = None
    notes: Tuple[str, ...] = ()

    @property
    def resolved(self) -> bool:
        return self.value is not None

    @classmethod
    def unresolved(cls) -> 'FieldResolution':
        return cls()


@dataclass(frozen=True)
class Candidate:
    """
    A value proposed by a strategy, before validation.

    Attributes:
        value: Proposed field value.
        tier_offset: Added to the strategy tier (a fallback inside a
            strategy, such as an unmatched manufacturer, is trusted less).
        note: Optional warning recorded when the candidate wins.
        ambiguous: Whether the value is a guess between readings.
    """
    value: Any
    tier_offset: int = 0
    note: Optional[str] = None
    ambiguous: bool = False


@dataclass
class ResolutionContext:
    """
    Per-document state shared by the cascades of one resolution run.

    A context is created for each call to ResolutionEngine.resolve() and
    discarded afterwards; nothing in it outlives the run.

    Attributes:
        document: OCR text being resolved.
        dialect: Dialect the cascades were built for.
        tables: Lookup tables.
        corrector: OCR noise corrector.
        decoder: Identifier decoder.
        settings: Resolution settings snapshot.
        validator: Field validator used to reject candidates.
        resolved: Values accepted so far, by field name. Only the
            cross-field strategies read it.
        warnings: Warnings accumulated during the run, in order.
    """
    document: RawDocumentText
    dialect: Dialect
    tables: LookupTables
    corrector: NoiseCorrector
    decoder: IdentifierDecoder
    settings: ResolutionSettings
    validator: FieldValidator
    resolved: Dict[str, Any] = field(default_factory=dict)
    warnings: List[str] = field(default_factory=list)

    @property
    def lines(self) -> List[str]:
        """Document lines with surrounding whitespace removed."""
        return [line.strip() for line in self.document.lines]

    def accepts(self, field_name: str, value: Any) -> bool:
        """Return True when ``value`` passes the validator for ``field_name``."""
        return self.validator.is_valid(field_name, value)

    def add_warning(self, warning: str) -> None:
        """Record a warning once."""
        if warning and warning not in self.warnings:
            self.warnings.append(warning)
