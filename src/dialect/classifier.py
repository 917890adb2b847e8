"""
Report Dialect Classifier.

Identifies which valuation vendor produced a report by scanning the OCR
text for signature phrases. Unrecognized text is mapped to a configured
default dialect, with a warning, before any field is resolved.

Author: ML Engineering Team
"""

from enum import Enum
from typing import Dict, Optional, Tuple

from src.ingestion.raw_text import RawDocumentText
from src.utils.exceptions import DialectUnrecognizedError
from src.utils.logger import get_logger

# Initialize module logger
logger = get_logger(__name__)


class Dialect(Enum):
    """Known report layouts."""
    MITCHELL = "MITCHELL"
    CCC_ONE = "CCC_ONE"
    UNKNOWN = "UNKNOWN"


class DialectClassifier:
    """
    Classifies report text into a Dialect.

    Signatures are lowercase substrings checked in dictionary order;
    CCC ONE is checked first because its reports can quote Mitchell
    terminology, while the reverse does not occur.

    Attributes:
        default_dialect: Dialect used when no signature matches.

    Example:
        >>> classifier = DialectClassifier()
        >>> classifier.classify(RawDocumentText.from_text("CCC ONE Market Valuation"))
        <Dialect.CCC_ONE: 'CCC_ONE'>
    """

    SIGNATURES: Dict[Dialect, Tuple[str, ...]] = {
        Dialect.CCC_ONE: (
            'ccc one',
            'cccone',
            'ccc intelligent solutions',
            'adjusted vehicle value',
        ),
        Dialect.MITCHELL: (
            'mitchell',
            'workcenter',
            'loss vehicle detail',
            'settlement value =',
        ),
    }

    def __init__(self, default_dialect: Dialect = Dialect.MITCHELL) -> None:
        if default_dialect is Dialect.UNKNOWN:
            raise ValueError("Default dialect must be a known dialect")
        self.default_dialect = default_dialect

    def classify(self, document: RawDocumentText) -> Dialect:
        """
        Return the first dialect whose signature appears in the text.

        Args:
            document: OCR text of the report.

        Returns:
            Matching Dialect, or Dialect.UNKNOWN.
        """
        lowered = document.text.lower()

        for dialect, signatures in self.SIGNATURES.items():
            for signature in signatures:
                if signature in lowered:
                    logger.debug(f"Dialect {dialect.value} matched signature '{signature}'")
                    return dialect

        return Dialect.UNKNOWN

    def resolve(self, document: RawDocumentText) -> Dialect:
        """
        Return a known dialect for the document.

        Raises:
            DialectUnrecognizedError: If no signature matched. The error
                carries the default dialect as ``fallback``.
        """
        dialect = self.classify(document)
        if dialect is Dialect.UNKNOWN:
            raise DialectUnrecognizedError(self.default_dialect)
        return dialect


def parse_dialect(name: Optional[str], default: Dialect = Dialect.MITCHELL) -> Dialect:
    """Parse a configured dialect name, ignoring unknown or empty values."""
    if not name:
        return default
    try:
        dialect = Dialect(str(name).upper())
    except ValueError:
        logger.warning(f"Unknown dialect '{name}' in configuration, using {default.value}")
        return default
    return default if dialect is Dialect.UNKNOWN else dialect
