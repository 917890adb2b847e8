"""
Manufacturer / Model Splitting.

Splits a "manufacturer model" text span, as printed on a loss-vehicle
line, into a canonical manufacturer and a cleaned model name.

Author: ML Engineering Team
"""

import re
from dataclasses import dataclass
from typing import Iterable, Optional, Tuple

from src.correction import ManufacturerNormalizer
from src.lookup import LookupTables, default_tables
from src.utils.helpers import collapse_whitespace
from src.utils.logger import get_logger

# Initialize module logger
logger = get_logger(__name__)

# Trim and body specifications that follow the model name
MODEL_TAIL_PATTERNS = (
    re.compile(r'\|.*$'),
    re.compile(r'\s+\d\s*(?:Door|Dr)\b.*$', re.IGNORECASE),
    re.compile(r'\s+\d\.\d\s*L\b.*$', re.IGNORECASE),
    re.compile(r'\s+(?:AWD|FWD|RWD|4WD|2WD|4x4)\b.*$', re.IGNORECASE),
    re.compile(r'\s+(?:Vehicle|Section)\b.*$'),
)

MODEL_DISALLOWED_CHARS = re.compile(r'[^A-Za-z0-9\- ]')


@dataclass(frozen=True)
class MakeModelSplit:
    """
    Result of splitting a span.

    Attributes:
        manufacturer: Canonical or best-effort manufacturer.
        model: Cleaned model, or None when nothing remains.
        matched: False when the manufacturer is only the first token of
            the span and matched no known name.
    """
    manufacturer: Optional[str]
    model: Optional[str]
    matched: bool


def strip_artifacts(text: str, artifact_tokens: Iterable[str]) -> str:
    """
    Remove trailing OCR artifact tokens and punctuation-only tokens.

    Example:
        >>> strip_artifacts("SAN DIEGO, CA 92101 are }", ('are', '}'))
        'SAN DIEGO, CA 92101'
    """
    artifacts = set(artifact_tokens)
    tokens = text.split()
    while tokens and (tokens[-1] in artifacts or not re.search(r'[A-Za-z0-9]', tokens[-1])):
        tokens.pop()
    return ' '.join(tokens)


class MakeModelSplitter:
    """
    Splits manufacturer and model.

    The manufacturer is found by, in order:
        1. Longest case-insensitive prefix match against the canonical
           manufacturer list, ending on a word boundary.
        2. Variant correction of the first token ("oyota" → "Toyota").
        3. The first token as-is (reported as unmatched).

    Example:
        >>> splitter = MakeModelSplitter()
        >>> splitter.split("Land Rover Range Rover Sport")
        MakeModelSplit(manufacturer='Land Rover', model='Range Rover Sport', matched=True)
    """

    def __init__(self, tables: Optional[LookupTables] = None) -> None:
        self.tables = tables or default_tables()
        self.normalizer = ManufacturerNormalizer(self.tables)

    def split(self, span: Optional[str]) -> MakeModelSplit:
        """
        Split a span into manufacturer and model.

        Args:
            span: Text following the model year on a loss-vehicle line.

        Returns:
            MakeModelSplit; manufacturer is None only for an empty span.
        """
        span = collapse_whitespace(span or '').strip(' |:-,')
        if not span:
            return MakeModelSplit(None, None, False)

        manufacturer, remainder = self.match_canonical(span)
        if manufacturer:
            return MakeModelSplit(manufacturer, self.clean_model(manufacturer, remainder), True)

        first, _, rest = span.partition(' ')
        corrected = self.normalizer.correct(first)
        if corrected.applied:
            return MakeModelSplit(corrected.text, self.clean_model(corrected.text, rest), True)

        logger.debug(f"No known manufacturer in '{span}', using first token")
        return MakeModelSplit(first, self.clean_model(first, rest), False)

    def match_canonical(self, span: str) -> Tuple[Optional[str], str]:
        """Return (canonical manufacturer, remainder) for the longest prefix match."""
        lowered = span.lower()
        for name in self.tables.canonical_manufacturers:
            length = len(name)
            if not lowered.startswith(name.lower()):
                continue
            if length < len(span) and span[length].isalnum():
                continue
            return self.tables.canonical_name(name), span[length:].strip(' -|,')
        return None, span

    def clean_model(self, manufacturer: Optional[str], model: Optional[str]) -> Optional[str]:
        """
        Clean a raw model string.

        Strips trailing body, engine and drivetrain specifications, OCR
        artifacts and stray symbols, then applies the manufacturer's
        known model corrections (Volvo "XG60" → "XC60").
        """
        if not model:
            return None

        for pattern in MODEL_TAIL_PATTERNS:
            model = pattern.sub('', model)

        model = MODEL_DISALLOWED_CHARS.sub(' ', model)
        model = strip_artifacts(collapse_whitespace(model), self.tables.artifact_tokens)
        model = model.strip(' -')

        for wrong, right in self.tables.model_corrections.get(manufacturer or '', ()):
            model = re.sub(rf'\b{re.escape(wrong)}\b', right, model)

        return model or None
