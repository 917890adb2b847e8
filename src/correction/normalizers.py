"""
OCR Noise Normalizers Module.

This module reconstructs tokens damaged by OCR:
    - Vehicle identifiers (digit/letter confusion, merged glyphs, length)
    - Manufacturer names (dropped leading letters)
    - Monetary digit strings (dropped decimal point, "$" read as a digit)

Each normalizer returns a CorrectionResult holding the corrected text and
whether anything was changed. NoiseCorrector dispatches on a context hint.

Author: ML Engineering Team
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from src.lookup import LookupTables, default_tables
from src.utils.logger import get_logger
from .validators import has_valid_check_digit

# Initialize module logger
logger = get_logger(__name__)


class CorrectionHint(Enum):
    """Context in which a token is being corrected."""
    IDENTIFIER = "identifier"
    MANUFACTURER = "manufacturer"
    NUMERIC = "numeric"


@dataclass(frozen=True)
class CorrectionResult:
    """
    Outcome of a single correction.

    Attributes:
        text: Corrected token (the input when nothing applied).
        applied: Whether any correction changed the token.
    """
    text: str
    applied: bool


class IdentifierNormalizer:
    """
    Repairs OCR damage in 17-character vehicle identifiers.

    Correction runs in two phases. The first phase applies substitutions
    that are always safe because the damaged form can never be valid
    (I, O and Q are outside the identifier alphabet, "W6" is not a real
    prefix). The second phase handles confusions where both readings are
    legal characters (6/B, 8/V, 4/A); these are only applied when the
    token fails its check digit and the substituted token passes it.

    Example:
        >>> normalizer = IdentifierNormalizer()
        >>> normalizer.correct("WDDJKBFAIFF035164").text
        'WDDJK6FA9FF035164'
        >>> normalizer.correct("JHACU2F88CC019777").text
        'JH4CU2F88CC019777'
    """

    # (same-length merge, shrinking merge); "IFF" is handled before "IF"
    MERGE_SUBSTITUTIONS = (('IFF', '9FF'), ('IF', '9'))
    CHARACTER_SUBSTITUTIONS = str.maketrans({'I': '1', 'O': '0', 'Q': '0'})

    # Prefixes whose descriptor section legitimately carries B and V
    B_RETAINING_PREFIXES = ('WBA', 'WBS', 'WBY')

    # Prefixes whose third character is commonly a 4 misread as A
    A_TO_4_PREFIXES = ('JH', '1G', '2G', '3G', '4G', '5G', 'KM', 'WD')

    IDENTIFIER_LENGTH = 17

    def __init__(self, tables: Optional[LookupTables] = None) -> None:
        self.tables = tables or default_tables()

    def correct(self, token: Optional[str]) -> CorrectionResult:
        """
        Correct an identifier token.

        The result is not guaranteed to be valid: tokens shorter than 17
        characters cannot be repaired and are returned as-is for the
        caller's validator to reject.

        Args:
            token: Raw identifier token from OCR text.

        Returns:
            CorrectionResult with the repaired identifier.
        """
        original = token or ''
        text = re.sub(r'[^A-Za-z0-9]', '', original).upper()

        text = self._apply_merges(text)
        text = text.translate(self.CHARACTER_SUBSTITUTIONS)

        if text.startswith('W6'):
            text = 'WB' + text[2:]

        text = self._repair_length(text)

        if len(text) == self.IDENTIFIER_LENGTH and not has_valid_check_digit(text):
            text = self._resolve_ambiguous(text)

        applied = text != original
        if applied:
            logger.debug(f"Identifier corrected: '{original}' -> '{text}'")

        return CorrectionResult(text=text, applied=applied)

    def _apply_merges(self, text: str) -> str:
        """
        Undo "9" glyphs that OCR split into "IFF" or "IF".

        The prefix is left alone ("1FT" read as "IFT" is a Ford prefix,
        not a merged 9). "IF" shrinks the token, so it is only replaced
        while the token is longer than 17 characters.
        """
        head, tail = text[:3], text[3:]
        same_length, shrinking = self.MERGE_SUBSTITUTIONS

        tail = tail.replace(*same_length)
        excess = len(head) + len(tail) - self.IDENTIFIER_LENGTH
        if excess > 0:
            tail = tail.replace(shrinking[0], shrinking[1], excess)

        return head + tail

    def _repair_length(self, text: str) -> str:
        """
        Bring an over-long identifier back to 17 characters.

        An 18-character token usually carries one inserted glyph in the
        descriptor section; dropping it at index 5 or 6 is preferred when
        that yields a valid check digit. Anything else is truncated.
        """
        if len(text) == self.IDENTIFIER_LENGTH + 1:
            for index in (5, 6):
                candidate = text[:index] + text[index + 1:]
                if has_valid_check_digit(candidate):
                    return candidate

        if len(text) > self.IDENTIFIER_LENGTH:
            return text[:self.IDENTIFIER_LENGTH]

        return text

    def _resolve_ambiguous(self, text: str) -> str:
        """Try check-digit-gated substitutions, returning the first that validates."""
        for candidate in self._ambiguous_candidates(text):
            if has_valid_check_digit(candidate):
                return candidate
        return text

    def _ambiguous_candidates(self, text: str):
        prefix = text[:3]

        if prefix in self.B_RETAINING_PREFIXES:
            if text[5] == 'V':
                yield text[:5] + '8' + text[6:]
        elif 'B' in text[3:]:
            yield prefix + text[3:].replace('B', '6')

        if text[:2] in self.A_TO_4_PREFIXES and text[2] == 'A':
            yield text[:2] + '4' + text[3:]


class ManufacturerNormalizer:
    """
    Maps corrupted manufacturer tokens to canonical names.

    Example:
        >>> normalizer = ManufacturerNormalizer()
        >>> normalizer.correct("oyota")
        CorrectionResult(text='Toyota', applied=True)
        >>> normalizer.correct("Accord")
        CorrectionResult(text='Accord', applied=False)
    """

    def __init__(self, tables: Optional[LookupTables] = None) -> None:
        self.tables = tables or default_tables()

    def correct(self, token: Optional[str]) -> CorrectionResult:
        original = token or ''
        stripped = original.strip()
        variants = self.tables.manufacturer_variants

        canonical = variants.get(stripped) or variants.get(stripped.lower())
        if canonical is None:
            return CorrectionResult(text=original, applied=False)

        return CorrectionResult(text=canonical, applied=canonical != original)


class AmountNormalizer:
    """
    Normalizes monetary strings and reconstructs dropped decimals.

    OCR of valuation reports frequently loses the decimal point
    ("$9,782.21" → "978221") and reads the dollar sign as 3, 4, 5 or S
    ("$52,852.67" → "35285267"). A digit run of six or more characters
    with no decimal gets one inserted before the last two digits; a run
    of seven or more starting with 3, 4 or 5 first has that digit
    dropped.

    Example:
        >>> normalizer = AmountNormalizer()
        >>> normalizer.reconstruct("978221")
        9782.21
        >>> normalizer.reconstruct("35285267")
        52852.67
        >>> normalizer.reconstruct("$10,062.32")
        10062.32
    """

    CURRENCY_MARKERS = re.compile(r'^[sS$]+')
    AMOUNT_PATTERN = re.compile(r'^\d+(?:\.\d+)?')
    CORRUPTED_CURRENCY_DIGITS = ('3', '4', '5')

    MIN_RECONSTRUCT_LENGTH = 6
    MIN_CURRENCY_DROP_LENGTH = 7

    def normalize(self, amount_str: Optional[str]) -> Optional[str]:
        """
        Normalize an amount string to plain "digits.cents" form.

        Args:
            amount_str: Raw amount (e.g., "$10,062.32", "978221", "9,251 .08").

        Returns:
            Normalized amount string, or None if no digits are found.
        """
        normalized, _ = self._normalize(amount_str)
        return normalized

    def reconstruct(self, amount_str: Optional[str]) -> Optional[float]:
        """Normalize and convert to a float rounded to cents."""
        normalized = self.normalize(amount_str)
        if normalized is None:
            return None
        return round(float(normalized), 2)

    def correct(self, token: Optional[str]) -> CorrectionResult:
        """Return the normalized amount, flagging decimal or currency repairs."""
        normalized, reconstructed = self._normalize(token)
        if normalized is None:
            return CorrectionResult(text=token or '', applied=False)
        return CorrectionResult(text=normalized, applied=reconstructed)

    def _normalize(self, amount_str: Optional[str]) -> Tuple[Optional[str], bool]:
        if not amount_str:
            return None, False

        cleaned = ''.join(amount_str.split()).replace(',', '')
        cleaned = self.CURRENCY_MARKERS.sub('', cleaned)

        match = self.AMOUNT_PATTERN.match(cleaned)
        if match is None:
            return None, False

        value = match.group(0)
        if '.' in value or len(value) < self.MIN_RECONSTRUCT_LENGTH:
            return value, False

        # Drop the misread currency symbol before inserting the decimal
        if (len(value) >= self.MIN_CURRENCY_DROP_LENGTH
                and value[0] in self.CORRUPTED_CURRENCY_DIGITS):
            value = value[1:]

        reconstructed = f"{value[:-2]}.{value[-2:]}"
        logger.debug(f"Amount reconstructed: '{amount_str}' -> '{reconstructed}'")
        return reconstructed, True


class NoiseCorrector:
    """
    Facade dispatching tokens to the normalizer for their context.

    Example:
        >>> corrector = NoiseCorrector()
        >>> corrector.correct("7339127", CorrectionHint.NUMERIC).text
        '73391.27'
    """

    def __init__(self, tables: Optional[LookupTables] = None) -> None:
        self.tables = tables or default_tables()
        self.identifier = IdentifierNormalizer(self.tables)
        self.manufacturer = ManufacturerNormalizer(self.tables)
        self.amount = AmountNormalizer()

    def correct(self, token: Optional[str], hint: CorrectionHint) -> CorrectionResult:
        """
        Correct a token according to its context hint.

        Args:
            token: Raw token text.
            hint: Which kind of value the token is expected to hold.

        Returns:
            CorrectionResult for the token.
        """
        if hint is CorrectionHint.IDENTIFIER:
            return self.identifier.correct(token)
        if hint is CorrectionHint.MANUFACTURER:
            return self.manufacturer.correct(token)
        return self.amount.correct(token)
