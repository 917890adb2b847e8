"""
Data Validators Module.

This module provides validation for resolved vehicle fields:
    - Identifier codes (length, alphabet, check digit)
    - Model years
    - Odometer readings
    - Monetary amounts
    - Locations

Every validator exposes validate() returning (is_valid, message) and a
boolean is_valid() shortcut. The field cascade uses is_valid() to reject
candidates before they can win a tier.

Author: ML Engineering Team
"""

import re
from datetime import date
from typing import Any, Callable, Dict, Optional, Tuple

from src.utils.logger import get_logger

# Initialize module logger
logger = get_logger(__name__)

# Letters I, O and Q never appear in a valid identifier
IDENTIFIER_PATTERN = re.compile(r'^[A-HJ-NPR-Z0-9]{17}$')

CHECK_DIGIT_WEIGHTS = (8, 7, 6, 5, 4, 3, 2, 10, 0, 9, 8, 7, 6, 5, 4, 3, 2)

TRANSLITERATION = {
    'A': 1, 'B': 2, 'C': 3, 'D': 4, 'E': 5, 'F': 6, 'G': 7, 'H': 8,
    'J': 1, 'K': 2, 'L': 3, 'M': 4, 'N': 5, 'P': 7, 'R': 9,
    'S': 2, 'T': 3, 'U': 4, 'V': 5, 'W': 6, 'X': 7, 'Y': 8, 'Z': 9,
}


def is_identifier_shape(vin: Optional[str]) -> bool:
    """Return True when ``vin`` is 17 characters from the identifier alphabet."""
    return bool(vin) and IDENTIFIER_PATTERN.match(vin) is not None


def calculate_check_digit(vin: str) -> Optional[str]:
    """
    Calculate the check digit (position 9) of an identifier.

    Args:
        vin: 17-character identifier.

    Returns:
        Expected check character ('0'-'9' or 'X'), or None when the
        identifier is not alphabet-valid.

    Example:
        >>> calculate_check_digit("JH4CU2F88CC019777")
        '8'
    """
    if not is_identifier_shape(vin):
        return None

    total = 0
    for char, weight in zip(vin, CHECK_DIGIT_WEIGHTS):
        value = int(char) if char.isdigit() else TRANSLITERATION[char]
        total += value * weight

    remainder = total % 11
    return 'X' if remainder == 10 else str(remainder)


def has_valid_check_digit(vin: str) -> bool:
    """Return True when the identifier's position-9 character matches its check digit."""
    expected = calculate_check_digit(vin)
    return expected is not None and vin[8] == expected


class IdentifierValidator:
    """
    Validates 17-character vehicle identifiers.

    Shape (length and alphabet) decides acceptance. The check digit is
    reported separately because many valuation reports carry identifiers
    that are correct but fail it, so a mismatch is only a warning.

    Example:
        >>> validator = IdentifierValidator()
        >>> validator.is_valid("5XYZT3LB0EG123456")
        True
        >>> validator.validate("5XYZT3LB0EG12345")
        (False, "Identifier must be 17 characters (got 16)")
    """

    def is_valid(self, vin: Optional[str]) -> bool:
        valid, _ = self.validate(vin)
        return valid

    def validate(self, vin: Optional[str]) -> Tuple[bool, str]:
        """
        Validate identifier shape.

        Args:
            vin: Identifier string.

        Returns:
            Tuple of (is_valid, message).
        """
        if not vin:
            return False, "Identifier is empty"

        if len(vin) != 17:
            return False, f"Identifier must be 17 characters (got {len(vin)})"

        if not IDENTIFIER_PATTERN.match(vin):
            return False, "Identifier contains invalid characters (I, O, Q or symbols)"

        return True, "Valid identifier"

    def check_digit_warning(self, vin: str) -> Optional[str]:
        """Return a warning message when the check digit does not match, else None."""
        if has_valid_check_digit(vin):
            return None
        return f"Identifier {vin} failed check digit validation"


class YearValidator:
    """
    Validates model years.

    Accepts years from MIN_YEAR up to two years past the reference year,
    since next-year models are sold during the current calendar year.
    """

    MIN_YEAR = 1900
    FUTURE_ALLOWANCE = 2

    def __init__(self, reference_year: Optional[int] = None) -> None:
        self.reference_year = reference_year or date.today().year

    def is_valid(self, year: Any) -> bool:
        valid, _ = self.validate(year)
        return valid

    def validate(self, year: Any) -> Tuple[bool, str]:
        if not isinstance(year, int) or isinstance(year, bool):
            return False, "Year must be an integer"

        max_year = self.reference_year + self.FUTURE_ALLOWANCE
        if year < self.MIN_YEAR:
            return False, f"Year {year} is too old"
        if year > max_year:
            return False, f"Year {year} is after {max_year}"

        return True, "Valid year"


class OdometerValidator:
    """Validates odometer readings in miles."""

    MAX_MILES = 1_000_000

    def is_valid(self, miles: Any) -> bool:
        valid, _ = self.validate(miles)
        return valid

    def validate(self, miles: Any) -> Tuple[bool, str]:
        if not isinstance(miles, int) or isinstance(miles, bool):
            return False, "Odometer must be an integer"
        if miles <= 0:
            return False, "Odometer must be positive"
        if miles >= self.MAX_MILES:
            return False, f"Odometer {miles} exceeds maximum"
        return True, "Valid odometer"


class AmountValidator:
    """
    Validates monetary amounts.

    Example:
        >>> validator = AmountValidator()
        >>> validator.validate(0.0)
        (False, "Amount must be positive")
    """

    MAX_AMOUNT = 10_000_000

    def is_valid(self, amount: Any) -> bool:
        valid, _ = self.validate(amount)
        return valid

    def validate(self, amount: Any) -> Tuple[bool, str]:
        if not isinstance(amount, (int, float)) or isinstance(amount, bool):
            return False, "Amount must be numeric"
        if amount <= 0:
            return False, "Amount must be positive"
        if amount > self.MAX_AMOUNT:
            return False, f"Amount {amount} exceeds maximum"
        return True, "Valid amount"


class LocationValidator:
    """Validates locations ("CA 90210", "SAN DIEGO, CA 92101")."""

    def is_valid(self, location: Any) -> bool:
        valid, _ = self.validate(location)
        return valid

    def validate(self, location: Any) -> Tuple[bool, str]:
        if not isinstance(location, str) or not location.strip():
            return False, "Location is empty"
        if len(re.findall(r'[A-Za-z]', location)) < 2:
            return False, "Location has no state or city"
        return True, "Valid location"


class FieldValidator:
    """
    Maps record field names to their validators.

    Example:
        >>> validator = FieldValidator(reference_year=2026)
        >>> validator.is_valid("model_year", 2014)
        True
        >>> validator.is_valid("odometer_reading", 0)
        False
    """

    def __init__(self, reference_year: Optional[int] = None) -> None:
        identifier = IdentifierValidator()
        amount = AmountValidator()

        self._validators: Dict[str, Callable[[Any], bool]] = {
            'identifier_code': identifier.is_valid,
            'model_year': YearValidator(reference_year).is_valid,
            'manufacturer': _is_text,
            'model': _is_text,
            'odometer_reading': OdometerValidator().is_valid,
            'location': LocationValidator().is_valid,
            'market_value': amount.is_valid,
            'settlement_value': amount.is_valid,
        }

        logger.debug(f"FieldValidator initialized ({len(self._validators)} fields)")

    def is_valid(self, field_name: str, value: Any) -> bool:
        """
        Check a value against the validator registered for its field.

        Unknown fields accept any non-empty value.
        """
        if value is None or value == '':
            return False
        validator = self._validators.get(field_name)
        if validator is None:
            return True
        return validator(value)

    def validator_for(self, field_name: str) -> Callable[[Any], bool]:
        """Return a single-argument predicate for ``field_name``."""
        return lambda value: self.is_valid(field_name, value)


def _is_text(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())
