"""
Identifier Decoder Module.

Decodes a 17-character vehicle identifier into its manufacturer (from the
world manufacturer prefix) and model year (from the position-10 code).
The resolver uses it as a fallback source of truth when the report text
does not yield a year or manufacturer.

Author: ML Engineering Team
"""

from dataclasses import dataclass
from datetime import date
from typing import Optional

from src.lookup import LookupTables, default_tables
from src.utils.exceptions import IdentifierDecodeError
from src.utils.logger import get_logger

# Initialize module logger
logger = get_logger(__name__)


@dataclass(frozen=True)
class DecodedIdentifier:
    """
    Components recovered from an identifier.

    Attributes:
        manufacturer: Manufacturer from the prefix table, if matched.
        model_year: Model year from the year-code table, if matched.
    """
    manufacturer: Optional[str] = None
    model_year: Optional[int] = None

    @property
    def is_empty(self) -> bool:
        return self.manufacturer is None and self.model_year is None


class IdentifierDecoder:
    """
    Decodes manufacturer and model year from an identifier.

    The year code repeats every 30 years ("E" is 1984 and 2014). Of the
    two candidates, the most recent one that is not later than the
    reference year plus one is chosen; a model year can run one year
    ahead of the calendar.

    Attributes:
        tables: Lookup tables supplying prefix and year-code data.
        reference_year: Year treated as "now" for cycle disambiguation.

    Example:
        >>> decoder = IdentifierDecoder(reference_year=2026)
        >>> decoder.decode("5XYZT3LB0EG123456")
        DecodedIdentifier(manufacturer='Hyundai', model_year=2014)
    """

    YEAR_CODE_INDEX = 9
    MAX_PREFIX_LENGTH = 3

    def __init__(
        self,
        tables: Optional[LookupTables] = None,
        reference_year: Optional[int] = None
    ) -> None:
        self.tables = tables or default_tables()
        self.reference_year = reference_year or date.today().year

    def decode(self, identifier: Optional[str]) -> DecodedIdentifier:
        """
        Decode an identifier. Never raises.

        Args:
            identifier: Corrected identifier string.

        Returns:
            DecodedIdentifier with None for any component without a match.
        """
        if not isinstance(identifier, str) or not identifier:
            return DecodedIdentifier()

        identifier = identifier.strip().upper()
        return DecodedIdentifier(
            manufacturer=self.decode_manufacturer(identifier),
            model_year=self.decode_model_year(identifier)
        )

    def decode_or_raise(self, identifier: Optional[str]) -> DecodedIdentifier:
        """
        Decode an identifier, raising when neither component resolves.

        Raises:
            IdentifierDecodeError: If no table matches the identifier.
        """
        decoded = self.decode(identifier)
        if decoded.is_empty:
            raise IdentifierDecodeError(identifier, "no prefix or year-code match")
        return decoded

    def decode_manufacturer(self, identifier: str) -> Optional[str]:
        """Return the manufacturer for the longest matching 1-3 character prefix."""
        prefixes = self.tables.manufacturer_prefixes
        for length in range(min(self.MAX_PREFIX_LENGTH, len(identifier)), 0, -1):
            manufacturer = prefixes.get(identifier[:length])
            if manufacturer:
                return manufacturer
        return None

    def decode_model_year(self, identifier: str) -> Optional[int]:
        """Return the model year encoded at position 10, with recency bias."""
        if len(identifier) <= self.YEAR_CODE_INDEX:
            return None

        base_year = self.tables.model_year_codes.get(identifier[self.YEAR_CODE_INDEX])
        if base_year is None:
            return None

        latest_allowed = self.reference_year + 1
        year = base_year
        while year > latest_allowed:
            year -= self.tables.model_year_cycle

        logger.debug(f"Year code '{identifier[self.YEAR_CODE_INDEX]}' decoded as {year}")
        return year
