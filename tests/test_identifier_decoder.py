"""
Tests for identifier decoding.

Run with: pytest tests/test_identifier_decoder.py -v
"""

import pytest

from src.decoding import DecodedIdentifier, IdentifierDecoder
from src.lookup import LookupTables
from src.utils.exceptions import IdentifierDecodeError


# =============================================================================
# FIXTURES
# =============================================================================

@pytest.fixture
def decoder():
    """Decoder pinned to 2026."""
    return IdentifierDecoder(reference_year=2026)


# =============================================================================
# DECODING
# =============================================================================

class TestIdentifierDecoder:
    """Tests for manufacturer and model-year decoding."""

    @pytest.mark.parametrize("vin,manufacturer,year", [
        ("5XYZT3LB0EG123456", "Hyundai", 2014),
        ("WBS8M9C57NCG12345", "BMW", 2022),
        ("JTDKN3DU6A0123456", "Toyota", 2010),
        ("SALWR2RV9KA123456", "Land Rover", 2019),
        ("WDDJK6FA9FF035164", "Mercedes-Benz", 2015),
    ])
    def test_decode(self, decoder, vin, manufacturer, year):
        """Known identifiers decode to manufacturer and year."""
        assert decoder.decode(vin) == DecodedIdentifier(manufacturer=manufacturer, model_year=year)

    def test_longest_prefix_wins(self, decoder):
        """Three-character prefixes take precedence over shorter ones."""
        assert decoder.decode_manufacturer("JH4CU2F88CC019777") == "Acura"
        assert decoder.decode_manufacturer("JHMCU2F88CC019777") == "Honda"

    def test_recency_bias(self):
        """Year codes resolve to the latest cycle not past reference year + 1."""
        assert IdentifierDecoder(reference_year=2026).decode_model_year("1FTFW1E50ZF000001") is None
        assert IdentifierDecoder(reference_year=2026).decode_model_year("1FTFW1E50VF000001") == 2027
        assert IdentifierDecoder(reference_year=2025).decode_model_year("1FTFW1E50VF000001") == 1997

    def test_unknown_components(self, decoder):
        """Unmatched prefix and year code give an empty result."""
        decoded = decoder.decode("ZZZZZZZZZZZZZZZZZ")
        assert decoded.is_empty

    def test_invalid_input_never_raises(self, decoder):
        """decode() returns an empty result for None and short strings."""
        assert decoder.decode(None).is_empty
        assert decoder.decode("WBS").model_year is None

    def test_decode_or_raise(self, decoder):
        """decode_or_raise() raises when nothing decodes."""
        with pytest.raises(IdentifierDecodeError):
            decoder.decode_or_raise("ZZZZZZZZZZZZZZZZZ")

    def test_injected_tables(self):
        """Decoding uses the injected tables."""
        tables = LookupTables(manufacturer_prefixes={'5XY': 'Kia'})
        decoder = IdentifierDecoder(tables, reference_year=2026)
        assert decoder.decode_manufacturer("5XYZT3LB0EG123456") == "Kia"
