"""
Tests for report dialect classification.

Run with: pytest tests/test_dialect.py -v
"""

import pytest

from src.dialect import Dialect, DialectClassifier, parse_dialect
from src.ingestion import RawDocumentText
from src.utils.exceptions import DialectUnrecognizedError

from tests.samples import CCC_TOYOTA, MITCHELL_HYUNDAI, UNKNOWN_DIALECT


def _doc(text):
    return RawDocumentText.from_text(text)


class TestDialectClassifier:
    """Tests for signature-based classification."""

    def test_mitchell(self):
        """Mitchell WorkCenter reports are recognized."""
        assert DialectClassifier().classify(_doc(MITCHELL_HYUNDAI)) is Dialect.MITCHELL

    def test_ccc_one(self):
        """CCC ONE reports are recognized."""
        assert DialectClassifier().classify(_doc(CCC_TOYOTA)) is Dialect.CCC_ONE

    def test_ccc_checked_first(self):
        """A CCC report quoting Mitchell terms is still CCC ONE."""
        text = "CCC ONE Market Valuation\nPrior estimate: Mitchell WorkCenter"
        assert DialectClassifier().classify(_doc(text)) is Dialect.CCC_ONE

    def test_case_insensitive(self):
        """Signatures match regardless of case."""
        assert DialectClassifier().classify(_doc("MITCHELL INTERNATIONAL")) is Dialect.MITCHELL

    def test_unknown(self):
        """Text without signatures is unknown."""
        assert DialectClassifier().classify(_doc(UNKNOWN_DIALECT)) is Dialect.UNKNOWN

    def test_resolve_raises_with_fallback(self):
        """resolve() raises with the default dialect as fallback."""
        classifier = DialectClassifier(Dialect.CCC_ONE)
        with pytest.raises(DialectUnrecognizedError) as exc_info:
            classifier.resolve(_doc(UNKNOWN_DIALECT))
        assert exc_info.value.fallback is Dialect.CCC_ONE
        assert "CCC_ONE" in str(exc_info.value)

    def test_resolve_known(self):
        """resolve() returns known dialects unchanged."""
        assert DialectClassifier().resolve(_doc(CCC_TOYOTA)) is Dialect.CCC_ONE

    def test_unknown_default_rejected(self):
        """UNKNOWN cannot be the default dialect."""
        with pytest.raises(ValueError):
            DialectClassifier(Dialect.UNKNOWN)


class TestParseDialect:
    """Tests for configuration parsing of dialect names."""

    def test_known_names(self):
        """Names parse case-insensitively."""
        assert parse_dialect("ccc_one") is Dialect.CCC_ONE
        assert parse_dialect("MITCHELL") is Dialect.MITCHELL

    def test_fallbacks(self):
        """Empty, unknown and UNKNOWN names fall back to the default."""
        assert parse_dialect(None) is Dialect.MITCHELL
        assert parse_dialect("audatex") is Dialect.MITCHELL
        assert parse_dialect("UNKNOWN", Dialect.CCC_ONE) is Dialect.CCC_ONE
