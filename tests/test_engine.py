"""
End-to-end tests for the resolution engine.

Run with: pytest tests/test_engine.py -v
"""

import pytest

from src.correction import is_identifier_shape
from src.dialect import Dialect
from src.ingestion import RawDocumentText
from src.resolver import ResolutionEngine, ResolutionSettings, StructuredVehicleRecord
from src.utils.exceptions import InputEmptyOrUnreadableError

from tests.samples import (
    CCC_CORRUPTED_COMPONENTS,
    CCC_TOYOTA,
    MITCHELL_BASE_VALUE_ONLY,
    MITCHELL_BMW_SUBMODEL,
    MITCHELL_CORRUPTED,
    MITCHELL_CORRUPTED_LABELS,
    MITCHELL_CORRUPTED_MILES,
    MITCHELL_HYUNDAI,
    MITCHELL_LOOKAHEAD,
    MITCHELL_MARKET_LABEL_ABOVE_SETTLEMENT,
    UNKNOWN_DIALECT
)

ALL_SAMPLES = [
    MITCHELL_HYUNDAI,
    MITCHELL_BMW_SUBMODEL,
    MITCHELL_CORRUPTED,
    MITCHELL_LOOKAHEAD,
    MITCHELL_BASE_VALUE_ONLY,
    CCC_TOYOTA,
    UNKNOWN_DIALECT,
]


# =============================================================================
# MITCHELL REPORTS
# =============================================================================

class TestMitchellReports:
    """End-to-end resolution of Mitchell reports."""

    def test_hyundai_santa_fe_sport(self, engine):
        """A clean report resolves every field directly."""
        record = engine.resolve(MITCHELL_HYUNDAI)

        assert record.dialect is Dialect.MITCHELL
        assert record.identifier_code == "5XYZT3LB0EG123456"
        assert record.model_year == 2014
        assert record.manufacturer == "Hyundai"
        assert record.model == "Santa Fe Sport"
        assert record.odometer_reading == 85234
        assert record.location == "CA 90210"
        assert record.settlement_value == 10741.06
        assert set(record.tiers.values()) == {1}
        assert record.overall_confidence == 100.0
        assert record.warnings == ()
        assert record.needs_manual_review() is False

    def test_market_value_preferred_over_base_value(self, engine):
        """The adjusted market value is taken, never the base value."""
        record = engine.resolve(MITCHELL_HYUNDAI)
        assert record.market_value == 10062.32

    def test_bmw_m3_reconstruction(self, engine):
        """Year and make come from the identifier; the M3 is reconstructed."""
        record = engine.resolve(MITCHELL_BMW_SUBMODEL)

        assert record.identifier_code == "WBS8M9C57NCG12345"
        assert record.model_year == 2022
        assert record.manufacturer == "BMW"
        assert record.model == "M3"
        assert record.tiers['model_year'] == 3
        assert record.tiers['manufacturer'] == 3
        assert record.tiers['model'] == 4
        assert record.market_value == 52852.67
        assert any("M3" in warning for warning in record.warnings)
        assert record.overall_confidence == 76.0

    def test_corrupted_report(self, engine):
        """Corrupted labels and values are repaired at tier 2."""
        record = engine.resolve(MITCHELL_CORRUPTED)

        assert record.identifier_code == "WDDJK6FA9FF035164"
        assert record.model_year == 2015
        assert record.manufacturer == "Mercedes-Benz"
        assert record.model == "SL-Class"
        assert record.market_value == 9782.21
        assert record.settlement_value == 10741.06
        assert record.tiers['identifier_code'] == 2
        assert record.tiers['manufacturer'] == 2
        assert record.tiers['market_value'] == 2
        assert record.overall_confidence == 83.0

    def test_market_value_lookahead(self, engine):
        """An amount printed below its label resolves at tier 3."""
        record = engine.resolve(MITCHELL_LOOKAHEAD)
        assert record.market_value == 10062.32
        assert record.tiers['market_value'] == 3

    def test_market_label_above_settlement(self, engine):
        """A bare market label never borrows the settlement amount below it."""
        record = engine.resolve(MITCHELL_MARKET_LABEL_ABOVE_SETTLEMENT)

        assert record.settlement_value == 10741.06
        assert record.market_value is None
        assert "market_value" in record.missing_fields

    def test_corrupted_odometer_and_location_labels(self, engine):
        """Labels with dropped letters resolve at tier 2 with artifacts trimmed."""
        record = engine.resolve(MITCHELL_CORRUPTED_LABELS)

        assert record.odometer_reading == 45120
        assert record.location == "CA 90210"
        assert record.tiers['odometer_reading'] == 2
        assert record.tiers['location'] == 2

    def test_corrupted_miles_unit(self, engine):
        """A misread miles unit still yields the reading at tier 2."""
        record = engine.resolve(MITCHELL_CORRUPTED_MILES)

        assert record.odometer_reading == 45120
        assert record.tiers['odometer_reading'] == 2

    def test_base_value_never_used(self, engine):
        """With only a base value present the market value stays unresolved."""
        record = engine.resolve(MITCHELL_BASE_VALUE_ONLY)

        assert record.market_value is None
        assert "market_value" in record.missing_fields
        assert "Field 'market_value' could not be resolved" in record.warnings

    def test_check_digit_warning(self, engine):
        """A failed check digit is reported but the identifier is kept."""
        text = MITCHELL_HYUNDAI.replace("5XYZT3LB0EG123456", "5XYZT3LB1EG123456")
        record = engine.resolve(text)

        assert record.identifier_code == "5XYZT3LB1EG123456"
        assert "Identifier 5XYZT3LB1EG123456 failed check digit validation" in record.warnings


# =============================================================================
# CCC ONE REPORTS
# =============================================================================

class TestCCCReports:
    """End-to-end resolution of CCC ONE reports."""

    def test_toyota_prius(self, engine):
        """Labeled components resolve with artifacts stripped."""
        record = engine.resolve(CCC_TOYOTA)

        assert record.dialect is Dialect.CCC_ONE
        assert record.identifier_code == "JTDKN3DU6A0123456"
        assert record.model_year == 2010
        assert record.manufacturer == "Toyota"
        assert record.model == "Prius Two"
        assert record.odometer_reading == 112450
        assert record.location == "SAN DIEGO, CA 92101"
        assert record.market_value == 7845.5
        assert record.settlement_value == 8402.13
        assert record.overall_confidence == 100.0

    def test_corrupted_component_labels(self, engine):
        """Year, make and model lines with dropped leading letters resolve at tier 2."""
        record = engine.resolve(CCC_CORRUPTED_COMPONENTS)

        assert record.dialect is Dialect.CCC_ONE
        assert record.model_year == 2010
        assert record.manufacturer == "Toyota"
        assert record.model == "Prius Two"
        assert record.tiers['model_year'] == 2
        assert record.tiers['manufacturer'] == 2
        assert record.tiers['model'] == 2


# =============================================================================
# DIALECT FALLBACK
# =============================================================================

class TestDialectFallback:
    """Tests for reports without a dialect signature."""

    def test_unknown_dialect_uses_default(self, engine):
        """Unknown reports are resolved with the default dialect and a warning."""
        record = engine.resolve(UNKNOWN_DIALECT)

        assert record.dialect is Dialect.MITCHELL
        assert record.warnings[0] == "Report dialect not recognized, defaulting to MITCHELL"
        assert record.manufacturer == "Land Rover"
        assert record.model == "Range Rover Sport"
        assert record.model_year == 2019

    def test_configured_default(self):
        """The fallback dialect comes from settings."""
        engine = ResolutionEngine(
            settings=ResolutionSettings(default_dialect=Dialect.CCC_ONE, reference_year=2026)
        )
        assert engine.resolve(UNKNOWN_DIALECT).dialect is Dialect.CCC_ONE


# =============================================================================
# INPUT HANDLING AND PROPERTIES
# =============================================================================

class TestEngineProperties:
    """Invariants that hold for every input."""

    @pytest.mark.parametrize("raw", [None, "", "   \n\t  ", "short text"])
    def test_empty_input_raises(self, engine, raw):
        """Empty or unreadable input is the only fatal error."""
        with pytest.raises(InputEmptyOrUnreadableError):
            engine.resolve(raw)

    def test_accepts_line_lists_and_documents(self, engine):
        """Strings, line lists and RawDocumentText give equal records."""
        from_text = engine.resolve(MITCHELL_HYUNDAI)
        from_lines = engine.resolve(MITCHELL_HYUNDAI.splitlines())
        from_document = engine.resolve(RawDocumentText.from_text(MITCHELL_HYUNDAI))
        assert from_text == from_lines == from_document

    @pytest.mark.parametrize("text", ALL_SAMPLES)
    def test_idempotent(self, engine, text):
        """Resolving the same text twice gives an equal record."""
        assert engine.resolve(text) == engine.resolve(text)

    @pytest.mark.parametrize("text", ALL_SAMPLES)
    def test_confidence_in_range(self, engine, text):
        """Confidence always lies in [0, 100]."""
        assert 0.0 <= engine.resolve(text).overall_confidence <= 100.0

    @pytest.mark.parametrize("text", ALL_SAMPLES)
    def test_identifiers_are_well_formed(self, engine, text):
        """Resolved identifiers are 17 characters from the identifier alphabet."""
        identifier = engine.resolve(text).identifier_code
        assert identifier is None or is_identifier_shape(identifier)

    def test_record_is_frozen(self, engine):
        """Records cannot be modified."""
        record = engine.resolve(MITCHELL_HYUNDAI)
        with pytest.raises(AttributeError):
            record.model = "Tucson"

    def test_module_level_resolve(self, monkeypatch):
        """The module-level resolve() builds its own engine."""
        from src.resolver import engine as engine_module

        monkeypatch.setattr(
            engine_module.ResolutionSettings, 'from_config',
            classmethod(lambda cls: cls(reference_year=2026))
        )
        record = engine_module.resolve(MITCHELL_HYUNDAI)
        assert isinstance(record, StructuredVehicleRecord)
        assert record.model == "Santa Fe Sport"


# =============================================================================
# RECORD SERIALIZATION
# =============================================================================

class TestRecordSerialization:
    """Tests for StructuredVehicleRecord conversions."""

    def test_dict_round_trip(self, engine):
        """from_dict(to_dict()) restores an equal record."""
        record = engine.resolve(MITCHELL_BMW_SUBMODEL)
        assert StructuredVehicleRecord.from_dict(record.to_dict()) == record

    def test_flat_dict(self, engine):
        """Flat dicts carry tiers and joined warnings."""
        flat = engine.resolve(MITCHELL_BMW_SUBMODEL).to_flat_dict()
        assert flat['model_tier'] == 4
        assert flat['warning_count'] == 1
        assert flat['dialect'] == "MITCHELL"

    def test_valuation_input(self, engine):
        """The valuation view uses neutral defaults for condition and equipment."""
        view = engine.resolve(MITCHELL_HYUNDAI).to_valuation_input()
        assert view['vin'] == "5XYZT3LB0EG123456"
        assert view['mileage'] == 85234
        assert view['condition'] == "Good"
        assert view['equipment'] == []

    def test_review_threshold(self, engine):
        """Records below the threshold need manual review."""
        record = engine.resolve(MITCHELL_BMW_SUBMODEL)
        assert record.needs_manual_review(threshold=80) is True
        assert record.needs_manual_review(threshold=60) is False
