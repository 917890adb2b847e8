"""
Tests for manufacturer / model splitting.

Run with: pytest tests/test_make_model.py -v
"""

import pytest

from src.resolver import MakeModelSplit
from src.resolver.make_model import strip_artifacts


class TestMakeModelSplitter:
    """Tests for MakeModelSplitter.split."""

    @pytest.mark.parametrize("span,manufacturer,model", [
        ("Hyundai Santa Fe Sport", "Hyundai", "Santa Fe Sport"),
        ("Land Rover Range Rover Sport", "Land Rover", "Range Rover Sport"),
        ("Mercedes-Benz SL-Class", "Mercedes-Benz", "SL-Class"),
        ("Alfa Romeo Giulia", "Alfa Romeo", "Giulia"),
        ("toyota Camry", "Toyota", "Camry"),
        ("Dodge Ram 1500 Laramie", "Dodge Ram", "1500 Laramie"),
        ("American Motors Eagle", "American Motors", "Eagle"),
    ])
    def test_canonical_prefix(self, splitter, span, manufacturer, model):
        """Known manufacturers, including multi-word names, are never truncated."""
        assert splitter.split(span) == MakeModelSplit(manufacturer, model, True)

    def test_spaced_alias(self, splitter):
        """A spaced spelling is reported under its hyphenated name."""
        split = splitter.split("Mercedes Benz C300 4MATIC")
        assert split == MakeModelSplit("Mercedes-Benz", "C300 4MATIC", True)

    def test_variant_correction(self, splitter):
        """A dropped leading letter is repaired."""
        assert splitter.split("ercedes SL-Class") == MakeModelSplit("Mercedes-Benz", "SL-Class", True)

    def test_unknown_manufacturer(self, splitter):
        """Unknown spans use their first token and report no match."""
        assert splitter.split("Zastava Yugo GV") == MakeModelSplit("Zastava", "Yugo GV", False)

    def test_word_boundary(self, splitter):
        """A canonical name must end on a word boundary."""
        split = splitter.split("Hondata Tuner")
        assert split.manufacturer == "Hondata"
        assert split.matched is False

    def test_empty_span(self, splitter):
        """Empty spans give no manufacturer."""
        assert splitter.split("  | ") == MakeModelSplit(None, None, False)

    def test_manufacturer_only(self, splitter):
        """A span holding only a manufacturer has no model."""
        assert splitter.split("Tesla") == MakeModelSplit("Tesla", None, True)


class TestCleanModel:
    """Tests for model cleanup."""

    def test_body_and_engine_removed(self, splitter):
        """Body, engine and drivetrain specifications are dropped."""
        assert splitter.clean_model("Toyota", "Camry 2.5L AWD") == "Camry"
        assert splitter.clean_model("Hyundai", "Santa Fe Sport | 4 Door Utility") == "Santa Fe Sport"

    def test_model_corrections(self, splitter):
        """Manufacturer-specific OCR corrections apply."""
        assert splitter.clean_model("Volvo", "XG60 T5 Momentum 4 Door Utility") == "XC60 T5 Momentum"

    def test_section_headers_removed(self, splitter):
        """Trailing section headers are not part of the model."""
        assert splitter.clean_model("Toyota", "Prius Two Vehicle Information") == "Prius Two"

    def test_empty(self, splitter):
        """Nothing left after cleanup gives None."""
        assert splitter.clean_model("Toyota", "") is None
        assert splitter.clean_model("Toyota", "| 4 Door") is None


class TestStripArtifacts:
    """Tests for trailing artifact removal."""

    def test_trailing_tokens(self):
        """Known artifacts and punctuation-only tokens are removed from the end."""
        assert strip_artifacts("SAN DIEGO, CA 92101 are }", ('are', '}')) == "SAN DIEGO, CA 92101"

    def test_inner_tokens_kept(self):
        """Artifacts inside the text are kept."""
        assert strip_artifacts("are you ok", ('are',)) == "are you ok"
