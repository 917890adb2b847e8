"""
Shared fixtures for the resolver test suite.
"""

import pytest

from src.confidence import ConfidenceScorer
from src.correction import FieldValidator, NoiseCorrector
from src.decoding import IdentifierDecoder
from src.dialect import Dialect
from src.ingestion import RawDocumentText
from src.lookup import default_tables
from src.resolver import MakeModelSplitter, ResolutionContext, ResolutionEngine, ResolutionSettings

from tests.samples import REFERENCE_YEAR


# =============================================================================
# FIXTURES
# =============================================================================

@pytest.fixture
def settings():
    """Default settings pinned to a fixed reference year."""
    return ResolutionSettings(reference_year=REFERENCE_YEAR)


@pytest.fixture
def engine(settings):
    """Resolution engine independent of the calendar and of settings.yaml."""
    return ResolutionEngine(settings=settings)


@pytest.fixture
def tables():
    """Shared default lookup tables."""
    return default_tables()


@pytest.fixture
def splitter(tables):
    """Manufacturer/model splitter."""
    return MakeModelSplitter(tables)


@pytest.fixture
def validator():
    """Field validator pinned to the reference year."""
    return FieldValidator(REFERENCE_YEAR)


@pytest.fixture
def scorer():
    """Confidence scorer with default weights."""
    return ConfidenceScorer()


@pytest.fixture
def make_context(tables, settings, validator):
    """Factory building a fresh ResolutionContext for a text."""
    def _make(text, dialect=Dialect.MITCHELL):
        return ResolutionContext(
            document=RawDocumentText.from_text(text),
            dialect=dialect,
            tables=tables,
            corrector=NoiseCorrector(tables),
            decoder=IdentifierDecoder(tables, REFERENCE_YEAR),
            settings=settings,
            validator=validator
        )
    return _make
