"""
Tests for the ingestion boundary.

Run with: pytest tests/test_ingestion.py -v
"""

import threading

import pytest

from src.ingestion import PlainTextSource, RawDocumentText, create_text_source
from src.utils.exceptions import (
    IngestionCancelledError,
    OCREngineNotAvailableError,
    UnsupportedFileTypeError
)

from tests.samples import MITCHELL_HYUNDAI


# =============================================================================
# FIXTURES
# =============================================================================

@pytest.fixture
def report_file(tmp_path):
    """A pre-OCR'd report on disk with Windows line endings."""
    path = tmp_path / "hyundai.txt"
    path.write_bytes(MITCHELL_HYUNDAI.replace("\n", "\r\n").encode('utf-8'))
    return path


# =============================================================================
# RAW DOCUMENT TEXT
# =============================================================================

class TestRawDocumentText:
    """Tests for RawDocumentText."""

    def test_from_text_mixed_newlines(self):
        """Any newline convention splits lines."""
        document = RawDocumentText.from_text("a\r\nb\rc\nd")
        assert document.lines == ("a", "b", "c", "d")

    def test_from_pages(self):
        """Pages are concatenated in order."""
        document = RawDocumentText.from_pages(["page one\nline two", None, "page three"])
        assert list(document) == ["page one", "line two", "page three"]
        assert len(document) == 3

    def test_char_count_ignores_whitespace(self):
        """Only non-whitespace characters count."""
        document = RawDocumentText.from_text("  ab \n\t c ")
        assert document.char_count == 3
        assert RawDocumentText.from_text(" \n ").is_blank

    def test_text_property(self):
        """text joins lines with newlines."""
        assert RawDocumentText.from_text("a\r\nb").text == "a\nb"


# =============================================================================
# PLAIN TEXT SOURCE
# =============================================================================

class TestPlainTextSource:
    """Tests for PlainTextSource."""

    def test_extract(self, report_file):
        """Text files are read into RawDocumentText."""
        document = PlainTextSource().extract(report_file)

        assert document.source == "hyundai.txt"
        assert document.lines == tuple(MITCHELL_HYUNDAI.splitlines())

    def test_progress(self, report_file):
        """Progress is reported as a single page."""
        calls = []
        PlainTextSource().extract(report_file, progress=lambda done, total: calls.append((done, total)))
        assert calls == [(1, 1)]

    def test_cancelled(self, report_file):
        """A set cancel event stops extraction."""
        cancel = threading.Event()
        cancel.set()

        with pytest.raises(IngestionCancelledError) as exc_info:
            PlainTextSource().extract(report_file, cancel_event=cancel)
        assert exc_info.value.details == {'pages_done': 0, 'total_pages': 1}

    def test_unsupported(self, tmp_path):
        """Other file types are rejected."""
        path = tmp_path / "report.docx"
        path.write_bytes(b"")

        with pytest.raises(UnsupportedFileTypeError):
            PlainTextSource().extract(path)

    def test_supports(self):
        """supports() checks the extension case-insensitively."""
        source = PlainTextSource()
        assert source.supports("REPORT.TXT")
        assert not source.supports("report.pdf")

    def test_end_to_end(self, report_file, engine):
        """Extracted text resolves like the same text passed as a string."""
        document = PlainTextSource().extract(report_file)
        assert engine.resolve(document) == engine.resolve(MITCHELL_HYUNDAI)


# =============================================================================
# BACKEND FACTORY
# =============================================================================

class TestCreateTextSource:
    """Tests for create_text_source."""

    def test_text_backend(self):
        """The text backend needs no OCR libraries."""
        assert isinstance(create_text_source("TEXT"), PlainTextSource)

    def test_unknown_backend(self):
        """Unknown backends are not available."""
        with pytest.raises(OCREngineNotAvailableError):
            create_text_source("abbyy")
