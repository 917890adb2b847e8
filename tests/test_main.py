"""
Command-line tests for main.py.

Run with: pytest tests/test_main.py -v
"""

import json
import logging

import pytest

import main
from src.utils.logger import APP_LOGGER_NAME

from tests.samples import CCC_TOYOTA, MITCHELL_BMW_SUBMODEL, MITCHELL_HYUNDAI


# =============================================================================
# FIXTURES
# =============================================================================

@pytest.fixture(autouse=True)
def restore_logging():
    """main() reconfigures the application logger; undo it afterwards."""
    logger = logging.getLogger(APP_LOGGER_NAME)
    saved = (list(logger.handlers), logger.level, logger.propagate)
    yield
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    handlers, level, propagate = saved
    for handler in handlers:
        logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = propagate


@pytest.fixture
def report_dir(tmp_path):
    """Directory of pre-OCR'd reports plus an ignored file."""
    directory = tmp_path / "reports"
    directory.mkdir()
    (directory / "hyundai.txt").write_text(MITCHELL_HYUNDAI, encoding='utf-8')
    (directory / "bmw.txt").write_text(MITCHELL_BMW_SUBMODEL, encoding='utf-8')
    (directory / "toyota.txt").write_text(CCC_TOYOTA, encoding='utf-8')
    (directory / "notes.docx").write_bytes(b"")
    return directory


# =============================================================================
# TESTS
# =============================================================================

class TestMain:
    """End-to-end runs of the command-line entry point."""

    def test_json_output(self, report_dir, tmp_path):
        """A directory run writes one JSON record per report."""
        output = tmp_path / "out" / "records.json"

        exit_code = main.main([
            "--input", str(report_dir), "--output", str(output),
            "--backend", "text", "--no-database", "--quiet"
        ])

        assert exit_code == 0
        records = json.loads(output.read_text(encoding='utf-8'))
        assert [record['source_file'] for record in records] == ["bmw.txt", "hyundai.txt", "toyota.txt"]
        assert records[0]['model'] == "M3"
        assert records[2]['dialect'] == "CCC_ONE"

    def test_excel_output(self, report_dir, tmp_path):
        """An .xlsx output path names the workbook."""
        output = tmp_path / "records.xlsx"

        exit_code = main.main([
            "--input", str(report_dir / "hyundai.txt"), "--output", str(output),
            "--backend", "text", "--no-database", "--quiet"
        ])

        assert exit_code == 0
        assert output.exists()

    def test_evaluation_run(self, report_dir, tmp_path):
        """Evaluation runs against a ground truth file."""
        truth = tmp_path / "truth.json"
        truth.write_text(json.dumps({'hyundai.txt': {'model': "Santa Fe Sport"}}), encoding='utf-8')

        documents = main.run_resolution(
            str(report_dir), str(tmp_path / "records.json"), backend="text",
            enable_database=False, evaluate=True, ground_truth_path=str(truth)
        )

        assert len(documents) == 3
        result = main.run_evaluation(documents, str(truth), review_threshold=60)
        assert result.total_samples == 1
        assert result.overall_accuracy == 1.0

    def test_missing_input(self, tmp_path):
        """A missing input path exits with 1."""
        assert main.main(["--input", str(tmp_path / "absent"), "--no-database", "-q"]) == 1

    def test_unsupported_single_file(self, report_dir):
        """A single unsupported file exits with 1."""
        assert main.main(["--input", str(report_dir / "notes.docx"), "--no-database", "-q"]) == 1

    def test_empty_directory(self, tmp_path):
        """A directory with nothing to resolve exits with 1."""
        assert main.main([
            "--input", str(tmp_path), "--output", str(tmp_path / "r.json"),
            "--backend", "text", "--no-database", "-q"
        ]) == 1


class TestHelpers:
    """Tests for command-line helpers."""

    def test_collect_input_files(self, report_dir):
        """Only supported extensions are collected, sorted by name."""
        files = main.collect_input_files(str(report_dir), ['.txt'])
        assert [f.name for f in files] == ["bmw.txt", "hyundai.txt", "toyota.txt"]

    def test_parse_arguments(self):
        """Arguments map onto the namespace."""
        args = main.parse_arguments(["-i", "reports", "--review-threshold", "75", "--debug"])
        assert args.input == "reports"
        assert args.review_threshold == 75.0
        assert args.debug is True
        assert args.backend is None
