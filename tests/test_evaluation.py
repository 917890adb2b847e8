"""
Tests for ground truth loading and accuracy metrics.

Run with: pytest tests/test_evaluation.py -v
"""

import json

import pytest

from src.evaluation import GroundTruthLoader, MetricsCalculator
from src.utils.exceptions import UnsupportedFileTypeError

from tests.samples import MITCHELL_BMW_SUBMODEL, MITCHELL_HYUNDAI


# =============================================================================
# FIXTURES
# =============================================================================

@pytest.fixture
def hyundai_truth():
    """Expected values for the Hyundai report."""
    return {
        'identifier_code': "5XYZT3LB0EG123456",
        'model_year': 2014,
        'manufacturer': "hyundai",
        'model': "Santa  Fe Sport",
        'odometer_reading': 85234,
        'location': "CA 90210",
        'market_value': 10062.325,
        'settlement_value': 10741.06,
    }


@pytest.fixture
def csv_file(tmp_path):
    """Ground truth CSV with formatted numbers and a blank cell."""
    path = tmp_path / "truth.csv"
    path.write_text(
        "source_file,identifier_code,model_year,odometer_reading,market_value,location\n"
        "reports/hyundai.txt,5XYZT3LB0EG123456,2014,\"85,234\",\"$10,062.32\",\n",
        encoding='utf-8'
    )
    return path


# =============================================================================
# METRICS
# =============================================================================

class TestMetricsCalculator:
    """Tests for MetricsCalculator."""

    def test_perfect_record(self, engine, hyundai_truth):
        """A correct record scores full accuracy despite case and spacing."""
        prediction = engine.resolve(MITCHELL_HYUNDAI).to_dict()
        result = MetricsCalculator().evaluate([prediction], [hyundai_truth])

        assert result.overall_accuracy == 1.0
        assert result.overall_extraction_rate == 1.0
        assert result.avg_confidence == 100.0
        assert result.total_samples == 1

    def test_wrong_and_missing_values(self, engine):
        """Wrong values lower accuracy; unresolved values lower extraction."""
        prediction = engine.resolve(MITCHELL_BMW_SUBMODEL).to_dict()
        truth = {'model': "M3 Competition", 'settlement_value': 55310.20, 'odometer_reading': 12500}

        result = MetricsCalculator().evaluate([prediction], [truth])

        assert result.field_metrics['model'].accuracy == 0.0
        assert result.field_metrics['model'].extraction_rate == 1.0
        assert result.field_metrics['settlement_value'].correct_count == 1
        assert result.field_metrics['odometer_reading'].correct_count == 1
        assert result.field_metrics['location'].total_samples == 0

    def test_missing_prediction(self):
        """A None prediction counts as missing."""
        result = MetricsCalculator(fields=['model']).evaluate([{'model': None}], [{'model': "M3"}])
        metrics = result.field_metrics['model']
        assert metrics.missing_count == 1
        assert metrics.extraction_rate == 0.0

    def test_length_mismatch(self):
        """Predictions and ground truth must pair up."""
        with pytest.raises(ValueError):
            MetricsCalculator().evaluate([{}], [])

    def test_empty(self):
        """No samples give an empty result."""
        assert MetricsCalculator().evaluate([], []).total_samples == 0

    @pytest.mark.parametrize("field,predicted,expected,match", [
        ('market_value', 10062.32, 10062.33, True),
        ('market_value', 10062.32, 10062.35, False),
        ('model_year', 2014, "2014", True),
        ('model_year', "n/a", 2014, False),
        ('location', "SAN DIEGO,  CA 92101", "san diego, ca 92101", True),
    ])
    def test_values_match(self, field, predicted, expected, match):
        """Fields compare by type."""
        assert MetricsCalculator().values_match(field, predicted, expected) is match

    def test_evaluate_single(self):
        """Single comparisons report per-field matches."""
        results = MetricsCalculator(fields=['manufacturer', 'model']).evaluate_single(
            {'manufacturer': "BMW", 'model': None}, {'manufacturer': "bmw", 'model': "M3"}
        )
        assert results['manufacturer']['exact_match'] is True
        assert results['model'] == {
            'predicted': None, 'ground_truth': "M3", 'exact_match': False, 'extracted': False
        }

    def test_report(self, engine, hyundai_truth):
        """The text report lists overall and field metrics."""
        prediction = engine.resolve(MITCHELL_HYUNDAI).to_dict()
        report = MetricsCalculator().evaluate([prediction], [hyundai_truth]).print_report()

        assert "RESOLUTION EVALUATION REPORT" in report
        assert "Accuracy:        100.0%" in report
        assert "identifier_code" in report
        assert "T1:100%" in report

    def test_to_dict(self):
        """Results serialize with per-field metrics."""
        result = MetricsCalculator(fields=['model']).evaluate([{'model': "M3"}], [{'model': "M3"}])
        data = result.to_dict()
        assert data['field_metrics']['model']['accuracy'] == 1.0
        assert 'calibration' not in data
        assert json.dumps(data)

    def test_accuracy_by_tier(self):
        """Correct values are counted against the tier that produced them."""
        predictions = [
            {'model': "M3", 'field_tiers': {'model': 4}},
            {'model': "M4", 'field_tiers': {'model': 4}},
            {'model': "Camry", 'field_tiers': {'model': 1}},
        ]
        truth = [{'model': "M3"}, {'model': "M5"}, {'model': "Camry"}]

        metrics = MetricsCalculator(fields=['model']).evaluate(predictions, truth).field_metrics['model']

        assert metrics.tier_accuracy() == {1: 1.0, 4: 0.5}


# =============================================================================
# REVIEW CALIBRATION
# =============================================================================

class TestReviewCalibration:
    """Tests for review threshold calibration."""

    @pytest.fixture
    def pair(self, engine, hyundai_truth):
        """A clean Hyundai record and a BMW record with a wrong model."""
        predictions = [
            engine.resolve(MITCHELL_HYUNDAI).to_dict(),
            engine.resolve(MITCHELL_BMW_SUBMODEL).to_dict(),
        ]
        truth = [hyundai_truth, {'model': "M3 Competition"}]
        return predictions, truth

    def test_threshold_catches_error(self, pair):
        """A threshold above the BMW score flags exactly the erroneous record."""
        calibration = MetricsCalculator(review_threshold=80).evaluate(*pair).calibration

        assert calibration.flagged == 1
        assert calibration.precision == 1.0
        assert calibration.recall == 1.0

    def test_threshold_misses_error(self, pair):
        """A low threshold lets the erroneous record through."""
        result = MetricsCalculator(review_threshold=60).evaluate(*pair)

        assert result.calibration.flagged == 0
        assert result.calibration.recall == 0.0
        assert "Review threshold 60: 0 flagged" in result.print_report()


# =============================================================================
# GROUND TRUTH
# =============================================================================

class TestGroundTruthLoader:
    """Tests for GroundTruthLoader."""

    def test_csv(self, csv_file):
        """CSV values are coerced to numbers; blank cells become None."""
        loader = GroundTruthLoader(str(csv_file))
        record = loader.get_all()[0]

        assert len(loader) == 1
        assert record['model_year'] == 2014
        assert record['odometer_reading'] == 85234
        assert record['market_value'] == 10062.32
        assert record['location'] is None

    def test_lookup_by_filename(self, csv_file):
        """Records are found by path or bare file name."""
        loader = GroundTruthLoader(str(csv_file))
        assert loader.get_by_filename("hyundai.txt")['identifier_code'] == "5XYZT3LB0EG123456"
        assert loader.get_by_filename("/other/dir/hyundai.txt") is not None
        assert loader.get_by_filename("bmw.txt") is None

    @pytest.mark.parametrize("payload", [
        [{'source_file': "bmw.txt", 'model': "M3"}],
        {'records': [{'source_file': "bmw.txt", 'model': "M3"}]},
        {'bmw.txt': {'model': "M3"}},
    ])
    def test_json_layouts(self, tmp_path, payload):
        """Lists, record wrappers and filename-keyed dicts are accepted."""
        path = tmp_path / "truth.json"
        path.write_text(json.dumps(payload), encoding='utf-8')

        loader = GroundTruthLoader(str(path))

        assert loader.get_by_filename("bmw.txt")['model'] == "M3"
        assert list(loader) == loader.get_all()

    def test_missing_file(self, tmp_path):
        """A missing file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            GroundTruthLoader(str(tmp_path / "absent.json"))

    def test_unsupported_format(self, tmp_path):
        """Only JSON and CSV are supported."""
        path = tmp_path / "truth.xml"
        path.write_text("<records/>", encoding='utf-8')
        with pytest.raises(UnsupportedFileTypeError):
            GroundTruthLoader(str(path))

    def test_empty_loader(self):
        """A loader without a file holds nothing."""
        assert len(GroundTruthLoader()) == 0
