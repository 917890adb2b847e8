"""
Metrics Calculator Module.

Scores resolved vehicle records against ground truth. Besides plain
per-field accuracy it answers the two questions that matter for tuning
the resolver:

    - Are lower tiers less accurate? Accuracy is broken down by the tier
      that produced each value.
    - Does the confidence score flag the right records? Records below the
      review threshold are compared with records that actually contain an
      error.

Author: ML Engineering Team
"""

from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from src.resolver.vehicle_record import RECORD_FIELDS
from src.utils.helpers import collapse_whitespace
from src.utils.logger import get_logger

# Initialize module logger
logger = get_logger(__name__)


@dataclass
class FieldMetrics:
    """
    Results for one record field across all samples.

    Attributes:
        field_name: Name of the field
        total_samples: Samples that have a ground truth value
        extracted_count: Samples where the resolver produced a value
        correct_count: Values equal to ground truth
        missing_count: Unresolved values
        tier_totals: Resolved values per strategy tier
        tier_correct: Correct values per strategy tier
    """
    field_name: str
    total_samples: int = 0
    extracted_count: int = 0
    correct_count: int = 0
    missing_count: int = 0
    tier_totals: Counter = field(default_factory=Counter)
    tier_correct: Counter = field(default_factory=Counter)

    @property
    def accuracy(self) -> float:
        return self.correct_count / self.total_samples if self.total_samples else 0.0

    @property
    def extraction_rate(self) -> float:
        return self.extracted_count / self.total_samples if self.total_samples else 0.0

    def tier_accuracy(self) -> Dict[int, float]:
        """Accuracy of the values each tier produced."""
        return {
            tier: self.tier_correct[tier] / total
            for tier, total in sorted(self.tier_totals.items())
        }


@dataclass
class ReviewCalibration:
    """
    How well the review threshold separates good records from bad ones.

    A record is erroneous when any evaluated field is wrong or missing.

    Attributes:
        threshold: Confidence threshold used for flagging
        flagged: Records below the threshold
        flagged_erroneous: Flagged records that really have an error
        missed_erroneous: Erroneous records that were not flagged
    """
    threshold: float
    flagged: int = 0
    flagged_erroneous: int = 0
    missed_erroneous: int = 0

    @property
    def precision(self) -> float:
        """Share of flagged records that needed review."""
        return self.flagged_erroneous / self.flagged if self.flagged else 0.0

    @property
    def recall(self) -> float:
        """Share of erroneous records that were flagged."""
        erroneous = self.flagged_erroneous + self.missed_erroneous
        return self.flagged_erroneous / erroneous if erroneous else 1.0


@dataclass
class EvaluationResult:
    """
    Complete evaluation results.

    Attributes:
        field_metrics: Field name to FieldMetrics
        calibration: Review threshold calibration
        avg_confidence: Mean record confidence (0-100)
        total_samples: Number of records evaluated
        timestamp: Evaluation timestamp
    """
    field_metrics: Dict[str, FieldMetrics] = field(default_factory=dict)
    calibration: Optional[ReviewCalibration] = None
    avg_confidence: float = 0.0
    total_samples: int = 0
    timestamp: str = ""

    def __post_init__(self):
        if not self.timestamp:
            self.timestamp = datetime.now().isoformat()

    def _evaluated(self) -> List[FieldMetrics]:
        return [m for m in self.field_metrics.values() if m.total_samples > 0]

    @property
    def overall_accuracy(self) -> float:
        """Mean accuracy over fields that had ground truth."""
        evaluated = self._evaluated()
        return sum(m.accuracy for m in evaluated) / len(evaluated) if evaluated else 0.0

    @property
    def overall_extraction_rate(self) -> float:
        evaluated = self._evaluated()
        return sum(m.extraction_rate for m in evaluated) / len(evaluated) if evaluated else 0.0

    def to_dict(self) -> Dict[str, Any]:
        result = {
            'overall_accuracy': self.overall_accuracy,
            'overall_extraction_rate': self.overall_extraction_rate,
            'avg_confidence': self.avg_confidence,
            'total_samples': self.total_samples,
            'timestamp': self.timestamp,
            'field_metrics': {
                name: {
                    'accuracy': m.accuracy,
                    'extraction_rate': m.extraction_rate,
                    'correct_count': m.correct_count,
                    'missing_count': m.missing_count,
                    'tier_accuracy': m.tier_accuracy(),
                }
                for name, m in self.field_metrics.items()
            },
        }

        if self.calibration is not None:
            result['calibration'] = {
                'threshold': self.calibration.threshold,
                'flagged': self.calibration.flagged,
                'precision': self.calibration.precision,
                'recall': self.calibration.recall,
            }
        return result

    def print_report(self) -> str:
        """Render the results as a plain text table."""
        rule = "=" * 72
        lines = [
            rule,
            "RESOLUTION EVALUATION REPORT",
            rule,
            f"Timestamp:       {self.timestamp}",
            f"Records:         {self.total_samples}",
            f"Accuracy:        {self.overall_accuracy * 100:.1f}%",
            f"Extraction Rate: {self.overall_extraction_rate * 100:.1f}%",
            f"Avg Confidence:  {self.avg_confidence:.1f}",
            "-" * 72,
            f"{'Field':<18}{'Accuracy':>10}{'Extracted':>11}{'Correct':>10}  By tier",
        ]

        for m in self._evaluated():
            by_tier = "  ".join(
                f"T{tier}:{accuracy * 100:.0f}%" for tier, accuracy in m.tier_accuracy().items()
            )
            lines.append(
                f"{m.field_name:<18}{m.accuracy * 100:>9.1f}%{m.extraction_rate * 100:>10.1f}%"
                f"{m.correct_count:>6}/{m.total_samples:<3}  {by_tier}"
            )

        if self.calibration is not None:
            c = self.calibration
            lines.extend([
                "-" * 72,
                f"Review threshold {c.threshold:g}: {c.flagged} flagged, "
                f"precision {c.precision * 100:.1f}%, recall {c.recall * 100:.1f}%",
            ])

        lines.append(rule)
        return "\n".join(lines)


class MetricsCalculator:
    """
    Calculates evaluation metrics for resolved records.

    Values are compared by field type: amounts within one cent, integers
    exactly, strings case- and whitespace-insensitively. Fields without
    a ground truth value are not counted for that sample.

    Example:
        >>> calculator = MetricsCalculator(review_threshold=60)
        >>> result = calculator.evaluate(predictions, ground_truth)
        >>> print(result.print_report())
    """

    AMOUNT_TOLERANCE = 0.01

    AMOUNT_FIELDS = ('market_value', 'settlement_value')
    INTEGER_FIELDS = ('model_year', 'odometer_reading')

    def __init__(
        self,
        fields: Optional[List[str]] = None,
        review_threshold: Optional[float] = None
    ) -> None:
        """
        Args:
            fields: Fields to evaluate. Defaults to every record field.
            review_threshold: Enables review calibration when given.
        """
        self.fields = list(fields or RECORD_FIELDS)
        self.review_threshold = review_threshold

    def evaluate(
        self,
        predictions: List[Dict[str, Any]],
        ground_truth: List[Dict[str, Any]]
    ) -> EvaluationResult:
        """
        Evaluate predictions against ground truth.

        Args:
            predictions: Record dictionaries (StructuredVehicleRecord.to_dict()).
            ground_truth: Expected record dictionaries, in the same order.

        Returns:
            EvaluationResult with computed metrics.

        Raises:
            ValueError: If predictions and ground truth lengths don't match.
        """
        if len(predictions) != len(ground_truth):
            raise ValueError(
                f"Predictions ({len(predictions)}) and ground truth "
                f"({len(ground_truth)}) must have same length"
            )

        if not predictions:
            return EvaluationResult()

        field_metrics = {name: FieldMetrics(field_name=name) for name in self.fields}
        calibration = (
            ReviewCalibration(threshold=self.review_threshold)
            if self.review_threshold is not None else None
        )

        for pred, gt in zip(predictions, ground_truth):
            tiers = pred.get('field_tiers') or {}
            erroneous = False

            for name in self.fields:
                expected = gt.get(name)
                if expected is None or expected == '':
                    continue

                metrics = field_metrics[name]
                metrics.total_samples += 1

                predicted = pred.get(name)
                if predicted is None or predicted == '':
                    metrics.missing_count += 1
                    erroneous = True
                    continue

                metrics.extracted_count += 1
                tier = int(tiers.get(name, 0))
                metrics.tier_totals[tier] += 1

                if self.values_match(name, predicted, expected):
                    metrics.correct_count += 1
                    metrics.tier_correct[tier] += 1
                else:
                    erroneous = True

            if calibration is not None:
                flagged = (pred.get('overall_confidence') or 0.0) < calibration.threshold
                calibration.flagged += int(flagged)
                if erroneous and flagged:
                    calibration.flagged_erroneous += 1
                elif erroneous:
                    calibration.missed_erroneous += 1

        confidences = [p.get('overall_confidence') or 0.0 for p in predictions]
        result = EvaluationResult(
            field_metrics=field_metrics,
            calibration=calibration,
            avg_confidence=sum(confidences) / len(confidences),
            total_samples=len(predictions)
        )

        logger.debug(
            f"Evaluated {result.total_samples} records "
            f"(accuracy {result.overall_accuracy * 100:.1f}%)"
        )
        return result

    def values_match(self, field_name: str, predicted: Any, expected: Any) -> bool:
        """True if a predicted value equals the expected one for its field type."""
        if field_name in self.AMOUNT_FIELDS:
            try:
                return abs(float(predicted) - float(expected)) <= self.AMOUNT_TOLERANCE + 1e-9
            except (TypeError, ValueError):
                return False

        if field_name in self.INTEGER_FIELDS:
            try:
                return int(predicted) == int(expected)
            except (TypeError, ValueError):
                return False

        return self._normalize(predicted) == self._normalize(expected)

    @staticmethod
    def _normalize(value: Any) -> str:
        return collapse_whitespace(str(value)).lower()

    def evaluate_single(
        self,
        prediction: Dict[str, Any],
        ground_truth: Dict[str, Any]
    ) -> Dict[str, Any]:
        """Per-field comparison of one prediction, for debugging a single report."""
        results = {}

        for name in self.fields:
            predicted = prediction.get(name)
            expected = ground_truth.get(name)

            results[name] = {
                'predicted': predicted,
                'ground_truth': expected,
                'exact_match': (
                    expected is not None and predicted is not None
                    and self.values_match(name, predicted, expected)
                ),
                'extracted': predicted is not None,
            }

        return results
