"""
Evaluation Module for the Vehicle Valuation Resolver.

This module provides evaluation and quality assessment functionality:
    - Field-level accuracy computation
    - Missing field rate calculation
    - Accuracy by resolution tier
    - Review threshold calibration
    - Ground truth comparison
    - Metrics reporting

Author: ML Engineering Team
"""

from .metrics import EvaluationResult, FieldMetrics, MetricsCalculator, ReviewCalibration
from .ground_truth import GroundTruthLoader

__all__ = [
    'MetricsCalculator',
    'EvaluationResult',
    'FieldMetrics',
    'ReviewCalibration',
    'GroundTruthLoader'
]
