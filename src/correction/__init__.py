"""
OCR Correction Module for the Vehicle Valuation Resolver.

This module provides functionality for:
    - Identifier (VIN) noise correction
    - Manufacturer name variant correction
    - Monetary digit string reconstruction
    - Field validation (identifier check digit, year range, amounts)

Author: ML Engineering Team
"""

from .normalizers import (
    CorrectionHint,
    CorrectionResult,
    IdentifierNormalizer,
    ManufacturerNormalizer,
    AmountNormalizer,
    NoiseCorrector
)
from .validators import (
    FieldValidator,
    IdentifierValidator,
    YearValidator,
    calculate_check_digit,
    has_valid_check_digit,
    is_identifier_shape
)

__all__ = [
    'CorrectionHint',
    'CorrectionResult',
    'IdentifierNormalizer',
    'ManufacturerNormalizer',
    'AmountNormalizer',
    'NoiseCorrector',
    'FieldValidator',
    'IdentifierValidator',
    'YearValidator',
    'calculate_check_digit',
    'has_valid_check_digit',
    'is_identifier_shape'
]
