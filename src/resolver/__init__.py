"""
Field Resolver Module for the Vehicle Valuation Resolver.

This module provides functionality for:
    - Tiered field resolution cascades per report dialect
    - Manufacturer / model splitting
    - Resolution orchestration into StructuredVehicleRecord

Author: ML Engineering Team
"""

from .cascade import FieldCascade, build_cascades
from .engine import ResolutionEngine, resolve
from .field_resolution import Candidate, FieldResolution, ResolutionContext
from .make_model import MakeModelSplit, MakeModelSplitter
from .settings import ResolutionSettings
from .vehicle_record import ProcessedDocument, StructuredVehicleRecord, RECORD_FIELDS

__all__ = [
    'FieldCascade',
    'build_cascades',
    'ResolutionEngine',
    'resolve',
    'Candidate',
    'FieldResolution',
    'ResolutionContext',
    'MakeModelSplit',
    'MakeModelSplitter',
    'ResolutionSettings',
    'ProcessedDocument',
    'StructuredVehicleRecord',
    'RECORD_FIELDS'
]
