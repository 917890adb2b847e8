"""
Structured Vehicle Record.

Defines the immutable output of one resolution run and the mutable
ProcessedDocument wrapper used by the batch and output layers.

Author: ML Engineering Team
"""

import json
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional, Tuple

from config import get_config
from src.dialect import Dialect

RECORD_FIELDS = (
    'identifier_code',
    'model_year',
    'manufacturer',
    'model',
    'odometer_reading',
    'location',
    'market_value',
    'settlement_value',
)

DEFAULT_REVIEW_THRESHOLD = 60.0


@dataclass(frozen=True)
class StructuredVehicleRecord:
    """
    Vehicle record resolved from one valuation report.

    Every field may be None when it could not be resolved; the
    ``warnings`` explain why and ``overall_confidence`` reflects it.

    Attributes:
        identifier_code: 17-character vehicle identifier.
        model_year: Four-digit model year.
        manufacturer: Canonical manufacturer name.
        model: Model name.
        odometer_reading: Mileage.
        location: Loss location ("CA 90210", "SAN DIEGO, CA 92101").
        market_value: Adjusted market value.
        settlement_value: Final settlement value.
        dialect: Report dialect the text was resolved with.
        overall_confidence: Weighted confidence score, 0-100.
        warnings: Warnings in the order they were raised.
        field_tiers: (field, tier) pairs; tier 0 means unresolved.

    Example:
        >>> record = resolve(report_text)
        >>> record.manufacturer, record.model
        ('Hyundai', 'Santa Fe Sport')
        >>> record.needs_manual_review()
        False
    """
    identifier_code: Optional[str] = None
    model_year: Optional[int] = None
    manufacturer: Optional[str] = None
    model: Optional[str] = None
    odometer_reading: Optional[int] = None
    location: Optional[str] = None
    market_value: Optional[float] = None
    settlement_value: Optional[float] = None

    dialect: Dialect = Dialect.MITCHELL
    overall_confidence: float = 0.0
    warnings: Tuple[str, ...] = ()
    field_tiers: Tuple[Tuple[str, int], ...] = ()

    @classmethod
    def from_resolutions(
        cls,
        resolutions: Mapping[str, Any],
        dialect: Dialect,
        overall_confidence: float,
        warnings: Tuple[str, ...] = ()
    ) -> 'StructuredVehicleRecord':
        """
        Assemble a record from per-field resolutions.

        Args:
            resolutions: Field name to FieldResolution.
            dialect: Dialect used.
            overall_confidence: Score from the confidence scorer.
            warnings: Accumulated warnings.

        Returns:
            StructuredVehicleRecord instance.
        """
        values = {}
        tiers = []
        for field_name in RECORD_FIELDS:
            resolution = resolutions.get(field_name)
            values[field_name] = resolution.value if resolution is not None else None
            tiers.append((field_name, resolution.strategy_tier if resolution is not None else 0))

        return cls(
            dialect=dialect,
            overall_confidence=overall_confidence,
            warnings=tuple(warnings),
            field_tiers=tuple(tiers),
            **values
        )

    @property
    def fields(self) -> Dict[str, Any]:
        """Get the resolved vehicle fields as a dictionary."""
        return {name: getattr(self, name) for name in RECORD_FIELDS}

    @property
    def missing_fields(self) -> List[str]:
        """Get the list of fields that were not resolved."""
        return [name for name, value in self.fields.items() if value is None]

    @property
    def tiers(self) -> Dict[str, int]:
        """Get the winning strategy tier per field."""
        return dict(self.field_tiers)

    def needs_manual_review(self, threshold: Optional[float] = None) -> bool:
        """
        Check whether the record should be reviewed by a person.

        Args:
            threshold: Confidence below which review is needed. Defaults
                to ``resolution.review_threshold`` from configuration.

        Returns:
            True if the confidence is below the threshold.
        """
        if threshold is None:
            threshold = float(get_config('resolution.review_threshold', DEFAULT_REVIEW_THRESHOLD))
        return self.overall_confidence < threshold

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert to dictionary format.

        Returns:
            Dictionary representation of the record.
        """
        return {
            **self.fields,
            'dialect': self.dialect.value,
            'overall_confidence': self.overall_confidence,
            'warnings': list(self.warnings),
            'field_tiers': self.tiers,
        }

    def to_json(self, indent: int = 2) -> str:
        """Convert to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)

    def to_flat_dict(self) -> Dict[str, Any]:
        """
        Convert to flat dictionary suitable for database/Excel.

        Returns:
            Flat dictionary with no nested structures.
        """
        result = dict(self.fields)
        result['dialect'] = self.dialect.value
        result['overall_confidence'] = self.overall_confidence
        result['warning_count'] = len(self.warnings)
        result['warnings'] = '; '.join(self.warnings)

        # Add individual tiers
        for name, tier in self.field_tiers:
            result[f'{name}_tier'] = tier

        return result

    def to_valuation_input(self) -> Dict[str, Any]:
        """
        Build the input expected by the downstream valuation scorer.

        Condition and equipment are not printed in a usable form on the
        reports, so the neutral defaults are used.
        """
        return {
            'vin': self.identifier_code,
            'year': self.model_year,
            'make': self.manufacturer,
            'model': self.model,
            'mileage': self.odometer_reading,
            'location': self.location,
            'condition': 'Good',
            'equipment': [],
            'market_value': self.market_value,
            'settlement_value': self.settlement_value,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'StructuredVehicleRecord':
        """
        Create a record from a dictionary produced by to_dict().

        Args:
            data: Dictionary with record data.

        Returns:
            StructuredVehicleRecord instance.
        """
        tiers = data.get('field_tiers') or {}
        return cls(
            identifier_code=data.get('identifier_code'),
            model_year=data.get('model_year'),
            manufacturer=data.get('manufacturer'),
            model=data.get('model'),
            odometer_reading=data.get('odometer_reading'),
            location=data.get('location'),
            market_value=data.get('market_value'),
            settlement_value=data.get('settlement_value'),
            dialect=Dialect(data.get('dialect', Dialect.MITCHELL.value)),
            overall_confidence=data.get('overall_confidence', 0.0),
            warnings=tuple(data.get('warnings', ())),
            field_tiers=tuple((name, int(tiers.get(name, 0))) for name in RECORD_FIELDS)
        )

    def __repr__(self) -> str:
        return (
            f"StructuredVehicleRecord("
            f"vin={self.identifier_code}, "
            f"vehicle={self.model_year} {self.manufacturer} {self.model}, "
            f"confidence={self.overall_confidence})"
        )


@dataclass
class ProcessedDocument:
    """
    A resolved record together with its batch metadata.

    Attributes:
        record: Resolved vehicle record.
        source_file: File the text came from.
        processing_time: Seconds spent on ingestion and resolution.
        timestamp: ISO timestamp of processing.
    """
    record: StructuredVehicleRecord
    source_file: Optional[str] = None
    processing_time: float = 0.0
    timestamp: Optional[str] = None

    def __post_init__(self):
        """Initialize timestamp if not provided."""
        if self.timestamp is None:
            self.timestamp = datetime.now().isoformat()

    def to_dict(self) -> Dict[str, Any]:
        return {
            **self.record.to_dict(),
            'source_file': self.source_file,
            'processing_time': self.processing_time,
            'timestamp': self.timestamp,
        }

    def to_flat_dict(self) -> Dict[str, Any]:
        result = self.record.to_flat_dict()
        result['source_file'] = self.source_file or ''
        result['processing_time'] = self.processing_time
        result['timestamp'] = self.timestamp or ''
        return result
