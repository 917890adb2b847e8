"""
Ground Truth Loader Module.

This module handles loading expected vehicle records for evaluating
resolution results.

Supported Formats:
    - JSON files (list, {"records": [...]}, or keyed by file name)
    - CSV files (one row per report, header row required)

Author: ML Engineering Team
"""

import csv
import json
from pathlib import Path
from typing import Any, Dict, List, Optional

from src.utils.exceptions import UnsupportedFileTypeError
from src.utils.helpers import parse_int
from src.utils.logger import get_logger

# Initialize module logger
logger = get_logger(__name__)

INTEGER_FIELDS = ('model_year', 'odometer_reading')
AMOUNT_FIELDS = ('market_value', 'settlement_value')


class GroundTruthLoader:
    """
    Loads ground truth records keyed by source file.

    CSV values arrive as strings; numeric fields are converted so they
    compare cleanly with resolved records.

    Attributes:
        data: Loaded ground truth records
        file_path: Path to ground truth file

    Example:
        >>> loader = GroundTruthLoader("ground_truth.json")
        >>> expected = loader.get_by_filename("hyundai_santa_fe.txt")
        >>> expected['model']
        'Santa Fe Sport'
    """

    SUPPORTED_FORMATS = ['.json', '.csv']

    def __init__(self, file_path: Optional[str] = None) -> None:
        """
        Initialize the ground truth loader.

        Args:
            file_path: Path to ground truth file. If None, creates empty loader.
        """
        self.file_path = Path(file_path) if file_path else None
        self.data: List[Dict[str, Any]] = []
        self._file_index: Dict[str, int] = {}

        if self.file_path:
            self.load(self.file_path)

    def load(self, file_path: str) -> List[Dict[str, Any]]:
        """
        Load ground truth from file.

        Args:
            file_path: Path to ground truth file.

        Returns:
            List of ground truth records.

        Raises:
            FileNotFoundError: If file doesn't exist.
            UnsupportedFileTypeError: If format is not supported.
        """
        path = Path(file_path)

        if not path.exists():
            raise FileNotFoundError(f"Ground truth file not found: {path}")

        extension = path.suffix.lower()

        if extension == '.json':
            records = self._load_json(path)
        elif extension == '.csv':
            records = self._load_csv(path)
        else:
            raise UnsupportedFileTypeError(extension, self.SUPPORTED_FORMATS)

        self.data = [self._coerce(record) for record in records]
        self._build_index()

        logger.info(f"Loaded {len(self.data)} ground truth records from {path.name}")
        return self.data

    def _load_json(self, path: Path) -> List[Dict[str, Any]]:
        """Load ground truth from JSON file."""
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)

        # Handle both list and dict formats
        if isinstance(data, dict):
            if 'records' in data:
                return data['records']
            return [{**value, 'source_file': key} for key, value in data.items()]

        return data

    def _load_csv(self, path: Path) -> List[Dict[str, Any]]:
        """Load ground truth from CSV file."""
        with open(path, 'r', encoding='utf-8', newline='') as f:
            return [dict(row) for row in csv.DictReader(f)]

    @staticmethod
    def _coerce(record: Dict[str, Any]) -> Dict[str, Any]:
        """Convert numeric fields; empty strings become None."""
        coerced = {}
        for key, value in record.items():
            if isinstance(value, str):
                value = value.strip() or None

            if value is not None and key in INTEGER_FIELDS:
                value = parse_int(str(value))
            elif value is not None and key in AMOUNT_FIELDS:
                value = float(str(value).replace(',', '').lstrip('$'))

            coerced[key] = value
        return coerced

    def _build_index(self) -> None:
        """Build an index for faster lookups by filename."""
        self._file_index = {}

        for idx, record in enumerate(self.data):
            filename = record.get('source_file') or record.get('filename')
            if filename:
                self._file_index[filename] = idx
                self._file_index[Path(filename).name] = idx

    def get_all(self) -> List[Dict[str, Any]]:
        """Get all ground truth records."""
        return self.data

    def get_by_filename(self, filename: str) -> Optional[Dict[str, Any]]:
        """
        Get ground truth record by source filename.

        Args:
            filename: Source file name (with or without path).

        Returns:
            Ground truth record or None.
        """
        index = self._file_index.get(filename)
        if index is None:
            index = self._file_index.get(Path(filename).name)
        return self.data[index] if index is not None else None

    def __len__(self) -> int:
        """Return number of ground truth records."""
        return len(self.data)

    def __iter__(self):
        """Iterate over ground truth records."""
        return iter(self.data)
