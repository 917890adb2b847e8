"""
Main Output Handler Module.

This module provides the unified OutputHandler class that coordinates
all output operations (Excel, JSON and Database).

Author: ML Engineering Team
"""

import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

from config import get_config
from src.resolver.vehicle_record import ProcessedDocument
from src.utils.exceptions import OutputError
from src.utils.helpers import ensure_directory
from src.utils.logger import get_logger
from .database_handler import DatabaseHandler
from .excel_exporter import ExcelExporter

# Initialize module logger
logger = get_logger(__name__)

Documents = Union[ProcessedDocument, Sequence[ProcessedDocument]]


class OutputHandler:
    """
    Unified output handler for resolved vehicle records.

    Coordinates output to Excel files and database storage. Exporters
    are created on first use, so a disabled output never touches disk.

    Attributes:
        excel_enabled: Whether Excel export is enabled
        database_enabled: Whether database storage is enabled
        db_path: Optional database path overriding configuration

    Example:
        >>> handler = OutputHandler()
        >>> handler.save(documents)  # Saves to both Excel and database
        >>>
        >>> # Or save to specific outputs
        >>> handler.to_excel(documents, "vehicles.xlsx")
        >>> handler.to_database(documents)
    """

    def __init__(
        self,
        excel_enabled: Optional[bool] = None,
        database_enabled: Optional[bool] = None,
        db_path: Optional[str] = None
    ) -> None:
        """
        Initialize the output handler.

        Args:
            excel_enabled: Override config for Excel output.
            database_enabled: Override config for database output.
            db_path: Override config for the database location.
        """
        # Load configuration
        self.excel_enabled = excel_enabled if excel_enabled is not None else \
            get_config("output.excel.enabled", True)
        self.database_enabled = database_enabled if database_enabled is not None else \
            get_config("output.database.enabled", True)
        self.db_path = db_path

        # Initialize exporters (lazy loading)
        self._excel_exporter = None
        self._database_handler = None

        logger.info(
            f"OutputHandler initialized "
            f"(excel={self.excel_enabled}, database={self.database_enabled})"
        )

    @property
    def excel_exporter(self) -> ExcelExporter:
        """Get or create the Excel exporter."""
        if self._excel_exporter is None:
            self._excel_exporter = ExcelExporter()
        return self._excel_exporter

    @property
    def database_handler(self) -> DatabaseHandler:
        """Get or create the database handler."""
        if self._database_handler is None:
            self._database_handler = DatabaseHandler(self.db_path)
        return self._database_handler

    def save(
        self,
        documents: Documents,
        excel_filename: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        Save documents to all enabled outputs.

        A failing output is logged and reported as None; it does not stop
        the other output.

        Args:
            documents: Single document or list of documents.
            excel_filename: Custom Excel filename (optional).

        Returns:
            Dictionary with output details:
            {
                'excel_path': 'path/to/file.xlsx',
                'database_records': {'inserted': 5, 'skipped': 0}
            }
        """
        documents = self._as_list(documents)

        output_info = {
            'excel_path': None,
            'database_records': None
        }

        # Export to Excel
        if self.excel_enabled:
            try:
                output_info['excel_path'] = self.to_excel(documents, excel_filename)
            except OutputError as e:
                logger.error(f"Excel export failed: {e}")

        # Save to database
        if self.database_enabled:
            try:
                output_info['database_records'] = self.to_database(documents)
            except OutputError as e:
                logger.error(f"Database save failed: {e}")

        return output_info

    def to_excel(
        self,
        documents: Documents,
        filename: Optional[str] = None,
        output_dir: Optional[str] = None
    ) -> str:
        """
        Export documents to an Excel file.

        Returns:
            Path to created Excel file.
        """
        return self.excel_exporter.export(self._as_list(documents), filename, output_dir)

    def to_json(self, documents: Documents, filepath: Union[str, Path]) -> str:
        """
        Write documents to a JSON file as a list of record dictionaries.

        Returns:
            Path to the created JSON file.
        """
        filepath = Path(filepath)
        ensure_directory(filepath.parent)

        payload = [document.to_dict() for document in self._as_list(documents)]
        with open(filepath, 'w', encoding='utf-8') as f:
            json.dump(payload, f, indent=2)

        logger.info(f"JSON file saved: {filepath} ({len(payload)} records)")
        return str(filepath)

    def to_database(self, documents: Documents) -> Dict[str, int]:
        """
        Save documents to the database.

        Returns:
            Dictionary with 'inserted' and 'skipped' counts.
        """
        return self.database_handler.insert_batch(self._as_list(documents))

    def get_database_stats(self) -> Dict[str, Any]:
        """Get statistics from the database."""
        return self.database_handler.get_statistics()

    def get_review_queue(self, threshold: Optional[float] = None) -> List[Dict[str, Any]]:
        """Get stored records below the manual review threshold."""
        return self.database_handler.get_needing_review(threshold)

    @staticmethod
    def _as_list(documents: Documents) -> List[ProcessedDocument]:
        if isinstance(documents, ProcessedDocument):
            return [documents]
        return list(documents)
