"""
Excel Exporter Module.

This module provides Excel file generation for resolved vehicle
records. Uses openpyxl for modern Excel format support.

Features:
    - Formatted headers
    - Auto-column width
    - Low-confidence rows highlighted for manual review
    - Field tier and warning sheets

Author: ML Engineering Team
"""

from pathlib import Path
from typing import List, Optional, Sequence, Union

import openpyxl
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter

from config import get_config
from src.resolver.vehicle_record import RECORD_FIELDS, ProcessedDocument, StructuredVehicleRecord
from src.utils.exceptions import ExcelExportError
from src.utils.helpers import ensure_directory, generate_timestamp
from src.utils.logger import get_logger

# Initialize module logger
logger = get_logger(__name__)

Exportable = Union[ProcessedDocument, StructuredVehicleRecord]


class ExcelExporter:
    """
    Exports vehicle records to Excel format.

    Attributes:
        output_dir: Directory for output files
        include_tiers: Whether to include the field tier sheet
        include_warnings: Whether to include the warnings sheet
        review_threshold: Rows below this confidence are highlighted

    Example:
        >>> exporter = ExcelExporter()
        >>> filepath = exporter.export(documents, "vehicles.xlsx")
        >>> print(f"Saved to: {filepath}")
    """

    # Column definitions
    COLUMNS = [
        ('Source File', 'source_file'),
        ('VIN', 'identifier_code'),
        ('Year', 'model_year'),
        ('Make', 'manufacturer'),
        ('Model', 'model'),
        ('Mileage', 'odometer_reading'),
        ('Location', 'location'),
        ('Market Value', 'market_value'),
        ('Settlement Value', 'settlement_value'),
        ('Dialect', 'dialect'),
        ('Confidence', 'overall_confidence'),
        ('Warnings', 'warning_count'),
    ]

    HEADER_COLORS = {
        'records': "4472C4",
        'tiers': "548235",
        'warnings': "C65911",
    }

    REVIEW_FILL = PatternFill(start_color="FFF2CC", end_color="FFF2CC", fill_type="solid")

    def __init__(self) -> None:
        """Initialize the Excel exporter with configuration."""
        self.output_dir = Path(get_config("paths.output_dir", "outputs"))
        self.include_tiers = get_config("output.excel.include_tiers", True)
        self.include_warnings = get_config("output.excel.include_warnings", True)
        self.sheet_name = get_config("output.excel.sheet_name", "Vehicle Records")
        self.review_threshold = float(get_config("resolution.review_threshold", 60))

        logger.debug(f"ExcelExporter initialized (output_dir: {self.output_dir})")

    def export(
        self,
        items: Union[Exportable, Sequence[Exportable]],
        filename: Optional[str] = None,
        output_dir: Optional[str] = None
    ) -> str:
        """
        Export records to an Excel file.

        Args:
            items: Single item or list of ProcessedDocument / records.
            filename: Output filename. If None, auto-generated.
            output_dir: Output directory. If None, uses configured dir.

        Returns:
            Path to the created Excel file.

        Raises:
            ExcelExportError: If export fails.
        """
        # Normalize to list of ProcessedDocument
        if isinstance(items, (ProcessedDocument, StructuredVehicleRecord)):
            items = [items]
        documents = [
            item if isinstance(item, ProcessedDocument) else ProcessedDocument(record=item)
            for item in items
        ]

        if not documents:
            raise ExcelExportError("No results", "No records to export")

        out_dir = Path(output_dir) if output_dir else self.output_dir
        ensure_directory(out_dir)

        filepath = out_dir / (filename or self.get_default_filename())

        try:
            workbook = openpyxl.Workbook()

            self._create_records_sheet(workbook, documents)

            if self.include_tiers:
                self._create_tiers_sheet(workbook, documents)

            if self.include_warnings:
                self._create_warnings_sheet(workbook, documents)

            workbook.save(filepath)

        except (OSError, ValueError) as e:
            logger.error(f"Excel export failed: {e}")
            raise ExcelExportError(str(filepath), str(e))

        logger.info(f"Excel file saved: {filepath} ({len(documents)} records)")
        return str(filepath)

    def _write_header(self, sheet, headers: List[str], color: str) -> None:
        header_font = Font(bold=True, color="FFFFFF")
        header_fill = PatternFill(start_color=color, end_color=color, fill_type="solid")

        for col, header_name in enumerate(headers, 1):
            cell = sheet.cell(row=1, column=col, value=header_name)
            cell.font = header_font
            cell.fill = header_fill
            cell.alignment = Alignment(horizontal="center", vertical="center")

        sheet.freeze_panes = 'A2'

    def _create_records_sheet(self, workbook, documents: List[ProcessedDocument]) -> None:
        """
        Create the main sheet with one row per record.

        Rows below the review threshold are filled so reviewers can find
        them without sorting.
        """
        sheet = workbook.active
        sheet.title = self.sheet_name

        thin_border = Border(
            left=Side(style='thin'),
            right=Side(style='thin'),
            top=Side(style='thin'),
            bottom=Side(style='thin')
        )

        self._write_header(sheet, [name for name, _ in self.COLUMNS], self.HEADER_COLORS['records'])

        for row_num, document in enumerate(documents, 2):
            flat = document.to_flat_dict()
            needs_review = document.record.needs_manual_review(self.review_threshold)

            for col, (_, field_name) in enumerate(self.COLUMNS, 1):
                value = flat.get(field_name)
                cell = sheet.cell(row=row_num, column=col, value=value if value is not None else '')
                cell.border = thin_border
                if needs_review:
                    cell.fill = self.REVIEW_FILL

        # Adjust column widths
        for col, (header_name, _) in enumerate(self.COLUMNS, 1):
            max_length = len(header_name)
            for row in range(2, len(documents) + 2):
                cell_value = sheet.cell(row=row, column=col).value
                if cell_value not in (None, ''):
                    max_length = max(max_length, len(str(cell_value)))

            sheet.column_dimensions[get_column_letter(col)].width = min(max_length + 2, 50)

    def _create_tiers_sheet(self, workbook, documents: List[ProcessedDocument]) -> None:
        """Create a sheet with the winning strategy tier of every field (0 = unresolved)."""
        sheet = workbook.create_sheet(title="Field Tiers")

        columns = ['Source File'] + list(RECORD_FIELDS)
        self._write_header(sheet, columns, self.HEADER_COLORS['tiers'])

        for row_num, document in enumerate(documents, 2):
            tiers = document.record.tiers
            sheet.cell(row=row_num, column=1, value=document.source_file or '')
            for col, field_name in enumerate(RECORD_FIELDS, 2):
                sheet.cell(row=row_num, column=col, value=tiers.get(field_name, 0))

        for col in range(1, len(columns) + 1):
            sheet.column_dimensions[get_column_letter(col)].width = 18

    def _create_warnings_sheet(self, workbook, documents: List[ProcessedDocument]) -> None:
        """Create a sheet with one row per record warning."""
        sheet = workbook.create_sheet(title="Warnings")

        self._write_header(sheet, ['Source File', 'VIN', 'Warning'], self.HEADER_COLORS['warnings'])

        row_num = 2
        for document in documents:
            for warning in document.record.warnings:
                sheet.cell(row=row_num, column=1, value=document.source_file or '')
                sheet.cell(row=row_num, column=2, value=document.record.identifier_code or '')
                sheet.cell(row=row_num, column=3, value=warning)
                row_num += 1

        sheet.column_dimensions['A'].width = 30
        sheet.column_dimensions['B'].width = 20
        sheet.column_dimensions['C'].width = 80

    def get_default_filename(self) -> str:
        """
        Generate a default filename with timestamp.

        Returns:
            Default filename string.
        """
        timestamp = generate_timestamp()
        pattern = get_config(
            "output.excel.filename_pattern",
            "vehicle_records_{timestamp}.xlsx"
        )
        return pattern.format(timestamp=timestamp)
