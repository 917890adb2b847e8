"""
Output Handler Module for the Vehicle Valuation Resolver.

This module provides functionality for:
    - Excel file generation
    - Database storage (SQLite)
    - JSON export
    - Duplicate detection and handling

Author: ML Engineering Team
"""

from .handler import OutputHandler
from .excel_exporter import ExcelExporter
from .database_handler import DatabaseHandler

__all__ = ['OutputHandler', 'ExcelExporter', 'DatabaseHandler']
