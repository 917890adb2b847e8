"""
Ingestion Module for the Vehicle Valuation Resolver.

This module provides functionality for:
    - Holding OCR text as an immutable line sequence
    - Reading pre-OCR'd text files
    - OCR of scanned PDF reports with Tesseract

Author: ML Engineering Team
"""

from .raw_text import RawDocumentText
from .text_source import (
    TextSource,
    PlainTextSource,
    TesseractPdfSource,
    create_text_source
)

__all__ = [
    'RawDocumentText',
    'TextSource',
    'PlainTextSource',
    'TesseractPdfSource',
    'create_text_source'
]
