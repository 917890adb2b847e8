"""
Utility Module for the Vehicle Valuation Resolver.

This module provides common utilities used across all other modules:
    - Logging configuration
    - Custom exceptions
    - Common helpers
"""

from .logger import document_context, get_logger, setup_logger
from .helpers import ensure_directory, get_file_extension, generate_timestamp

__all__ = [
    'setup_logger',
    'get_logger',
    'document_context',
    'ensure_directory',
    'get_file_extension',
    'generate_timestamp'
]
