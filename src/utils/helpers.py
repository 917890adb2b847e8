"""
Helper Utilities Module.

This module provides small utility functions shared across the
resolver. Functions here are generic and free of resolution logic.

Functions:
    - ensure_directory: Create directory if it doesn't exist
    - get_file_extension: Extract file extension safely
    - generate_timestamp: Generate formatted timestamps
    - collapse_whitespace: Normalize runs of whitespace in OCR text
    - parse_int: Parse OCR digit groups such as "85,234"
"""

import re
from datetime import datetime
from pathlib import Path
from typing import Optional, Union


def ensure_directory(path: Union[str, Path]) -> Path:
    """
    Ensure a directory exists, creating it if necessary.

    Args:
        path: Directory path to ensure exists.

    Returns:
        Path object pointing to the directory.

    Example:
        >>> ensure_directory("outputs/exports")
        PosixPath('outputs/exports')
    """
    dir_path = Path(path)
    dir_path.mkdir(parents=True, exist_ok=True)
    return dir_path


def get_file_extension(filepath: Union[str, Path]) -> str:
    """
    Extract the lowercase file extension (including the dot).

    Example:
        >>> get_file_extension("report.PDF")
        ".pdf"
    """
    return Path(filepath).suffix.lower()


def generate_timestamp(format_str: str = "%Y%m%d_%H%M%S") -> str:
    """
    Generate a formatted timestamp string.

    Args:
        format_str: strftime format string.

    Returns:
        Formatted timestamp string.
    """
    return datetime.now().strftime(format_str)


def collapse_whitespace(text: str) -> str:
    """
    Collapse runs of whitespace into single spaces and strip the ends.

    Example:
        >>> collapse_whitespace("  Santa   Fe\\tSport ")
        "Santa Fe Sport"
    """
    return ' '.join(text.split())


def parse_int(value: Optional[str]) -> Optional[int]:
    """
    Parse an integer out of an OCR digit group.

    Thousands separators and stray spaces are ignored. Returns None when
    no digits are present.

    Example:
        >>> parse_int("85,234")
        85234
    """
    if not value:
        return None
    digits = re.sub(r'[^\d]', '', value)
    if not digits:
        return None
    return int(digits)
