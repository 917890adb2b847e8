"""
Custom Exceptions Module.

This module defines all custom exceptions used throughout the vehicle
valuation resolver. Only InputEmptyOrUnreadableError is fatal to a
resolution run; the ResolutionError family is raised and caught inside
the engine and surfaces to callers as record warnings.

Exception Hierarchy:
    ValuationExtractionError (base)
    ├── InputError
    │   ├── InputEmptyOrUnreadableError
    │   └── UnsupportedFileTypeError
    ├── IngestionError
    │   ├── OCREngineNotAvailableError
    │   ├── OCRProcessingError
    │   └── IngestionCancelledError
    ├── ResolutionError
    │   ├── DialectUnrecognizedError
    │   ├── FieldUnresolvedError
    │   ├── IdentifierDecodeError
    │   └── AmbiguousReconstructionError
    └── OutputError
        ├── DatabaseError
        └── ExcelExportError
"""

from typing import Any, Dict, Optional, Sequence


class ValuationExtractionError(Exception):
    """
    Base exception for all resolver errors.

    Attributes:
        message: Human-readable error message.
        details: Optional dictionary with additional error details.
    """

    def __init__(self, message: str, details: dict = None):
        """
        Initialize the exception.

        Args:
            message: Human-readable error message.
            details: Optional dictionary with additional context.
        """
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def __str__(self) -> str:
        """Return string representation of the error."""
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


# =============================================================================
# INPUT ERRORS
# =============================================================================

class InputError(ValuationExtractionError):
    """Base exception for input handling errors."""
    pass


class InputEmptyOrUnreadableError(InputError):
    """
    Raised when the OCR text is empty or too short to resolve.

    This is the only fatal resolution error: no partial record is
    produced and the caller must surface it as a hard failure.

    Example:
        >>> raise InputEmptyOrUnreadableError(0, 20)
    """

    def __init__(self, char_count: int, min_length: int):
        message = "Document text is empty or unreadable"
        details = {"char_count": char_count, "min_length": min_length}
        super().__init__(message, details)


class UnsupportedFileTypeError(InputError):
    """Raised when an input file has an extension no text source handles."""

    def __init__(self, file_type: str, supported_types: list):
        message = f"Unsupported file type: '{file_type}'"
        details = {"file_type": file_type, "supported_types": supported_types}
        super().__init__(message, details)


# =============================================================================
# INGESTION ERRORS
# =============================================================================

class IngestionError(ValuationExtractionError):
    """Base exception for errors at the OCR ingestion boundary."""
    pass


class OCREngineNotAvailableError(IngestionError):
    """Raised when the configured OCR backend cannot be loaded."""

    def __init__(self, engine_name: str):
        message = f"OCR engine not available: {engine_name}"
        details = {"engine": engine_name}
        super().__init__(message, details)


class OCRProcessingError(IngestionError):
    """Raised when OCR of a document fails."""

    def __init__(self, filepath: str, reason: str = None):
        message = f"OCR processing failed for: {filepath}"
        details = {"filepath": filepath, "reason": reason}
        super().__init__(message, details)


class IngestionCancelledError(IngestionError):
    """Raised when ingestion is cancelled before resolution starts."""

    def __init__(self, filepath: str, pages_done: int, total_pages: int):
        message = f"Ingestion cancelled for: {filepath}"
        details = {"pages_done": pages_done, "total_pages": total_pages}
        super().__init__(message, details)


# =============================================================================
# RESOLUTION ERRORS (recoverable)
# =============================================================================

class ResolutionError(ValuationExtractionError):
    """
    Base exception for recoverable resolution failures.

    These never escape ResolutionEngine.resolve(); they are converted
    into record warnings and a lowered confidence score.
    """
    pass


class DialectUnrecognizedError(ResolutionError):
    """Raised when no dialect signature is found in the text."""

    def __init__(self, fallback: Any):
        self.fallback = fallback
        message = f"Report dialect not recognized, defaulting to {fallback.value}"
        super().__init__(message)


class FieldUnresolvedError(ResolutionError):
    """
    Raised when a field cascade ends with fields left unresolved.

    Attributes:
        fields: Names of the unresolved fields, in cascade order.
        partial: Resolutions produced for the cascade, resolved or not.
    """

    def __init__(self, fields: Sequence[str], partial: Optional[Dict[str, Any]] = None):
        self.fields = list(fields)
        self.partial = partial or {}
        message = "Unresolved fields: " + ", ".join(self.fields)
        super().__init__(message)

    @staticmethod
    def describe(field: str) -> str:
        """Return the record warning for a single unresolved field."""
        return f"Field '{field}' could not be resolved"


class IdentifierDecodeError(ResolutionError):
    """Raised when an identifier has no prefix or year-code table match."""

    def __init__(self, identifier: Optional[str], reason: str = None):
        message = f"Could not decode identifier: {identifier or 'none found'}"
        details = {"reason": reason} if reason else None
        super().__init__(message, details)


class AmbiguousReconstructionError(ResolutionError):
    """
    Describes a submodel reconstructed from a digit and keyword.

    The reconstructed value is kept but trusted at reduced weight; the
    message of this error becomes the record warning.
    """

    def __init__(self, manufacturer: str, model: str, keyword: str):
        message = (
            f"Model '{model}' reconstructed for {manufacturer} "
            f"from keyword '{keyword}'; verify manually"
        )
        super().__init__(message)


# =============================================================================
# OUTPUT ERRORS
# =============================================================================

class OutputError(ValuationExtractionError):
    """Base exception for output handling errors."""
    pass


class DatabaseError(OutputError):
    """Raised when database operations fail."""

    def __init__(self, operation: str, reason: str = None):
        message = f"Database operation failed: {operation}"
        details = {"operation": operation, "reason": reason}
        super().__init__(message, details)


class ExcelExportError(OutputError):
    """Raised when Excel export fails."""

    def __init__(self, filepath: str, reason: str = None):
        message = f"Failed to export Excel file: {filepath}"
        details = {"filepath": filepath, "reason": reason}
        super().__init__(message, details)


__all__ = [
    'ValuationExtractionError',
    'InputError',
    'InputEmptyOrUnreadableError',
    'UnsupportedFileTypeError',
    'IngestionError',
    'OCREngineNotAvailableError',
    'OCRProcessingError',
    'IngestionCancelledError',
    'ResolutionError',
    'DialectUnrecognizedError',
    'FieldUnresolvedError',
    'IdentifierDecodeError',
    'AmbiguousReconstructionError',
    'OutputError',
    'DatabaseError',
    'ExcelExportError',
]
