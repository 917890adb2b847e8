"""
Logging Configuration Module.

This module provides centralized logging configuration for the vehicle
valuation resolver. Console output is colorized with colorama; an
optional rotating file keeps plain text. Every record carries the name of
the document being processed, set with document_context(), so batch logs
can be read per report.

Usage:
    from src.utils.logger import document_context, get_logger, setup_logger

    # Initialize logging (call once at startup)
    setup_logger()

    # Get logger in any module
    logger = get_logger(__name__)

    with document_context("hyundai.txt"):
        logger.info("Resolving valuation report...")
"""

import contextvars
import logging
import logging.handlers
import sys
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

import colorama
from colorama import Fore, Style

colorama.init()

# Application logger namespace; every module logger is a child of it
APP_LOGGER_NAME = "valuation_extraction"

DEFAULT_FORMAT = "%(asctime)s | %(levelname)-8s | %(document)s | %(name)s | %(message)s"
DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Placeholder shown outside document processing
NO_DOCUMENT = "-"

_current_document: contextvars.ContextVar[str] = contextvars.ContextVar(
    "current_document", default=NO_DOCUMENT
)


def get_current_document() -> str:
    """Name of the document being processed, or '-'."""
    return _current_document.get()


@contextmanager
def document_context(name: Optional[str]) -> Iterator[str]:
    """
    Tag every log record emitted inside the block with a document name.

    Example:
        >>> with document_context("bmw.txt"):
        ...     logger.warning("Model reconstructed")
    """
    token = _current_document.set(name or NO_DOCUMENT)
    try:
        yield get_current_document()
    finally:
        _current_document.reset(token)


class DocumentContextFilter(logging.Filter):
    """Adds the ``document`` attribute used by the log format."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.document = _current_document.get()
        return True


class ColoredFormatter(logging.Formatter):
    """
    Formatter that colors console lines by level.

    Warnings are the resolver's main signal (unresolved fields, failed
    check digits), so they stand out in yellow.
    """

    COLORS = {
        logging.DEBUG: Fore.CYAN,
        logging.INFO: Fore.GREEN,
        logging.WARNING: Fore.YELLOW,
        logging.ERROR: Fore.RED,
        logging.CRITICAL: Fore.RED + Style.BRIGHT,
    }
    RESET = Style.RESET_ALL

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelno, '')
        return f"{color}{super().format(record)}{self.RESET}"


def _parse_level(level: str) -> int:
    numeric_level = logging.getLevelName(str(level).upper())
    if not isinstance(numeric_level, int):
        raise ValueError(f"Unknown logging level: {level}")
    return numeric_level


def setup_logger(
    level: str = "INFO",
    log_format: Optional[str] = None,
    date_format: Optional[str] = None,
    log_file: Optional[str] = None,
    max_bytes: int = 10485760,  # 10 MB
    backup_count: int = 5,
    colorize: bool = True
) -> logging.Logger:
    """
    Configure the application logger.

    Call once at startup; calling again replaces the handlers. Loggers
    returned by get_logger() are children of the application logger and
    inherit this configuration.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_format: Format string; may use %(document)s.
        date_format: Date format string.
        log_file: Path to log file. If None, file logging is disabled.
        max_bytes: Maximum log file size before rotation.
        backup_count: Number of backup files to keep.
        colorize: Color console output when it is a terminal.

    Returns:
        Configured application logger.

    Raises:
        ValueError: If the level name is unknown.

    Example:
        >>> setup_logger(level="DEBUG", log_file="logs/resolver.log")
    """
    log_format = log_format or DEFAULT_FORMAT
    date_format = date_format or DEFAULT_DATE_FORMAT
    numeric_level = _parse_level(level)

    app_logger = logging.getLogger(APP_LOGGER_NAME)
    app_logger.setLevel(numeric_level)

    for handler in list(app_logger.handlers):
        app_logger.removeHandler(handler)
        handler.close()

    context_filter = DocumentContextFilter()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(numeric_level)
    console_handler.addFilter(context_filter)

    if colorize and sys.stdout.isatty():
        console_handler.setFormatter(ColoredFormatter(log_format, datefmt=date_format))
    else:
        console_handler.setFormatter(logging.Formatter(log_format, datefmt=date_format))
    app_logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.handlers.RotatingFileHandler(
            log_path,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding='utf-8'
        )
        file_handler.setLevel(numeric_level)
        file_handler.addFilter(context_filter)
        file_handler.setFormatter(logging.Formatter(log_format, datefmt=date_format))
        app_logger.addHandler(file_handler)

    app_logger.propagate = False

    app_logger.debug(f"Logging initialized (level={logging.getLevelName(numeric_level)})")
    return app_logger


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger under the application namespace.

    Example:
        >>> logger = get_logger("src.resolver.engine")
        >>> logger.name
        'valuation_extraction.src.resolver.engine'
    """
    if name == APP_LOGGER_NAME or name.startswith(APP_LOGGER_NAME + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{APP_LOGGER_NAME}.{name}")


def set_level(level: str) -> None:
    """Change the application logger level and all its handlers."""
    numeric_level = _parse_level(level)
    app_logger = logging.getLogger(APP_LOGGER_NAME)
    app_logger.setLevel(numeric_level)
    for handler in app_logger.handlers:
        handler.setLevel(numeric_level)


def setup_logger_from_config() -> logging.Logger:
    """Initialize logging from the ``logging`` configuration section."""
    from config import get_config

    log_file = None
    if get_config("logging.file.enabled", False):
        log_file = get_config("logging.file.path")

    return setup_logger(
        level=get_config("logging.level", "INFO"),
        log_format=get_config("logging.format"),
        date_format=get_config("logging.date_format"),
        log_file=log_file,
        max_bytes=get_config("logging.file.max_bytes", 10485760),
        backup_count=get_config("logging.file.backup_count", 5),
        colorize=get_config("logging.console.colorize", True)
    )
