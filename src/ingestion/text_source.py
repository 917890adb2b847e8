"""
Text Source Module.

Turns input files into RawDocumentText at the OCR boundary:
    - PlainTextSource: pre-OCR'd .txt files
    - TesseractPdfSource: scanned PDF reports (pdf2image + pytesseract)

The backend is chosen once by create_text_source(), from the
``ingestion.backend`` setting unless given explicitly. PDF ingestion
reports per-page progress and can be cancelled between pages; a
cancelled document never reaches the resolver.

Usage:
    from src.ingestion import create_text_source

    source = create_text_source("tesseract")
    document = source.extract("report.pdf", progress=lambda page, total: ...)

Author: ML Engineering Team
"""

import threading
from pathlib import Path
from typing import Callable, List, Optional, Union

from PIL import Image

from config import get_config
from src.utils.exceptions import (
    IngestionCancelledError,
    OCREngineNotAvailableError,
    OCRProcessingError,
    UnsupportedFileTypeError
)
from src.utils.helpers import get_file_extension
from src.utils.logger import get_logger
from .raw_text import RawDocumentText

# Initialize module logger
logger = get_logger(__name__)

ProgressCallback = Callable[[int, int], None]


class TextSource:
    """
    Base class for input backends.

    Subclasses implement extract() for the file types they list in
    SUPPORTED_EXTENSIONS.
    """

    name = 'base'
    SUPPORTED_EXTENSIONS: List[str] = []

    def supports(self, filepath: Union[str, Path]) -> bool:
        return get_file_extension(filepath) in self.SUPPORTED_EXTENSIONS

    def extract(
        self,
        filepath: Union[str, Path],
        progress: Optional[ProgressCallback] = None,
        cancel_event: Optional[threading.Event] = None
    ) -> RawDocumentText:
        """
        Extract the text of a document.

        Args:
            filepath: Input file.
            progress: Called with (pages_done, total_pages).
            cancel_event: When set, extraction stops before the next page.

        Returns:
            RawDocumentText of the document.

        Raises:
            UnsupportedFileTypeError: If the file type is not handled.
            IngestionCancelledError: If cancelled before completion.
        """
        raise NotImplementedError

    def _check_supported(self, filepath: Path) -> None:
        if not self.supports(filepath):
            raise UnsupportedFileTypeError(get_file_extension(filepath), self.SUPPORTED_EXTENSIONS)


class PlainTextSource(TextSource):
    """
    Reads text files that already hold OCR output.

    Example:
        >>> source = PlainTextSource()
        >>> document = source.extract("samples/hyundai.txt")
        >>> document.source
        'hyundai.txt'
    """

    name = 'text'
    SUPPORTED_EXTENSIONS = ['.txt']

    def __init__(self, encoding: str = 'utf-8') -> None:
        self.encoding = encoding

    def extract(self, filepath, progress=None, cancel_event=None):
        filepath = Path(filepath)
        self._check_supported(filepath)

        if cancel_event is not None and cancel_event.is_set():
            raise IngestionCancelledError(str(filepath), 0, 1)

        try:
            text = filepath.read_text(encoding=self.encoding, errors='replace')
        except OSError as e:
            raise OCRProcessingError(str(filepath), str(e))

        if progress is not None:
            progress(1, 1)

        logger.debug(f"Read {filepath.name} ({len(text)} chars)")
        return RawDocumentText.from_text(text, source=filepath.name)


class TesseractPdfSource(TextSource):
    """
    OCRs scanned PDF reports page by page with Tesseract.

    Plain text files are passed through unchanged, so one source can
    serve a mixed input directory.

    Attributes:
        dpi: Resolution for PDF to image conversion.
        max_pages: Maximum number of pages to OCR.
        language: Tesseract language code (e.g., "eng").
        psm: Page Segmentation Mode.
        oem: OCR Engine Mode.
        extra_config: Additional Tesseract configuration.

    Example:
        >>> source = TesseractPdfSource()
        >>> document = source.extract("valuation.pdf")
        >>> print(f"{len(document)} lines")
    """

    name = 'tesseract'
    SUPPORTED_EXTENSIONS = ['.pdf', '.txt']

    def __init__(self) -> None:
        """Initialize the source with configuration."""
        self.dpi = get_config("ingestion.pdf.dpi", 300)
        self.max_pages = get_config("ingestion.max_pages", 20)
        self.language = get_config("ingestion.tesseract.lang", "eng")
        self.psm = get_config("ingestion.tesseract.psm", 6)
        self.oem = get_config("ingestion.tesseract.oem", 3)
        self.extra_config = get_config("ingestion.tesseract.config", "")

        self._check_dependencies()
        self._text_source = PlainTextSource()

        logger.debug(
            f"TesseractPdfSource initialized (dpi={self.dpi}, lang={self.language}, "
            f"psm={self.psm}, oem={self.oem})"
        )

    def _check_dependencies(self) -> None:
        """
        Check that pytesseract, pdf2image and the Tesseract binary are available.

        Raises:
            OCREngineNotAvailableError: If any of them is missing.
        """
        try:
            import pytesseract
            import pdf2image
        except ImportError as e:
            raise OCREngineNotAvailableError(
                f"{e.name} (install with: pip install pytesseract pdf2image)"
            )

        try:
            version = pytesseract.get_tesseract_version()
        except Exception as e:
            raise OCREngineNotAvailableError(
                f"Tesseract OCR (not installed or not in PATH): {e}"
            )

        logger.info(f"Tesseract version: {version}")
        self._pytesseract = pytesseract
        self._pdf2image = pdf2image

    def _build_config(self) -> str:
        """
        Build Tesseract configuration string.

        Returns:
            Configuration string for Tesseract.
        """
        config_parts = [
            f"--psm {self.psm}",
            f"--oem {self.oem}"
        ]

        if self.extra_config:
            config_parts.append(self.extra_config)

        return ' '.join(config_parts)

    def extract(self, filepath, progress=None, cancel_event=None):
        filepath = Path(filepath)
        self._check_supported(filepath)

        if get_file_extension(filepath) == '.txt':
            return self._text_source.extract(filepath, progress, cancel_event)

        logger.info(f"Processing PDF: {filepath.name}")
        images = self._render_pages(filepath)
        total = len(images)

        pages = []
        for index, image in enumerate(images):
            if cancel_event is not None and cancel_event.is_set():
                logger.warning(f"Ingestion cancelled for {filepath.name} after {index}/{total} pages")
                raise IngestionCancelledError(str(filepath), index, total)

            pages.append(self._ocr_page(filepath, image))

            if progress is not None:
                progress(index + 1, total)

        logger.info(f"OCR complete for {filepath.name} ({total} page(s))")
        return RawDocumentText.from_pages(pages, source=filepath.name)

    def _render_pages(self, filepath: Path) -> List[Image.Image]:
        """Convert PDF pages to images, limited to max_pages."""
        try:
            return self._pdf2image.convert_from_path(
                str(filepath),
                dpi=self.dpi,
                first_page=1,
                last_page=self.max_pages
            )
        except Exception as e:
            logger.error(f"PDF conversion failed: {e}")
            raise OCRProcessingError(str(filepath), str(e))

    def _ocr_page(self, filepath: Path, image: Image.Image) -> str:
        if image.mode != 'L':
            image = image.convert('L')

        try:
            return self._pytesseract.image_to_string(
                image,
                lang=self.language,
                config=self._build_config()
            )
        except Exception as e:
            logger.error(f"Tesseract OCR failed: {e}")
            raise OCRProcessingError(str(filepath), str(e))


BACKENDS = {
    PlainTextSource.name: PlainTextSource,
    TesseractPdfSource.name: TesseractPdfSource,
}


def create_text_source(backend: Optional[str] = None) -> TextSource:
    """
    Create the text source for a backend.

    Args:
        backend: Backend name ("text" or "tesseract"). If None, uses
            ``ingestion.backend`` from configuration.

    Returns:
        TextSource instance.

    Raises:
        OCREngineNotAvailableError: If the backend is unknown or its
            libraries are missing.
    """
    backend = (backend or get_config("ingestion.backend", "text")).lower()

    source_class = BACKENDS.get(backend)
    if source_class is None:
        raise OCREngineNotAvailableError(backend)

    logger.info(f"Using text source backend: {backend}")
    return source_class()
