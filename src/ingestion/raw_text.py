"""
Raw Document Text.

Immutable container for the OCR output of one valuation report. Line
order is preserved because several resolution strategies look ahead a
bounded number of lines from a label.

Author: ML Engineering Team
"""

from dataclasses import dataclass
from typing import Iterable, Iterator, Tuple


@dataclass(frozen=True)
class RawDocumentText:
    """
    OCR text of one document as an ordered tuple of lines.

    Attributes:
        lines: Text lines in reading order (trailing newlines removed).
        source: Optional label of where the text came from (file name).

    Example:
        >>> doc = RawDocumentText.from_text("Loss vehicle: 2014 Hyundai\\nVIN: 5XY...")
        >>> len(doc)
        2
    """
    lines: Tuple[str, ...]
    source: str = ""

    @classmethod
    def from_text(cls, text: str, source: str = "") -> 'RawDocumentText':
        """Build from a single string, splitting on any newline convention."""
        return cls(lines=tuple((text or "").splitlines()), source=source)

    @classmethod
    def from_pages(cls, pages: Iterable[str], source: str = "") -> 'RawDocumentText':
        """Build from per-page OCR strings, concatenated in page order."""
        lines = []
        for page in pages:
            lines.extend((page or "").splitlines())
        return cls(lines=tuple(lines), source=source)

    @property
    def text(self) -> str:
        """Full text joined with newlines."""
        return "\n".join(self.lines)

    @property
    def char_count(self) -> int:
        """Number of non-whitespace characters."""
        return sum(len(''.join(line.split())) for line in self.lines)

    @property
    def is_blank(self) -> bool:
        return self.char_count == 0

    def __len__(self) -> int:
        return len(self.lines)

    def __iter__(self) -> Iterator[str]:
        return iter(self.lines)
