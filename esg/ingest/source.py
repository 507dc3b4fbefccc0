from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Protocol, Union

import fitz  # PyMuPDF

from esg.errors import SourceReadError

PAGE_BREAK = "\f"


class PageTextSource(Protocol):
    """Supplies full-document text and per-page text (0-based page indices)."""

    def full_text(self) -> str: ...

    def page_text(self, page_index: int) -> str: ...

    def page_count(self) -> int: ...


def text_between(source: PageTextSource, start: int, end: Optional[int]) -> str:
    """
    Concatenate page text for [start..end] (0-based, inclusive).
    end=None reads to the end of the document; ranges past the end are clipped.
    """
    last = source.page_count() - 1
    if end is not None:
        last = min(last, end)
    parts: List[str] = []
    for i in range(max(0, start), last + 1):
        parts.append(source.page_text(i))
    return "\n".join(parts)


class PdfTextSource:
    """Light wrapper around PyMuPDF; page texts are extracted lazily and cached."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        try:
            self.doc = fitz.open(self.path)
        except Exception as e:
            raise SourceReadError(f"cannot open {self.path}: {e}") from e
        self._pages: List[Optional[str]] = [None] * self.doc.page_count

    def page_count(self) -> int:
        return len(self._pages)

    def page_text(self, page_index: int) -> str:
        if page_index < 0 or page_index >= len(self._pages):
            return ""
        cached = self._pages[page_index]
        if cached is None:
            try:
                cached = self.doc.load_page(page_index).get_text("text")
            except Exception as e:
                raise SourceReadError(
                    f"cannot read page {page_index} of {self.path}: {e}"
                ) from e
            self._pages[page_index] = cached
        return cached

    def full_text(self) -> str:
        return "\n".join(self.page_text(i) for i in range(self.page_count()))

    def close(self) -> None:
        self.doc.close()


class PlainTextSource:
    """Pages held in memory; used for pre-extracted .txt reports and in tests."""

    def __init__(self, pages: List[str]):
        self.pages = list(pages)

    @classmethod
    def from_text(cls, text: str) -> "PlainTextSource":
        return cls(text.split(PAGE_BREAK))

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "PlainTextSource":
        p = Path(path)
        try:
            text = p.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise SourceReadError(f"cannot read {p}: {e}") from e
        return cls.from_text(text)

    def page_count(self) -> int:
        return len(self.pages)

    def page_text(self, page_index: int) -> str:
        if 0 <= page_index < len(self.pages):
            return self.pages[page_index]
        return ""

    def full_text(self) -> str:
        return "\n".join(self.pages)

    def close(self) -> None:
        pass


def open_source(path: Union[str, Path]) -> Union[PdfTextSource, PlainTextSource]:
    """Pick a source implementation by file suffix (.pdf or text)."""
    p = Path(path)
    if not p.exists():
        raise SourceReadError(f"source file not found: {p}")
    if p.suffix.lower() == ".pdf":
        return PdfTextSource(p)
    return PlainTextSource.from_file(p)
