from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from esg.ingest.source import PageTextSource, text_between
from esg.ingest.toc import TocEntry


@dataclass
class ChapterSpan:
    number: str
    title: str
    start_page: int  # 0-based inclusive
    end_page: Optional[int]  # 0-based inclusive; None = runs to document end
    content: str


def page_ranges(entries: List[TocEntry]) -> List[tuple[TocEntry, int, Optional[int]]]:
    """
    Sort entries by page (stable) and turn 1-based ToC pages into 0-based
    [start, end] ranges. A chapter stops one page short of the next chapter's
    printed page so the next header/footer does not bleed in.
    """
    ordered = sorted(entries, key=lambda e: e.page)
    out: List[tuple[TocEntry, int, Optional[int]]] = []
    for i, entry in enumerate(ordered):
        start = max(0, entry.page - 1)
        end: Optional[int] = None
        if i + 1 < len(ordered):
            # entries on the same or adjacent pages still get a one-page span
            end = max(start, ordered[i + 1].page - 2)
        out.append((entry, start, end))
    return out


class ChapterSplitter:
    """Cut the document into one contiguous span per ToC entry."""

    def split(
        self, entries: List[TocEntry], source: PageTextSource
    ) -> List[ChapterSpan]:
        spans: List[ChapterSpan] = []
        for entry, start, end in page_ranges(entries):
            spans.append(
                ChapterSpan(
                    number=entry.number,
                    title=entry.title,
                    start_page=start,
                    end_page=end,
                    content=text_between(source, start, end),
                )
            )
        return spans
