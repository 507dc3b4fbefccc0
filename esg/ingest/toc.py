"""
toc.py

Chapter boundary detection for sustainability reports:
- Locates a table-of-contents page among the first pages and parses its lines
- Falls back to a line-pattern heading scan over the full text when the ToC
  is missing or too thin

Both paths produce TocEntry(number, title, page) with 1-based page numbers.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Tuple, Union

from esg.ingest.source import PageTextSource

logger = logging.getLogger(__name__)

# -----------------------------
# Utilities & configuration
# -----------------------------

TOC_MARKERS: Tuple[str, ...] = ("目錄", "目次", "目录", "contents")

DEFAULT_SCAN_PAGES = 20
DEFAULT_MIN_ENTRIES = 3
DEFAULT_LINES_PER_PAGE = 50
MAX_HEADING_LINE = 100

LEADER_CHARS = r"\.\u2026\u00B7\u2219\u22EF\u2024\u2027\u30FB\uFF0E"  # dot-leader variants
NUMBER_SEP_CHARS = r"\.．、:：\-"

# "1. Environmental Overview ..... 5", "2.1、員工照顧 …… 40"
TOC_LINE_RE = re.compile(
    rf"""^(?P<number>\d+(?:\.\d+)*)
         [\s{NUMBER_SEP_CHARS}]*            # punctuation after the number
         (?P<title>[^\d\s{NUMBER_SEP_CHARS}{LEADER_CHARS}].*?)
         [\s{LEADER_CHARS}]+                # dot-fill / whitespace leaders
         (?P<page>\d{{1,4}})\s*$            # trailing page number
    """,
    re.VERBOSE,
)


@dataclass
class TocEntry:
    number: str
    title: str
    page: int  # 1-based, as printed in the report


# -----------------------------
# ToC parse outcomes
# -----------------------------


@dataclass(frozen=True)
class TocFound:
    entries: List[TocEntry]
    toc_page: int  # 0-based index of the page carrying the ToC


@dataclass(frozen=True)
class TocInsufficient:
    reason: str
    entries: List[TocEntry] = field(default_factory=list)


@dataclass(frozen=True)
class TocFailed:
    reason: str


TocResult = Union[TocFound, TocInsufficient, TocFailed]


@dataclass
class ChapterDetection:
    entries: List[TocEntry]
    source: str  # 'toc' | 'heuristic' | 'none'


# -----------------------------
# ToC page
# -----------------------------


def has_toc_marker(text: str) -> bool:
    low = (text or "").lower()
    return any(marker in low for marker in TOC_MARKERS)


def find_toc_page(source: PageTextSource, scan_pages: int) -> Optional[int]:
    """Return the first page index (0-based) carrying a ToC marker, if any."""
    limit = min(scan_pages, source.page_count())
    for pi in range(limit):
        if has_toc_marker(source.page_text(pi)):
            return pi
    return None


def parse_toc_line(line: str) -> Optional[TocEntry]:
    m = TOC_LINE_RE.match(line.strip())
    if not m:
        return None
    title = re.sub(r"\s+", " ", m.group("title")).strip()
    if not title:
        return None
    return TocEntry(number=m.group("number"), title=title, page=int(m.group("page")))


def parse_toc_lines(text: str) -> List[TocEntry]:
    """Parse every non-blank line; lines that do not match are dropped."""
    entries: List[TocEntry] = []
    for raw in text.splitlines():
        if not raw.strip():
            continue
        entry = parse_toc_line(raw)
        if entry:
            entries.append(entry)
    return entries


def read_toc(
    source: PageTextSource,
    scan_pages: int = DEFAULT_SCAN_PAGES,
    min_entries: int = DEFAULT_MIN_ENTRIES,
) -> TocResult:
    try:
        toc_page = find_toc_page(source, scan_pages)
        if toc_page is None:
            return TocInsufficient(reason="no table-of-contents page")
        entries = parse_toc_lines(source.page_text(toc_page))
    except Exception as e:
        return TocFailed(reason=f"{type(e).__name__}: {e}")

    if len(entries) < min_entries:
        return TocInsufficient(
            reason=f"only {len(entries)} entries on ToC page {toc_page}",
            entries=entries,
        )
    return TocFound(entries=entries, toc_page=toc_page)


# -----------------------------
# Heuristic heading scan
# -----------------------------


@dataclass(frozen=True)
class HeadingRule:
    """
    A single line-level heading pattern.
    `extract` maps (match, entries found so far) to (number, title).
    """

    name: str
    regex: re.Pattern
    extract: Callable[[re.Match, List[TocEntry]], Tuple[str, str]]


def _numbered(m: re.Match, found: List[TocEntry]) -> Tuple[str, str]:
    return m.group(1), m.group(2).strip()


def _labelled(m: re.Match, found: List[TocEntry]) -> Tuple[str, str]:
    number = m.group("num") or m.group("cjk_num")
    title = m.group("title") or m.group("cjk_title")
    return number, title.strip()


def _uppercase(m: re.Match, found: List[TocEntry]) -> Tuple[str, str]:
    return str(len(found) + 1), m.group(0).strip()


HEADING_RULES: List[HeadingRule] = [
    # "3 Environmental Stewardship", "2.1 員工照顧"
    # Also fires on year-led sentences ("2023 was ...") and numbered list items.
    HeadingRule(
        name="numbered",
        regex=re.compile(r"^(\d+(?:\.\d+)*)\.?\s+([^\d\s].*)$"),
        extract=_numbered,
    ),
    # "Chapter 2: Climate Action", "Section 4: Governance", "第3章 社會共融"
    # Misses headings without the colon ("Chapter 2 Climate").
    HeadingRule(
        name="labelled",
        regex=re.compile(
            r"^(?:(?:chapter|section)\s+(?P<num>\d+)\s*[:：]\s*(?P<title>\S.*)"
            r"|第\s*(?P<cjk_num>\d+)\s*[章節]\s*[:：、]?\s*(?P<cjk_title>\S.*))$",
            re.IGNORECASE,
        ),
        extract=_labelled,
    ),
    # "SUSTAINABLE GOVERNANCE"; running headers in caps produce repeats.
    HeadingRule(
        name="uppercase",
        regex=re.compile(r"^[A-Z][A-Z0-9&,'()/\- ]{3,}$"),
        extract=_uppercase,
    ),
]


class HeuristicChapterDetector:
    """Scan full text for chapter-like lines when no usable ToC exists."""

    def __init__(
        self,
        lines_per_page: int = DEFAULT_LINES_PER_PAGE,
        rules: Optional[List[HeadingRule]] = None,
    ):
        self.lines_per_page = lines_per_page
        self.rules = rules if rules is not None else HEADING_RULES

    def detect(self, text: str) -> List[TocEntry]:
        entries: List[TocEntry] = []
        for idx, raw in enumerate((text or "").splitlines()):
            line = raw.strip()
            if not line or len(line) > MAX_HEADING_LINE:
                continue
            page = 1 + idx // self.lines_per_page
            # every matching rule contributes, in rule order
            for rule in self.rules:
                m = rule.regex.match(line)
                if not m:
                    continue
                number, title = rule.extract(m, entries)
                entries.append(TocEntry(number=number, title=title, page=page))
        return entries


# -----------------------------
# Resolver
# -----------------------------


class TocResolver:
    """
    ToC first, heuristic scan second.
    Usage:
        detection = TocResolver().resolve(source)
        detection.entries, detection.source
    """

    def __init__(
        self,
        scan_pages: int = DEFAULT_SCAN_PAGES,
        min_entries: int = DEFAULT_MIN_ENTRIES,
        heuristic: Optional[HeuristicChapterDetector] = None,
    ):
        self.scan_pages = scan_pages
        self.min_entries = min_entries
        self.heuristic = heuristic or HeuristicChapterDetector()

    def resolve(self, source: PageTextSource) -> ChapterDetection:
        result = read_toc(source, self.scan_pages, self.min_entries)

        if isinstance(result, TocFound):
            logger.info(
                "ToC on page %d: %d entries", result.toc_page + 1, len(result.entries)
            )
            return ChapterDetection(entries=list(result.entries), source="toc")

        if isinstance(result, TocFailed):
            logger.warning("ToC unreadable (%s); scanning headings", result.reason)
        else:
            logger.info("ToC insufficient (%s); scanning headings", result.reason)

        try:
            entries = self.heuristic.detect(source.full_text())
        except Exception as e:
            logger.warning("heading scan failed, no chapters: %s", e)
            return ChapterDetection(entries=[], source="none")
        return ChapterDetection(
            entries=entries, source="heuristic" if entries else "none"
        )
