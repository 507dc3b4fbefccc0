from __future__ import annotations

import logging
import re
import unicodedata
from typing import Dict, Iterable, List, Optional, Protocol, Tuple

from esg.extract.rules import GRI_RULE, NUMERIC_RULE, SASB_RULE, PatternRule
from esg.extract.schema import CUSTOM_STANDARD, IndicatorCandidate
from esg.utils.textnorm import collapse_whitespace

logger = logging.getLogger(__name__)

DEFAULT_CHARS_PER_PAGE = 2000
CONTEXT_RADIUS = 100
MIN_NAME_WIDTH = 6  # names narrower than this (in display columns) are noise

# page/chapter tokens that mark running headers & footers
_MARKER_TOKENS = ("page", "頁", "chapter", "章")

OTHER_CATEGORY = "其他"

# checked in order; first bucket with a hit wins
CATEGORY_BUCKETS: List[Tuple[str, Tuple[str, ...]]] = [
    (
        "環境指標",
        (
            "排放", "碳", "溫室", "能源", "用電", "電力", "用水", "取水", "廢棄物",
            "廢水", "回收",
            "emission", "carbon", "ghg", "energy", "electricity", "water",
            "waste", "recycl",
        ),
    ),
    (
        "社會指標",
        (
            "員工", "人數", "訓練", "培訓", "安全", "傷害", "女性", "離職", "薪",
            "捐", "志工",
            "employee", "training", "safety", "injury", "women", "female",
            "turnover", "volunteer", "donation",
        ),
    ),
    (
        "治理指標",
        (
            "董事", "治理", "營收", "審計", "法規", "違規", "罰", "股東", "獨立",
            "board", "governance", "revenue", "audit", "compliance", "fine",
            "shareholder", "independent",
        ),
    ),
]


class ChapterText(Protocol):
    start_page: int
    content: Optional[str]


def category_for_name(name: str) -> str:
    low = name.lower()
    for category, words in CATEGORY_BUCKETS:
        if any(w in low for w in words):
            return category
    return OTHER_CATEGORY


def display_width(s: str) -> int:
    """East-Asian wide/full-width characters take two columns."""
    return sum(2 if unicodedata.east_asian_width(ch) in ("W", "F") else 1 for ch in s)


def is_noise_name(name: str) -> bool:
    if display_width(name) < MIN_NAME_WIDTH:
        return True
    low = name.lower()
    return any(tok in low for tok in _MARKER_TOKENS)


def context_window(text: str, start: int, end: int, radius: int = CONTEXT_RADIUS) -> str:
    return collapse_whitespace(text[max(0, start - radius) : end + radius])


def _information(c: IndicatorCandidate) -> Tuple[bool, bool]:
    return (bool(c.value), bool(c.unit))


def dedupe_indicators(candidates: Iterable[IndicatorCandidate]) -> List[IndicatorCandidate]:
    """
    Collapse candidates sharing (name, value). The kept one is the first seen
    unless a later one adds a value, or (value status equal) adds a unit.
    """
    kept: Dict[Tuple[str, str], IndicatorCandidate] = {}
    for c in candidates:
        key = c.dedup_key
        prev = kept.get(key)
        if prev is None or _information(c) > _information(prev):
            kept[key] = c
    return list(kept.values())


class IndicatorExtractor:
    """
    GRI codes, SASB codes, then generic 'label: value unit' pairs, per chapter.
    Pages are estimated from the match offset at a flat characters-per-page rate.
    """

    def __init__(self, chars_per_page: int = DEFAULT_CHARS_PER_PAGE):
        self.chars_per_page = chars_per_page

    def _page(self, start_page: int, offset: int) -> int:
        return start_page + offset // self.chars_per_page

    def _coded(
        self, rule: PatternRule, prefix: str, text: str, start_page: int
    ) -> List[IndicatorCandidate]:
        out: List[IndicatorCandidate] = []
        for m in rule.finditer(text):
            label = re.sub(r"\s+", " ", m.group("label")).strip()
            if not label:
                continue
            out.append(
                IndicatorCandidate(
                    standard_code=f"{prefix} {m.group('code')}",
                    category=label,
                    name=label,
                    page=self._page(start_page, m.start()),
                    context=context_window(text, m.start(), m.end()),
                )
            )
        return out

    def _numeric(self, text: str, start_page: int) -> List[IndicatorCandidate]:
        out: List[IndicatorCandidate] = []
        for m in NUMERIC_RULE.finditer(text):
            name = re.sub(r"\s+", " ", m.group("label")).strip()
            if is_noise_name(name):
                continue
            out.append(
                IndicatorCandidate(
                    standard_code=CUSTOM_STANDARD,
                    category=category_for_name(name),
                    name=name,
                    value=m.group("value"),
                    unit=m.group("unit"),
                    page=self._page(start_page, m.start()),
                    context=context_window(text, m.start(), m.end()),
                )
            )
        return out

    def extract_chapter(self, chapter: ChapterText) -> List[IndicatorCandidate]:
        text = chapter.content
        if not text:
            return []
        tiers = [
            ("gri", lambda: self._coded(GRI_RULE, "GRI", text, chapter.start_page)),
            ("sasb", lambda: self._coded(SASB_RULE, "SASB", text, chapter.start_page)),
            ("numeric", lambda: self._numeric(text, chapter.start_page)),
        ]
        found: List[IndicatorCandidate] = []
        for name, run in tiers:
            try:
                found.extend(run())
            except Exception as e:
                logger.warning(
                    "indicator tier %s failed on chapter at page %s: %s",
                    name,
                    chapter.start_page,
                    e,
                )
        return found

    def extract(self, chapters: Iterable[ChapterText]) -> List[IndicatorCandidate]:
        candidates: List[IndicatorCandidate] = []
        for chapter in chapters:
            candidates.extend(self.extract_chapter(chapter))
        return dedupe_indicators(candidates)
