from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional, Tuple

from esg.extract.rules import GOAL_RULES, GOAL_STATEMENT_RULE, YEAR_IN_TEXT_RE
from esg.extract.schema import GOAL_STATUS_IN_PROGRESS, GoalCandidate

logger = logging.getLogger(__name__)

DEFAULT_CHARS_PER_PAGE = 2000
MIN_DESCRIPTION = 10
MAX_DESCRIPTION = 200
TITLE_LENGTH = 50

DEFAULT_GOAL_CATEGORY = "永續發展目標"

# checked in order; first ladder step with a hit wins
GOAL_CATEGORIES: List[Tuple[str, Tuple[str, ...]]] = [
    (
        "減碳目標",
        ("減碳", "碳", "排放", "溫室氣體", "淨零", "氣候",
         "carbon", "emission", "ghg", "net zero", "net-zero", "climate"),
    ),
    (
        "能源目標",
        ("能源", "再生能源", "綠電", "用電", "節能",
         "energy", "renewable", "electricity"),
    ),
    ("水資源目標", ("水", "water")),
    (
        "循環經濟目標",
        ("廢棄物", "回收", "循環", "waste", "recycl", "circular"),
    ),
    (
        "人才發展目標",
        ("員工", "人才", "培訓", "訓練", "多元", "女性",
         "employee", "talent", "training", "diversity", "people", "women"),
    ),
]


def goal_category(description: str) -> str:
    low = description.lower()
    for category, words in GOAL_CATEGORIES:
        if any(w in low for w in words):
            return category
    return DEFAULT_GOAL_CATEGORY


def is_valid_description(description: str) -> bool:
    return MIN_DESCRIPTION <= len(description.strip()) <= MAX_DESCRIPTION


def sniff_year(text: str) -> Optional[int]:
    m = YEAR_IN_TEXT_RE.search(text)
    return int(m.group(1)) if m else None


def dedupe_goals(candidates: Iterable[GoalCandidate]) -> List[GoalCandidate]:
    """Collapse goals sharing their first 50 description characters."""
    kept: Dict[str, GoalCandidate] = {}
    for g in candidates:
        key = g.dedup_key
        prev = kept.get(key)
        if prev is None or (prev.target_year is None and g.target_year is not None):
            kept[key] = g
    return list(kept.values())


class GoalExtractor:
    """Dated and undated commitment statements from the whole report text."""

    def __init__(self, chars_per_page: int = DEFAULT_CHARS_PER_PAGE):
        self.chars_per_page = chars_per_page

    def _candidate(
        self, description: str, year: Optional[int], offset: int, company_id: Optional[str]
    ) -> GoalCandidate:
        return GoalCandidate(
            category=goal_category(description),
            title=description[:TITLE_LENGTH],
            description=description,
            target_year=year,
            page=offset // self.chars_per_page,
            status=GOAL_STATUS_IN_PROGRESS,
            company_id=company_id,
        )

    def extract(self, text: str, company_id: Optional[str] = None) -> List[GoalCandidate]:
        if not text:
            return []
        found: List[GoalCandidate] = []
        for rule in GOAL_RULES:
            hits: List[GoalCandidate] = []
            try:
                for m in rule.finditer(text):
                    description = m.group("desc").strip()
                    if not is_valid_description(description):
                        continue
                    if rule is GOAL_STATEMENT_RULE:
                        year = sniff_year(description)
                    else:
                        year = int(m.group("year"))
                    hits.append(self._candidate(description, year, m.start(), company_id))
            except Exception as e:
                logger.warning("goal rule %s failed: %s", rule.name, e)
                continue
            found.extend(hits)
        return dedupe_goals(found)
