"""Keyword-scored ESG axis classification of report chapters."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import yaml

logger = logging.getLogger(__name__)

TITLE_WEIGHT = 3
CONTENT_WEIGHT = 1

GENERAL = "General"

# axis tag -> keywords (bilingual, matched case-insensitively as substrings)
DEFAULT_LEXICONS: Dict[str, List[str]] = {
    "E": [
        "環境", "氣候", "碳", "排放", "溫室氣體", "能源", "水資源", "廢棄物",
        "生態", "生物多樣性", "再生能源",
        "environment", "climate", "carbon", "emission", "greenhouse", "energy",
        "water", "waste", "biodiversity", "renewable",
    ],
    "S": [
        "社會", "員工", "人才", "職業安全", "健康", "社區", "人權", "多元",
        "客戶", "供應鏈", "公益",
        "social", "employee", "talent", "safety", "health", "community",
        "human rights", "diversity", "customer", "supply chain", "workforce",
    ],
    "G": [
        "治理", "董事會", "風險管理", "誠信", "法規遵循", "道德", "股東",
        "審計", "內部控制", "反貪腐",
        "governance", "board", "risk management", "compliance", "ethics",
        "integrity", "shareholder", "audit", "anti-corruption",
    ],
}

# the one keyword per axis that settles ties, checked in E -> S -> G order
DEFINING_KEYWORDS: List[Tuple[str, Tuple[str, ...]]] = [
    ("E", ("環境", "environment")),
    ("S", ("社會", "social")),
    ("G", ("治理", "governance")),
]


def load_lexicons(path: Path) -> Dict[str, List[str]]:
    """
    Read lexicons from YAML:
        environmental: [...]
        social: [...]
        governance: [...]
    Axes missing from the file keep their defaults.
    """
    rows = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    out = {k: list(v) for k, v in DEFAULT_LEXICONS.items()}
    for key, tag in (("environmental", "E"), ("social", "S"), ("governance", "G")):
        words = rows.get(key)
        if words:
            out[tag] = [str(w) for w in words]
    return out


@dataclass
class AxisScores:
    E: int = 0
    S: int = 0
    G: int = 0

    def as_dict(self) -> Dict[str, int]:
        return {"E": self.E, "S": self.S, "G": self.G}


class ChapterClassifier:
    def __init__(self, lexicons: Optional[Dict[str, List[str]]] = None):
        self.lexicons = lexicons or DEFAULT_LEXICONS

    @classmethod
    def from_yaml(cls, path: Optional[Path]) -> "ChapterClassifier":
        if path is None:
            return cls()
        return cls(load_lexicons(path))

    def score(self, title: str, content: str) -> AxisScores:
        title_low = (title or "").lower()
        content_low = (content or "").lower()
        scores = AxisScores()
        for tag, words in self.lexicons.items():
            total = 0
            for w in words:
                kw = w.lower()
                if kw in title_low:
                    total += TITLE_WEIGHT
                # plain substring count, "carbon" inside "carbonate" counts
                total += CONTENT_WEIGHT * content_low.count(kw)
            setattr(scores, tag, total)
        return scores

    def classify(self, title: str, content: str) -> str:
        scores = self.score(title, content).as_dict()
        best = max(scores.values())
        leaders = [tag for tag, v in scores.items() if v == best]
        if best > 0 and len(leaders) == 1:
            return leaders[0]

        title_low = (title or "").lower()
        for tag, words in DEFINING_KEYWORDS:
            if any(w in title_low for w in words):
                return tag
        logger.debug("no dominant axis for %r (%s)", title, scores)
        return GENERAL
