"""
Named regex rules for indicator and goal extraction.

Each rule is matched with `finditer` over free text; the extractors decide
what to do with the groups. `notes` records what the rule is known to get
wrong so tests can pin the behaviour of each rule on its own.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterator, List


@dataclass(frozen=True)
class PatternRule:
    name: str
    regex: re.Pattern
    notes: str = ""

    def finditer(self, text: str) -> Iterator[re.Match]:
        return self.regex.finditer(text)


# ---------- indicators ----------

GRI_RULE = PatternRule(
    name="gri",
    regex=re.compile(
        r"GRI\s*(?P<code>\d{1,3}(?:-\d{1,3})?)\s*[:：\s]\s*(?P<label>[^\n]{2,100})"
    ),
    notes=(
        "Label runs to end of line, so trailing page numbers or table cells "
        "stay in the name. Codes split across lines are missed."
    ),
)

SASB_RULE = PatternRule(
    name="sasb",
    regex=re.compile(
        r"SASB\s*(?P<code>[A-Z0-9]+(?:[-.][A-Za-z0-9]+)*)\s*[:：\s]\s*(?P<label>[^\n]{2,100})"
    ),
    notes=(
        "Any upper-case token after 'SASB' is taken as the code, including "
        "words such as 'INDEX'. Same end-of-line label caveat as the GRI rule."
    ),
)

_VALUE = r"\d{1,3}(?:,\d{3})+(?:\.\d+)?|\d+(?:\.\d+)?"
_UNIT_STOP = r"\s,，。、;；:：()（）"
# punctuation that ends the previous pair never starts a label
_LABEL_LEAD_STOP = r"\s,，;；、"

NUMERIC_RULE = PatternRule(
    name="numeric",
    regex=re.compile(
        rf"(?P<label>[^\n:：{_LABEL_LEAD_STOP}][^\n:：]{{1,29}})[:：][ \t]*(?P<value>{_VALUE})"
        rf"[ \t]*(?P<unit>[^{_UNIT_STOP}\d][^{_UNIT_STOP}]{{0,19}})?"
    ),
    notes=(
        "Matches any 'label: number unit' pair: table rows, dates written as "
        "'Date: 2023', footnote counters. Labels longer than 30 characters "
        "are cut to their last 30. Values without a colon are missed."
    ),
)

INDICATOR_RULES: List[PatternRule] = [GRI_RULE, SASB_RULE, NUMERIC_RULE]

# ---------- goals ----------

_YEAR = r"(?<![\d,.])(?P<year>\d{4})(?!\d)"
_QUALIFIER = r"(?:\s*(?:年底前|年以前|年前|年底|年))?\s*[,，、:：]?\s*"
# description stops at sentence punctuation; a '.' only counts as a stop
# when it is not a decimal point
_DESC = r"(?P<desc>(?:[^。！？!?；;\n.]|\.(?=\d)){5,100})"

BY_YEAR_RULE = PatternRule(
    name="by_year",
    regex=re.compile(
        rf"(?:\b(?:by|in|before)\s+|[於在])\s*{_YEAR}{_QUALIFIER}{_DESC}",
        re.IGNORECASE,
    ),
    notes=(
        "'in <year>' also catches retrospective statements ('in 2022, we "
        "reduced ...'). Goals whose year follows the action are missed."
    ),
)

BARE_YEAR_RULE = PatternRule(
    name="bare_year",
    regex=re.compile(rf"{_YEAR}{_QUALIFIER}{_DESC}"),
    notes=(
        "Fires on any four-digit number followed by text: table years, "
        "headers such as '2023 Sustainability Report'. Precision is low."
    ),
)

GOAL_STATEMENT_RULE = PatternRule(
    name="goal_statement",
    regex=re.compile(
        rf"(?:\bgoal\s+(?:is|as)\b|\bgoal\s*[:：]|目標(?:為|是|:|：))\s*{_DESC}",
        re.IGNORECASE,
    ),
    notes=(
        "Only the literal 'goal' / '目標' lead-ins; 'target', 'aim', "
        "'commit to' are missed."
    ),
)

GOAL_RULES: List[PatternRule] = [BY_YEAR_RULE, BARE_YEAR_RULE, GOAL_STATEMENT_RULE]

YEAR_IN_TEXT_RE = re.compile(r"(?<!\d)(\d{4})(?!\d)")
