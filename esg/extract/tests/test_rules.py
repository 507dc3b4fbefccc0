"""Each rule on its own, including the false positives its notes admit to."""

from esg.extract.rules import (
    BARE_YEAR_RULE,
    BY_YEAR_RULE,
    GOAL_STATEMENT_RULE,
    GRI_RULE,
    NUMERIC_RULE,
    SASB_RULE,
)


def _groups(rule, text, *names):
    return [tuple(m.group(n) for n in names) for m in rule.finditer(text)]


def test_gri_code_forms():
    text = "GRI 2-1: Organizational details\nGRI305-4 GHG emissions intensity"
    assert _groups(GRI_RULE, text, "code", "label") == [
        ("2-1", "Organizational details"),
        ("305-4", "GHG emissions intensity"),
    ]


def test_sasb_takes_any_uppercase_token_as_code():
    assert _groups(SASB_RULE, "SASB INDEX: overview table", "code") == [("INDEX",)]


def test_numeric_accepts_fullwidth_colon_and_decimals():
    assert _groups(NUMERIC_RULE, "再生能源比例：12.75%", "label", "value", "unit") == [
        ("再生能源比例", "12.75", "%")
    ]


def test_numeric_also_fires_on_dates():
    assert _groups(NUMERIC_RULE, "Date: 2023", "label", "value") == [("Date", "2023")]


def test_by_year_catches_retrospective_sentences():
    (m,) = BY_YEAR_RULE.finditer("In 2022, we reduced water use by 8%.")
    assert m.group("year") == "2022"
    assert m.group("desc").startswith("we reduced water use")


def test_bare_year_fires_on_report_headers():
    (m,) = BARE_YEAR_RULE.finditer("2023 Sustainability Report")
    assert (m.group("year"), m.group("desc")) == ("2023", "Sustainability Report")


def test_year_inside_a_number_is_not_a_year():
    assert list(BARE_YEAR_RULE.finditer("revenue 12,2030 thousand")) == []
    assert list(BARE_YEAR_RULE.finditer("ratio 0.2030 overall")) == []


def test_goal_statement_lead_ins():
    text = "Our goal is to halve landfill waste. 目標為提升女性主管比例至30%。"
    assert [m.group("desc") for m in GOAL_STATEMENT_RULE.finditer(text)] == [
        "to halve landfill waste",
        "提升女性主管比例至30%",
    ]


def test_numeric_label_never_starts_with_a_separator():
    text = "用電量: 120 MWh；用水量: 35 噸、廢棄物量: 8 噸"
    assert [m.group("label") for m in NUMERIC_RULE.finditer(text)] == ["用電量", "用水量", "廢棄物量"]
