import pytest

from esg.extract.goals import (
    GoalExtractor,
    dedupe_goals,
    goal_category,
    is_valid_description,
)
from esg.extract.schema import GoalCandidate


@pytest.fixture
def ext():
    return GoalExtractor()


def _goal(description, year=None, page=0):
    return GoalCandidate(
        category=goal_category(description),
        title=description[:50],
        description=description,
        target_year=year,
        page=page,
    )


def test_english_by_year_goal(ext):
    goals = ext.extract("by 2030, reduce emissions by 50%")
    assert len(goals) == 1
    g = goals[0]
    assert g.target_year == 2030
    assert g.category == "減碳目標"
    assert g.status == "進行中"
    assert g.description == "reduce emissions by 50%"


def test_chinese_year_goal(ext):
    goals = ext.extract("本公司於2030年前，再生能源使用比例達到50%。")
    assert len(goals) == 1
    g = goals[0]
    assert g.target_year == 2030
    assert g.category == "能源目標"
    assert g.description == "再生能源使用比例達到50%"


def test_goal_statement_sniffs_year_from_description(ext):
    (g,) = ext.extract("Our goal is to cut water withdrawal 20% by 2035.")
    assert g.target_year == 2035
    assert g.category == "水資源目標"


def test_goal_statement_without_year(ext):
    (g,) = ext.extract("目標為提升員工訓練時數與多元包容")
    assert g.target_year is None
    assert g.category == "人才發展目標"


def test_description_length_bounds(ext):
    assert len(ext.extract("by 2030, abcdefghij.")) == 1  # 10 chars
    assert ext.extract("by 2030, abcdefghi.") == []  # 9 chars
    assert is_valid_description("x" * 200)
    assert not is_valid_description("x" * 201)
    assert not is_valid_description("   short   ")


def test_page_is_estimated_over_the_whole_document(ext):
    (g,) = ext.extract("x" * 5000 + " by 2030, reduce emissions by 50%")
    assert g.page == 5001 // 2000


def test_status_is_never_inferred(ext):
    (g,) = ext.extract("by 2025, complete the LED lighting retrofit (achieved)")
    assert g.status == "進行中"


def test_company_and_title_are_filled(ext):
    text = "By 2040, " + "achieve net zero across all operations and the entire value chain"
    (g,) = ext.extract(text, company_id="2330")
    assert g.company_id == "2330"
    assert g.title == g.description[:50]
    assert len(g.title) == 50


def test_empty_text(ext):
    assert ext.extract("") == []


def test_dedupe_prefers_a_dated_duplicate():
    undated, dated = _goal("reduce plastic packaging waste"), _goal("reduce plastic packaging waste", 2028)
    assert [g.target_year for g in dedupe_goals([undated, dated])] == [2028]
    assert [g.target_year for g in dedupe_goals([dated, undated])] == [2028]


def test_dedupe_key_is_description_prefix():
    head = "a" * 50
    goals = dedupe_goals([_goal(head + " first tail"), _goal(head + " second tail")])
    assert len(goals) == 1
    assert goals[0].description.endswith("first tail")


@pytest.mark.parametrize(
    "description,expected",
    [
        ("reach net zero emissions", "減碳目標"),
        ("100% renewable electricity", "能源目標"),
        ("降低單位產品用水量", "水資源目標"),
        ("廢棄物回收率達90%", "循環經濟目標"),
        ("women in management at 30%", "人才發展目標"),
        ("完成ISO認證", "永續發展目標"),
    ],
)
def test_goal_category_ladder(description, expected):
    assert goal_category(description) == expected
