import pytest

from esg.classify.classifier import ChapterClassifier, load_lexicons


@pytest.fixture
def clf():
    return ChapterClassifier()


def test_title_hits_weigh_three(clf):
    assert clf.score("Climate", "").E == 3
    assert clf.score("Climate", "climate and CLIMATE").E == 5


def test_content_count_is_substring_based(clf):
    # "carbonate" still counts as a "carbon" hit
    assert clf.score("Overview", "carbon carbonate").E == 2


@pytest.mark.parametrize(
    "title,content,expected",
    [
        ("環境保護與氣候行動", "", "E"),
        ("員工照顧與職業安全", "", "S"),
        ("公司治理", "董事會 股東會", "G"),
        ("Our Workforce", "employee training, employee safety", "S"),
        ("Board Oversight", "audit committee and risk management", "G"),
    ],
)
def test_strict_winner(clf, title, content, expected):
    assert clf.classify(title, content) == expected


def test_tie_goes_to_defining_keyword_in_title(clf):
    # E and S both score 3; "environment" is the environmental defining keyword
    assert clf.classify("Environment and Social", "") == "E"


def test_tie_without_defining_keyword_is_general(clf):
    assert clf.classify("Carbon and employee", "") == "General"


def test_zero_scores_are_general(clf):
    assert clf.classify("About this report", "Lorem ipsum dolor sit amet") == "General"


def test_result_is_always_a_known_tag(clf):
    for title in ["", "x", "碳", "GOVERNANCE", "社會與治理"]:
        assert clf.classify(title, title * 3) in {"E", "S", "G", "General"}


def test_yaml_lexicon_override(tmp_path):
    path = tmp_path / "lexicon.yaml"
    path.write_text("environmental:\n  - ocean\n  - 海洋\n", encoding="utf-8")

    lex = load_lexicons(path)
    assert lex["E"] == ["ocean", "海洋"]
    assert "employee" in lex["S"]  # untouched axes keep their defaults

    assert ChapterClassifier.from_yaml(path).classify("Ocean Stewardship", "") == "E"
    assert ChapterClassifier().classify("Ocean Stewardship", "") == "General"


def test_from_yaml_without_path_uses_defaults():
    assert ChapterClassifier.from_yaml(None).classify("環境", "") == "E"
