from esg.ingest.source import PlainTextSource
from esg.ingest.toc import (
    HeuristicChapterDetector,
    TocEntry,
    TocFailed,
    TocFound,
    TocInsufficient,
    TocResolver,
    find_toc_page,
    has_toc_marker,
    parse_toc_line,
    parse_toc_lines,
    read_toc,
)

# --- Tiny fakes ----------------------------------------------------------------


class _BrokenSource:
    """Page text access blows up, as a damaged PDF would."""

    def page_count(self):
        return 5

    def page_text(self, page_index):
        raise RuntimeError("xref table damaged")

    def full_text(self):
        return "1 Introduction\n2 Climate\n3 People"


class _BrokenEverywhere(_BrokenSource):
    def full_text(self):
        raise RuntimeError("stream truncated")


def _report(toc_lines, body_pages=30, toc_index=1):
    pages = ["2023 永續報告書"] + ["" for _ in range(body_pages)]
    pages[toc_index] = "\n".join(toc_lines)
    return PlainTextSource(pages)


# --- ToC line parsing ------------------------------------------------------------


def test_parse_toc_line_with_dot_leaders():
    assert parse_toc_line("1. Environmental Overview ..... 5") == TocEntry(
        number="1", title="Environmental Overview", page=5
    )


def test_parse_toc_line_cjk_separator_and_ellipsis_leaders():
    e = parse_toc_line("2.1、員工照顧 …… 40")
    assert e is not None
    assert (e.number, e.title, e.page) == ("2.1", "員工照顧", 40)


def test_parse_toc_line_keeps_digits_inside_title():
    e = parse_toc_line("3 Scope 3 Emissions 12")
    assert e is not None
    assert e.title == "Scope 3 Emissions"
    assert e.page == 12


def test_parse_toc_line_rejects_non_entries():
    assert parse_toc_line("目錄") is None
    assert parse_toc_line("Introduction ..... 3") is None  # no chapter number
    assert parse_toc_line("2023 年報") is None  # no trailing page number


def test_parse_toc_lines_drops_unmatched_lines():
    text = "CONTENTS\n\n1 About this report 3\nsome running header\n2 Climate 8\n"
    entries = parse_toc_lines(text)
    assert [(e.number, e.page) for e in entries] == [("1", 3), ("2", 8)]


# --- ToC page & outcomes ---------------------------------------------------------


def test_toc_markers_are_case_insensitive_and_bilingual():
    assert has_toc_marker("TABLE OF CONTENTS")
    assert has_toc_marker("目錄")
    assert has_toc_marker("目次")
    assert not has_toc_marker("Letter from the Chairman")


def test_find_toc_page_respects_scan_limit():
    pages = ["cover"] * 30
    pages[25] = "Contents"
    src = PlainTextSource(pages)
    assert find_toc_page(src, scan_pages=20) is None
    assert find_toc_page(src, scan_pages=30) == 25


def test_read_toc_found():
    src = _report(
        [
            "目錄",
            "1. 關於本報告 ..... 3",
            "2. 環境永續 ..... 5",
            "3. 社會共融 …… 9",
            "4. 公司治理 ..... 12",
        ]
    )
    res = read_toc(src)
    assert isinstance(res, TocFound)
    assert res.toc_page == 1
    assert [e.page for e in res.entries] == [3, 5, 9, 12]
    assert res.entries[2].title == "社會共融"


def test_read_toc_insufficient_keeps_partial_entries():
    src = _report(["Contents", "1 Climate 4", "2 People 9"])
    res = read_toc(src, min_entries=3)
    assert isinstance(res, TocInsufficient)
    assert len(res.entries) == 2


def test_read_toc_without_marker_is_insufficient():
    src = PlainTextSource(["cover", "1 Climate 4\n2 People 9\n3 Board 12"])
    assert isinstance(read_toc(src), TocInsufficient)


def test_read_toc_failure_is_reported_not_raised():
    res = read_toc(_BrokenSource())
    assert isinstance(res, TocFailed)
    assert "RuntimeError" in res.reason


# --- Heuristic heading scan ------------------------------------------------------


def test_heuristic_rules_and_page_estimate():
    lines = [""] * 120
    lines[0] = "1 Introduction"
    lines[60] = "Chapter 2: Climate Action"
    lines[110] = "GOVERNANCE REVIEW"
    entries = HeuristicChapterDetector(lines_per_page=50).detect("\n".join(lines))

    assert [(e.number, e.title, e.page) for e in entries] == [
        ("1", "Introduction", 1),
        ("2", "Climate Action", 2),
        ("3", "GOVERNANCE REVIEW", 3),
    ]


def test_heuristic_cjk_headings():
    text = "第3章 社會共融\n3.1 員工照顧"
    entries = HeuristicChapterDetector().detect(text)
    assert [(e.number, e.title) for e in entries] == [("3", "社會共融"), ("3.1", "員工照顧")]


def test_heuristic_skips_long_lines_and_keeps_pages_monotonic():
    long_line = "1 " + "word " * 30
    lines = ["2 Strategy", long_line] + ["filler text"] * 200 + ["3 Outlook", "ANNEX TABLES"]
    entries = HeuristicChapterDetector(lines_per_page=50).detect("\n".join(lines))
    assert all(e.title != long_line[2:].strip() for e in entries)
    pages = [e.page for e in entries]
    assert pages == sorted(pages)


def test_heuristic_empty_text():
    assert HeuristicChapterDetector().detect("") == []


# --- Resolver --------------------------------------------------------------------


def test_resolver_prefers_toc():
    src = _report(["CONTENTS", "1 About 3", "2 Environment 5", "3 Society 9"])
    det = TocResolver().resolve(src)
    assert det.source == "toc"
    assert [e.number for e in det.entries] == ["1", "2", "3"]


def test_resolver_falls_back_to_headings_when_toc_is_thin():
    src = PlainTextSource(
        ["目錄\n1 環境 3", "1 Environmental Stewardship\nbody", "2 Social Impact\nbody"]
    )
    det = TocResolver(min_entries=3).resolve(src)
    assert det.source == "heuristic"
    titles = [e.title for e in det.entries]
    assert "Environmental Stewardship" in titles
    assert "Social Impact" in titles


def test_resolver_reports_none_when_nothing_found():
    src = PlainTextSource(["just prose without any headings.", "more prose here."])
    det = TocResolver().resolve(src)
    assert det.source == "none"
    assert det.entries == []


def test_resolver_scans_headings_when_toc_is_unreadable():
    det = TocResolver().resolve(_BrokenSource())
    assert det.source == "heuristic"
    assert [e.title for e in det.entries] == ["Introduction", "Climate", "People"]


def test_resolver_reports_none_when_headings_also_fail():
    det = TocResolver().resolve(_BrokenEverywhere())
    assert det.source == "none"
    assert det.entries == []
