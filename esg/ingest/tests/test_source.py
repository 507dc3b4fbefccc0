import fitz  # PyMuPDF
import pytest

from esg.errors import SourceReadError
from esg.ingest.source import (
    PdfTextSource,
    PlainTextSource,
    open_source,
    text_between,
)


def _make_pdf(path, page_texts):
    doc = fitz.open()
    for t in page_texts:
        page = doc.new_page()
        page.insert_text((72, 72), t)
    doc.save(str(path))
    doc.close()


def test_plain_text_pages_split_on_form_feed():
    src = PlainTextSource.from_text("alpha\fbeta\fgamma")
    assert src.page_count() == 3
    assert src.page_text(1) == "beta"
    assert src.page_text(7) == ""
    assert src.page_text(-1) == ""
    assert src.full_text() == "alpha\nbeta\ngamma"


def test_text_between_is_inclusive_and_clipped():
    src = PlainTextSource(["a", "b", "c", "d"])
    assert text_between(src, 1, 2) == "b\nc"
    assert text_between(src, 2, None) == "c\nd"
    assert text_between(src, -5, 0) == "a"
    assert text_between(src, 3, 50) == "d"
    assert text_between(src, 9, None) == ""


def test_open_source_dispatches_on_suffix(tmp_path):
    txt = tmp_path / "2330_2023.txt"
    txt.write_text("封面\f目錄\f第一章", encoding="utf-8")
    src = open_source(txt)
    assert isinstance(src, PlainTextSource)
    assert src.page_count() == 3

    pdf = tmp_path / "report.pdf"
    _make_pdf(pdf, ["Hello ESG", "Second page"])
    src = open_source(pdf)
    try:
        assert isinstance(src, PdfTextSource)
        assert src.page_count() == 2
    finally:
        src.close()


def test_pdf_source_reads_pages_lazily(tmp_path):
    pdf = tmp_path / "report.pdf"
    _make_pdf(pdf, ["Hello ESG", "Scope 1 emissions"])
    src = PdfTextSource(pdf)
    try:
        assert "Hello ESG" in src.page_text(0)
        assert "Scope 1" in src.page_text(1)
        assert src.page_text(2) == ""
        full = src.full_text()
        assert full.index("Hello ESG") < full.index("Scope 1")
    finally:
        src.close()


def test_missing_file_raises_source_read_error(tmp_path):
    with pytest.raises(SourceReadError):
        open_source(tmp_path / "nope.pdf")


def test_broken_pdf_raises_source_read_error(tmp_path):
    bad = tmp_path / "broken.pdf"
    bad.write_bytes(b"this is not a pdf")
    with pytest.raises(SourceReadError):
        PdfTextSource(bad)
