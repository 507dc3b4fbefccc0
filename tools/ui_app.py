from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional

import streamlit as st

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from esg.config import get_settings
from esg.db import ReportStore


# Optional: render PDF page images (pages are 0-based here)
def render_pdf_page(pdf_path: Path, page: int, zoom: float = 1.5) -> Optional[bytes]:
    if pdf_path.suffix.lower() != ".pdf":
        return None
    try:
        import fitz  # PyMuPDF

        doc = fitz.open(pdf_path)
        if page < 0 or page >= doc.page_count:
            return None
        pix = doc.load_page(page).get_pixmap(
            matrix=fitz.Matrix(zoom, zoom), alpha=False
        )
        return pix.tobytes("png")
    except Exception:
        return None


STATUS_ICON = {"pending": "⏳", "processing": "⚙️", "completed": "✅", "failed": "❌"}


def main():
    st.set_page_config(page_title="ESG Report Viewer", layout="wide")
    st.title("ESG Report Extractor — Chapters, Indicators & Goals")

    cfg = get_settings()
    store = ReportStore(cfg.db_path)
    colA, colB = st.columns([4, 1])
    with colA:
        st.caption(f"Database: `{cfg.db_path}`")
    with colB:
        if st.button("↻ Refresh"):
            st.rerun()

    reports = store.list_reports()
    st.sidebar.header("Reports")
    if not reports:
        st.sidebar.warning("No reports yet. Run `python scripts/cli.py run <dir>` first.")
        st.stop()

    labels = {
        r.id: f"{STATUS_ICON.get(r.status, '')} {r.company_id} · {r.title}" for r in reports
    }
    report_id = st.sidebar.selectbox(
        "Choose report", list(labels), format_func=labels.get, index=0
    )
    report = next(r for r in reports if r.id == report_id)

    st.sidebar.header("Filters")
    show_content = st.sidebar.checkbox("Show chapter text")
    show_preview = st.sidebar.checkbox("Show page previews")

    st.subheader(f"{report.title} ({report.year or '—'})")
    st.write(
        f"Status: **{report.status}** · pages: {report.total_pages or '—'} · "
        f"source: `{report.source_path}`"
    )
    if report.error:
        st.error(report.error)

    tab_ch, tab_ind, tab_goal = st.tabs(["Chapters", "Indicators", "Goals"])

    with tab_ch:
        chapters = store.find_chapters_by_report(report_id)
        if not chapters:
            st.info("No chapters for this report.")
        for c in chapters:
            end = c.end_page if c.end_page is not None else "end"
            header = f"**{c.number} {c.title}** · {c.chapter_type} · p.{c.start_page}–{end}"
            with st.expander(header, expanded=False):
                st.write(c.content_summary or "—")
                if show_content:
                    st.code(c.content[:5000])

    with tab_ind:
        rows = store.get_indicators_for_report(report_id)
        if not rows:
            st.info("No indicators for this report.")
        else:
            categories = sorted({r["category"] for r in rows})
            picked = st.multiselect("Category", categories, default=categories)
            rows = [r for r in rows if r["category"] in picked]
            st.write(f"Indicators: **{len(rows)}**")
            for r in rows:
                value = f"{r['value']} {r['unit'] or ''}" if r["value"] else "—"
                header = f"`{r['standard_code']}` **{r['name']}** — {value} · p.{r['page']}"
                with st.expander(header, expanded=False):
                    c1, c2 = st.columns([2, 3])
                    with c1:
                        st.code(r["context"] or "")
                    with c2:
                        if show_preview:
                            img = render_pdf_page(Path(report.source_path), int(r["page"]))
                            if img:
                                st.image(img, caption=f"page {r['page']}")
                            else:
                                st.info("Page preview unavailable.")

    with tab_goal:
        goals = store.get_goals_for_report(report_id)
        if not goals:
            st.info("No goals for this report.")
        else:
            st.dataframe(goals, use_container_width=True)


if __name__ == "__main__":
    main()
