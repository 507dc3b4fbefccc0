from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Optional

import typer
from rich import print
from rich.console import Console
from rich.table import Table

# If not installed in editable mode, add repo root to PYTHONPATH
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from esg.batch import process_directory
from esg.config import get_settings
from esg.db import ReportStore, init_db
from esg.errors import ESGError
from esg.ingest.schema import export_json_schema
from esg.log import setup_logging
from esg.pipeline import ReportPipeline
from esg.summarize.summarize import create_summarizer

app = typer.Typer(add_completion=False, help="ESG report chapter & indicator extraction")
console = Console()

ProviderOpt = typer.Option(
    None, "--provider", help="Summarizer: none|mock|ollama|openai (default: ESG_LLM_PROVIDER)"
)


@app.callback()
def _main(
    log_level: str = typer.Option(None, "--log-level", help="Defaults to ESG_LOG_LEVEL"),
):
    setup_logging(log_level or get_settings().log_level)


def _store(db: Optional[Path]) -> ReportStore:
    return ReportStore(db or get_settings().db_path)


@app.command("init-db")
def init_db_cmd(db: Path = typer.Option(None, help="SQLite path; defaults to <output_dir>/esg.sqlite")):
    """Create the SQLite tables."""
    path = init_db(db or get_settings().db_path)
    print(f"[green]✓[/green] {path}")


@app.command()
def register(
    src: Path = typer.Argument(..., help="Report PDF or pre-extracted .txt"),
    company: str = typer.Option(..., "--company", help="Owning company identifier"),
    title: str = typer.Option(None, help="Report title; defaults to the file name"),
    year: int = typer.Option(None, help="Reporting year"),
    db: Path = typer.Option(None),
):
    """Register a report (status pending) and print its id."""
    if not src.is_file():
        typer.secho(f"Not a file: {src}", fg="red")
        raise typer.Exit(1)
    rec = _store(db).create_report(
        company_id=company, title=title or src.stem, source_path=src.resolve(), year=year
    )
    print(rec.id)


@app.command()
def process(
    report_id: str = typer.Argument(...),
    provider: str = ProviderOpt,
    db: Path = typer.Option(None),
):
    """Run the extraction pipeline for a registered report."""
    cfg = get_settings()
    summarizer = create_summarizer(provider or cfg.llm_provider, cfg.llm_model)
    try:
        res = ReportPipeline(_store(db), summarizer=summarizer).run(report_id)
    except ESGError as e:
        typer.secho(str(e), fg="red")
        raise typer.Exit(1)
    print(
        f"[green]✓[/green] {res.report_id}: {res.chapters} chapters ({res.detection_source}), "
        f"{res.indicators} indicators, {res.goals} goals"
    )


@app.command()
def run(
    src: Path = typer.Argument(
        None, help="Report file or directory; defaults to ESG_DATA_DIR"
    ),
    company: str = typer.Option(
        None, "--company", help="Company id for a single file; directories use the file-name prefix"
    ),
    provider: str = ProviderOpt,
    limit: int = typer.Option(None, help="Process at most N files of a directory"),
    db: Path = typer.Option(None),
):
    """Register + process a file, or every .pdf/.txt under a directory."""
    cfg = get_settings()
    effective_src = src or cfg.data_dir
    store = _store(db)
    summarizer = create_summarizer(provider or cfg.llm_provider, cfg.llm_model)

    if effective_src.is_dir():
        results, failed = process_directory(
            effective_src, store=store, summarizer=summarizer, limit=limit
        )
        print(f"{len(results)} processed, {failed} failed")
        if failed:
            raise typer.Exit(1)
        return

    if not effective_src.is_file():
        typer.secho(f"No reports found at {effective_src}", fg="red")
        raise typer.Exit(1)
    rec = store.create_report(
        company_id=company or effective_src.stem,
        title=effective_src.stem,
        source_path=effective_src.resolve(),
    )
    try:
        res = ReportPipeline(store, summarizer=summarizer).run(rec.id)
    except ESGError as e:
        typer.secho(str(e), fg="red")
        raise typer.Exit(1)
    print(
        f"[green]✓[/green] {effective_src.name} → {res.report_id}: {res.chapters} chapters, "
        f"{res.indicators} indicators, {res.goals} goals"
    )


@app.command()
def show(
    report_id: str = typer.Argument(None, help="Omit to list all reports"),
    db: Path = typer.Option(None),
):
    """Print reports, or one report's chapters, indicators and goals."""
    store = _store(db)
    if report_id is None:
        table = Table("id", "company", "title", "year", "status", "pages")
        for r in store.list_reports():
            table.add_row(r.id, r.company_id, r.title, str(r.year or ""), r.status, str(r.total_pages or ""))
        console.print(table)
        return

    report = store.get_report(report_id)
    if report is None:
        typer.secho(f"report not found: {report_id}", fg="red")
        raise typer.Exit(1)
    print(f"[bold]{report.title}[/bold] ({report.company_id}) — {report.status}")
    if report.error:
        print(f"[red]{report.error}[/red]")

    chapters = Table("#", "title", "type", "pages", "summary", title="Chapters")
    for c in store.find_chapters_by_report(report_id):
        pages = f"{c.start_page}–{c.end_page if c.end_page is not None else 'end'}"
        chapters.add_row(c.number, c.title, c.chapter_type, pages, c.content_summary[:80])
    console.print(chapters)

    indicators = Table("code", "category", "name", "value", "unit", "page", title="Indicators")
    for i in store.get_indicators_for_report(report_id):
        indicators.add_row(
            i["standard_code"], i["category"], i["name"], i["value"] or "", i["unit"] or "", str(i["page"])
        )
    console.print(indicators)

    goals = Table("category", "year", "description", "page", "status", title="Goals")
    for g in store.get_goals_for_report(report_id):
        goals.add_row(
            g["category"], str(g["target_year"] or ""), g["description"], str(g["page"]), g["status"]
        )
    console.print(goals)


@app.command("export-schema")
def export_schema(
    out: Path = typer.Option(None, help="Write JSON here instead of stdout"),
):
    """Export JSON Schemas of the persisted records."""
    text = json.dumps(export_json_schema(), indent=2, ensure_ascii=False)
    if out:
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_text(text, encoding="utf-8")
        print(f"[green]✓[/green] wrote {out}")
    else:
        console.print_json(text)


if __name__ == "__main__":
    app()
