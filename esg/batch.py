from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, List, Optional, Tuple

from rich import print
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    TextColumn,
    TimeElapsedColumn,
)

from esg.config import Settings
from esg.db import ReportStore
from esg.pipeline import PipelineResult, process_file
from esg.summarize.summarize import Summarizer

logger = logging.getLogger(__name__)

REPORT_SUFFIXES = (".pdf", ".txt")


def iter_reports(root: Path) -> Iterable[Path]:
    return sorted(p for p in root.glob("**/*") if p.suffix.lower() in REPORT_SUFFIXES)


def company_from_stem(stem: str) -> str:
    """'2330_2023_esg' -> '2330'; files without an underscore use the whole stem."""
    return stem.split("_", 1)[0] or stem


def process_directory(
    src_dir: Path,
    *,
    store: ReportStore,
    summarizer: Optional[Summarizer] = None,
    settings: Optional[Settings] = None,
    limit: Optional[int] = None,
    show_progress: bool = True,
) -> Tuple[List[PipelineResult], int]:
    """
    Register and process every report under src_dir. A failing document is
    reported and skipped; its status is already `failed` in the store.
    Returns (results, n_failed).
    """
    files = list(iter_reports(src_dir))
    if limit is not None and limit >= 0:
        files = files[:limit]

    results: List[PipelineResult] = []
    failed = 0

    def process(path: Path) -> None:
        nonlocal failed
        try:
            res = process_file(
                path,
                company_id=company_from_stem(path.stem),
                store=store,
                summarizer=summarizer,
                settings=settings,
            )
        except Exception as e:  # status is already `failed` in the store
            failed += 1
            print(f"[red]✗[/red] {path.name}: {e}")
            return
        results.append(res)
        print(
            f"[green]✓[/green] {path.name} → {res.chapters} chapters, "
            f"{res.indicators} indicators, {res.goals} goals"
        )

    if show_progress:
        with Progress(
            TextColumn("[bold]Process[/bold]"),
            BarColumn(),
            MofNCompleteColumn(),
            TimeElapsedColumn(),
            transient=False,
        ) as progress:
            task = progress.add_task("reports", total=len(files))
            for path in files:
                process(path)
                progress.update(task, advance=1)
    else:
        for path in files:
            process(path)

    logger.info("batch done: %d processed, %d failed", len(results), failed)
    return results, failed
