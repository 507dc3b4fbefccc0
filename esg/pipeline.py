"""
pipeline.py

One run per report:
  processing → ToC/heuristic chapters → per chapter (summarize, classify, persist)
  → indicators from persisted chapters → goals from full text → completed

Any unrecovered error after the run starts flips the report to `failed`
(one status write) before the error is re-raised.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

from esg.classify.classifier import ChapterClassifier
from esg.config import Settings, get_settings
from esg.db import ReportStore
from esg.errors import ReportNotFoundError
from esg.extract.goals import GoalExtractor
from esg.extract.indicators import IndicatorExtractor
from esg.ingest.chapters import ChapterSpan, ChapterSplitter
from esg.ingest.source import PageTextSource, open_source
from esg.ingest.toc import HeuristicChapterDetector, TocResolver
from esg.summarize.summarize import Summarizer, truncate_summary

logger = logging.getLogger(__name__)

SourceOpener = Callable[[Path], PageTextSource]


@dataclass
class PipelineResult:
    report_id: str
    detection_source: str
    chapters: int
    indicators: int
    goals: int


class ReportPipeline:
    """
    High-level extraction orchestrator.
    Usage:
        store = ReportStore()
        report = store.create_report(company_id="2330", title="...", source_path=pdf)
        result = ReportPipeline(store, summarizer=None).run(report.id)
    """

    def __init__(
        self,
        store: ReportStore,
        *,
        summarizer: Optional[Summarizer] = None,
        settings: Optional[Settings] = None,
        open_source_fn: SourceOpener = open_source,
        classifier: Optional[ChapterClassifier] = None,
    ):
        cfg = settings or get_settings()
        self.store = store
        self.summarizer = summarizer
        self.open_source = open_source_fn
        self.summary_language = cfg.summary_language
        self.summary_max_length = cfg.summary_max_length
        self.resolver = TocResolver(
            scan_pages=cfg.toc_scan_pages,
            min_entries=cfg.min_toc_entries,
            heuristic=HeuristicChapterDetector(lines_per_page=cfg.lines_per_page),
        )
        self.splitter = ChapterSplitter()
        self.classifier = classifier or ChapterClassifier.from_yaml(cfg.lexicon_path)
        self.indicators = IndicatorExtractor(chars_per_page=cfg.chars_per_page)
        self.goals = GoalExtractor(chars_per_page=cfg.chars_per_page)

    def summarize_chapter(self, span: ChapterSpan) -> str:
        if self.summarizer is None:
            return truncate_summary(span.content)
        try:
            return self.summarizer.summarize(
                span.content, self.summary_language, self.summary_max_length
            )
        except Exception as e:
            logger.warning(
                "summary for chapter %s %r failed (%s); truncating",
                span.number,
                span.title,
                e,
            )
            return truncate_summary(span.content)

    def run(self, report_id: str) -> PipelineResult:
        report = self.store.get_report(report_id)
        if report is None:
            raise ReportNotFoundError(report_id)

        self.store.update_report_status(report_id, "processing")
        logger.info("processing report %s (%s)", report_id, report.source_path)
        try:
            result = self._run(report_id, Path(report.source_path), report.company_id)
            self.store.update_report_status(report_id, "completed")
        except Exception as e:
            logger.exception("report %s failed", report_id)
            try:
                self.store.update_report_status(
                    report_id, "failed", error=f"{type(e).__name__}: {e}"
                )
            except Exception:
                logger.exception("could not mark report %s as failed", report_id)
            raise
        logger.info(
            "report %s completed: %d chapters, %d indicators, %d goals",
            report_id,
            result.chapters,
            result.indicators,
            result.goals,
        )
        return result

    def _run(self, report_id: str, path: Path, company_id: str) -> PipelineResult:
        source = self.open_source(path)
        try:
            self.store.update_report_pages(report_id, source.page_count())

            # 1) chapter boundaries
            detection = self.resolver.resolve(source)
            spans = self.splitter.split(detection.entries, source)
            logger.info("%d chapters via %s", len(spans), detection.source)

            # 2) chapters, strictly in page order
            for seq, span in enumerate(spans):
                self.store.create_chapter(
                    report_id,
                    seq=seq,
                    number=span.number,
                    title=span.title,
                    start_page=span.start_page,
                    end_page=span.end_page,
                    content=span.content,
                    chapter_type=self.classifier.classify(span.title, span.content),
                    content_summary=self.summarize_chapter(span),
                )

            # 3) indicators from what was persisted
            chapters = self.store.find_chapters_by_report(report_id)
            indicators = self.indicators.extract(chapters)
            for ind in indicators:
                self.store.create_indicator(report_id, ind)

            # 4) goals over the whole document
            goals = self.goals.extract(source.full_text(), company_id)
            for goal in goals:
                self.store.create_goal(report_id, goal)
        finally:
            close = getattr(source, "close", None)
            if close is not None:
                close()

        return PipelineResult(
            report_id=report_id,
            detection_source=detection.source,
            chapters=len(spans),
            indicators=len(indicators),
            goals=len(goals),
        )


def process_file(
    path: Path,
    *,
    company_id: str,
    title: Optional[str] = None,
    year: Optional[int] = None,
    store: Optional[ReportStore] = None,
    summarizer: Optional[Summarizer] = None,
    settings: Optional[Settings] = None,
) -> PipelineResult:
    """Register `path` as a new report and run the pipeline on it."""
    store = store or ReportStore()
    report = store.create_report(
        company_id=company_id, title=title or path.stem, source_path=path, year=year
    )
    return ReportPipeline(store, summarizer=summarizer, settings=settings).run(report.id)
