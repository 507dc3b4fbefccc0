"""Exceptions that end (or degrade) a pipeline run."""

from __future__ import annotations


class ESGError(Exception):
    """Base class for all pipeline errors."""


class ReportNotFoundError(ESGError):
    def __init__(self, report_id: str):
        super().__init__(f"report not found: {report_id}")
        self.report_id = report_id


class SourceReadError(ESGError):
    """The underlying document bytes could not be opened or read."""


class SummarizationError(ESGError):
    """The summarization collaborator failed (timeout, quota, empty answer)."""


class PersistenceError(ESGError):
    """A store operation failed."""
