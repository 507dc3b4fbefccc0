from __future__ import annotations

import re
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

# -----------------------------
# Type aliases
# -----------------------------
ReportStatus = Literal["pending", "processing", "completed", "failed"]
ChapterType = Literal["E", "S", "G", "General"]

# -----------------------------
# Core schema
# -----------------------------


class ReportRecord(BaseModel):
    model_config = ConfigDict(extra="forbid")

    id: str = Field(..., min_length=1)
    company_id: str = Field(..., min_length=1, max_length=200)
    title: str = Field(..., min_length=1, max_length=300)
    year: Optional[int] = Field(None, ge=1900, le=2100)
    source_path: str
    status: ReportStatus = "pending"
    total_pages: Optional[int] = Field(None, ge=0)
    error: Optional[str] = None


class ChapterRecord(BaseModel):
    model_config = ConfigDict(extra="forbid")

    id: str = Field(..., min_length=1)
    report_id: str = Field(..., min_length=1)
    number: str
    title: str = Field(..., min_length=1, max_length=300)
    # 0-based inclusive page indices
    start_page: int = Field(..., ge=0)
    end_page: Optional[int] = Field(
        None, ge=0, description="None = chapter runs to the end of the document"
    )
    content: str = ""
    chapter_type: ChapterType = "General"
    content_summary: str = ""

    @field_validator("title")
    @classmethod
    def _strip_title(cls, v: str) -> str:
        v = re.sub(r"\s+", " ", (v or "")).strip()
        if not v:
            raise ValueError("empty title")
        return v

    @model_validator(mode="after")
    def _page_order(self) -> "ChapterRecord":
        if self.end_page is not None and self.start_page > self.end_page:
            raise ValueError("start_page must be ≤ end_page")
        return self


# -----------------------------
# JSON Schema export
# -----------------------------
def export_json_schema() -> dict:
    """Export the JSON Schemas for every persisted record (Pydantic v2)."""
    from esg.extract.schema import GoalCandidate, IndicatorCandidate

    return {
        "report": ReportRecord.model_json_schema(),
        "chapter": ChapterRecord.model_json_schema(),
        "indicator": IndicatorCandidate.model_json_schema(),
        "goal": GoalCandidate.model_json_schema(),
    }
