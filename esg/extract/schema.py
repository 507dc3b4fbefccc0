from __future__ import annotations

import re
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

GOAL_STATUS_IN_PROGRESS = "進行中"
CUSTOM_STANDARD = "Custom"


class IndicatorCandidate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    standard_code: str = Field(..., description='"GRI 305-1", "SASB EM-EP-110a.1" or "Custom"')
    category: str
    name: str = Field(..., min_length=1)
    value: Optional[str] = None
    unit: Optional[str] = None
    page: int = Field(..., ge=0, description="estimated 0-based page index")
    context: str = ""

    @field_validator("name", "category")
    @classmethod
    def _strip(cls, v: str) -> str:
        return re.sub(r"\s+", " ", v).strip()

    @field_validator("value", "unit")
    @classmethod
    def _empty_to_none(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v = v.strip()
        return v or None

    @property
    def dedup_key(self) -> tuple[str, str]:
        return (self.name, self.value or "")


class GoalCandidate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    category: str
    title: str = Field(..., max_length=50)
    description: str = Field(..., min_length=1)
    target_year: Optional[int] = None
    page: int = Field(..., ge=0, description="estimated 0-based page index")
    status: str = GOAL_STATUS_IN_PROGRESS
    company_id: Optional[str] = None

    @model_validator(mode="after")
    def _title_is_prefix(self) -> "GoalCandidate":
        if not self.description.startswith(self.title):
            raise ValueError("title must be a prefix of description")
        return self

    @property
    def dedup_key(self) -> str:
        return self.description[:50]
