from __future__ import annotations

from pathlib import Path
from typing import Literal, Optional

from pydantic import Field, computed_field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

LLMProvider = Literal["none", "mock", "ollama", "openai"]


class Settings(BaseSettings):
    """
    Central configuration for paths, heuristics and collaborators.
    Every field can be overridden with an ESG_<FIELD> environment variable.
    """

    model_config = SettingsConfigDict(
        env_prefix="ESG_",
        extra="ignore",
    )

    project_root: Path = Field(
        default_factory=lambda: Path(__file__).resolve().parents[1]
    )

    data_dir: Path = Field(default=Path("data") / "reports")
    output_dir: Path = Field(default=Path("artifacts"))

    # structure detection
    toc_scan_pages: int = Field(default=20, ge=1)
    min_toc_entries: int = Field(default=3, ge=1)
    lines_per_page: int = Field(default=50, ge=1)

    # extraction
    chars_per_page: int = Field(default=2000, ge=1)
    lexicon_path: Optional[Path] = None

    # summarization
    summary_language: str = "zh-TW"
    summary_max_length: int = Field(default=200, ge=10)
    llm_provider: LLMProvider = "none"
    llm_model: str = "mistral"

    log_level: str = "INFO"

    @field_validator("data_dir", "output_dir", "lexicon_path", mode="before")
    @classmethod
    def _coerce_path(cls, v):
        # Accept strings from env and coerce; allow Path passthrough.
        if isinstance(v, str):
            s = v.strip()
            if not s:
                return None
            return Path(s).expanduser()
        if isinstance(v, Path):
            return v.expanduser()
        return v

    @computed_field(return_type=Path)
    def db_path(self) -> Path:
        return self.output_dir / "esg.sqlite"

    def model_post_init(self, __context) -> None:
        # Resolve relative paths against project_root
        if not self.data_dir.is_absolute():
            self.data_dir = (self.project_root / self.data_dir).resolve()
        if not self.output_dir.is_absolute():
            self.output_dir = (self.project_root / self.output_dir).resolve()
        if self.lexicon_path is not None and not self.lexicon_path.is_absolute():
            self.lexicon_path = (self.project_root / self.lexicon_path).resolve()

        self.output_dir.mkdir(parents=True, exist_ok=True)


# Lazy singleton
_settings: Settings | None = None


def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
