from __future__ import annotations

import logging
from typing import List, Optional, Protocol

from esg.errors import SummarizationError
from esg.llm.llm_text_client import LLMTextClient
from esg.llm.llm_text_client_factory import create_llm_text_client
from esg.utils.textnorm import normalize_hyphenation

logger = logging.getLogger(__name__)

FALLBACK_CHARS = 100
ELLIPSIS = "..."


class Summarizer(Protocol):
    def summarize(self, text: str, target_language: str, max_length: int) -> str: ...


def truncate_summary(text: str, limit: int = FALLBACK_CHARS) -> str:
    """Local fallback when no summary service answers: first N chars + ellipsis."""
    return (text or "")[:limit] + ELLIPSIS


def _chunk_text(s: str, max_chars: int = 12000, overlap: int = 800) -> List[str]:
    """
    Simple character-based chunking (LLM-agnostic). Keeps overlaps so we don't lose context
    around boundaries.
    """
    s = s.strip()
    if len(s) <= max_chars:
        return [s]
    chunks = []
    i = 0
    while i < len(s):
        j = min(len(s), i + max_chars)
        chunks.append(s[i:j])
        if j == len(s):
            break
        i = max(0, j - overlap)
    return chunks


def _chapter_prompt(chunk: str, target_language: str, max_length: int) -> str:
    return (
        "You summarize chapters of corporate sustainability (ESG) reports for analysts.\n"
        f"Write the summary in {target_language}, at most {max_length} characters.\n"
        "Keep material figures with their units and any stated targets or years; "
        "do not invent numbers. Avoid marketing language and boilerplate.\n"
        "If the input is empty or not informative, respond with an empty line.\n"
        "\n--- BEGIN CHAPTER TEXT ---\n"
        f"{chunk}\n"
        "--- END CHAPTER TEXT ---\n"
    )


def _synthesis_prompt(partials: List[str], target_language: str, max_length: int) -> str:
    joined = "\n\n---\n\n".join(partials)
    return (
        "You are given multiple partial summaries of the same report chapter. "
        f"Merge them into one summary in {target_language}, at most {max_length} "
        "characters, removing duplication and keeping the most precise numbers. "
        "Do not add information not present in the partial summaries.\n\n"
        "Partial summaries:\n"
        f"{joined}"
    )


class LLMSummarizer:
    """Chunk → summarize each chunk → synthesize (if needed) → cut to max_length."""

    def __init__(
        self,
        llm: LLMTextClient,
        max_chars_per_chunk: int = 12000,
        overlap: int = 800,
    ):
        self.llm = llm
        self.max_chars_per_chunk = max_chars_per_chunk
        self.overlap = overlap

    def _generate(self, prompt: str) -> str:
        try:
            out = self.llm.generate_raw(prompt)
        except Exception as e:
            raise SummarizationError(f"{type(e).__name__}: {e}") from e
        return (out or "").strip()

    def summarize(self, text: str, target_language: str, max_length: int) -> str:
        text = normalize_hyphenation(text or "")
        if not text.strip():
            raise SummarizationError("nothing to summarize")

        chunks = _chunk_text(text, max_chars=self.max_chars_per_chunk, overlap=self.overlap)
        logger.debug("summarizing %d chars in %d chunk(s)", len(text), len(chunks))
        partials = [
            self._generate(_chapter_prompt(ch, target_language, max_length))
            for ch in chunks
        ]
        partials = [p for p in partials if p]
        if not partials:
            raise SummarizationError("empty response")

        if len(partials) == 1:
            final = partials[0]
        else:
            final = self._generate(
                _synthesis_prompt(partials, target_language, max_length)
            ) or "\n".join(partials)
        return final[:max_length]


def create_summarizer(provider: str, model: Optional[str] = None) -> Optional[LLMSummarizer]:
    """provider='none' disables summarization (callers fall back to truncation)."""
    if provider == "none":
        return None
    kwargs = {"model": model} if model and provider in ("ollama", "openai") else {}
    return LLMSummarizer(create_llm_text_client(provider, **kwargs))
