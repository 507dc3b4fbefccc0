from __future__ import annotations

import hashlib
import json
import logging
import os
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

from esg.llm.llm_text_client import LLMTextClient

logger = logging.getLogger(__name__)

# Note: openai is imported lazily in _client() so the package works without it.


def _stable_json(obj: Any) -> str:
    """Deterministic JSON for hashing/caching."""
    return json.dumps(obj, ensure_ascii=False, sort_keys=True, separators=(",", ":"))


def _response_to_text(resp: Any) -> str:
    # 1) Fast path (SDK provides this on many versions)
    text = getattr(resp, "output_text", None)
    if isinstance(text, str) and text.strip():
        return text.strip()

    # 2) Fallback: walk resp.output items
    chunks: list[str] = []
    for item in getattr(resp, "output", None) or []:
        for c in getattr(item, "content", None) or []:
            if getattr(c, "type", None) in ("output_text", "text"):
                t = getattr(c, "text", None)
                if isinstance(t, str) and t:
                    chunks.append(t)
    return "".join(chunks).strip()


@dataclass
class OpenAITextClient(LLMTextClient):
    """
    Minimal text-generation client using the OpenAI Responses API.
    Requires `pip install openai` and OPENAI_API_KEY.
    """

    model: str = "gpt-4o-mini"
    temperature: float = 0.0
    max_output_tokens: int = 800
    timeout_s: float = 60.0
    max_retries: int = 2
    retry_backoff_s: float = 1.5

    enable_cache: bool = True
    cache_dir: Path = field(default_factory=lambda: Path(".cache") / "esg" / "openai")

    def _client(self):
        try:
            from openai import OpenAI  # type: ignore
        except ImportError as e:  # pragma: no cover
            raise RuntimeError(
                "OpenAI SDK not installed. Run: pip install 'esg-report-extractor[openai]'"
            ) from e

        key = os.getenv("OPENAI_API_KEY")
        if not key:
            raise RuntimeError(
                "Missing OpenAI API key. Set environment variable OPENAI_API_KEY"
            )
        return OpenAI(api_key=key, timeout=self.timeout_s)

    def _cache_path(self, payload: Dict[str, Any]) -> Path:
        h = hashlib.sha256(_stable_json(payload).encode("utf-8")).hexdigest()
        return self.cache_dir / self.model / f"{h}.txt"

    def generate_raw(
        self,
        prompt: str,
        *,
        options: Optional[Dict[str, Any]] = None,
    ) -> str:
        payload: Dict[str, Any] = {
            "model": self.model,
            "input": [{"role": "user", "content": prompt}],
            "max_output_tokens": self.max_output_tokens,
            "temperature": self.temperature,
        }
        if options:
            payload.update(options)

        if self.enable_cache:
            path = self._cache_path(payload)
            if path.exists():
                return path.read_text(encoding="utf-8")

        client = self._client()
        last_err: Optional[Exception] = None
        for attempt in range(self.max_retries + 1):
            try:
                text = _response_to_text(client.responses.create(**payload))
                if self.enable_cache:
                    path.parent.mkdir(parents=True, exist_ok=True)
                    path.write_text(text, encoding="utf-8")
                return text
            except Exception as e:  # pragma: no cover (network)
                last_err = e
                if attempt >= self.max_retries:
                    break
                logger.warning("openai request failed (%s), retrying", e)
                time.sleep(self.retry_backoff_s * (attempt + 1))

        raise RuntimeError(
            f"OpenAI request failed after retries: {last_err}"
        ) from last_err
