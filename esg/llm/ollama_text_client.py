from __future__ import annotations

import hashlib
import json
import logging
import random
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import requests

from esg.llm.llm_text_client import LLMTextClient

logger = logging.getLogger(__name__)


def _sha1(s: str) -> str:
    return hashlib.sha1(s.encode("utf-8")).hexdigest()


@dataclass
class OllamaTextClient(LLMTextClient):
    model: str = "mistral"
    host: str = "http://127.0.0.1:11434"
    temperature: float = 0.0
    num_ctx: int = 8192
    num_predict: int = 400
    timeout_s: float = 60.0
    max_retries: int = 1
    backoff_base_s: float = 1.2
    backoff_jitter_s: float = 0.4
    enable_cache: bool = False
    cache_dir: Path = field(default_factory=lambda: Path(".cache/ollama_text"))

    def __post_init__(self):
        if self.enable_cache:
            self.cache_dir.mkdir(parents=True, exist_ok=True)

    def _cache_path(self, prompt: str, options: Dict[str, Any]) -> Path:
        key_src = json.dumps(
            {"model": self.model, "prompt": prompt, "options": options},
            ensure_ascii=False,
            sort_keys=True,
        )
        return self.cache_dir / f"{_sha1(key_src)}.txt"

    def generate_raw(
        self,
        prompt: str,
        *,
        options: Optional[Dict[str, Any]] = None,  # merged into "options"
    ) -> str:
        """
        Return Ollama's .json()['response'] (a STRING). No parsing here.
        Raise for HTTP errors; retry with simple backoff on request exceptions.
        """
        opts = {
            "temperature": self.temperature,
            "num_ctx": self.num_ctx,
            "num_predict": self.num_predict,
        }
        if options:
            opts.update(options)

        if self.enable_cache:
            p = self._cache_path(prompt, opts)
            if p.exists():
                return p.read_text(encoding="utf-8")

        payload = {
            "model": self.model,
            "prompt": prompt,
            "stream": False,
            "options": opts,
        }
        for attempt in range(self.max_retries + 1):
            try:
                r = requests.post(
                    f"{self.host}/api/generate", json=payload, timeout=self.timeout_s
                )
                r.raise_for_status()
                resp = r.json().get("response", "")
                if self.enable_cache:
                    self._cache_path(prompt, opts).write_text(resp, encoding="utf-8")
                return resp
            except requests.RequestException as e:
                if attempt >= self.max_retries:
                    raise
                sleep_s = (self.backoff_base_s**attempt) + random.uniform(
                    0, self.backoff_jitter_s
                )
                logger.warning(
                    "ollama request failed (%s), retrying in %.1fs", e, sleep_s
                )
                time.sleep(min(8.0, sleep_s))

        raise RuntimeError("Unknown failure in OllamaTextClient.generate_raw")
