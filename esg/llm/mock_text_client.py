import re
from dataclasses import dataclass
from typing import Any, Dict, Optional

from esg.llm.llm_text_client import LLMTextClient

_BLOCK_RE = re.compile(r"--- BEGIN CHAPTER TEXT ---\n(.*?)\n--- END CHAPTER TEXT ---", re.S)
_SENTENCE_RE = re.compile(r"[^。！？!?\n]+[。！？!?]?")


@dataclass
class MockTextClient(LLMTextClient):
    """
    Deterministic offline client.
    With `reply` set it always answers that; otherwise it echoes the first
    sentence of the chapter text embedded in the prompt.
    """

    reply: Optional[str] = None

    def generate_raw(
        self,
        prompt: str,
        *,
        options: Optional[Dict[str, Any]] = None,
    ) -> str:
        if self.reply is not None:
            return self.reply
        m = _BLOCK_RE.search(prompt)
        body = m.group(1) if m else prompt
        first = _SENTENCE_RE.search(body.strip())
        return first.group(0).strip() if first else ""
