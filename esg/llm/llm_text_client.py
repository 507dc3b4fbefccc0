from typing import Any, Dict, Optional  # ---------- text-generation interface ----------


class LLMTextClient:
    """
    Interface: implement .generate_raw(prompt) -> str (plain text, no parsing).
    Transport errors are raised as-is; the summarizer turns them into
    SummarizationError and the pipeline degrades to a truncated summary.
    """

    def generate_raw(
        self,
        prompt: str,
        *,
        options: Optional[Dict[str, Any]] = None,
    ) -> str:
        raise NotImplementedError
