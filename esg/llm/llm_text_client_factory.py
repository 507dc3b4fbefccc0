from typing import Any, Dict, Type

from esg.llm.llm_text_client import LLMTextClient
from esg.llm.mock_text_client import MockTextClient
from esg.llm.ollama_text_client import OllamaTextClient
from esg.llm.openai_text_client import OpenAITextClient

PROVIDERS: Dict[str, Type[LLMTextClient]] = {
    "ollama": OllamaTextClient,
    "openai": OpenAITextClient,
    "mock": MockTextClient,
}


def create_llm_text_client(provider: str, **kwargs: Any) -> LLMTextClient:
    """kwargs go to the client dataclass (model, host, timeout_s, ...)."""
    try:
        cls = PROVIDERS[provider]
    except KeyError:
        raise ValueError(
            f"Unknown LLM provider: {provider}. Use one of {', '.join(PROVIDERS)}."
        ) from None
    return cls(**kwargs)
