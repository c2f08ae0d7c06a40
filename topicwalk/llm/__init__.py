# llm - backend for structured relevance scoring
from .provider import OllamaProvider, LLMResponse

__all__ = [
    "OllamaProvider", "LLMResponse"
]
