"""
llm provider - async ollama backend for structured scoring.

usage:
    provider = OllamaProvider(model="qwen3-coder:latest")
    models = await provider.list_models()
    data = await provider.chat_json(prompt, schema=SCHEMA)
    await provider.close()
"""

import json
import logging
import time
from dataclasses import dataclass
from typing import Optional, Dict, Any, List

import httpx

from ..core.config import DEFAULT_MODEL, DEFAULT_OLLAMA_URL

logger = logging.getLogger("topicwalk.llm.provider")


@dataclass
class LLMResponse:
    """response from LLM."""
    text: str
    model: str
    tokens_used: int = 0
    duration_ms: float = 0.0
    raw: Optional[Dict[str, Any]] = None


class OllamaProvider:
    """
    ollama local LLM provider.

    transport errors propagate as httpx exceptions; callers decide
    whether they are fatal (initialize) or recoverable (scoring).
    """

    def __init__(
        self,
        model: str = DEFAULT_MODEL,
        base_url: str = DEFAULT_OLLAMA_URL,
        timeout: float = 60.0,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def client(self) -> httpx.AsyncClient:
        """lazy client initialization."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self._transport
            )
        return self._client

    @property
    def name(self) -> str:
        return f"ollama:{self.model}"

    async def list_models(self) -> List[str]:
        """names of installed models. raises on transport failure or a malformed reply."""
        resp = await self.client.get("/api/tags")
        resp.raise_for_status()
        data = resp.json()
        if not isinstance(data, dict) or not isinstance(data.get("models", []), list):
            raise ValueError(f"unexpected /api/tags payload: {str(data)[:200]}")
        return [m.get("name", "") for m in data.get("models", []) if isinstance(m, dict)]

    async def has_model(self, model: Optional[str] = None) -> bool:
        """true if model (or model:tag) is installed."""
        model = model or self.model
        names = await self.list_models()
        return any(n == model or n.startswith(f"{model}:") for n in names)

    async def chat(
        self,
        prompt: str,
        format: Any = None,
        temperature: float = 0.1,
        timeout: Optional[float] = None
    ) -> LLMResponse:
        """single-turn chat. format is "json" or a json schema dict."""
        start = time.time()

        payload: Dict[str, Any] = {
            "model": self.model,
            "messages": [{"role": "user", "content": prompt}],
            "stream": False,
            "options": {"temperature": temperature}
        }
        if format is not None:
            payload["format"] = format

        resp = await self.client.post(
            "/api/chat",
            json=payload,
            timeout=timeout if timeout is not None else self.timeout
        )
        resp.raise_for_status()

        data = resp.json()
        duration = (time.time() - start) * 1000
        text = (data.get("message") or {}).get("content", "")

        logger.debug(f"{self.name} replied in {duration:.0f}ms ({len(text)} chars)")

        return LLMResponse(
            text=text,
            model=self.model,
            tokens_used=data.get("eval_count", 0),
            duration_ms=duration,
            raw=data
        )

    async def chat_json(
        self,
        prompt: str,
        schema: Optional[Dict[str, Any]] = None,
        temperature: float = 0.1,
        timeout: Optional[float] = None
    ) -> Any:
        """chat constrained to json and parse the reply. raises on bad json."""
        response = await self.chat(
            prompt,
            format=schema if schema is not None else "json",
            temperature=temperature,
            timeout=timeout
        )

        # handle markdown code blocks
        text = response.text.strip()
        if text.startswith("```json"):
            text = text[7:]
        if text.startswith("```"):
            text = text[3:]
        if text.endswith("```"):
            text = text[:-3]

        return json.loads(text.strip())

    async def close(self):
        """close the client."""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
        self._client = None
