# src/llm/adapters/ollama_adapter.py - v2
"""Ollama local LLM adapter implementing BaseLLMClient.

Uses the ollama Python SDK. The async client is created on first use and
reused for every call.
"""

from __future__ import annotations

import time
from typing import Any

from codereview.llm.base_client import BaseLLMClient
from codereview.llm.models import LLMResponse, Message

DEFAULT_OLLAMA_HOST = "http://localhost:11434"


class OllamaAdapter(BaseLLMClient):
    """Ollama local inference adapter."""

    def __init__(
        self, model: str = "llama3.2", host: str = DEFAULT_OLLAMA_HOST, **kwargs: Any,
    ):
        self._model = model
        self._host = host
        self._client: Any = None

    def _get_client(self) -> Any:
        if self._client is None:
            import ollama

            self._client = ollama.AsyncClient(host=self._host)
        return self._client

    async def complete(
        self,
        messages: list[Message],
        max_tokens: int = 1024,
        temperature: float = 0.2,
    ) -> LLMResponse:
        client = self._get_client()
        msgs = [{"role": m.role, "content": m.content} for m in messages]
        options: dict[str, Any] = {
            "num_predict": max_tokens,
            "temperature": temperature,
        }

        t0 = time.monotonic()
        resp = await client.chat(model=self._model, messages=msgs, options=options)
        latency = int((time.monotonic() - t0) * 1000)

        return LLMResponse(
            content=resp["message"]["content"],
            input_tokens=resp.get("prompt_eval_count") or 0,
            output_tokens=resp.get("eval_count") or 0,
            model=self._model,
            provider="ollama",
            latency_ms=latency,
            raw_response=resp,
        )

    @property
    def provider_name(self) -> str:
        return "ollama"

    @property
    def model_name(self) -> str:
        return self._model
