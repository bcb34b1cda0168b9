# tests/unit/llm/test_adapters.py - v1
"""Tests for llm/adapters: Ollama and OpenAI adapters over mocked SDK clients."""

from __future__ import annotations

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from codereview.llm.adapters.ollama_adapter import OllamaAdapter
from codereview.llm.adapters.openai_adapter import OpenAIAdapter
from codereview.llm.base_client import BaseLLMClient
from codereview.llm.models import Message

MESSAGES = [
    Message(role="user", content="Review a.cs"),
    Message(role="system", content="Security expert."),
    Message(role="assistant", content="No issues."),
    Message(role="system", content="Summarize."),
]


class TestOllamaAdapter:
    def test_is_client(self):
        adapter = OllamaAdapter()
        assert isinstance(adapter, BaseLLMClient)
        assert adapter.provider_name == "ollama"
        assert adapter.model_name == "llama3.2"

    @pytest.mark.asyncio
    async def test_complete(self):
        adapter = OllamaAdapter(model="codellama")
        sdk = MagicMock()
        sdk.chat = AsyncMock(return_value={
            "message": {"role": "assistant", "content": "SEVERITY: HIGH"},
            "prompt_eval_count": 120,
            "eval_count": 30,
        })
        adapter._client = sdk

        resp = await adapter.complete(MESSAGES, max_tokens=200, temperature=0.1)

        assert resp.content == "SEVERITY: HIGH"
        assert resp.input_tokens == 120
        assert resp.output_tokens == 30
        assert resp.provider == "ollama"
        assert resp.model == "codellama"
        kwargs = sdk.chat.await_args.kwargs
        assert kwargs["model"] == "codellama"
        assert [m["role"] for m in kwargs["messages"]] == [
            "user", "system", "assistant", "system",
        ]
        assert kwargs["options"] == {"num_predict": 200, "temperature": 0.1}

    @pytest.mark.asyncio
    async def test_missing_token_counts(self):
        adapter = OllamaAdapter()
        adapter._client = MagicMock(chat=AsyncMock(return_value={"message": {"content": "ok"}}))
        resp = await adapter.complete(MESSAGES)
        assert resp.input_tokens == 0
        assert resp.output_tokens == 0

    def test_client_created_lazily(self):
        with patch("ollama.AsyncClient") as client_cls:
            adapter = OllamaAdapter(host="http://gpu-box:11434")
            client_cls.assert_not_called()
            first = adapter._get_client()
            assert adapter._get_client() is first
        client_cls.assert_called_once_with(host="http://gpu-box:11434")


class TestOpenAIAdapter:
    def test_is_client(self):
        adapter = OpenAIAdapter(model="gpt-4o")
        assert adapter.provider_name == "openai"
        assert adapter.model_name == "gpt-4o"

    @pytest.mark.asyncio
    async def test_complete(self):
        adapter = OpenAIAdapter(model="gpt-4o-mini", api_key="sk-test")
        completion = SimpleNamespace(
            choices=[SimpleNamespace(message=SimpleNamespace(content="Looks fine."))],
            usage=SimpleNamespace(prompt_tokens=80, completion_tokens=12),
        )
        sdk = MagicMock()
        sdk.chat.completions.create = AsyncMock(return_value=completion)
        adapter._client = sdk

        resp = await adapter.complete(MESSAGES, max_tokens=64, temperature=0.0)

        assert resp.content == "Looks fine."
        assert resp.input_tokens == 80
        assert resp.output_tokens == 12
        kwargs = sdk.chat.completions.create.await_args.kwargs
        assert kwargs["max_tokens"] == 64
        assert kwargs["messages"][1] == {"role": "system", "content": "Security expert."}

    @pytest.mark.asyncio
    async def test_null_content_and_usage(self):
        adapter = OpenAIAdapter()
        completion = SimpleNamespace(
            choices=[SimpleNamespace(message=SimpleNamespace(content=None))],
            usage=None,
        )
        sdk = MagicMock()
        sdk.chat.completions.create = AsyncMock(return_value=completion)
        adapter._client = sdk
        resp = await adapter.complete(MESSAGES)
        assert resp.content == ""
        assert resp.input_tokens == 0

    def test_client_created_lazily(self):
        with patch("openai.AsyncOpenAI") as client_cls:
            adapter = OpenAIAdapter(api_key="sk-test", base_url="http://localhost:8000/v1")
            adapter._get_client()
        client_cls.assert_called_once_with(
            api_key="sk-test", base_url="http://localhost:8000/v1",
        )
