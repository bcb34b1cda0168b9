# tests/unit/llm/test_client_factory.py - v1
"""Tests for llm/client_factory.py: provider registry and adapter creation."""

from __future__ import annotations

import pytest

from codereview.config.settings import Settings
from codereview.core.errors import ConfigurationError
from codereview.llm import client_factory
from codereview.llm.adapters.ollama_adapter import OllamaAdapter
from codereview.llm.adapters.openai_adapter import OpenAIAdapter
from codereview.llm.client_factory import (
    UnsupportedProviderError,
    available_providers,
    create_llm_client,
    register_provider,
)


class TestCreateLLMClient:
    def test_ollama(self):
        client = create_llm_client("ollama", "llama3.2")
        assert isinstance(client, OllamaAdapter)
        assert client.provider_name == "ollama"
        assert client.model_name == "llama3.2"

    def test_openai(self):
        client = create_llm_client("openai", "gpt-4o-mini")
        assert isinstance(client, OpenAIAdapter)
        assert client.model_name == "gpt-4o-mini"

    def test_case_insensitive(self):
        assert isinstance(create_llm_client(" Ollama ", "m"), OllamaAdapter)

    def test_unknown_provider(self):
        with pytest.raises(UnsupportedProviderError, match="Unknown provider"):
            create_llm_client("azure-magic", "m")

    def test_unsupported_is_configuration_error(self):
        with pytest.raises(ConfigurationError):
            create_llm_client("nope", "m")

    def test_settings_endpoints(self):
        settings = Settings(
            _env_file=None,
            ollama_base_url="http://gpu-box:11434",
            openai_api_key="sk-test",
            openai_base_url="http://localhost:8000/v1",
        )
        ollama = create_llm_client("ollama", "m", settings)
        assert ollama._host == "http://gpu-box:11434"
        openai = create_llm_client("openai", "m", settings)
        assert openai._api_key == "sk-test"
        assert openai._base_url == "http://localhost:8000/v1"

    def test_kwargs_override_settings(self):
        settings = Settings(_env_file=None, ollama_base_url="http://a:1")
        client = create_llm_client("ollama", "m", settings, host="http://b:2")
        assert client._host == "http://b:2"


class TestRegistry:
    def test_available_providers(self):
        assert available_providers() == ["ollama", "openai"]

    def test_register_provider(self, monkeypatch):
        monkeypatch.setattr(client_factory, "_PROVIDER_REGISTRY", dict(client_factory._PROVIDER_REGISTRY))
        register_provider(
            "Local", "codereview.llm.adapters.ollama_adapter.OllamaAdapter",
        )
        assert "local" in available_providers()
        assert isinstance(create_llm_client("local", "m"), OllamaAdapter)
