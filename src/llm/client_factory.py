# src/llm/client_factory.py - v3
"""Factory: instantiate LLM client from provider name.

The provider and model come from the CLI or settings and are forwarded
opaquely; only the adapter registry knows what they mean.
"""

from __future__ import annotations

import importlib
import logging

from codereview.config.settings import Settings
from codereview.core.errors import ConfigurationError
from codereview.llm.base_client import BaseLLMClient

logger = logging.getLogger(__name__)

# Registry of provider name -> adapter class path (lazy import).
_PROVIDER_REGISTRY: dict[str, str] = {
    "ollama": "codereview.llm.adapters.ollama_adapter.OllamaAdapter",
    "openai": "codereview.llm.adapters.openai_adapter.OpenAIAdapter",
}


class UnsupportedProviderError(ConfigurationError):
    """Raised when a provider is not registered."""


def available_providers() -> list[str]:
    """Registered provider names, sorted."""
    return sorted(_PROVIDER_REGISTRY)


def create_llm_client(
    provider: str,
    model: str,
    settings: Settings | None = None,
    **kwargs: object,
) -> BaseLLMClient:
    """Instantiate the correct adapter from provider name.

    Args:
        provider: Provider identifier (ollama, openai), case-insensitive.
        model: Model name (e.g. llama3.2).
        settings: Application settings (endpoints and API keys).
        **kwargs: Additional provider-specific arguments.

    Returns:
        Configured BaseLLMClient instance.

    Raises:
        UnsupportedProviderError: If provider is not registered.
    """
    key = provider.strip().lower()
    if key not in _PROVIDER_REGISTRY:
        raise UnsupportedProviderError(
            f"Unknown provider: {provider!r}. "
            f"Available: {', '.join(available_providers())}"
        )

    adapter_cls = _import_class(_PROVIDER_REGISTRY[key])

    init_kwargs = dict(kwargs)
    init_kwargs["model"] = model

    if settings is not None:
        if key == "ollama":
            init_kwargs.setdefault("host", settings.ollama_base_url)
        elif key == "openai":
            init_kwargs.setdefault("api_key", settings.openai_api_key)
            init_kwargs.setdefault("base_url", settings.openai_base_url or None)

    logger.debug("Creating LLM client: provider=%s, model=%s", key, model)
    return adapter_cls(**init_kwargs)


def register_provider(name: str, class_path: str) -> None:
    """Register a custom provider adapter.

    Args:
        name: Provider identifier.
        class_path: Fully qualified class path implementing BaseLLMClient.
    """
    _PROVIDER_REGISTRY[name.strip().lower()] = class_path
    logger.info("Registered LLM provider: %s -> %s", name, class_path)


def _import_class(class_path: str) -> type:
    """Dynamically import a class from its fully qualified path."""
    module_path, class_name = class_path.rsplit(".", 1)
    module = importlib.import_module(module_path)
    return getattr(module, class_name)
