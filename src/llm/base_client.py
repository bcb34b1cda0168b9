# src/llm/base_client.py - v2
"""Abstract LLM client interface implemented by the provider adapters."""

from __future__ import annotations

from abc import ABC, abstractmethod

from codereview.llm.models import LLMResponse, Message


class BaseLLMClient(ABC):
    """Unified interface for all LLM providers.

    ``messages`` is the full conversation. System messages may appear at
    any position, since each pipeline stage contributes its own
    instructions to the running conversation.
    """

    @abstractmethod
    async def complete(
        self,
        messages: list[Message],
        max_tokens: int = 1024,
        temperature: float = 0.2,
    ) -> LLMResponse:
        """Chat completion over the given conversation."""

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Provider identifier (ollama, openai)."""

    @property
    @abstractmethod
    def model_name(self) -> str:
        """Model served by this client."""
