# src/llm/gateway.py - v1
"""Inference gateway: send a conversation, get text back.

The pipeline core only sees the Gateway protocol. InferenceGateway adapts
a BaseLLMClient to it, turning every failure mode (timeout, transport,
malformed response) into GatewayError. No retries are attempted.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Protocol, Sequence, runtime_checkable

from codereview.core.errors import GatewayError
from codereview.llm.models import Message

if TYPE_CHECKING:
    from codereview.llm.base_client import BaseLLMClient

logger = logging.getLogger(__name__)


@runtime_checkable
class Gateway(Protocol):
    """Text-generation capability invoked once per stage per run."""

    async def generate(self, conversation: Sequence[Message]) -> str:
        """Return generated text or raise GatewayError."""
        ...


class InferenceGateway:
    """Gateway backed by a provider adapter.

    Args:
        client: Provider adapter used for every call.
        timeout_s: Per-call timeout in seconds (None = wait forever).
        max_concurrency: Upper bound on in-flight calls (None = unbounded).
        max_tokens: Completion token limit forwarded to the adapter.
        temperature: Sampling temperature forwarded to the adapter.
    """

    def __init__(
        self,
        client: BaseLLMClient,
        timeout_s: float | None = None,
        max_concurrency: int | None = None,
        max_tokens: int = 1024,
        temperature: float = 0.2,
    ) -> None:
        self._client = client
        self._timeout_s = timeout_s
        self._semaphore = (
            asyncio.Semaphore(max_concurrency) if max_concurrency else None
        )
        self._max_tokens = max_tokens
        self._temperature = temperature

    @property
    def client(self) -> BaseLLMClient:
        return self._client

    async def generate(self, conversation: Sequence[Message]) -> str:
        """Run one completion over an independent copy of the conversation.

        Raises:
            GatewayError: On timeout, transport failure or empty response.
        """
        messages = list(conversation)
        if self._semaphore is None:
            return await self._call(messages)
        async with self._semaphore:
            return await self._call(messages)

    async def _call(self, messages: list[Message]) -> str:
        call = self._client.complete(
            messages, max_tokens=self._max_tokens, temperature=self._temperature,
        )
        try:
            if self._timeout_s is not None:
                response = await asyncio.wait_for(call, timeout=self._timeout_s)
            else:
                response = await call
        except asyncio.TimeoutError as exc:
            raise GatewayError(
                f"no response from {self._client.provider_name} "
                f"within {self._timeout_s:g}s",
                kind="timeout",
            ) from exc
        except GatewayError:
            raise
        except Exception as exc:
            raise GatewayError(
                f"{type(exc).__name__}: {exc}", kind="transport",
            ) from exc

        text = getattr(response, "content", None)
        if not isinstance(text, str) or not text.strip():
            raise GatewayError(
                f"empty or malformed response from {self._client.provider_name}",
                kind="malformed",
            )

        logger.debug(
            "Gateway call complete: provider=%s, model=%s, tokens=%d/%d, %dms",
            response.provider,
            response.model,
            response.input_tokens,
            response.output_tokens,
            response.latency_ms,
        )
        return text
