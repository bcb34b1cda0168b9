# tests/conftest.py - v2
"""Shared test fixtures for all unit tests.

Provides a deterministic fake gateway, small pipelines, an in-memory
telemetry instance and mock LLM clients. No network access: every
inference call is faked.
"""

from __future__ import annotations

from typing import Callable, Sequence
from unittest.mock import AsyncMock

import pytest

from codereview.core.errors import GatewayError
from codereview.llm.models import LLMResponse, Message
from codereview.logging.context import clear_context
from codereview.pipeline.executor import PipelineExecutor
from codereview.pipeline.pipeline import Pipeline, PipelineBuilder
from codereview.tracking.sinks import MemorySpanSink
from codereview.tracking.telemetry import Telemetry


class FakeGateway:
    """Deterministic gateway: the reply is a pure function of the conversation.

    The reply names the stage (last system message's first line) and the
    conversation length. ``fail_at_stage`` (1-based) or ``fail_when`` turn
    a call into a GatewayError instead.
    """

    def __init__(
        self,
        fail_at_stage: int | None = None,
        fail_when: Callable[[Sequence[Message]], bool] | None = None,
    ) -> None:
        self.calls: list[tuple[Message, ...]] = []
        self._fail_at_stage = fail_at_stage
        self._fail_when = fail_when

    async def generate(self, conversation: Sequence[Message]) -> str:
        snapshot = tuple(conversation)
        self.calls.append(snapshot)
        system = [m for m in snapshot if m.role == "system"]
        if len(system) == self._fail_at_stage or (
            self._fail_when is not None and self._fail_when(snapshot)
        ):
            raise GatewayError("backend unavailable", kind="transport")
        label = system[-1].content.splitlines()[0] if system else "none"
        return f"{label} -> {len(snapshot)} messages"


# === FIXTURES: Pipelines ===


@pytest.fixture
def three_stage_pipeline() -> Pipeline:
    """Security -> quality -> summary."""
    return (
        PipelineBuilder()
        .add_stage("security", "Check security.")
        .add_stage("quality", "Check quality.")
        .add_stage("summary", "Summarize findings.")
        .build()
    )


# === FIXTURES: Gateway, telemetry, executor ===


@pytest.fixture
def fake_gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture
def make_gateway() -> type[FakeGateway]:
    """The FakeGateway class, for tests that need failure injection."""
    return FakeGateway


@pytest.fixture
def span_sink() -> MemorySpanSink:
    return MemorySpanSink()


@pytest.fixture
def telemetry(span_sink: MemorySpanSink) -> Telemetry:
    """Telemetry on a private registry, spans kept in memory."""
    return Telemetry(sinks=[span_sink], service_name="test")


@pytest.fixture
def executor(
    three_stage_pipeline: Pipeline, fake_gateway: FakeGateway, telemetry: Telemetry,
) -> PipelineExecutor:
    return PipelineExecutor(three_stage_pipeline, fake_gateway, telemetry=telemetry)


# === FIXTURES: Mock LLM ===


@pytest.fixture
def mock_llm_response() -> LLMResponse:
    """Standard mock LLM response."""
    return LLMResponse(
        content="SEVERITY: LOW",
        input_tokens=100,
        output_tokens=50,
        model="llama3.2",
        provider="ollama",
        latency_ms=500,
    )


@pytest.fixture
def mock_llm_client(mock_llm_response: LLMResponse) -> AsyncMock:
    """Mock BaseLLMClient with default response."""
    client = AsyncMock()
    client.complete = AsyncMock(return_value=mock_llm_response)
    client.provider_name = "mock"
    client.model_name = "mock-model"
    return client


@pytest.fixture(autouse=True)
def _reset_log_context():
    clear_context()
    yield
    clear_context()
