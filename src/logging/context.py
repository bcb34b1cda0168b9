# src/logging/context.py - v2
"""Contextual logging support: attach run_id, input_id and stage to log records.

Context variables are per asyncio task, so items reviewed concurrently
never see each other's context.
"""

from __future__ import annotations

import contextvars
from dataclasses import dataclass
from typing import Any

_run_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "run_id", default=None
)
_input_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "input_id", default=None
)
_stage: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "stage", default=None
)
_step: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "step", default=None
)


@dataclass
class LogContext:
    """Snapshot of current logging context."""

    run_id: str | None = None
    input_id: str | None = None
    stage: str | None = None
    step: str | None = None

    def as_dict(self) -> dict[str, Any]:
        """Return non-None fields as dict for JSON log injection."""
        return {k: v for k, v in self.__dict__.items() if v is not None}


def get_context() -> LogContext:
    """Snapshot current context variables."""
    return LogContext(
        run_id=_run_id.get(),
        input_id=_input_id.get(),
        stage=_stage.get(),
        step=_step.get(),
    )


def set_run_context(run_id: str, input_id: str) -> None:
    """Set run-level context (called once per pipeline run)."""
    _run_id.set(run_id)
    _input_id.set(input_id)
    _stage.set(None)
    _step.set(None)


def set_stage_context(stage: str | None, step: str | None = None) -> None:
    """Set stage-level context (called per stage invocation)."""
    _stage.set(stage)
    _step.set(step)


def clear_context() -> None:
    """Reset all context variables."""
    _run_id.set(None)
    _input_id.set(None)
    _stage.set(None)
    _step.set(None)
