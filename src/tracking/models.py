# src/tracking/models.py - v2
"""Tracking domain models: SpanRecord, StageStats."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, Field

SpanStatus = Literal["ok", "error", "cancelled"]


class SpanRecord(BaseModel):
    """One finished span: a whole run, or one stage nested inside it."""

    span_id: str
    parent_span_id: str | None = None
    name: str
    service_name: str = ""
    run_id: str
    input_id: str = ""
    stage_name: str | None = None
    start_time: datetime
    duration_ms: float
    status: SpanStatus = "ok"
    error: str | None = None
    attributes: dict[str, Any] = Field(default_factory=dict)


class StageStats(BaseModel):
    """Per-stage aggregate over a set of stage spans."""

    stage: str
    invocations: int
    failures: int = 0
    avg_latency_ms: float
    max_latency_ms: float
    total_latency_ms: float

    @property
    def failure_rate(self) -> float:
        return self.failures / self.invocations if self.invocations else 0.0
