# src/tracking/telemetry.py - v1
"""Telemetry capability injected into the pipeline executor.

Spans are nested through a context variable and fanned out to sinks.
Stage metrics live on a per-instance prometheus CollectorRegistry, so
several Telemetry objects (one per test, say) never collide.

Lifecycle: init_telemetry() at startup, shutdown() once at exit.
"""

from __future__ import annotations

import contextvars
import logging
import time
import uuid
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Iterator, Sequence

from prometheus_client import CollectorRegistry, Counter, Histogram, generate_latest

from codereview.tracking.models import SpanRecord, SpanStatus
from codereview.tracking.sinks import JsonlSpanSink, LoggingSpanSink, MemorySpanSink, SpanSink

if TYPE_CHECKING:
    from codereview.config.settings import Settings

logger = logging.getLogger(__name__)

_current_span_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "current_span_id", default=None
)

STAGE_LATENCY_BUCKETS = (0.1, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0, 120.0, 300.0)


class SpanHandle:
    """Mutable view of an open span, yielded by Telemetry.span()."""

    def __init__(self, span_id: str, parent_span_id: str | None) -> None:
        self.span_id = span_id
        self.parent_span_id = parent_span_id
        self.status: SpanStatus = "ok"
        self.error: str | None = None
        self.attributes: dict[str, Any] = {}

    def set_status(self, status: SpanStatus, error: str | None = None) -> None:
        self.status = status
        self.error = error

    def set_attribute(self, key: str, value: Any) -> None:
        self.attributes[key] = value


class Telemetry:
    """Tracer and meter for pipeline runs.

    Args:
        sinks: Span destinations. Defaults to a single MemorySpanSink.
        registry: Prometheus registry for stage metrics.
        service_name: Stamped on every span.
    """

    def __init__(
        self,
        sinks: Sequence[SpanSink] | None = None,
        registry: CollectorRegistry | None = None,
        service_name: str = "codereview",
    ) -> None:
        self._sinks: list[SpanSink] = list(sinks) if sinks is not None else [MemorySpanSink()]
        self._registry = registry if registry is not None else CollectorRegistry()
        self._service_name = service_name
        self._closed = False

        self._stage_invocations = Counter(
            "stage_invocations_total",
            "Number of stage invocations against the inference gateway",
            labelnames=("stage",),
            registry=self._registry,
        )
        self._stage_failures = Counter(
            "stage_failures_total",
            "Number of stage invocations that failed",
            labelnames=("stage",),
            registry=self._registry,
        )
        self._stage_latency = Histogram(
            "stage_latency_seconds",
            "Latency of stage invocations",
            labelnames=("stage",),
            buckets=STAGE_LATENCY_BUCKETS,
            registry=self._registry,
        )

    @property
    def registry(self) -> CollectorRegistry:
        return self._registry

    @property
    def service_name(self) -> str:
        return self._service_name

    @property
    def sinks(self) -> list[SpanSink]:
        return list(self._sinks)

    @property
    def spans(self) -> list[SpanRecord]:
        """Spans held by attached in-memory sinks."""
        collected: list[SpanRecord] = []
        for sink in self._sinks:
            if isinstance(sink, MemorySpanSink):
                collected.extend(sink.spans)
        return collected

    @contextmanager
    def span(
        self,
        name: str,
        run_id: str,
        input_id: str = "",
        stage_name: str | None = None,
        **attributes: Any,
    ) -> Iterator[SpanHandle]:
        """Open a span nested under the current one.

        The body may set the status through the handle; an exception that
        escapes the body marks the span "error" unless a status was set.
        """
        handle = SpanHandle(uuid.uuid4().hex[:16], _current_span_id.get())
        handle.attributes.update(attributes)
        token = _current_span_id.set(handle.span_id)
        start_time = datetime.now(timezone.utc)
        t0 = time.perf_counter()
        try:
            yield handle
        except BaseException as exc:
            if handle.status == "ok":
                handle.set_status("error", f"{type(exc).__name__}: {exc}")
            raise
        finally:
            _current_span_id.reset(token)
            self._emit(
                SpanRecord(
                    span_id=handle.span_id,
                    parent_span_id=handle.parent_span_id,
                    name=name,
                    service_name=self._service_name,
                    run_id=run_id,
                    input_id=input_id,
                    stage_name=stage_name,
                    start_time=start_time,
                    duration_ms=(time.perf_counter() - t0) * 1000,
                    status=handle.status,
                    error=handle.error,
                    attributes=handle.attributes,
                )
            )

    def record_stage(self, stage: str, latency_s: float, failed: bool = False) -> None:
        """Count one stage invocation and observe its latency.

        Metrics are labeled by stage only; per-run correlation lives on the
        spans, whose ``run_id`` ties them to one run.
        """
        self._stage_invocations.labels(stage=stage).inc()
        self._stage_latency.labels(stage=stage).observe(latency_s)
        if failed:
            self._stage_failures.labels(stage=stage).inc()

    def counter_value(self, metric: str, stage: str) -> float:
        """Current value of a stage counter sample (0.0 if never touched)."""
        value = self._registry.get_sample_value(metric, {"stage": stage})
        return value or 0.0

    def render_metrics(self) -> str:
        """Prometheus text exposition of all stage metrics."""
        return generate_latest(self._registry).decode("utf-8")

    def shutdown(self) -> None:
        """Flush every sink. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        for sink in self._sinks:
            try:
                sink.flush()
            except Exception:
                logger.warning("Failed to flush span sink %r", sink, exc_info=True)

    def _emit(self, record: SpanRecord) -> None:
        for sink in self._sinks:
            try:
                sink.emit(record)
            except Exception:
                logger.warning("Span sink %r rejected span %s", sink, record.name, exc_info=True)


def init_telemetry(settings: Settings) -> Telemetry:
    """Build the process-wide Telemetry from settings.

    An in-memory sink is always attached so the CLI can aggregate stage
    statistics; console and JSON Lines sinks are opt-in.
    """
    sinks: list[SpanSink] = [MemorySpanSink()]
    if settings.telemetry_console:
        sinks.append(LoggingSpanSink())
    if settings.telemetry_spans_path is not None:
        sinks.append(JsonlSpanSink(settings.telemetry_spans_path))

    telemetry = Telemetry(sinks=sinks, service_name=settings.telemetry_service_name)
    logger.debug(
        "Telemetry initialized: service=%s, sinks=%s",
        settings.telemetry_service_name,
        [type(s).__name__ for s in sinks],
    )
    return telemetry
