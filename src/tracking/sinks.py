# src/tracking/sinks.py - v2
"""Span sinks: where finished SpanRecords go.

MemorySpanSink keeps records for in-process aggregation, JsonlSpanSink
buffers them and writes JSON Lines on flush, LoggingSpanSink echoes them
through the standard logger (console exporter).
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Protocol, runtime_checkable

from codereview.tracking.models import SpanRecord

logger = logging.getLogger(__name__)


@runtime_checkable
class SpanSink(Protocol):
    """Destination for finished spans."""

    def emit(self, span: SpanRecord) -> None: ...

    def flush(self) -> None: ...


class MemorySpanSink:
    """Accumulates span records for the lifetime of the process."""

    def __init__(self) -> None:
        self._spans: list[SpanRecord] = []

    def emit(self, span: SpanRecord) -> None:
        self._spans.append(span)

    def flush(self) -> None:
        pass

    @property
    def spans(self) -> list[SpanRecord]:
        """All recorded spans, in completion order."""
        return list(self._spans)

    def for_run(self, run_id: str) -> list[SpanRecord]:
        """Spans sharing one correlation id."""
        return [s for s in self._spans if s.run_id == run_id]

    def clear(self) -> None:
        self._spans.clear()


class JsonlSpanSink:
    """Buffers spans and appends them to a JSON Lines file on flush."""

    def __init__(self, path: Path) -> None:
        self._path = Path(path).expanduser()
        self._buffer: list[SpanRecord] = []

    @property
    def path(self) -> Path:
        return self._path

    def emit(self, span: SpanRecord) -> None:
        self._buffer.append(span)

    def flush(self) -> None:
        if not self._buffer:
            return
        self._path.parent.mkdir(parents=True, exist_ok=True)
        with self._path.open("a", encoding="utf-8") as f:
            for span in self._buffer:
                f.write(json.dumps(span.model_dump(), default=str) + "\n")
        logger.debug("Flushed %d spans to %s", len(self._buffer), self._path)
        self._buffer.clear()


class LoggingSpanSink:
    """Writes one log line per finished span."""

    def __init__(self, level: int = logging.INFO) -> None:
        self._level = level

    def emit(self, span: SpanRecord) -> None:
        logger.log(
            self._level,
            "span %s run=%s stage=%s status=%s duration=%.1fms",
            span.name,
            span.run_id,
            span.stage_name or "-",
            span.status,
            span.duration_ms,
            extra={"data": span.model_dump(mode="json")},
        )

    def flush(self) -> None:
        pass
