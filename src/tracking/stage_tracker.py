# src/tracking/stage_tracker.py - v2
"""Per-stage aggregation of stage spans.

Groups "pipeline.stage" spans by stage name into StageStats, so the
telemetry stream alone is enough to report latency and failures per stage.
"""

from __future__ import annotations

from collections import defaultdict
from typing import Iterable

from codereview.tracking.models import SpanRecord, StageStats

STAGE_SPAN_NAME = "pipeline.stage"


def aggregate_by_stage(spans: Iterable[SpanRecord]) -> dict[str, StageStats]:
    """Aggregate stage spans into per-stage statistics.

    Args:
        spans: Any span records; non-stage spans are ignored.

    Returns:
        Dict mapping stage name to StageStats, in first-seen order.
    """
    grouped: dict[str, list[SpanRecord]] = defaultdict(list)
    for span in spans:
        if span.name == STAGE_SPAN_NAME and span.stage_name:
            grouped[span.stage_name].append(span)

    result: dict[str, StageStats] = {}
    for stage_name, stage_spans in grouped.items():
        latencies = [s.duration_ms for s in stage_spans]
        total = sum(latencies)
        result[stage_name] = StageStats(
            stage=stage_name,
            invocations=len(stage_spans),
            failures=sum(1 for s in stage_spans if s.status == "error"),
            avg_latency_ms=total / len(stage_spans),
            max_latency_ms=max(latencies),
            total_latency_ms=total,
        )
    return result

