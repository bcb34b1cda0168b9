# src/tracking/exporter.py - v2
"""Report rendering and metrics export.

format_run_report() renders one item's review for the terminal,
format_batch_summary() the closing summary, export_metrics() writes the
prometheus text exposition to a file.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import TYPE_CHECKING

from prometheus_client import write_to_textfile

from codereview.config.stages import SEVERITY_LEVELS
from codereview.tracking.models import StageStats

if TYPE_CHECKING:
    from codereview.batch.models import BatchOutcome
    from codereview.pipeline.models import RunResult
    from codereview.tracking.telemetry import Telemetry

logger = logging.getLogger(__name__)

BANNER = "=" * 60

_SEVERITY_RE = re.compile(r"SEVERITY:\s*\[?\s*([A-Za-z]+)", re.IGNORECASE)


def extract_severity(text: str | None) -> str | None:
    """Severity level announced by the synthesis stage, if recognizable."""
    if not text:
        return None
    match = _SEVERITY_RE.search(text)
    if match is None:
        return None
    level = match.group(1).upper()
    return level if level in SEVERITY_LEVELS else None


def format_run_report(result: RunResult) -> str:
    """Banner-framed review (or failure notice) for one item."""
    lines = ["", BANNER, f"Review for: {result.input_id}", BANNER]
    if result.failed:
        lines.append(f"Review failed for {result.input_id}: {result.failure_reason}")
    else:
        lines.append(result.final_text or "")
    return "\n".join(lines)


def format_batch_summary(
    outcome: BatchOutcome,
    stage_stats: dict[str, StageStats] | None = None,
) -> str:
    """Human-readable summary of a batch.

    Args:
        outcome: Batch results.
        stage_stats: Optional per-stage aggregates from the span stream.
    """
    lines: list[str] = [
        "",
        "=== Review Summary ===",
        f"Items      : {len(outcome)}",
        f"Succeeded  : {outcome.succeeded}",
        f"Failed     : {outcome.failed}",
        f"Duration   : {outcome.duration_ms / 1000:.1f}s",
    ]
    if outcome.cancelled:
        lines.append("Cancelled  : yes (remaining items not started)")

    severities = [
        (r.input_id, extract_severity(r.final_text)) for r in outcome if not r.failed
    ]
    if any(level for _, level in severities):
        lines.append("")
        lines.append("Severity:")
        for input_id, level in severities:
            lines.append(f"  {input_id:<40s} {level or '?'}")

    failures = [r for r in outcome if r.failed]
    if failures:
        lines.append("")
        lines.append("Failures:")
        for r in failures:
            lines.append(f"  {r.input_id}: {r.failure_reason}")

    if stage_stats:
        lines.append("")
        lines.append("Per-stage:")
        for name, stats in stage_stats.items():
            lines.append(
                f"  {name:<24s} calls={stats.invocations:<4d} "
                f"failures={stats.failures:<3d} "
                f"avg={stats.avg_latency_ms:,.0f}ms max={stats.max_latency_ms:,.0f}ms"
            )

    return "\n".join(lines)


def export_metrics(telemetry: Telemetry, path: Path) -> None:
    """Write the telemetry registry in prometheus text format."""
    path = Path(path).expanduser()
    path.parent.mkdir(parents=True, exist_ok=True)
    write_to_textfile(str(path), telemetry.registry)
    logger.debug("Exported stage metrics to %s", path)
