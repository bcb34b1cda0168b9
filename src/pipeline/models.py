# src/pipeline/models.py - v2
"""Run result models: StageResult, RunResult.

Frozen dataclasses rather than pydantic models: they carry exception
instances. Exceptions compare by identity, so equality goes through
``error_key`` (class name and message) instead of the instance. The
correlation id and timings are excluded from equality too, so repeated
runs over the same input compare equal whether they succeed or fail.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from codereview.core.errors import InputReadError, ReviewError


def error_key(error: BaseException | None) -> tuple[str, str] | None:
    """Value identity of an error: (class name, rendered message)."""
    if error is None:
        return None
    return type(error).__name__, str(error)


@dataclass(frozen=True)
class StageResult:
    """Outcome of one stage invocation within a run."""

    stage_name: str
    output_text: str | None = None
    error: ReviewError | None = field(default=None, compare=False)
    duration_ms: int = field(default=0, compare=False)
    error_key: tuple[str, str] | None = field(init=False, default=None, repr=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "error_key", error_key(self.error))

    @property
    def succeeded(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class RunResult:
    """Outcome of one pipeline run against one input item.

    ``stage_results`` follows pipeline order with no gaps: a run aborted at
    stage k holds exactly k entries, the last one carrying the error.
    """

    input_id: str
    stage_results: tuple[StageResult, ...] = ()
    final_text: str | None = None
    failed: bool = False
    cancelled: bool = False
    error: ReviewError | None = field(default=None, compare=False)
    run_id: str = field(default="", compare=False)
    duration_ms: int = field(default=0, compare=False)
    error_key: tuple[str, str] | None = field(init=False, default=None, repr=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "error_key", error_key(self.error))

    @property
    def succeeded(self) -> bool:
        return not self.failed

    @property
    def failure_reason(self) -> str | None:
        """Human-readable reason for a failed run."""
        if not self.failed:
            return None
        if self.error is not None:
            return str(self.error)
        return "unknown failure"

    @classmethod
    def from_input_error(
        cls, error: InputReadError, input_id: str | None = None, run_id: str = "",
    ) -> RunResult:
        """Failed result for an item whose content could not be loaded."""
        return cls(
            input_id=input_id if input_id is not None else error.item_id,
            failed=True,
            error=error,
            run_id=run_id,
        )
