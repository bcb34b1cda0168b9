# src/batch/models.py - v2
"""Batch models: ScanEntry, BatchOutcome."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator

from pydantic import BaseModel

from codereview.pipeline.models import RunResult


class ScanEntry(BaseModel):
    """A single source file discovered during a scan."""

    file_path: str
    filename: str
    relative_path: str
    size_bytes: int


@dataclass(frozen=True)
class BatchOutcome:
    """Run results of one batch, in input order.

    When the batch was cancelled, items never started are absent, so
    ``len(outcome)`` may be shorter than the input list.
    """

    results: tuple[RunResult, ...] = ()
    cancelled: bool = False
    duration_ms: int = field(default=0, compare=False)

    @property
    def succeeded(self) -> int:
        return sum(1 for r in self.results if not r.failed)

    @property
    def failed(self) -> int:
        return sum(1 for r in self.results if r.failed)

    def __len__(self) -> int:
        return len(self.results)

    def __iter__(self) -> Iterator[RunResult]:
        return iter(self.results)
