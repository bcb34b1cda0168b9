# src/pipeline/cancellation.py - v1
"""Cooperative cancellation checked at stage and item boundaries.

A token never interrupts an in-flight gateway call; the gateway's own
timeout bounds that. Once cancelled, no new stage or item is started.
"""

from __future__ import annotations

import time

from codereview.core.errors import RunCancelledError


class CancellationToken:
    """Stop signal with an optional deadline.

    Args:
        deadline_s: Seconds from creation after which the token reports
            cancelled on its own (None = no deadline).
    """

    def __init__(self, deadline_s: float | None = None) -> None:
        self._reason: str | None = None
        self._deadline = (
            time.monotonic() + deadline_s if deadline_s is not None else None
        )

    def cancel(self, reason: str = "cancellation requested") -> None:
        """Request cancellation. The first reason given is kept."""
        if self._reason is None:
            self._reason = reason

    @property
    def cancelled(self) -> bool:
        if self._reason is not None:
            return True
        if self._deadline is not None and time.monotonic() >= self._deadline:
            self._reason = "deadline exceeded"
            return True
        return False

    @property
    def reason(self) -> str | None:
        return self._reason if self.cancelled else None

    def raise_if_cancelled(self) -> None:
        """Raise RunCancelledError when cancellation has been requested."""
        if self.cancelled:
            raise RunCancelledError(self._reason or "cancelled")
