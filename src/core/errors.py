# src/core/errors.py - v1
"""Error taxonomy shared by the pipeline, batch runner and CLI.

Fatal before any run starts:
  ConfigurationError  invalid settings, stage or pipeline definition
  NoInputError        the batch has no items to review

Recovered inside the batch:
  InputReadError      one item's content could not be loaded
  GatewayError        one stage's inference call failed
  RunCancelledError   cancellation observed at a stage or item boundary
"""

from __future__ import annotations


class ReviewError(Exception):
    """Base class for all codereview errors."""


class ConfigurationError(ReviewError):
    """Raised when settings or a pipeline definition are inconsistent."""


class NoInputError(ReviewError):
    """Raised when a batch is started with no input items."""


class InputReadError(ReviewError):
    """Raised by a content loader when an item cannot be read."""

    def __init__(self, item_id: str, reason: str) -> None:
        self.item_id = item_id
        self.reason = reason
        super().__init__(f"Cannot read '{item_id}': {reason}")


class GatewayError(ReviewError):
    """Raised when an inference call fails.

    Attributes:
        kind: "timeout", "transport" or "malformed".
        stage_name: Stage whose call failed. The gateway itself is
            stage-agnostic; the executor fills this in.
    """

    def __init__(
        self, message: str, kind: str = "transport", stage_name: str | None = None,
    ) -> None:
        self.message = message
        self.kind = kind
        self.stage_name = stage_name
        super().__init__(message)

    def __str__(self) -> str:
        if self.stage_name:
            return f"Stage '{self.stage_name}' failed ({self.kind}): {self.message}"
        return f"Inference call failed ({self.kind}): {self.message}"


class RunCancelledError(ReviewError):
    """Raised when cancellation is observed before a stage or item starts."""

    def __init__(self, reason: str = "cancelled") -> None:
        self.reason = reason
        super().__init__(f"Run cancelled: {reason}")
