# src/batch/runner.py - v1
"""Batch runner: apply the pipeline executor to a list of input items.

Items are isolated from each other. A read failure, a failed stage or an
unexpected exception marks that item's RunResult failed and the batch
moves on; nothing raised for one item reaches the caller. The only batch
level error is NoInputError for an empty item list.

Sequential by default. With concurrency > 1, independent items overlap,
bounded by a semaphore, and results are still returned in input order.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import TYPE_CHECKING, Callable, Sequence

from codereview.batch.models import BatchOutcome
from codereview.core.errors import ConfigurationError, InputReadError, NoInputError, ReviewError
from codereview.logging.context import clear_context
from codereview.pipeline.executor import new_run_id
from codereview.pipeline.models import RunResult

if TYPE_CHECKING:
    from codereview.batch.loader import ContentLoader
    from codereview.pipeline.cancellation import CancellationToken
    from codereview.pipeline.executor import PipelineExecutor

logger = logging.getLogger(__name__)


class BatchRunner:
    """Run the executor once per item and assemble a BatchOutcome.

    Args:
        executor: Pipeline executor shared by every item.
        loader: Capability turning an item id into text.
        concurrency: Max items in flight (1 = strictly sequential).
        on_result: Called with each RunResult as soon as its item finishes.
            Exceptions it raises are logged and the batch continues.
    """

    def __init__(
        self,
        executor: PipelineExecutor,
        loader: ContentLoader,
        concurrency: int = 1,
        on_result: Callable[[RunResult], None] | None = None,
    ) -> None:
        if concurrency < 1:
            raise ConfigurationError(f"concurrency must be >= 1, got {concurrency}")
        self._executor = executor
        self._loader = loader
        self._concurrency = concurrency
        self._on_result = on_result

    async def run(
        self,
        item_ids: Sequence[str],
        cancellation: CancellationToken | None = None,
    ) -> BatchOutcome:
        """Review every item.

        Args:
            item_ids: Item identifiers, in the order results should appear.
            cancellation: Token checked before each item and each stage.

        Returns:
            BatchOutcome with one RunResult per started item, in input order.

        Raises:
            NoInputError: If ``item_ids`` is empty.
        """
        items = list(item_ids)
        if not items:
            raise NoInputError("No input items to review")

        t0 = time.perf_counter()
        logger.info(
            "Starting batch of %d item(s) (concurrency=%d)", len(items), self._concurrency,
        )

        if self._concurrency == 1:
            results = await self._run_sequential(items, cancellation)
        else:
            results = await self._run_concurrent(items, cancellation)

        cancelled = cancellation is not None and cancellation.cancelled
        if cancelled and len(results) < len(items):
            logger.warning(
                "Batch cancelled (%s): %d of %d item(s) not started",
                cancellation.reason, len(items) - len(results), len(items),
            )

        outcome = BatchOutcome(
            results=tuple(results),
            cancelled=cancelled,
            duration_ms=int((time.perf_counter() - t0) * 1000),
        )
        logger.info(
            "Batch complete: %d succeeded, %d failed, %dms",
            outcome.succeeded, outcome.failed, outcome.duration_ms,
        )
        return outcome

    async def _run_sequential(
        self, items: list[str], cancellation: CancellationToken | None,
    ) -> list[RunResult]:
        results: list[RunResult] = []
        for item_id in items:
            if cancellation is not None and cancellation.cancelled:
                break
            result = await self._process_item(item_id, cancellation)
            results.append(result)
            self._notify(result)
            if result.cancelled:
                break
        return results

    async def _run_concurrent(
        self, items: list[str], cancellation: CancellationToken | None,
    ) -> list[RunResult]:
        slots: list[RunResult | None] = [None] * len(items)
        semaphore = asyncio.Semaphore(self._concurrency)

        async def worker(index: int, item_id: str) -> None:
            async with semaphore:
                if cancellation is not None and cancellation.cancelled:
                    return
                result = await self._process_item(item_id, cancellation)
                slots[index] = result
                self._notify(result)

        await asyncio.gather(*(worker(i, item) for i, item in enumerate(items)))
        return [r for r in slots if r is not None]

    async def _process_item(
        self, item_id: str, cancellation: CancellationToken | None,
    ) -> RunResult:
        """Load and review one item. Never raises for per-item failures."""
        run_id = new_run_id()
        try:
            content = self._loader.load(item_id)
        except InputReadError as exc:
            logger.warning("Review failed for %s: %s", item_id, exc)
            return RunResult.from_input_error(exc, input_id=item_id, run_id=run_id)
        except Exception as exc:
            logger.exception("Loader raised unexpectedly for %s", item_id)
            error = InputReadError(item_id, f"{type(exc).__name__}: {exc}")
            error.__cause__ = exc
            return RunResult.from_input_error(error, input_id=item_id, run_id=run_id)

        try:
            result = await self._executor.run(
                item_id, content, cancellation=cancellation, run_id=run_id,
            )
        except Exception as exc:
            logger.exception("Unexpected error while reviewing %s", item_id)
            error = ReviewError(f"{type(exc).__name__}: {exc}")
            error.__cause__ = exc
            return RunResult(input_id=item_id, failed=True, error=error, run_id=run_id)
        finally:
            clear_context()

        if result.failed and not result.cancelled:
            logger.warning("Review failed for %s: %s", item_id, result.failure_reason)
        return result

    def _notify(self, result: RunResult) -> None:
        if self._on_result is None:
            return
        try:
            self._on_result(result)
        except Exception:
            logger.exception("on_result callback failed for %s", result.input_id)
