# src/pipeline/executor.py - v1
"""Pipeline executor: run one Pipeline against one input item.

Walks the stages strictly in order, threading one Conversation through
them:

  [user: prompt]
  [system: stage 1] -> gateway -> [assistant: stage 1 output]
  [system: stage 2] -> gateway -> [assistant: stage 2 output]
  ...

Stage k therefore sees the input plus every earlier stage's instructions
and output. A GatewayError aborts the remaining stages (fail-fast) and
cancellation is honored only between stages. Neither ever escapes run():
both end up in the returned RunResult.
"""

from __future__ import annotations

import logging
import time
import uuid
from typing import TYPE_CHECKING

from codereview.config.stages import DEFAULT_REVIEW_PROMPT
from codereview.core.errors import GatewayError, ReviewError, RunCancelledError
from codereview.llm.models import Message
from codereview.logging.context import set_run_context, set_stage_context
from codereview.pipeline.conversation import Conversation
from codereview.pipeline.models import RunResult, StageResult
from codereview.tracking.telemetry import Telemetry

if TYPE_CHECKING:
    from codereview.llm.gateway import Gateway
    from codereview.pipeline.cancellation import CancellationToken
    from codereview.pipeline.pipeline import Pipeline
    from codereview.pipeline.stage import Stage

logger = logging.getLogger(__name__)


def new_run_id() -> str:
    """Correlation id shared by every span and log line of one run."""
    return uuid.uuid4().hex


class PipelineExecutor:
    """Execute a Pipeline over single input items.

    Args:
        pipeline: Validated stage sequence, shared read-only across runs.
        gateway: Inference capability invoked once per stage.
        telemetry: Span and metric capability (private instance if None).
        prompt_template: Format string for the opening user turn, with
            ``{name}`` and ``{content}`` placeholders.
    """

    def __init__(
        self,
        pipeline: Pipeline,
        gateway: Gateway,
        telemetry: Telemetry | None = None,
        prompt_template: str = DEFAULT_REVIEW_PROMPT,
    ) -> None:
        self._pipeline = pipeline
        self._gateway = gateway
        self._telemetry = telemetry if telemetry is not None else Telemetry()
        self._prompt_template = prompt_template

    @property
    def pipeline(self) -> Pipeline:
        return self._pipeline

    @property
    def telemetry(self) -> Telemetry:
        return self._telemetry

    def build_prompt(self, input_id: str, content: str) -> str:
        return self._prompt_template.format(name=input_id, content=content)

    async def run(
        self,
        input_id: str,
        content: str,
        cancellation: CancellationToken | None = None,
        run_id: str | None = None,
    ) -> RunResult:
        """Run every stage over ``content``.

        Args:
            input_id: Item identifier (file name or path).
            content: Item text.
            cancellation: Token checked before each stage starts.
            run_id: Correlation id (generated if None).

        Returns:
            RunResult with one StageResult per stage attempted.
        """
        run_id = run_id or new_run_id()
        set_run_context(run_id, input_id)
        stages = self._pipeline.stages()
        total = len(stages)

        conversation = Conversation()
        conversation.append(
            Message(role="user", content=self.build_prompt(input_id, content))
        )

        stage_results: list[StageResult] = []
        failure: ReviewError | None = None
        cancelled = False
        start_ns = time.monotonic_ns()

        logger.info("Starting run for %s (%d stages)", input_id, total)

        with self._telemetry.span(
            "pipeline.run", run_id=run_id, input_id=input_id, stage_count=total,
        ) as run_span:
            for index, stage in enumerate(stages, start=1):
                if cancellation is not None:
                    try:
                        cancellation.raise_if_cancelled()
                    except RunCancelledError as exc:
                        failure = exc
                        cancelled = True
                        logger.warning(
                            "Run for %s cancelled before stage %d/%d (%s): %s",
                            input_id, index, total, stage.name, exc.reason,
                        )
                        break

                result = await self._run_stage(
                    stage, index, total, conversation, run_id, input_id,
                )
                stage_results.append(result)

                if result.error is not None:
                    failure = result.error
                    logger.error(
                        "Fail-fast: skipping %d remaining stage(s) for %s",
                        total - index, input_id,
                    )
                    break

            set_stage_context(None)
            run_span.set_attribute("stages_completed", len(stage_results))
            if cancelled:
                run_span.set_status("cancelled", str(failure))
            elif failure is not None:
                run_span.set_status("error", str(failure))

        duration_ms = (time.monotonic_ns() - start_ns) // 1_000_000
        failed = failure is not None
        final_text = None if failed else conversation.last_assistant_text()

        if failed:
            logger.warning("Run for %s failed after %dms: %s", input_id, duration_ms, failure)
        else:
            logger.info(
                "Run for %s complete: %d stages, %dms, verdict from %s",
                input_id, total, duration_ms, self._pipeline.final_stage.name,
            )

        return RunResult(
            input_id=input_id,
            stage_results=tuple(stage_results),
            final_text=final_text,
            failed=failed,
            cancelled=cancelled,
            error=failure,
            run_id=run_id,
            duration_ms=duration_ms,
        )

    async def _run_stage(
        self,
        stage: Stage,
        index: int,
        total: int,
        conversation: Conversation,
        run_id: str,
        input_id: str,
    ) -> StageResult:
        """Invoke the gateway for one stage and fold the reply into the conversation."""
        set_stage_context(stage.name, f"{index}/{total}")
        conversation.append(stage.render_system_message())

        with self._telemetry.span(
            "pipeline.stage",
            run_id=run_id,
            input_id=input_id,
            stage_name=stage.name,
            position=index,
            context_messages=len(conversation),
        ) as span:
            t0 = time.perf_counter()
            try:
                text = await self._gateway.generate(conversation.messages)
            except Exception as exc:
                latency_s = time.perf_counter() - t0
                error = exc if isinstance(exc, GatewayError) else GatewayError(
                    f"{type(exc).__name__}: {exc}", kind="transport",
                )
                if error is not exc:
                    error.__cause__ = exc
                if error.stage_name is None:
                    error.stage_name = stage.name
                span.set_status("error", str(error))
                self._telemetry.record_stage(stage.name, latency_s, failed=True)
                logger.error("Stage %d/%d (%s) failed: %s", index, total, stage.name, error)
                return StageResult(
                    stage_name=stage.name,
                    error=error,
                    duration_ms=int(latency_s * 1000),
                )

            latency_s = time.perf_counter() - t0
            self._telemetry.record_stage(stage.name, latency_s)
            span.set_attribute("output_chars", len(text))

        conversation.append(Message(role="assistant", content=text))
        logger.info(
            "Stage %d/%d (%s) completed in %dms", index, total, stage.name, latency_s * 1000,
        )
        return StageResult(
            stage_name=stage.name,
            output_text=text,
            duration_ms=int(latency_s * 1000),
        )
