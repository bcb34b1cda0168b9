# src/pipeline/pipeline.py - v1
"""Pipeline: an ordered, validated, immutable sequence of stages.

Order is execution order and is significant: each stage sees the outputs
of every stage before it. Reordering means building a new Pipeline.
"""

from __future__ import annotations

import logging
from collections import Counter
from typing import Iterable, Iterator

from pydantic import ValidationError

from codereview.core.errors import ConfigurationError
from codereview.pipeline.stage import Stage

logger = logging.getLogger(__name__)


class Pipeline:
    """Immutable ordered list of stages with unique names.

    Holds no mutable state, so concurrent runs can share one instance.

    Raises:
        ConfigurationError: If ``stages`` is empty or names are duplicated.
    """

    __slots__ = ("_stages",)

    def __init__(self, stages: Iterable[Stage]) -> None:
        stage_tuple = tuple(stages)
        if not stage_tuple:
            raise ConfigurationError("Pipeline requires at least one stage")

        counts = Counter(s.name for s in stage_tuple)
        duplicates = sorted(name for name, n in counts.items() if n > 1)
        if duplicates:
            raise ConfigurationError(
                f"Duplicate stage names in pipeline: {', '.join(duplicates)}"
            )

        self._stages = stage_tuple

    def stages(self) -> tuple[Stage, ...]:
        """Stages in execution order."""
        return self._stages

    @property
    def stage_names(self) -> list[str]:
        return [s.name for s in self._stages]

    @property
    def final_stage(self) -> Stage:
        """The synthesis stage whose output becomes the run's verdict."""
        return self._stages[-1]

    def __len__(self) -> int:
        return len(self._stages)

    def __iter__(self) -> Iterator[Stage]:
        return iter(self._stages)

    def __repr__(self) -> str:
        return f"Pipeline({' -> '.join(self.stage_names)})"


class PipelineBuilder:
    """Collect stage definitions, then validate them all at once.

    Usage:
        pipeline = (
            PipelineBuilder()
            .add_stage("security", "You are a security expert...")
            .add_stage("summary", "Synthesize the findings...")
            .build()
        )
    """

    def __init__(self) -> None:
        self._definitions: list[tuple[str, str]] = []

    def add_stage(self, name: str, instructions: str) -> PipelineBuilder:
        self._definitions.append((name, instructions))
        return self

    def build(self) -> Pipeline:
        """Create the Pipeline.

        Raises:
            ConfigurationError: If any stage is invalid, none were added,
                or names collide.
        """
        stages: list[Stage] = []
        for name, instructions in self._definitions:
            try:
                stages.append(Stage(name=name, instructions=instructions))
            except ValidationError as exc:
                raise ConfigurationError(f"Invalid stage {name!r}: {exc}") from exc
        pipeline = Pipeline(stages)
        logger.debug("Built pipeline with %d stages: %s", len(pipeline), pipeline)
        return pipeline


def default_review_pipeline() -> Pipeline:
    """The five-stage code review pipeline, synthesis last."""
    from codereview.config.stages import REVIEW_STAGES

    builder = PipelineBuilder()
    for name, instructions in REVIEW_STAGES:
        builder.add_stage(name, instructions)
    return builder.build()
