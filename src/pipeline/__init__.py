"""Sequential stage pipeline: definitions, executor and run results."""

from codereview.pipeline.cancellation import CancellationToken
from codereview.pipeline.executor import PipelineExecutor
from codereview.pipeline.models import RunResult, StageResult
from codereview.pipeline.pipeline import Pipeline, PipelineBuilder, default_review_pipeline
from codereview.pipeline.stage import Stage

__all__ = [
    "CancellationToken",
    "Pipeline",
    "PipelineBuilder",
    "PipelineExecutor",
    "RunResult",
    "Stage",
    "StageResult",
    "default_review_pipeline",
]
