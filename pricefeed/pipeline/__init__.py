"""Pipeline package - runner (fetch -> extract -> persist) and daily scheduler."""

from pricefeed.pipeline.runner import PipelineError, PipelineRunner, RunResult
from pricefeed.pipeline.scheduler import Scheduler

__all__ = ["PipelineRunner", "PipelineError", "RunResult", "Scheduler"]
