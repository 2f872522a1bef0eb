"""Instruction labeling and structured step reconstruction for recipes."""

from .runner import PIPELINE_ORDER, PipelineRunner, StageName

__all__ = ["PIPELINE_ORDER", "PipelineRunner", "StageName"]
