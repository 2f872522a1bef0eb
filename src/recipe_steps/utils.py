from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from recipe_steps.common.logging_setup import setup_logging
from .core import PipelineContext
from .tokenization import SpacyTokenizer


def stage_logger(context: PipelineContext | logging.Logger, stage_name: str, *, force: bool = False) -> logging.Logger:
    """
    Configure logging for a stage and return a namespaced logger.
    """
    if isinstance(context, logging.Logger):
        return context

    setup_logging(context.logging(stage_name), force=force)
    return logging.getLogger(f"recipe_steps.{stage_name}")


def bool_from_cfg(value: Optional[bool], default: bool = False) -> bool:
    if value is None:
        return default
    return bool(value)


def tokenizer_from_cfg(cfg: Mapping[str, Any]) -> SpacyTokenizer:
    """Build the shared spaCy tokenizer from ``pipeline.spacy``."""
    return SpacyTokenizer(
        model=str(cfg.get("model", "en_core_web_sm")),
        batch_size=int(cfg.get("batch_size", 128)),
        n_process=int(cfg.get("n_process", 1)),
    )
