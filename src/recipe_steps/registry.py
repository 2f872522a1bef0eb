"""Pipeline stage registry."""

from __future__ import annotations

from typing import Callable, Dict

from .core import StageResult
from .stages import build_vocabulary, decode_steps, label_corpus

StageFn = Callable[..., StageResult]

STAGES: Dict[str, StageFn] = {
    "build_vocabulary": build_vocabulary.run,
    "label_corpus": label_corpus.run,
    "decode_steps": decode_steps.run,
}

__all__ = ["STAGES", "StageFn"]
