"""Pipeline stages."""

from . import build_vocabulary, decode_steps, label_corpus

__all__ = ["build_vocabulary", "label_corpus", "decode_steps"]
