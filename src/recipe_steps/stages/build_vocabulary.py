"""Build the ingredient vocabulary from the recipes' ingredient lists."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from recipe_steps.io import load_recipes
from recipe_steps.vocabulary import build_vocabulary, save_vocabulary

from ..core import PipelineContext, StageResult
from ..utils import stage_logger, tokenizer_from_cfg


def run(
    context: PipelineContext,
    *,
    recipes_json: Optional[Path] = None,
    out_path: Optional[Path] = None,
    force: bool = False,
) -> StageResult:
    cfg = context.stage("build_vocabulary", required=False)
    logger = stage_logger(context, "build_vocabulary", force=force)

    try:
        recipes_path = context.artifact("recipes_json", recipes_json or cfg.get("recipes_json"))
        vocab_path = context.artifact("vocabulary_json", out_path or cfg.get("out_path"))

        recipes = load_recipes(recipes_path)
        tokenizer = tokenizer_from_cfg(context.stage("spacy", required=False))

        logger.info("Building vocabulary from %s recipes", len(recipes))
        vocab = build_vocabulary(recipes, tokenizer.pos_tag, progress=True)
        save_vocabulary(vocab, vocab_path)
        logger.info("Saved %s terms to %s", len(vocab), vocab_path)

        return StageResult(
            name="build_vocabulary",
            status="success",
            outputs={
                "vocabulary_json": str(vocab_path),
                "terms": len(vocab),
                "multiword_terms": len(vocab.multiword),
            },
        )
    except Exception as exc:  # pragma: no cover - pipeline runner logs
        logger.exception("Vocabulary build failed: %s", exc)
        return StageResult(name="build_vocabulary", status="failed", details=str(exc))
