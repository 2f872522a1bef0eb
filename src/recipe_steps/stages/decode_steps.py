"""Tag recipe instructions with the trained NER model and rebuild structured steps."""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional

from tqdm import tqdm

from recipe_steps.io import load_recipes, save_structured_recipes
from recipe_steps.models import StructuredRecipe
from recipe_steps.prediction import RecipeProcessor, SpacyTagPredictor

from ..core import PipelineContext, StageResult
from ..utils import stage_logger, tokenizer_from_cfg


def run(
    context: PipelineContext,
    *,
    recipes_json: Optional[Path] = None,
    model_dir: Optional[Path] = None,
    out_path: Optional[Path] = None,
    force: bool = False,
) -> StageResult:
    cfg = context.stage("decode_steps", required=False)
    logger = stage_logger(context, "decode_steps", force=force)

    try:
        recipes_path = context.artifact("recipes_json", recipes_json or cfg.get("recipes_json"))
        model_path = context.artifact("model_dir", model_dir or cfg.get("model_dir"))
        structured_path = context.artifact("structured_json", out_path or cfg.get("out_path"))

        recipes = load_recipes(recipes_path)
        processor = RecipeProcessor(
            tokenizer=tokenizer_from_cfg(context.stage("spacy", required=False)),
            predictor=SpacyTagPredictor(model_path),
        )

        structured: List[StructuredRecipe] = []
        for recipe in tqdm(recipes, desc="Decoding steps", unit="recipe"):
            structured.append(processor.process(recipe))

        total_steps = sum(len(r.steps) for r in structured)
        empty = sum(1 for r in structured if not r.steps)
        if empty:
            logger.warning("%s of %s recipes produced no steps", empty, len(structured))
        save_structured_recipes(structured, structured_path)

        return StageResult(
            name="decode_steps",
            status="success",
            outputs={
                "structured_json": str(structured_path),
                "recipes": len(structured),
                "steps": total_steps,
            },
        )
    except Exception as exc:  # pragma: no cover - pipeline runner logs
        logger.exception("Step decoding failed: %s", exc)
        return StageResult(name="decode_steps", status="failed", details=str(exc))
