from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Iterable, List, Union

from .models import Recipe, StructuredRecipe

logger = logging.getLogger(__name__)


def load_recipes(path: Union[str, Path]) -> List[Recipe]:
    """Load a JSON array of scraped recipes."""
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"Recipe file not found: {p}")
    with open(p, "r", encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, list):
        raise ValueError(f"Recipe file {p} must contain a JSON list, got {type(data).__name__}")
    recipes = [Recipe.from_dict(item) for item in data]
    logger.info("Loaded %s recipes from %s", len(recipes), p)
    return recipes


def save_structured_recipes(recipes: Iterable[StructuredRecipe], path: Union[str, Path]) -> Path:
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    payload = [r.to_dict() for r in recipes]
    with open(p, "w", encoding="utf-8") as f:
        json.dump(payload, f, ensure_ascii=False, indent=2)
    logger.info("Saved %s structured recipes to %s", len(payload), p)
    return p


__all__ = ["load_recipes", "save_structured_recipes"]
