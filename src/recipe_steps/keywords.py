"""Fixed keyword tables for the non-ingredient entity categories."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, FrozenSet, Iterable, Mapping, Optional, Tuple

from .models import EntityType

ACTIONS: FrozenSet[str] = frozenset({
    "chop", "stir", "sauté", "boil", "mix", "heat", "cook", "add", "grind", "fry",
    "bake", "blend", "whisk", "roast", "pour", "serve", "simmer", "knead", "soak",
    "sprinkle", "reduce", "cover", "drain", "steam",
})
TOOLS: FrozenSet[str] = frozenset({
    "pan", "blender", "cooker", "knife", "spatula", "bowl", "oven", "pot",
    "stove", "tongs", "mixer", "microwave", "ladle", "whisk", "strainer", "tray",
    "plate", "grinder", "steamer", "peeler",
})
TIMES: FrozenSet[str] = frozenset({"seconds", "minutes", "hours", "overnight"})
TEMPERATURES: FrozenSet[str] = frozenset({
    "low", "medium", "high", "simmer", "350f", "400f", "hot", "warm", "cold",
})
QUANTITIES: FrozenSet[str] = frozenset({
    "cup", "cups", "tablespoon", "tablespoons", "teaspoon", "teaspoons",
    "gram", "grams", "ml", "liter", "pinch", "handful", "quart", "pint", "ounce", "ounces",
})

# Lookup order; the first table containing a term decides its tag.
PRIORITY: Tuple[EntityType, ...] = (
    EntityType.ACTION,
    EntityType.TOOL,
    EntityType.TIME,
    EntityType.TEMP,
    EntityType.QUANTITY,
)

_NON_ALNUM = re.compile(r"[\W_]+")


def keyword_form(token: str) -> str:
    """Lowercase with everything but letters and digits removed ("350F," -> "350f")."""
    return _NON_ALNUM.sub("", str(token).lower())


def _frozen(terms: Iterable[Any]) -> FrozenSet[str]:
    return frozenset(keyword_form(t) for t in terms if keyword_form(t))


@dataclass(frozen=True)
class KeywordTables:
    actions: FrozenSet[str] = ACTIONS
    tools: FrozenSet[str] = TOOLS
    times: FrozenSet[str] = TIMES
    temperatures: FrozenSet[str] = TEMPERATURES
    quantities: FrozenSet[str] = QUANTITIES

    @classmethod
    def from_mapping(cls, cfg: Optional[Mapping[str, Iterable[Any]]]) -> "KeywordTables":
        """Build tables from a config mapping; categories left out keep the defaults."""
        cfg = cfg or {}
        unknown = set(cfg) - {"actions", "tools", "times", "temperatures", "quantities"}
        if unknown:
            raise KeyError(f"Unknown keyword categories in config: {sorted(unknown)}")
        kwargs = {name: _frozen(terms) for name, terms in cfg.items() if terms is not None}
        return cls(**kwargs)

    def table(self, entity: EntityType) -> FrozenSet[str]:
        if entity is EntityType.ACTION:
            return self.actions
        if entity is EntityType.TOOL:
            return self.tools
        if entity is EntityType.TIME:
            return self.times
        if entity is EntityType.TEMP:
            return self.temperatures
        if entity is EntityType.QUANTITY:
            return self.quantities
        raise ValueError(f"No keyword table for entity type {entity.value}")

    def lookup(self, token: str) -> Optional[EntityType]:
        term = keyword_form(token)
        if not term:
            return None
        for entity in PRIORITY:
            if term in self.table(entity):
                return entity
        return None


DEFAULT_KEYWORDS = KeywordTables()

__all__ = [
    "ACTIONS",
    "TOOLS",
    "TIMES",
    "TEMPERATURES",
    "QUANTITIES",
    "PRIORITY",
    "KeywordTables",
    "DEFAULT_KEYWORDS",
    "keyword_form",
]
