"""Recipe, tag and step records shared by the labeler and the decoder."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

Amount = Union[float, str, None]


class EntityType(str, Enum):
    INGREDIENT = "INGREDIENT"
    ACTION = "ACTION"
    TOOL = "TOOL"
    TIME = "TIME"
    TEMP = "TEMP"
    QUANTITY = "QUANTITY"
    UNIT = "UNIT"
    STATE = "STATE"

    @classmethod
    def from_suffix(cls, suffix: str) -> Optional["EntityType"]:
        try:
            return cls(suffix)
        except ValueError:
            return None


OUTSIDE = "O"
BEGIN = "B"
INSIDE = "I"


def make_tag(prefix: str, entity: EntityType) -> str:
    return f"{prefix}-{entity.value}"


def parse_tag(tag: Optional[str]) -> Tuple[str, Optional[str]]:
    """
    Split a BIO tag into (prefix, type).

    Anything that does not start with ``B-`` or ``I-`` is read as ``O``.
    The type is returned as the raw suffix so callers can decide what to do
    with a suffix outside ``EntityType``.
    """
    tag = (tag or "").strip()
    if len(tag) > 2 and tag[1] == "-" and tag[0] in (BEGIN, INSIDE):
        return tag[0], tag[2:]
    return OUTSIDE, None


def parse_amount(value: Any) -> Amount:
    """Numeric amounts become floats; anything unparseable is kept as its string form."""
    if value is None:
        return None
    if isinstance(value, bool):
        return str(value)
    if isinstance(value, (int, float)):
        return float(value)
    text = str(value).strip()
    if not text:
        return text
    try:
        return float(text)
    except ValueError:
        return text


@dataclass(frozen=True)
class Ingredient:
    amount: Amount
    unit: str
    name: str

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "Ingredient":
        # scraped recipe files store the name under "ingredient"
        name = payload.get("name")
        if name is None:
            name = payload.get("ingredient", "")
        return cls(
            amount=parse_amount(payload.get("amount")),
            unit=str(payload.get("unit") or ""),
            name=str(name or ""),
        )


@dataclass(frozen=True)
class Recipe:
    name: str
    url: Optional[str] = None
    ingredients: Tuple[Ingredient, ...] = ()
    instructions: Tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "Recipe":
        ingredients = payload.get("ingredients") or []
        instructions = payload.get("instructions") or []
        return cls(
            name=str(payload.get("name") or "Unknown"),
            url=payload.get("url"),
            ingredients=tuple(Ingredient.from_dict(i) for i in ingredients),
            instructions=tuple(str(s) for s in instructions),
        )


@dataclass(frozen=True)
class TaggedToken:
    text: str
    tag: str

    def to_line(self) -> str:
        return f"{self.text} {self.tag}\n"


@dataclass(frozen=True)
class StructuredStep:
    index: int
    action: Optional[str] = None
    ingredients: List[str] = field(default_factory=list)
    time: Optional[str] = None
    temperature: Optional[str] = None
    tool: Optional[str] = None
    quantity: Optional[str] = None
    state: Optional[str] = None
    parameters: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "step": self.index,
            "action": self.action,
            "ingredients": list(self.ingredients),
            "time": self.time,
            "temperature": self.temperature,
            "tool": self.tool,
            "quantity": self.quantity,
            "state": self.state,
            "parameters": self.parameters,
        }


@dataclass(frozen=True)
class StructuredRecipe:
    name: str
    steps: List[StructuredStep] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "steps": [s.to_dict() for s in self.steps]}


__all__ = [
    "Amount",
    "EntityType",
    "OUTSIDE",
    "BEGIN",
    "INSIDE",
    "make_tag",
    "parse_tag",
    "parse_amount",
    "Ingredient",
    "Recipe",
    "TaggedToken",
    "StructuredStep",
    "StructuredRecipe",
]
