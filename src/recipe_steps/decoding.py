"""Rebuild structured recipe steps from per-token BIO predictions."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import FrozenSet, Iterable, List, Optional, Sequence, Tuple

from .models import BEGIN, INSIDE, EntityType, StructuredStep, parse_tag

logger = logging.getLogger(__name__)

DEFAULT_STOPWORDS: FrozenSet[str] = frozenset({
    "a", "an", "the", "is", "are", "was", "were", "in", "on", "at", "to", "of",
    "and", "or", "but", "it", "this", "that", "they", "with", "for", "will",
    "be", "can", "i", "you", "he", "she",
})

_PUNCT_ONLY = re.compile(r"^[^\w\s]+$")


def _join(parts: List[str], sep: str = "; ") -> Optional[str]:
    return sep.join(parts) if parts else None


@dataclass
class _SentenceState:
    action: Optional[str] = None
    ingredients: List[str] = field(default_factory=list)
    time: List[str] = field(default_factory=list)
    temperature: List[str] = field(default_factory=list)
    tool: List[str] = field(default_factory=list)
    quantity: List[str] = field(default_factory=list)
    state: List[str] = field(default_factory=list)
    parameters: List[str] = field(default_factory=list)
    phrase: List[str] = field(default_factory=list)
    open_type: Optional[EntityType] = None

    def bucket(self, entity: EntityType) -> List[str]:
        if entity is EntityType.INGREDIENT:
            return self.ingredients
        if entity is EntityType.TIME:
            return self.time
        if entity is EntityType.TEMP:
            return self.temperature
        if entity is EntityType.TOOL:
            return self.tool
        if entity is EntityType.QUANTITY or entity is EntityType.UNIT:
            return self.quantity
        if entity is EntityType.STATE:
            return self.state
        raise ValueError(f"Entity type {entity.value} cannot close a span")

    def close(self) -> None:
        if self.open_type is not None:
            text = " ".join(self.phrase).strip()
            if text:
                self.bucket(self.open_type).append(text)
        self.phrase = []
        self.open_type = None

    def start(self, entity: EntityType, word: str) -> None:
        if entity is EntityType.ACTION:
            # last action in the sentence wins; actions never open a span
            self.action = word
            return
        self.phrase = [word]
        self.open_type = entity

    def to_step(self, index: int) -> Optional[StructuredStep]:
        fields = {
            "time": _join(self.time),
            "temperature": _join(self.temperature),
            "tool": _join(self.tool),
            "quantity": _join(self.quantity),
            "state": _join(self.state),
            "parameters": _join(self.parameters, " "),
        }
        if self.action is None and not self.ingredients and all(v is None for v in fields.values()):
            return None
        return StructuredStep(index=index, action=self.action, ingredients=list(self.ingredients), **fields)


class StepDecoder:
    """
    Token-stream state machine turning one tagged sentence into a step.

    A span is open from a ``B-`` tag through following ``I-`` tags of the
    same type; it is closed before any other tag is interpreted and once
    more at the end of the sentence. ``QUANTITY`` and ``UNIT`` spans share
    the quantity field. An ``I-`` tag with no open span of its type starts a
    new span. Unknown entity types go to ``parameters`` as raw tokens.
    """

    def __init__(self, stopwords: Iterable[str] = DEFAULT_STOPWORDS) -> None:
        self.stopwords = frozenset(w.lower() for w in stopwords)

    def _keep_outside(self, word: str) -> bool:
        return not _PUNCT_ONLY.match(word) and word.lower() not in self.stopwords

    def decode_sentence(self, tokens: Sequence[str], tags: Sequence[str], index: int = 1) -> Optional[StructuredStep]:
        if len(tokens) != len(tags):
            raise ValueError(f"Got {len(tags)} tags for {len(tokens)} tokens")

        st = _SentenceState()
        for word, tag in zip(tokens, tags):
            prefix, suffix = parse_tag(tag)
            entity = EntityType.from_suffix(suffix) if suffix is not None else None

            if prefix != INSIDE or entity is not st.open_type:
                st.close()

            if suffix is not None and entity is None:
                logger.warning("Unknown tag %r for %r; keeping token as a parameter", tag, word)
                st.parameters.append(word)
            elif prefix == BEGIN:
                st.start(entity, word)
            elif prefix == INSIDE:
                if st.open_type is not None and st.open_type is entity:
                    st.phrase.append(word)
                else:
                    logger.warning(
                        "Unexpected %s for %r without preceding B-%s; treating as B-%s",
                        tag, word, entity.value, entity.value,
                    )
                    st.start(entity, word)
            elif self._keep_outside(word):
                st.parameters.append(word)

        st.close()
        return st.to_step(index)

    def decode_recipe(self, sentences: Iterable[Tuple[Sequence[str], Sequence[str]]]) -> List[StructuredStep]:
        """Decode ``(tokens, tags)`` pairs in order; emitted steps are numbered from 1."""
        steps: List[StructuredStep] = []
        for tokens, tags in sentences:
            step = self.decode_sentence(tokens, tags, index=len(steps) + 1)
            if step is not None:
                steps.append(step)
        return steps


def decode_sentence(tokens: Sequence[str], tags: Sequence[str], index: int = 1) -> Optional[StructuredStep]:
    return StepDecoder().decode_sentence(tokens, tags, index=index)


__all__ = ["DEFAULT_STOPWORDS", "StepDecoder", "decode_sentence"]
