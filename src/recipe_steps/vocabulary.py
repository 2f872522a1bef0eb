"""Ingredient vocabulary built from structured recipe ingredient lists."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Callable, Dict, FrozenSet, Iterable, Iterator, List, Optional, Sequence, Tuple, Union

from tqdm import tqdm

from .models import Recipe

logger = logging.getLogger(__name__)

# (token text, Penn tag) pairs for one phrase
PosTagger = Callable[[str], Sequence[Tuple[str, str]]]

# Trailing prepositions / "to" / verbs are tagging artifacts, not head nouns.
SKIP_HEAD_TAGS: FrozenSet[str] = frozenset({"IN", "TO"})


def clean_phrase(text: str) -> str:
    """Lowercase, keep only letters and whitespace, collapse whitespace."""
    # "½" and "²" match \w but are not letters
    return " ".join("".join(ch for ch in str(text).lower() if ch.isalpha() or ch.isspace()).split())


def clean_token(text: str) -> str:
    """Lowercase, letters only."""
    return "".join(ch for ch in str(text).lower() if ch.isalpha())


def _is_head_word_tag(tag: str) -> bool:
    return tag not in SKIP_HEAD_TAGS and not tag.startswith("VB")


class Vocabulary:
    """
    Insertion-ordered, deduplicated set of ingredient surface forms.

    ``multiword`` fixes the match priority used by the labeler: longer
    phrases (by word count) first, ties broken lexicographically.
    """

    def __init__(self, terms: Iterable[str] = ()) -> None:
        self._terms: Dict[str, None] = {}
        self._multiword: Optional[Tuple[Tuple[str, ...], ...]] = None
        for term in terms:
            self.add(term)

    def add(self, term: str) -> bool:
        term = " ".join(str(term).split())
        if not term or term in self._terms:
            return False
        self._terms[term] = None
        self._multiword = None
        return True

    @property
    def entries(self) -> Tuple[str, ...]:
        return tuple(self._terms)

    @property
    def single_words(self) -> FrozenSet[str]:
        return frozenset(t for t in self._terms if " " not in t)

    @property
    def multiword(self) -> Tuple[Tuple[str, ...], ...]:
        if self._multiword is None:
            phrases = [tuple(t.split()) for t in self._terms if " " in t]
            self._multiword = tuple(sorted(phrases, key=lambda words: (-len(words), words)))
        return self._multiword

    def __contains__(self, term: object) -> bool:
        return term in self._terms

    def __iter__(self) -> Iterator[str]:
        return iter(self._terms)

    def __len__(self) -> int:
        return len(self._terms)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Vocabulary):
            return NotImplemented
        return self.entries == other.entries

    def __repr__(self) -> str:
        return f"Vocabulary({len(self)} terms, {len(self.multiword)} multi-word)"


def build_vocabulary(recipes: Iterable[Recipe], pos_tagger: PosTagger, *, progress: bool = False) -> Vocabulary:
    """
    Collect every cleaned ingredient name plus, for multi-word names, the
    head word (last token) unless it is tagged as a preposition, "to" or a verb.
    """
    vocab = Vocabulary()
    head_words = 0
    skipped_heads = 0

    iterator = tqdm(recipes, desc="Building vocabulary", unit="recipe") if progress else recipes
    for recipe in iterator:
        for ing in recipe.ingredients:
            phrase = clean_phrase(ing.name)
            if not phrase:
                continue
            vocab.add(phrase)

            tagged = list(pos_tagger(phrase))
            if len(tagged) <= 1:
                continue
            last_text, last_tag = tagged[-1]
            if not _is_head_word_tag(last_tag):
                skipped_heads += 1
                logger.debug("Skipping head word %r of %r (tag %s)", last_text, phrase, last_tag)
                continue
            head = clean_token(last_text)
            if head and vocab.add(head):
                head_words += 1

    logger.info(
        "Vocabulary: %s terms (%s multi-word, %s head words added, %s heads skipped by POS)",
        len(vocab),
        len(vocab.multiword),
        head_words,
        skipped_heads,
    )
    return vocab


def save_vocabulary(vocab: Vocabulary, path: Union[str, Path]) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump({"terms": list(vocab.entries)}, f, ensure_ascii=False, indent=2)
    return path


def load_vocabulary(path: Union[str, Path]) -> Vocabulary:
    """Read ``{"terms": [...]}`` or a bare JSON list, keeping file order."""
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"Vocabulary not found at {p}")
    with open(p, "r", encoding="utf-8") as f:
        data = json.load(f)
    if isinstance(data, dict) and "terms" in data:
        terms: List[str] = data["terms"]
    elif isinstance(data, list):
        terms = data
    else:
        raise ValueError(f"Vocabulary at {p} must be a list or {{'terms': [...]}}")
    return Vocabulary(clean_phrase(t) for t in terms)


__all__ = [
    "PosTagger",
    "Vocabulary",
    "build_vocabulary",
    "clean_phrase",
    "clean_token",
    "save_vocabulary",
    "load_vocabulary",
]
