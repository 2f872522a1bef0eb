"""Auto-label tokenised instruction sentences into a BIO training corpus."""

from __future__ import annotations

import logging
import random
import shutil
from collections import Counter
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Union

from spacy.tokens import Doc, DocBin
from spacy.vocab import Vocab
from tqdm import tqdm

from .keywords import DEFAULT_KEYWORDS, KeywordTables
from .models import BEGIN, INSIDE, OUTSIDE, EntityType, Recipe, TaggedToken, make_tag
from .tokenization import SpacyTokenizer
from .vocabulary import Vocabulary, clean_token

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LabeledSentence:
    recipe: str
    tokens: List[TaggedToken]

    @property
    def words(self) -> List[str]:
        return [t.text for t in self.tokens]

    @property
    def tags(self) -> List[str]:
        return [t.tag for t in self.tokens]


class CorpusLabeler:
    """
    Tags tokens with ingredient spans first, then single keywords.

    Per position: multi-word vocabulary phrases (in ``Vocabulary.multiword``
    order, first match wins), then single-word ingredients, then the keyword
    tables in priority order on the same letters-only form, otherwise ``O``.
    """

    def __init__(self, vocabulary: Vocabulary, keywords: KeywordTables = DEFAULT_KEYWORDS) -> None:
        self.vocabulary = vocabulary
        self.keywords = keywords
        self._phrases = vocabulary.multiword
        self._singles = vocabulary.single_words

    def _match_phrase(self, cleaned: Sequence[str], i: int) -> int:
        """Length of the first vocabulary phrase starting at ``i``, or 0."""
        if not cleaned[i]:
            return 0
        remaining = len(cleaned) - i
        for words in self._phrases:
            n = len(words)
            if n > remaining:
                continue
            if tuple(cleaned[i:i + n]) == words:
                return n
        return 0

    def label_tokens(self, tokens: Sequence[str]) -> List[TaggedToken]:
        cleaned = [clean_token(t) for t in tokens]
        out: List[TaggedToken] = []
        i = 0
        while i < len(tokens):
            span = self._match_phrase(cleaned, i)
            if span:
                out.append(TaggedToken(tokens[i], make_tag(BEGIN, EntityType.INGREDIENT)))
                for j in range(i + 1, i + span):
                    out.append(TaggedToken(tokens[j], make_tag(INSIDE, EntityType.INGREDIENT)))
                i += span
                continue

            tag = OUTSIDE
            if cleaned[i] and cleaned[i] in self._singles:
                tag = make_tag(BEGIN, EntityType.INGREDIENT)
            else:
                entity = self.keywords.lookup(cleaned[i])
                if entity is not None:
                    tag = make_tag(BEGIN, entity)
            out.append(TaggedToken(tokens[i], tag))
            i += 1
        return out

    def label_recipes(
        self,
        recipes: Iterable[Recipe],
        tokenizer: SpacyTokenizer,
        *,
        progress: bool = False,
    ) -> Iterator[LabeledSentence]:
        """
        Split every instruction into sentences and label each one.

        A recipe that yields no sentences is still reported once, as a
        ``LabeledSentence`` with no tokens, so corpus headers cover every recipe.
        """
        iterator = tqdm(recipes, desc="Labeling instructions", unit="recipe") if progress else recipes
        for recipe in iterator:
            emitted = False
            if recipe.instructions:
                for sentences in tokenizer.pipe_sentences(recipe.instructions):
                    for tokens in sentences:
                        emitted = True
                        yield LabeledSentence(recipe=recipe.name, tokens=self.label_tokens(tokens))
            if not emitted:
                logger.debug("Recipe %r has no instruction sentences", recipe.name)
                yield LabeledSentence(recipe=recipe.name, tokens=[])


def format_sentence(tagged: Iterable[TaggedToken]) -> str:
    """``"<token> <tag>"`` per line, blank line terminates the sentence."""
    return "".join(t.to_line() for t in tagged) + "\n"


def write_corpus(
    sentences: Iterable[LabeledSentence],
    path: Union[str, Path],
    *,
    recipe_headers: bool = False,
) -> Dict[str, int]:
    """
    Write sentences to one corpus file and return counts.

    With ``recipe_headers`` each recipe is introduced by ``# Recipe: <name>``
    and followed by an extra blank line. Token-less sentences only mark a
    recipe; they produce a header but no corpus lines.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    counts: Counter = Counter()
    current: Optional[str] = None

    with open(path, "w", encoding="utf-8") as f:
        for sent in sentences:
            if recipe_headers and sent.recipe != current:
                if current is not None:
                    f.write("\n")
                f.write(f"# Recipe: {sent.recipe}\n")
                counts["recipes"] += 1
            current = sent.recipe
            if not sent.tokens:
                continue
            f.write(format_sentence(sent.tokens))
            counts["sentences"] += 1
            counts["tokens"] += len(sent.tokens)
            counts["entities"] += sum(1 for t in sent.tokens if t.tag.startswith("B-"))
        if recipe_headers and current is not None:
            f.write("\n")

    logger.info(
        "Wrote %s sentences / %s tokens / %s entities to %s",
        counts["sentences"],
        counts["tokens"],
        counts["entities"],
        path,
    )
    return dict(counts)


def read_corpus(path: Union[str, Path]) -> Iterator[List[TaggedToken]]:
    """Read a corpus written by :func:`write_corpus` back into tagged sentences."""
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"Corpus not found at {p}")
    sentence: List[TaggedToken] = []
    with open(p, "r", encoding="utf-8") as f:
        for raw in f:
            line = raw.rstrip("\n")
            if line.startswith("# Recipe:"):
                continue
            if not line.strip():
                if sentence:
                    yield sentence
                    sentence = []
                continue
            text, _, tag = line.rpartition(" ")
            sentence.append(TaggedToken(text, tag))
    if sentence:
        yield sentence


# -----------------------------------------------------------------------------
# spaCy DocBin export
# -----------------------------------------------------------------------------

def sentence_to_doc(vocab: Vocab, sentence: LabeledSentence) -> Doc:
    return Doc(vocab, words=sentence.words, ents=sentence.tags)


def _flush_buffer(db: DocBin, index: int, out_dir: Path) -> Path:
    path = out_dir / f"shard_{index:04d}.spacy"
    db.to_disk(path)
    return path


def export_docbins(
    sentences: Iterable[LabeledSentence],
    out_dir: Union[str, Path],
    *,
    valid_fraction: float = 0.2,
    shard_size: int = 2000,
    seed: int = 42,
) -> Dict[str, int]:
    """
    Stream labeled sentences into train/valid ``DocBin`` shards under
    ``out_dir/train`` and ``out_dir/valid`` for a spaCy NER trainer.
    """
    out_dir = Path(out_dir)
    dirs = {"train": out_dir / "train", "valid": out_dir / "valid"}
    for p in dirs.values():
        if p.exists():
            shutil.rmtree(p)
        p.mkdir(parents=True, exist_ok=True)

    rng = random.Random(seed)
    vocab = Vocab()
    buffers = {split: DocBin(store_user_data=False) for split in dirs}
    counts = {split: 0 for split in dirs}
    shard_indices = {split: 0 for split in dirs}

    for sent in sentences:
        if not sent.tokens:
            continue
        split = "valid" if rng.random() < valid_fraction else "train"
        buffers[split].add(sentence_to_doc(vocab, sent))
        counts[split] += 1

        if len(buffers[split]) >= shard_size:
            _flush_buffer(buffers[split], shard_indices[split], dirs[split])
            buffers[split] = DocBin(store_user_data=False)
            shard_indices[split] += 1

    for split, db in buffers.items():
        if len(db) > 0:
            _flush_buffer(db, shard_indices[split], dirs[split])
            shard_indices[split] += 1

    logger.info("DocBin export: train=%s docs, valid=%s docs -> %s", counts["train"], counts["valid"], out_dir)
    return {
        "train_docs": counts["train"],
        "valid_docs": counts["valid"],
        "train_shards": shard_indices["train"],
        "valid_shards": shard_indices["valid"],
    }


__all__ = [
    "CorpusLabeler",
    "LabeledSentence",
    "format_sentence",
    "write_corpus",
    "read_corpus",
    "sentence_to_doc",
    "export_docbins",
]
