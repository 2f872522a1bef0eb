"""spaCy-backed tokenizer, sentence splitter and POS tagger."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, Iterator, List, Optional, Tuple

import spacy
from spacy.language import Language
from spacy.pipeline import Sentencizer
from spacy.tokens import Doc

logger = logging.getLogger(__name__)

Sentence = List[str]

_SENTENCE_PIPES = ("parser", "senter", "sentencizer")


def _doc_sentences(doc: Doc) -> List[Sentence]:
    out: List[Sentence] = []
    for sent in doc.sents:
        tokens = [t.text for t in sent if not t.is_space]
        if tokens:
            out.append(tokens)
    return out


@dataclass
class SpacyTokenizer:
    """
    Thin wrapper around a spaCy pipeline.

    Token order is preserved and no non-whitespace token is dropped, so
    labels and predictions stay aligned with the tokens they describe.
    Only the components needed for tokens, sentences and POS tags are kept.
    ``model="blank:en"`` gives a rule-based tokenizer without a tagger.

    A pipeline passed in through :meth:`from_nlp` is never modified; if it
    has no sentence boundary component, a standalone ``Sentencizer`` is run
    over each doc instead.
    """

    model: str = "en_core_web_sm"
    batch_size: int = 128
    n_process: int = 1
    nlp: Optional[Language] = field(default=None, repr=False)
    _sentencizer: Optional[Sentencizer] = field(default=None, init=False, repr=False)

    def __post_init__(self) -> None:
        owned = self.nlp is None
        if owned:
            if self.model.startswith("blank:"):
                # tokenizer only, no POS tags
                self.nlp = spacy.blank(self.model.split(":", 1)[1])
            else:
                self.nlp = spacy.load(self.model, disable=["ner", "textcat", "lemmatizer"])
            logger.info("Loaded spaCy pipeline %s (%s)", self.model, ", ".join(self.nlp.pipe_names))
        if not any(self.nlp.has_pipe(name) for name in _SENTENCE_PIPES):
            if owned:
                self.nlp.add_pipe("sentencizer")
            else:
                self._sentencizer = Sentencizer()

    @classmethod
    def from_nlp(cls, nlp: Language, *, batch_size: int = 128, n_process: int = 1) -> "SpacyTokenizer":
        return cls(model=nlp.meta.get("name", "custom"), batch_size=batch_size, n_process=n_process, nlp=nlp)

    def _split(self, doc: Doc) -> List[Sentence]:
        if not len(doc):
            return []
        if self._sentencizer is not None:
            doc = self._sentencizer(doc)
        return _doc_sentences(doc)

    def sentences(self, text: str) -> List[Sentence]:
        text = (text or "").strip()
        if not text:
            return []
        return self._split(self.nlp(text))

    def pipe_sentences(self, texts: Iterable[str]) -> Iterator[List[Sentence]]:
        """Batched version of :meth:`sentences`; yields one result per input text."""
        docs = self.nlp.pipe(
            ((t or "").strip() for t in texts),
            batch_size=self.batch_size,
            n_process=max(self.n_process, 1),
        )
        for doc in docs:
            yield self._split(doc)

    def pos_tag(self, text: str) -> List[Tuple[str, str]]:
        """(token text, Penn Treebank tag) pairs for ``text``."""
        text = (text or "").strip()
        if not text:
            return []
        return [(t.text, t.tag_) for t in self.nlp(text) if not t.is_space]


__all__ = ["SpacyTokenizer", "Sentence"]
