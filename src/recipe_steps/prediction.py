"""Classifier adapter and the recipe-level instruction processor."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional, Protocol, Sequence, Union

import spacy
from spacy.language import Language
from spacy.tokens import Doc

from .decoding import StepDecoder
from .models import OUTSIDE, Recipe, StructuredRecipe
from .tokenization import SpacyTokenizer

logger = logging.getLogger(__name__)


class TagPredictor(Protocol):
    def predict(self, tokens: Sequence[str]) -> List[str]:
        """One BIO tag per input token, same order."""
        ...


class SpacyTagPredictor:
    """Runs a trained spaCy NER pipeline over pre-tokenised sentences."""

    def __init__(self, model_dir: Union[str, Path, None] = None, *, nlp: Optional[Language] = None) -> None:
        if nlp is None:
            if model_dir is None:
                raise ValueError("Provide model_dir or nlp")
            model_dir = Path(model_dir)
            if not model_dir.exists():
                raise FileNotFoundError(
                    f"Model directory not found: {model_dir}. Train an NER model on the labeled corpus first."
                )
            nlp = spacy.load(model_dir)
            logger.info("Loaded NER model from %s", model_dir)
        if not nlp.has_pipe("ner") and not nlp.has_pipe("entity_ruler"):
            logger.warning("Pipeline %s has no ner/entity_ruler component; every tag will be O", nlp.pipe_names)
        self.nlp = nlp

    def predict(self, tokens: Sequence[str]) -> List[str]:
        doc = Doc(self.nlp.vocab, words=list(tokens))
        for _, proc in self.nlp.pipeline:
            doc = proc(doc)
        return [f"{t.ent_iob_}-{t.ent_type_}" if t.ent_iob_ in ("B", "I") else OUTSIDE for t in doc]


class RecipeProcessor:
    """Sentence-split a recipe's instructions, tag each sentence, decode steps."""

    def __init__(
        self,
        tokenizer: SpacyTokenizer,
        predictor: TagPredictor,
        decoder: Optional[StepDecoder] = None,
    ) -> None:
        self.tokenizer = tokenizer
        self.predictor = predictor
        self.decoder = decoder or StepDecoder()

    def _tagged_sentences(self, text: str):
        for tokens in self.tokenizer.sentences(text):
            tags = self.predictor.predict(tokens)
            if len(tags) != len(tokens):
                raise ValueError(f"Predictor returned {len(tags)} tags for {len(tokens)} tokens")
            yield tokens, tags

    def process(self, recipe: Recipe) -> StructuredRecipe:
        if not recipe.instructions:
            logger.warning("Recipe %r has no instructions to process", recipe.name)
            return StructuredRecipe(name=recipe.name, steps=[])
        text = " ".join(recipe.instructions)
        steps = self.decoder.decode_recipe(self._tagged_sentences(text))
        logger.debug("Recipe %r -> %s steps", recipe.name, len(steps))
        return StructuredRecipe(name=recipe.name, steps=steps)


__all__ = ["TagPredictor", "SpacyTagPredictor", "RecipeProcessor"]
