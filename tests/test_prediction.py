from __future__ import annotations

import unittest
from typing import List, Sequence

import spacy

from recipe_steps.models import Recipe
from recipe_steps.prediction import RecipeProcessor, SpacyTagPredictor
from recipe_steps.tokenization import SpacyTokenizer

PATTERNS = [
    {"label": "ACTION", "pattern": "Heat"},
    {"label": "TOOL", "pattern": "pan"},
    {"label": "INGREDIENT", "pattern": [{"LOWER": "coconut"}, {"LOWER": "milk"}]},
]


def ruler_pipeline():
    nlp = spacy.blank("en")
    ruler = nlp.add_pipe("entity_ruler")
    ruler.add_patterns(PATTERNS)
    return nlp


class FixedPredictor:
    def __init__(self, tags: List[str]) -> None:
        self.tags = tags

    def predict(self, tokens: Sequence[str]) -> List[str]:
        return list(self.tags)


class SpacyTagPredictorTests(unittest.TestCase):
    def test_predicts_bio_tags_per_token(self) -> None:
        predictor = SpacyTagPredictor(nlp=ruler_pipeline())
        self.assertEqual(
            predictor.predict(["Heat", "coconut", "milk", "in", "a", "pan"]),
            ["B-ACTION", "B-INGREDIENT", "I-INGREDIENT", "O", "O", "B-TOOL"],
        )

    def test_requires_a_model(self) -> None:
        with self.assertRaises(ValueError):
            SpacyTagPredictor()
        with self.assertRaises(FileNotFoundError):
            SpacyTagPredictor("/nonexistent/model-best")


class RecipeProcessorTests(unittest.TestCase):
    def setUp(self) -> None:
        self.tokenizer = SpacyTokenizer.from_nlp(spacy.blank("en"))

    def test_process_recipe(self) -> None:
        processor = RecipeProcessor(self.tokenizer, SpacyTagPredictor(nlp=ruler_pipeline()))
        recipe = Recipe(
            name="Payasam",
            instructions=("It is.", "Heat coconut milk in a pan.", "Stir gently."),
        )
        result = processor.process(recipe)
        self.assertEqual(result.name, "Payasam")
        self.assertEqual(len(result.steps), 2)

        first, second = result.steps
        self.assertEqual(first.index, 1)
        self.assertEqual(first.action, "Heat")
        self.assertEqual(first.ingredients, ["coconut milk"])
        self.assertEqual(first.tool, "pan")
        self.assertIsNone(first.parameters)

        self.assertEqual(second.index, 2)
        self.assertIsNone(second.action)
        self.assertEqual(second.parameters, "Stir gently")

    def test_recipe_without_instructions(self) -> None:
        processor = RecipeProcessor(self.tokenizer, FixedPredictor([]))
        with self.assertLogs("recipe_steps.prediction", level="WARNING"):
            result = processor.process(Recipe(name="Empty"))
        self.assertEqual(result.steps, [])

    def test_misaligned_predictions_are_rejected(self) -> None:
        processor = RecipeProcessor(self.tokenizer, FixedPredictor(["O"]))
        with self.assertRaises(ValueError):
            processor.process(Recipe(name="Bad", instructions=("Boil the rice.",)))


class TokenizerTests(unittest.TestCase):
    def test_sentences_keep_every_token(self) -> None:
        tokenizer = SpacyTokenizer(model="blank:en")
        self.assertEqual(
            tokenizer.sentences("Soak rice overnight. Grind to a batter!"),
            [["Soak", "rice", "overnight", "."], ["Grind", "to", "a", "batter", "!"]],
        )
        self.assertEqual(tokenizer.sentences("   "), [])

    def test_pipe_sentences_yields_per_text(self) -> None:
        tokenizer = SpacyTokenizer(model="blank:en")
        out = list(tokenizer.pipe_sentences(["Boil water.", "", "Serve."]))
        self.assertEqual(out, [[["Boil", "water", "."]], [], [["Serve", "."]]])

    def test_pos_tag_pairs(self) -> None:
        tokenizer = SpacyTokenizer(model="blank:en")
        self.assertEqual([w for w, _ in tokenizer.pos_tag("grated coconut")], ["grated", "coconut"])


if __name__ == "__main__":
    unittest.main()
