from __future__ import annotations

import json
import tempfile
import unittest
from pathlib import Path
from typing import List, Tuple

from recipe_steps.models import Ingredient, Recipe
from recipe_steps.vocabulary import (
    Vocabulary,
    build_vocabulary,
    clean_phrase,
    clean_token,
    load_vocabulary,
    save_vocabulary,
)

TAGS = {"to": "TO", "for": "IN", "taste": "VB", "frying": "VBG", "of": "IN"}


def fake_tagger(phrase: str) -> List[Tuple[str, str]]:
    return [(w, TAGS.get(w, "NN")) for w in phrase.split()]


def recipe(*names: str) -> Recipe:
    return Recipe(name="r", ingredients=tuple(Ingredient(amount=1.0, unit="", name=n) for n in names))


class CleaningTests(unittest.TestCase):
    def test_clean_phrase(self) -> None:
        self.assertEqual(clean_phrase("  Green Chillies (2), slit "), "green chillies slit")
        self.assertEqual(clean_phrase("1/2 tsp"), "tsp")
        self.assertEqual(clean_phrase("Sautéed Onions!"), "sautéed onions")
        self.assertEqual(clean_phrase("123 - 45"), "")

    def test_unicode_numerals_are_not_letters(self) -> None:
        self.assertEqual(clean_phrase("½ cup ghee"), "cup ghee")
        self.assertEqual(clean_phrase("¼ tsp jeera, 10cm² piece"), "tsp jeera cm piece")
        self.assertEqual(clean_phrase("½ ¾"), "")
        self.assertEqual(clean_token("½"), "")
        self.assertEqual(clean_token("cm²"), "cm")
        self.assertEqual(clean_token("Sauté"), "sauté")

    def test_numeral_head_word_is_dropped(self) -> None:
        vocab = build_vocabulary([recipe("ghee ½", "¼")], fake_tagger)
        self.assertEqual(vocab.entries, ("ghee",))

    def test_clean_token(self) -> None:
        self.assertEqual(clean_token("Coconut,"), "coconut")
        self.assertEqual(clean_token("350F"), "f")
        self.assertEqual(clean_token("--"), "")


class BuildVocabularyTests(unittest.TestCase):
    def test_full_phrases_and_head_words(self) -> None:
        vocab = build_vocabulary(
            [
                recipe("Grated Coconut", "Salt to taste", "Oil, for frying"),
                recipe("Green Chillies", "1/2", "Salt"),
            ],
            fake_tagger,
        )
        self.assertEqual(
            vocab.entries,
            (
                "grated coconut",
                "coconut",
                "salt to taste",
                "oil for frying",
                "green chillies",
                "chillies",
                "salt",
            ),
        )

    def test_preposition_head_is_skipped(self) -> None:
        vocab = build_vocabulary([recipe("cup of")], fake_tagger)
        self.assertEqual(vocab.entries, ("cup of",))

    def test_single_token_phrase_has_no_head_word(self) -> None:
        calls = []

        def tagger(phrase: str):
            calls.append(phrase)
            return [(phrase, "NN")]

        vocab = build_vocabulary([recipe("Jaggery")], tagger)
        self.assertEqual(vocab.entries, ("jaggery",))
        self.assertEqual(calls, ["jaggery"])

    def test_empty_names_are_skipped(self) -> None:
        vocab = build_vocabulary([recipe("", "42", "!!"), Recipe(name="none")], fake_tagger)
        self.assertEqual(len(vocab), 0)

    def test_building_twice_gives_same_vocabulary(self) -> None:
        recipes = [recipe("Coconut Milk", "Curry Leaves"), recipe("coconut milk", "Mustard Seeds")]
        first = build_vocabulary(recipes, fake_tagger)
        second = build_vocabulary(recipes, fake_tagger)
        self.assertEqual(set(first), set(second))
        self.assertEqual(first, second)


class VocabularyTests(unittest.TestCase):
    def test_duplicates_collapse(self) -> None:
        vocab = Vocabulary(["salt", "salt", " salt ", "black  pepper", "black pepper"])
        self.assertEqual(vocab.entries, ("salt", "black pepper"))
        self.assertIn("black pepper", vocab)

    def test_multiword_order_is_longest_first_then_lexicographic(self) -> None:
        vocab = Vocabulary(["b c", "rice", "c d e", "a b"])
        self.assertEqual(vocab.multiword, (("c", "d", "e"), ("a", "b"), ("b", "c")))
        self.assertEqual(vocab.single_words, frozenset({"rice"}))

    def test_multiword_cache_refreshes_on_add(self) -> None:
        vocab = Vocabulary(["a b"])
        self.assertEqual(len(vocab.multiword), 1)
        vocab.add("x y z")
        self.assertEqual(vocab.multiword[0], ("x", "y", "z"))

    def test_save_and_load(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            path = Path(temp_dir) / "nested" / "vocab.json"
            save_vocabulary(Vocabulary(["coconut milk", "coconut", "rice"]), path)
            payload = json.loads(path.read_text(encoding="utf-8"))
            self.assertEqual(payload, {"terms": ["coconut milk", "coconut", "rice"]})
            self.assertEqual(load_vocabulary(path).entries, ("coconut milk", "coconut", "rice"))

    def test_load_bare_list(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            path = Path(temp_dir) / "vocab.json"
            path.write_text(json.dumps(["Coconut Milk", "rice", ""]), encoding="utf-8")
            self.assertEqual(load_vocabulary(path).entries, ("coconut milk", "rice"))

    def test_load_missing_file(self) -> None:
        with self.assertRaises(FileNotFoundError):
            load_vocabulary("/nonexistent/vocab.json")

    def test_load_rejects_other_shapes(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            path = Path(temp_dir) / "vocab.json"
            path.write_text(json.dumps({"words": []}), encoding="utf-8")
            with self.assertRaises(ValueError):
                load_vocabulary(path)


if __name__ == "__main__":
    unittest.main()
