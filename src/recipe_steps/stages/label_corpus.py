"""Auto-label recipe instructions into a BIO training corpus."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Optional

from recipe_steps.io import load_recipes
from recipe_steps.keywords import KeywordTables
from recipe_steps.labeling import CorpusLabeler, export_docbins, write_corpus
from recipe_steps.vocabulary import load_vocabulary

from ..core import PipelineContext, StageResult
from ..utils import bool_from_cfg, stage_logger, tokenizer_from_cfg


def run(
    context: PipelineContext,
    *,
    recipes_json: Optional[Path] = None,
    vocabulary_json: Optional[Path] = None,
    out_path: Optional[Path] = None,
    force: bool = False,
) -> StageResult:
    cfg = context.stage("label_corpus", required=False)
    logger = stage_logger(context, "label_corpus", force=force)

    try:
        recipes_path = context.artifact("recipes_json", recipes_json or cfg.get("recipes_json"))
        vocab_path = context.artifact("vocabulary_json", vocabulary_json or cfg.get("vocabulary_json"))
        corpus_path = context.artifact("corpus_txt", out_path or cfg.get("out_path"))

        recipes = load_recipes(recipes_path)
        vocab = load_vocabulary(vocab_path)
        keywords = KeywordTables.from_mapping(context.stage("keywords", required=False))
        tokenizer = tokenizer_from_cfg(context.stage("spacy", required=False))
        labeler = CorpusLabeler(vocab, keywords)
        logger.info("Labeling with %s vocabulary terms (%s multi-word)", len(vocab), len(vocab.multiword))

        # Materialised once so the text corpus and DocBins see identical sentences.
        sentences = list(labeler.label_recipes(recipes, tokenizer, progress=True))
        counts = write_corpus(
            sentences,
            corpus_path,
            recipe_headers=bool_from_cfg(cfg.get("recipe_headers"), False),
        )
        outputs: Dict[str, Any] = {"corpus_txt": str(corpus_path), **counts}

        docbin_cfg = cfg.get("docbins") or {}
        if bool_from_cfg(docbin_cfg.get("enabled"), False):
            docbin_dir = context.artifact("docbin_dir", docbin_cfg.get("out_dir"))
            logger.info("Exporting DocBin shards to %s", docbin_dir)
            outputs.update(
                export_docbins(
                    sentences,
                    docbin_dir,
                    valid_fraction=float(docbin_cfg.get("valid_fraction", 0.2)),
                    shard_size=int(docbin_cfg.get("shard_size", 2000)),
                    seed=int(docbin_cfg.get("random_seed", 42)),
                )
            )
            outputs["docbin_dir"] = str(docbin_dir)
        else:
            logger.info("DocBin export disabled (label_corpus.docbins.enabled=false).")

        return StageResult(name="label_corpus", status="success", outputs=outputs)
    except Exception as exc:  # pragma: no cover - pipeline runner logs
        logger.exception("Corpus labeling failed: %s", exc)
        return StageResult(name="label_corpus", status="failed", details=str(exc))
