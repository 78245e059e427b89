"""
classification.py — Classify unlabeled feed records with an external LLM tool.

For the feed file given by --input, this script:
  1. Loads the JSON array of records.
  2. Selects the records that have no label under --label-field.
  3. Splits them into batches of --max-batch (default 10) and sends each batch,
     in order, to the classifier.  A batch gets 3 attempts; if the last one
     fails the whole run stops and nothing is written.
  4. Merges the returned labels into the records by id.
  5. Writes the records back to --output (default: the input file) and the
     label counts to --stats (default: classification-stats.json next to the
     output).

With --dry-run the classifier is still called, but a sample of the results is
logged instead of merging and writing anything.

Run states
----------
  LOADING -> SELECTING -> DONE                                 (nothing pending)
  LOADING -> SELECTING -> BATCHING -> CLASSIFYING -> MERGING
          -> PERSISTING -> REPORTING -> DONE
  CLASSIFYING -> FAILED                                        (batch exhausted retries)

Usage
-----
    classify-feed --input data/feed.json --max-batch 5
    classify-feed -i data/feed.json -o out/feed.json --backend openai --model openai/gpt-4o-mini
"""

import argparse
import json
import logging
import sys
import time
from dataclasses import dataclass, field
from enum import Enum

from feed_classifier.batching import batch, select_pending
from feed_classifier.client import make_client
from feed_classifier.config import load_settings
from feed_classifier.data import load_feed, write_json, write_json_files
from feed_classifier.errors import FeedClassifierError
from feed_classifier.llm import DroidExecClassifier, OpenAIClassifier, classify_batch
from feed_classifier.logging_config import setup_logging
from feed_classifier.merge import apply_classifications
from feed_classifier.stats import compute_stats

logger = logging.getLogger(__name__)

DRY_RUN_SAMPLE = 2


class RunState(str, Enum):
    LOADING = "loading"
    SELECTING = "selecting"
    BATCHING = "batching"
    CLASSIFYING = "classifying"
    MERGING = "merging"
    PERSISTING = "persisting"
    REPORTING = "reporting"
    DONE = "done"
    FAILED = "failed"


@dataclass
class RunSummary:
    state: RunState = RunState.LOADING
    pending: int = 0
    batch_sizes: list[int] = field(default_factory=list)
    results: list[dict] = field(default_factory=list)
    updated: int = 0
    stats: dict | None = None

    def advance(self, state: RunState) -> None:
        logger.debug("state: %s -> %s", self.state.value, state.value)
        self.state = state


def make_classifier(settings, environ=None):
    if settings.backend == "openai":
        return OpenAIClassifier(
            make_client(environ),
            model=settings.model,
            temperature=settings.temperature,
            max_tokens=settings.max_tokens,
            force_json_mode=settings.force_json_mode,
        )
    return DroidExecClassifier(
        model=settings.model,
        reasoning=settings.reasoning,
        executable=settings.droid_bin,
    )


def classify_pending(pending, classifier, max_batch, summary, sleep=time.sleep):
    """Classify *pending* batch by batch; any unrecoverable batch error propagates."""
    batches = list(batch(pending, max_batch))
    summary.advance(RunState.CLASSIFYING)
    for i, chunk in enumerate(batches, start=1):
        logger.info("→ Batch %d/%d of %d items", i, len(batches), len(chunk))
        summary.batch_sizes.append(len(chunk))
        summary.results.extend(classify_batch(chunk, classifier, sleep=sleep))
    return summary.results


def run(settings, classifier, sleep=time.sleep) -> RunSummary:
    summary = RunSummary()
    feed = load_feed(settings.input_path)

    summary.advance(RunState.SELECTING)
    pending = select_pending(feed, settings.label_field)
    summary.pending = len(pending)

    if not pending:
        logger.info("No items require classification.")
        if not settings.dry_run:
            summary.stats = compute_stats(feed, settings.label_field)
            write_json(settings.stats_path, summary.stats)
            logger.info("Stats saved to %s", settings.stats_path)
        summary.advance(RunState.DONE)
        return summary

    summary.advance(RunState.BATCHING)
    logger.info("Classifying %d item(s) with batches of %d...", len(pending), settings.max_batch)
    try:
        results = classify_pending(pending, classifier, settings.max_batch, summary, sleep=sleep)
    except FeedClassifierError:
        summary.advance(RunState.FAILED)
        raise

    if settings.dry_run:
        logger.info("Dry run complete. Sample response: %s",
                    json.dumps(results[:DRY_RUN_SAMPLE], indent=2, ensure_ascii=False))
        summary.advance(RunState.DONE)
        return summary

    summary.advance(RunState.MERGING)
    summary.updated = apply_classifications(feed, results, settings.label_field)
    logger.info("Merged %d/%d classification(s)", summary.updated, len(pending))

    summary.advance(RunState.PERSISTING)
    summary.stats = compute_stats(feed, settings.label_field)
    write_json_files([(settings.output_path, feed), (settings.stats_path, summary.stats)])

    summary.advance(RunState.REPORTING)
    logger.info("Classification saved to %s", settings.output_path)
    logger.info("Stats saved to %s", settings.stats_path)
    for label, count in summary.stats["counts"].items():
        logger.info("  %s: %d", label, count)

    summary.advance(RunState.DONE)
    return summary


def main(args, environ=None):
    setup_logging(args.log_file)
    start = time.time()

    settings = load_settings(args, environ)
    logger.info("=== classify-feed ===")
    logger.info("Input   : %s", settings.input_path)
    logger.info("Backend : %s  |  model: %s  |  reasoning: %s",
                settings.backend, settings.model, settings.reasoning)

    summary = run(settings, make_classifier(settings, environ))
    logger.info("Done in %.1fs", time.time() - start)
    return summary


def build_parser():
    parser = argparse.ArgumentParser(description="Classify unlabeled social feed records with an LLM tool.")
    parser.add_argument("--input", "-i", type=str, help="Feed file (JSON array of records)")
    parser.add_argument("--output", "-o", type=str, help="Where to write the classified feed (default: --input)")
    parser.add_argument("--stats", type=str,
                        help="Stats file (default: classification-stats.json next to --output)")
    parser.add_argument("--label-field", type=str, default=None,
                        help="Record field holding the classification (default: classification)")
    parser.add_argument("--dry-run", action="store_true",
                        help="Classify and print a sample without writing any file")
    parser.add_argument("--max-batch", type=str, default=None,
                        help="Records per classifier call (default: $CLASSIFIER_MAX_BATCH or 10)")
    parser.add_argument("--model", type=str, default=None,
                        help="Model id (default: $MODEL_ID, $GLM_MODEL_ID or glm-4.6)")
    parser.add_argument("--reasoning", type=str, default=None,
                        help="Reasoning effort, 'off' to omit (default: $MODEL_REASONING, $GLM_REASONING or low)")
    parser.add_argument("--backend", type=str, choices=["droid", "openai"], default=None,
                        help="Classifier backend (default: $CLASSIFIER_BACKEND or droid)")
    parser.add_argument("--log-file", type=str, default=None, help="Also write a DEBUG log to this file")
    return parser


def main_cli(argv=None):
    """Console-script entry point (registered in pyproject.toml)."""
    try:
        main(build_parser().parse_args(argv))
    except FeedClassifierError as e:
        logger.error("[classify-feed] Error: %s", e)
        sys.exit(1)


if __name__ == "__main__":
    main_cli()
