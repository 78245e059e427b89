"""
prompts.py — Instruction text sent to the classifier.

All functions are pure (no I/O, no side-effects).

Functions
---------
build_payload(records)
    Reduce each record to id / source / author / truncated content.

prompt_construct_classify_feed(records)
    Full instruction text for one batch: label definitions, the required
    JSON schema, and the batch payload.
"""

import json

LABELS = ("mention", "bug", "love", "question", "other")

CONTENT_LIMIT = 800


def build_payload(records):
    # hard cut at CONTENT_LIMIT characters, no word-boundary handling
    return [
        {
            "id": record.get("id"),
            "source": record.get("source"),
            "author": record.get("author"),
            "content": (record.get("content") or "")[:CONTENT_LIMIT],
        }
        for record in records
    ]


def prompt_construct_classify_feed(records):
    json_example = {
        "items": [
            {"id": "id", "label": "|".join(LABELS), "confidence": "0-1", "reason": "short justification"}
        ]
    }
    prompt = (
        "You are a precise classifier for Factory's social feed. "
        f"For each post you must label it as one of: {', '.join(LABELS)}.\n\n"
        "Definitions:\n"
        "- mention: Factory is referenced but no action needed.\n"
        "- bug: user reports an issue, blocker, or something broken.\n"
        "- love: positive sentiment or praise for Factory.\n"
        "- question: explicit question for Factory or about the product.\n"
        "- other: none of the above categories apply.\n\n"
    )
    prompt += f"Return JSON ONLY in this schema:\n{json.dumps(json_example)}\n"
    prompt += "Never add markdown or prose outside that JSON.\n\n"
    prompt += f"Posts:\n{json.dumps(build_payload(records), indent=2, ensure_ascii=False)}\n"
    return prompt
