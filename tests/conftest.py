import json
import logging

import pytest

from feed_classifier.config import Settings


def make_record(i, **extra):
    record = {
        "id": f"post-{i}",
        "source": "twitter",
        "author": f"user{i}",
        "content": f"post number {i} about factory",
    }
    record.update(extra)
    return record


def posts_from_prompt(prompt):
    """Recover the batch payload embedded at the end of a classification prompt."""
    return json.loads(prompt.split("Posts:\n", 1)[1])


class ScriptedClassifier:
    """Returns (or raises) the scripted responses in order and records every prompt."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.prompts = []

    def classify(self, prompt):
        self.prompts.append(prompt)
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


class EchoClassifier:
    """Labels every submitted post with *label*, echoing back its id."""

    def __init__(self, label="bug", confidence=0.9):
        self.label = label
        self.confidence = confidence
        self.batches = []

    def classify(self, prompt):
        posts = posts_from_prompt(prompt)
        self.batches.append([post["id"] for post in posts])
        items = [
            {"id": post["id"], "label": self.label, "confidence": self.confidence, "reason": "stub"}
            for post in posts
        ]
        return json.dumps({"items": items})


@pytest.fixture
def records():
    return [make_record(i) for i in range(1, 13)]


@pytest.fixture
def feed_file(tmp_path):
    def _write(feed, name="feed.json"):
        path = tmp_path / name
        path.write_text(json.dumps(feed), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def settings_for(tmp_path):
    def _settings(input_path, **overrides):
        values = dict(
            input_path=input_path,
            output_path=input_path,
            stats_path=tmp_path / "classification-stats.json",
            max_batch=5,
        )
        values.update(overrides)
        return Settings(**values)

    return _settings


@pytest.fixture
def sleeps():
    """Pass ``sleep=sleeps.append`` to record back-off delays instead of waiting."""
    return []


@pytest.fixture(autouse=True)
def restore_root_logging():
    """setup_logging() replaces root handlers; put pytest's back afterwards."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
