"""
llm.py — Classifier backends and the retrying batch classifier.

A classifier is any object with ``classify(prompt) -> str`` returning the raw
result text (JSON, possibly decorated).  Two backends ship with the package:

DroidExecClassifier
    Runs ``droid exec --output-format json`` as a child process and unwraps
    the JSON envelope it prints on stdout.

OpenAIClassifier
    Sends the prompt as a single-turn chat completion through the openai SDK.

classify_batch(records, classifier)
    Build the prompt for one batch, call the classifier, validate the
    ``{"items": [...]}`` response.  Up to 3 attempts with linear back-off
    (0.5 s, then 1.0 s); the last error propagates.
"""

import json
import logging
import re
import subprocess
import time

from openai import OpenAIError

from feed_classifier.errors import (
    MalformedResponseError,
    ToolError,
    ToolInvocationError,
    ToolResponseError,
)
from feed_classifier.prompts import prompt_construct_classify_feed

logger = logging.getLogger(__name__)

MAX_ATTEMPTS = 3
BACKOFF_SECONDS = 0.5

_ANSI_RE = re.compile(r"\x1b\[[0-9;?]*[ -/]*[@-~]")


def strip_ansi(text: str) -> str:
    return _ANSI_RE.sub("", text or "")


def _strip_fenced_json(text: str) -> str:
    """Remove markdown code fences if the model wrapped its JSON output in them."""
    text = text.strip()
    match = re.search(r"```(?:json)?\s*(\{.*?\}|\[.*?\])\s*```", text, re.DOTALL)
    if match:
        return match.group(1).strip()
    return text


def extract_result_text(stdout: str) -> str:
    """Pull the ``result`` (or ``text``) field out of the droid JSON envelope."""
    try:
        envelope = json.loads(strip_ansi(stdout) or "{}")
    except json.JSONDecodeError as e:
        raise ToolResponseError(f"Unable to parse droid exec output: {e}") from e

    raw = None
    if isinstance(envelope, dict):
        raw = envelope.get("result") or envelope.get("text")
    if raw is not None and not isinstance(raw, str):
        raise ToolResponseError(f"Unable to parse droid exec output: result is {type(raw).__name__}")

    result_text = strip_ansi((raw or "").strip()).strip()
    if not result_text:
        raise ToolResponseError("Empty result from droid exec")
    return result_text


def parse_items(result_text: str) -> list:
    try:
        parsed = json.loads(strip_ansi(result_text))
    except json.JSONDecodeError as e:
        raise ToolResponseError(f"Unable to parse classifier response: {e}") from e
    if not isinstance(parsed, dict) or not isinstance(parsed.get("items"), list):
        raise MalformedResponseError("Model response missing items array")
    return parsed["items"]


class DroidExecClassifier:
    def __init__(self, model=None, reasoning=None, executable="droid"):
        self.model = model
        self.reasoning = reasoning
        self.executable = executable

    def build_command(self, prompt):
        cmd = [self.executable, "exec", "--output-format", "json"]
        if self.model:
            cmd += ["-m", self.model]
        if self.reasoning and self.reasoning != "off":
            cmd += ["-r", self.reasoning]
        cmd.append(prompt)
        return cmd

    def classify(self, prompt: str) -> str:
        try:
            proc = subprocess.run(
                self.build_command(prompt),
                stdin=subprocess.DEVNULL,
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
            )
        except OSError as e:
            raise ToolInvocationError(f"Unable to start {self.executable}: {e}") from e

        if proc.returncode != 0:
            detail = proc.stderr or proc.stdout
            raise ToolInvocationError(
                f"droid exec failed (code {proc.returncode}): {detail}",
                returncode=proc.returncode,
                stderr=proc.stderr,
            )
        return extract_result_text(proc.stdout)


class OpenAIClassifier:
    def __init__(self, client, model, temperature=0.0, max_tokens=4096, force_json_mode=False):
        self.client = client
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.force_json_mode = force_json_mode

    def classify(self, prompt: str) -> str:
        kwargs = dict(
            model=self.model,
            temperature=self.temperature,
            max_tokens=self.max_tokens,
            messages=[
                {"role": "system", "content": "You are a helpful assistant designed to output JSON."},
                {"role": "user", "content": prompt},
            ],
        )
        if self.force_json_mode:
            kwargs["response_format"] = {"type": "json_object"}

        try:
            completion = self.client.chat.completions.create(**kwargs)
        except OpenAIError as e:
            raise ToolInvocationError(f"Chat completion failed: {e}") from e

        raw = completion.choices[0].message.content if completion.choices else None
        result_text = _strip_fenced_json(strip_ansi(raw or ""))
        if not result_text:
            raise ToolResponseError("Empty result from chat completion")
        return result_text


def classify_batch(records, classifier, max_attempts=MAX_ATTEMPTS, sleep=time.sleep):
    prompt = prompt_construct_classify_feed(records)
    for attempt in range(1, max_attempts + 1):
        try:
            return parse_items(classifier.classify(prompt))
        except ToolError as e:
            if attempt >= max_attempts:
                logger.error("Batch failed after %d attempts: %s", attempt, e)
                raise
            delay = BACKOFF_SECONDS * attempt
            logger.warning("[retry] attempt %d/%d failed (%s), retrying in %.1fs...",
                           attempt, max_attempts, e, delay)
            sleep(delay)
