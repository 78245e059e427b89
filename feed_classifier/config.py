"""
config.py — Runtime configuration for the classify-feed pipeline.

Defaults come from environment variables (populated by python-dotenv / .env)
and are resolved exactly once into a frozen Settings instance by
load_settings().  Every other module receives that instance as an argument
instead of re-reading os.environ itself.

Environment
-----------
  FACTORY_API_KEY          credential required by the droid backend
  CLASSIFIER_MAX_BATCH     default batch size (10)
  MODEL_ID, GLM_MODEL_ID   model identifier, first one set wins (glm-4.6)
  MODEL_REASONING,
  GLM_REASONING            reasoning effort, "off" disables the flag (low)
  CLASSIFIER_BACKEND       "droid" (default) or "openai"
  DROID_BIN                droid executable (droid)

  OPENAI_API_KEY           credential required by the openai backend
  LLM_TEMPERATURE, LLM_MAX_TOKENS, LLM_FORCE_JSON_MODE
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

from dotenv import load_dotenv

from feed_classifier.errors import ConfigurationError

DEFAULT_LABEL_FIELD = "classification"
DEFAULT_MAX_BATCH = 10
DEFAULT_MODEL = "glm-4.6"
DEFAULT_REASONING = "low"
DEFAULT_BACKEND = "droid"
STATS_FILENAME = "classification-stats.json"

BACKENDS = ("droid", "openai")

# Credential each backend needs before any feed I/O happens
CREDENTIAL_ENV = {
    "droid": "FACTORY_API_KEY",
    "openai": "OPENAI_API_KEY",
}


@dataclass(frozen=True)
class Settings:
    input_path: Path
    output_path: Path
    stats_path: Path
    label_field: str = DEFAULT_LABEL_FIELD
    dry_run: bool = False
    max_batch: int = DEFAULT_MAX_BATCH
    model: str = DEFAULT_MODEL
    reasoning: str = DEFAULT_REASONING
    backend: str = DEFAULT_BACKEND
    droid_bin: str = "droid"
    temperature: float = 0.0
    max_tokens: int = 4096
    force_json_mode: bool = False


def _first_env(environ: Mapping[str, str], *names: str, default: str) -> str:
    for name in names:
        value = environ.get(name)
        if value:
            return value
    return default


def parse_batch_size(value) -> int:
    """Return *value* as a positive int or raise ConfigurationError."""
    try:
        size = int(value)
    except (TypeError, ValueError):
        raise ConfigurationError(f"Invalid batch size: {value!r}") from None
    if size <= 0:
        raise ConfigurationError(f"Batch size must be positive, got {size}")
    return size


def load_settings(args, environ: Mapping[str, str] | None = None) -> Settings:
    """
    Resolve CLI arguments and environment defaults into a Settings object.

    *args* is the argparse namespace from build_parser().  When *environ* is
    None the process environment is used after loading .env (without
    overriding variables that are already set).

    Raises ConfigurationError for a missing input path, an unknown backend,
    a bad batch size or a missing credential.  No file is touched here.
    """
    if environ is None:
        load_dotenv(override=False)
        environ = os.environ

    if not args.input:
        raise ConfigurationError("Missing --input <path>")

    backend = (args.backend or environ.get("CLASSIFIER_BACKEND") or DEFAULT_BACKEND).lower()
    if backend not in BACKENDS:
        raise ConfigurationError(f"Unknown backend {backend!r} (expected one of {', '.join(BACKENDS)})")

    max_batch = parse_batch_size(
        args.max_batch if args.max_batch is not None
        else environ.get("CLASSIFIER_MAX_BATCH") or DEFAULT_MAX_BATCH
    )

    credential = CREDENTIAL_ENV[backend]
    if not environ.get(credential):
        raise ConfigurationError(f"{credential} is required for {backend} classification.")

    input_path = Path(args.input).resolve()
    output_path = Path(args.output or args.input).resolve()
    stats_path = Path(args.stats).resolve() if args.stats else output_path.parent / STATS_FILENAME

    try:
        temperature = float(environ.get("LLM_TEMPERATURE", "0"))
        max_tokens = int(environ.get("LLM_MAX_TOKENS", "4096"))
    except ValueError as e:
        raise ConfigurationError(f"Invalid LLM setting: {e}") from None

    return Settings(
        input_path=input_path,
        output_path=output_path,
        stats_path=stats_path,
        label_field=args.label_field or DEFAULT_LABEL_FIELD,
        dry_run=bool(args.dry_run),
        max_batch=max_batch,
        model=args.model or _first_env(environ, "MODEL_ID", "GLM_MODEL_ID", default=DEFAULT_MODEL),
        reasoning=args.reasoning or _first_env(
            environ, "MODEL_REASONING", "GLM_REASONING", default=DEFAULT_REASONING
        ),
        backend=backend,
        droid_bin=environ.get("DROID_BIN") or "droid",
        temperature=temperature,
        max_tokens=max_tokens,
        force_json_mode=environ.get("LLM_FORCE_JSON_MODE", "false").lower() == "true",
    )
