"""
client.py — OpenAI-compatible client factory for the openai backend.

Used only when the pipeline runs with ``--backend openai``.  The client talks
to OpenRouter by default, or to any endpoint named by OPENAI_BASE_URL.

Usage
-----
    from feed_classifier.client import make_client

    client = make_client()
    response = client.chat.completions.create(model=..., ...)
"""

from __future__ import annotations

import os
from typing import Mapping

from openai import OpenAI


def provider_headers(environ: Mapping[str, str]) -> dict[str, str]:
    """Attribution headers OpenRouter asks for (HTTP-Referer, X-Title)."""
    headers: dict[str, str] = {}
    if environ.get("LLM_PROVIDER", "openrouter").lower() == "openrouter":
        if site_url := environ.get("OR_SITE_URL", ""):
            headers["HTTP-Referer"] = site_url
        if app_name := environ.get("OR_APP_NAME", "classify-feed"):
            headers["X-Title"] = app_name
    return headers


def make_client(environ: Mapping[str, str] | None = None) -> OpenAI:
    """Build and return an OpenAI-compatible client from *environ* (default: os.environ)."""
    environ = os.environ if environ is None else environ
    return OpenAI(
        api_key=environ["OPENAI_API_KEY"],
        base_url=environ.get("OPENAI_BASE_URL") or None,
        default_headers=provider_headers(environ) or None,
    )
