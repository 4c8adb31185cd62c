"""Prompt enrichment applied to raw questions before completion."""

from __future__ import annotations

_PROMPT_PREFIX = "rewrite "
_PROMPT_SUFFIX = "in the voice of Shakespeare"


def enrich(question: str) -> str:
    """Wrap a raw question in the fixed Shakespeare rewrite instruction."""

    # No separator between question and suffix; existing clients depend on it.
    return _PROMPT_PREFIX + question + _PROMPT_SUFFIX
