"""Completion client protocol and a fixed-response implementation."""

from __future__ import annotations

from typing import Protocol


class LlmClientPort(Protocol):
    """Protocol for single-prompt text completion."""

    async def complete(self, *, prompt: str) -> str:
        """Return completion text for one user prompt."""


class StaticLlmClient:
    """Client returning the same text for every prompt, recording what it saw."""

    def __init__(self, response_text: str) -> None:
        self._response_text = response_text
        self.prompts: list[str] = []

    async def complete(self, *, prompt: str) -> str:
        self.prompts.append(prompt)
        return self._response_text
