"""Internal request/response values for the answer flow."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class AnswerRequest:
    """Question submitted by an RPC caller."""

    question: str


@dataclass(frozen=True)
class AnswerResponse:
    """Answer text produced for one request."""

    answer: str
