"""Answer orchestration: enrich the question, complete it, scrub failures."""

from __future__ import annotations

import logging

from shakespeare_rpc.application.dto.answer_models import AnswerRequest, AnswerResponse
from shakespeare_rpc.domain.prompt_enricher import enrich
from shakespeare_rpc.infrastructure.llm.llm_client import LlmClientPort

ANSWER_GENERATION_FAILED_MESSAGE = "failed making your text Shakespearean"

logger = logging.getLogger(__name__)


class AnswerGenerationFailed(RuntimeError):
    """Generic per-request failure safe to expose to RPC callers.

    The upstream error is only reachable through `__cause__` on the server.
    """

    def __init__(self) -> None:
        super().__init__(ANSWER_GENERATION_FAILED_MESSAGE)


class AnswerService:
    """Turn one question into one Shakespearean answer via the completion client."""

    def __init__(self, *, llm_client: LlmClientPort) -> None:
        self._llm_client = llm_client

    async def answer(self, request: AnswerRequest) -> AnswerResponse:
        """Return the completion for the enriched question.

        Raises `AnswerGenerationFailed` for any client failure; no retry is attempted.
        """

        prompt = enrich(request.question)
        try:
            answer_text = await self._llm_client.complete(prompt=prompt)
        except Exception as error:  # noqa: BLE001
            logger.exception(
                "answer_generation_failed question_chars=%s error_type=%s",
                len(request.question),
                type(error).__name__,
            )
            raise AnswerGenerationFailed() from error

        return AnswerResponse(answer=answer_text)
