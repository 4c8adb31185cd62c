"""gRPC servicer for `Greeter.GetAnswer` plus wire <-> internal mapping."""

from __future__ import annotations

import logging
from typing import Any

import grpc

from shakespeare_rpc.application.dto.answer_models import AnswerRequest, AnswerResponse
from shakespeare_rpc.application.services.answer_service import (
    ANSWER_GENERATION_FAILED_MESSAGE,
    AnswerGenerationFailed,
    AnswerService,
)
from shakespeare_rpc.infrastructure.rpc import answer_proto

logger = logging.getLogger(__name__)


def answer_request_from_proto(message: Any) -> AnswerRequest:
    return AnswerRequest(question=message.question)


def answer_request_to_proto(request: AnswerRequest) -> Any:
    return answer_proto.AnswerRequest(question=request.question)


def answer_response_from_proto(message: Any) -> AnswerResponse:
    return AnswerResponse(answer=message.answer)


def answer_response_to_proto(response: AnswerResponse) -> Any:
    return answer_proto.AnswerResponse(answer=response.answer)


class AnswerServicer:
    """Serve `GetAnswer`; holds only the shared, read-only answer service."""

    def __init__(self, *, answer_service: AnswerService) -> None:
        self._answer_service = answer_service

    async def GetAnswer(  # noqa: N802
        self,
        request: Any,
        context: grpc.aio.ServicerContext,
    ) -> Any:
        answer_request = answer_request_from_proto(request)
        logger.info("answer_request_received question_chars=%s", len(answer_request.question))

        try:
            answer_response = await self._answer_service.answer(answer_request)
        except AnswerGenerationFailed:
            logger.warning(
                "answer_request_failed question_chars=%s status=%s",
                len(answer_request.question),
                grpc.StatusCode.INTERNAL.name,
            )
            await context.abort(grpc.StatusCode.INTERNAL, ANSWER_GENERATION_FAILED_MESSAGE)

        logger.info("answer_request_completed answer_chars=%s", len(answer_response.answer))
        return answer_response_to_proto(answer_response)
