from __future__ import annotations

import asyncio
import json
import random
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import grpc
import pytest

from shakespeare_rpc.application.services.answer_service import AnswerService
from shakespeare_rpc.infrastructure.llm.llm_client import LlmClientPort, StaticLlmClient
from shakespeare_rpc.infrastructure.llm.openai_client import (
    OpenAiChatCompletionsClient,
    OpenAiHttpResponse,
)
from shakespeare_rpc.infrastructure.rpc import answer_proto
from shakespeare_rpc.infrastructure.rpc.server import build_grpc_server


class EchoLlmClient:
    """Answers with the prompt it was given after a random short delay."""

    async def complete(self, *, prompt: str) -> str:
        await asyncio.sleep(random.uniform(0.0, 0.02))
        return f"answer<{prompt}>"


class FailingTransport:
    def __init__(self, error: Exception | None = None, status_code: int = 500) -> None:
        self._error = error
        self._status_code = status_code

    async def request(
        self,
        *,
        method: str,
        url: str,
        headers: dict[str, str],
        body: bytes | None,
        timeout_seconds: float,
    ) -> OpenAiHttpResponse:
        _ = method, url, headers, body, timeout_seconds
        if self._error is not None:
            raise self._error
        return OpenAiHttpResponse(
            status_code=self._status_code,
            body_bytes=b'{"error":{"message":"upstream exploded: internal-token-123"}}',
        )


class ZeroChoicesTransport:
    async def request(
        self,
        *,
        method: str,
        url: str,
        headers: dict[str, str],
        body: bytes | None,
        timeout_seconds: float,
    ) -> OpenAiHttpResponse:
        _ = method, url, headers, body, timeout_seconds
        return OpenAiHttpResponse(
            status_code=200,
            body_bytes=json.dumps({"choices": []}).encode("utf-8"),
        )


@asynccontextmanager
async def _running_stub(llm_client: LlmClientPort) -> AsyncIterator[answer_proto.GreeterStub]:
    bound = build_grpc_server(
        answer_service=AnswerService(llm_client=llm_client),
        host="127.0.0.1",
        port=0,
    )
    await bound.server.start()
    try:
        async with grpc.aio.insecure_channel(bound.address) as channel:
            yield answer_proto.GreeterStub(channel)
    finally:
        await bound.server.stop(None)


def _openai_client(transport: object) -> OpenAiChatCompletionsClient:
    return OpenAiChatCompletionsClient(api_key="sk-test", transport=transport)  # type: ignore[arg-type]


@pytest.mark.asyncio
async def test_get_answer_returns_completion_text() -> None:
    llm_client = StaticLlmClient("Good morrow")

    async with _running_stub(llm_client) as stub:
        response = await stub.GetAnswer(answer_proto.AnswerRequest(question="Hello"))

    assert response.answer == "Good morrow"
    assert llm_client.prompts == ["rewrite Helloin the voice of Shakespeare"]


@pytest.mark.parametrize(
    "transport",
    [
        FailingTransport(error=ConnectionRefusedError("connect refused internal-host:443")),
        FailingTransport(status_code=500),
        ZeroChoicesTransport(),
    ],
)
@pytest.mark.asyncio
async def test_upstream_failures_surface_as_generic_internal_error(transport: object) -> None:
    async with _running_stub(_openai_client(transport)) as stub:
        with pytest.raises(grpc.aio.AioRpcError) as exc_info:
            await stub.GetAnswer(answer_proto.AnswerRequest(question="Hello"))

    assert exc_info.value.code() == grpc.StatusCode.INTERNAL
    assert exc_info.value.details() == "failed making your text Shakespearean"


@pytest.mark.asyncio
async def test_server_keeps_serving_after_a_failed_call() -> None:
    class FlakyLlmClient:
        def __init__(self) -> None:
            self.calls = 0

        async def complete(self, *, prompt: str) -> str:
            self.calls += 1
            if self.calls == 1:
                raise RuntimeError("first call fails")
            return "Thou art well met"

    async with _running_stub(FlakyLlmClient()) as stub:
        with pytest.raises(grpc.aio.AioRpcError):
            await stub.GetAnswer(answer_proto.AnswerRequest(question="one"))
        response = await stub.GetAnswer(answer_proto.AnswerRequest(question="two"))

    assert response.answer == "Thou art well met"


@pytest.mark.asyncio
async def test_concurrent_calls_receive_their_own_answers() -> None:
    questions = [f"question-{index}" for index in range(50)]

    async with _running_stub(EchoLlmClient()) as stub:
        responses = await asyncio.gather(
            *(
                stub.GetAnswer(answer_proto.AnswerRequest(question=question))
                for question in questions
            )
        )

    assert [response.answer for response in responses] == [
        f"answer<rewrite {question}in the voice of Shakespeare>" for question in questions
    ]
