"""answer-server entrypoint: configuration, client wiring, and gRPC serving."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from collections.abc import Sequence

from pydantic import ValidationError

from shakespeare_rpc.application.services.answer_service import AnswerService
from shakespeare_rpc.config.env_loader import ConfigurationError, load_environment_file
from shakespeare_rpc.config.settings import Settings, load_settings
from shakespeare_rpc.infrastructure.llm.llm_client import LlmClientPort
from shakespeare_rpc.infrastructure.llm.openai_client import OpenAiChatCompletionsClient
from shakespeare_rpc.infrastructure.logging import configure_logging
from shakespeare_rpc.infrastructure.rpc.server import (
    DEFAULT_PORT,
    BoundGrpcServer,
    ListenError,
    build_grpc_server,
)

_SHUTDOWN_GRACE_SECONDS = 5.0
logger = logging.getLogger(__name__)


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Shakespearean answer gRPC server.")
    parser.add_argument("--port", type=int, default=DEFAULT_PORT, help="The server port")
    return parser.parse_args(argv)


def load_runtime_settings() -> Settings:
    """Load `.env` when not live, then validate settings; any failure is fatal."""

    load_environment_file()
    try:
        return load_settings()
    except ValidationError as error:
        missing = ", ".join(
            str(detail["loc"][0]) for detail in error.errors() if detail.get("loc")
        )
        raise ConfigurationError(f"invalid or missing settings: {missing}") from error


def build_runtime_llm_client(*, settings: Settings) -> OpenAiChatCompletionsClient:
    """Build the process-wide OpenAI client from validated settings."""

    return OpenAiChatCompletionsClient(
        api_key=settings.gpt_api_key,
        model=settings.openai_model,
        temperature=settings.openai_temperature,
        timeout_seconds=settings.openai_timeout_seconds,
        base_url=settings.openai_base_url,
        max_concurrent_requests=settings.openai_max_concurrent_requests,
    )


def build_runtime_server(
    *,
    settings: Settings,
    port: int,
    llm_client: LlmClientPort | None = None,
) -> BoundGrpcServer:
    """Compose client, answer service, and bound gRPC server."""

    runtime_llm_client = llm_client or build_runtime_llm_client(settings=settings)
    answer_service = AnswerService(llm_client=runtime_llm_client)
    return build_grpc_server(
        answer_service=answer_service,
        host=settings.server_host,
        port=port,
    )


async def serve(
    *,
    settings: Settings,
    port: int,
    llm_client: LlmClientPort | None = None,
) -> None:
    """Start serving and block until the server terminates.

    A client built here is closed on shutdown; an injected client is left to its owner.
    """

    owned_client: OpenAiChatCompletionsClient | None = None
    runtime_llm_client = llm_client
    if runtime_llm_client is None:
        owned_client = build_runtime_llm_client(settings=settings)
        runtime_llm_client = owned_client
    try:
        bound = build_runtime_server(
            settings=settings,
            port=port,
            llm_client=runtime_llm_client,
        )
        await bound.server.start()
        logger.info("server listening at %s", bound.address)
        try:
            await bound.server.wait_for_termination()
        finally:
            await bound.server.stop(_SHUTDOWN_GRACE_SECONDS)
            logger.info("server_stopped address=%s", bound.address)
    finally:
        if owned_client is not None:
            owned_client.close()


def main(argv: Sequence[str] | None = None) -> None:
    """Run answer-server; exit with status 1 on any startup or serve failure."""

    args = parse_args(argv)
    configure_logging(level="INFO")
    try:
        settings = load_runtime_settings()
    except ConfigurationError as error:
        logger.critical("startup_failed reason=%s", error)
        sys.exit(1)

    configure_logging(level=settings.log_level)
    logger.info(
        "answer_server_starting environment=%s model=%s port=%s",
        settings.environment,
        settings.openai_model,
        args.port,
    )
    try:
        asyncio.run(serve(settings=settings, port=args.port))
    except ListenError as error:
        logger.critical("failed to listen: %s", error)
        sys.exit(1)
    except KeyboardInterrupt:
        logger.info("answer_server_interrupted")
    except Exception:
        logger.critical("failed to serve", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
