"""Process logging setup for the answer server."""

from __future__ import annotations

import logging

_LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
_GRPC_LOGGER_NAME = "grpc"


def resolve_log_level(level: str) -> int:
    """Map a level name such as `debug` to its numeric value, defaulting to INFO."""

    normalized_level = level.strip().upper()
    resolved_level = getattr(logging, normalized_level, None) if normalized_level else None
    if not isinstance(resolved_level, int):
        return logging.INFO
    return resolved_level


def configure_logging(*, level: str) -> int:
    """Configure root logging once and keep gRPC internals at WARNING or above."""

    resolved_level = resolve_log_level(level)
    logging.basicConfig(level=resolved_level, format=_LOG_FORMAT)
    logging.getLogger().setLevel(resolved_level)
    logging.getLogger(_GRPC_LOGGER_NAME).setLevel(max(resolved_level, logging.WARNING))
    return resolved_level
