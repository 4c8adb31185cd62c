"""Optional `.env` loading for non-live environments."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from dotenv import load_dotenv

LIVE_ENVIRONMENT = "live"
ENVIRONMENT_VARIABLE = "environment"
DEFAULT_DOTENV_PATH = Path(".env")

logger = logging.getLogger(__name__)


class ConfigurationError(RuntimeError):
    """Raised when startup configuration is missing or unreadable."""


def load_environment_file(
    *,
    environment: str | None = None,
    dotenv_path: Path | str = DEFAULT_DOTENV_PATH,
) -> bool:
    """Load `.env` into the process environment unless running live.

    Returns whether a file was loaded. Values already present in the
    environment are left untouched.
    """

    resolved_environment = (
        os.environ.get(ENVIRONMENT_VARIABLE, "") if environment is None else environment
    )
    if resolved_environment == LIVE_ENVIRONMENT:
        return False

    path = Path(dotenv_path)
    if not path.is_file():
        raise ConfigurationError(f"could not load the .env file at {path}")
    try:
        load_dotenv(path, override=False)
    except (OSError, UnicodeDecodeError) as error:
        raise ConfigurationError(f"could not read the .env file at {path}") from error

    logger.info("dotenv_loaded path=%s environment=%s", path, resolved_environment or "unset")
    return True
