"""Runtime settings loaded from environment variables."""

from functools import lru_cache
from typing import Annotated

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

NonEmptyStr = Annotated[str, Field(min_length=1)]
PositiveFloat = Annotated[float, Field(gt=0.0)]
PositiveInt = Annotated[int, Field(gt=0)]
TemperatureFloat = Annotated[float, Field(ge=0.0, le=2.0)]


class Settings(BaseSettings):
    """Environment-driven application settings."""

    # The .env file is loaded explicitly at bootstrap, only outside live.
    model_config = SettingsConfigDict(env_file=None, extra="ignore", str_strip_whitespace=True)

    environment: str = Field(default="development", validation_alias="environment")
    gpt_api_key: NonEmptyStr = Field(validation_alias="GPT_API_KEY")
    openai_model: NonEmptyStr = Field(
        default="gpt-3.5-turbo",
        validation_alias="OPENAI_MODEL",
    )
    openai_temperature: TemperatureFloat | None = Field(
        default=None,
        validation_alias="OPENAI_TEMPERATURE",
    )
    openai_timeout_seconds: PositiveFloat = Field(
        default=60.0,
        validation_alias="OPENAI_TIMEOUT_SECONDS",
    )
    openai_max_concurrent_requests: PositiveInt = Field(
        default=64,
        validation_alias="OPENAI_MAX_CONCURRENT_REQUESTS",
    )
    openai_base_url: NonEmptyStr = Field(
        default="https://api.openai.com",
        validation_alias="OPENAI_BASE_URL",
    )
    server_host: NonEmptyStr = Field(default="[::]", validation_alias="SERVER_HOST")
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")


@lru_cache(maxsize=1)
def load_settings() -> Settings:
    """Load and cache application settings."""

    return Settings()  # type: ignore[call-arg]
