"""OpenAI chat-completions adapter implementing the completion client port."""

from __future__ import annotations

import asyncio
import functools
import json
from collections.abc import Mapping
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Protocol, cast
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

DEFAULT_OPENAI_MODEL = "gpt-3.5-turbo"
DEFAULT_OPENAI_BASE_URL = "https://api.openai.com"
DEFAULT_TIMEOUT_SECONDS = 60.0
DEFAULT_MAX_CONCURRENT_REQUESTS = 64
_CHAT_COMPLETIONS_PATH = "/v1/chat/completions"


@dataclass(frozen=True)
class OpenAiHttpResponse:
    """Normalized HTTP response data returned by OpenAI transports."""

    status_code: int
    body_bytes: bytes


class OpenAiHttpTransportPort(Protocol):
    """Transport protocol used by OpenAI HTTP adapter."""

    async def request(
        self,
        *,
        method: str,
        url: str,
        headers: dict[str, str],
        body: bytes | None,
        timeout_seconds: float,
    ) -> OpenAiHttpResponse:
        """Execute one HTTP request and return normalized response data."""


class OpenAiAdapterError(RuntimeError):
    """Raised for normalized OpenAI adapter failures."""


class UrllibOpenAiHttpTransport:
    """urllib transport running blocking requests on its own thread pool.

    The pool is sized for the expected number of in-flight calls so that
    concurrent RPCs do not queue behind the event loop's default executor.
    """

    def __init__(self, *, max_workers: int = DEFAULT_MAX_CONCURRENT_REQUESTS) -> None:
        if max_workers <= 0:
            raise ValueError("max_workers must be positive")
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers,
            thread_name_prefix="openai-http",
        )

    async def request(
        self,
        *,
        method: str,
        url: str,
        headers: dict[str, str],
        body: bytes | None,
        timeout_seconds: float,
    ) -> OpenAiHttpResponse:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(
            self._executor,
            functools.partial(
                _urlopen_once,
                method=method,
                url=url,
                headers=headers,
                body=body,
                timeout_seconds=timeout_seconds,
            ),
        )

    def close(self) -> None:
        """Stop accepting requests; threads still blocked on a socket finish on their own."""

        self._executor.shutdown(wait=False, cancel_futures=True)


def _urlopen_once(
    *,
    method: str,
    url: str,
    headers: dict[str, str],
    body: bytes | None,
    timeout_seconds: float,
) -> OpenAiHttpResponse:
    # timeout applies per socket operation; the caller enforces the overall deadline.
    request = Request(url=url, data=body, headers=headers, method=method)
    try:
        with urlopen(request, timeout=timeout_seconds) as response:
            return OpenAiHttpResponse(
                status_code=int(response.getcode()),
                body_bytes=response.read(),
            )
    except HTTPError as error:
        return OpenAiHttpResponse(status_code=int(error.code), body_bytes=error.read())
    except URLError as error:
        raise OpenAiAdapterError(f"transport connection failure: {error.reason}") from error
    except TimeoutError as error:
        raise OpenAiAdapterError(
            f"transport timed out after {timeout_seconds} seconds"
        ) from error


class OpenAiChatCompletionsClient:
    """Send one prompt as a single user message to `/v1/chat/completions`.

    The client holds the API key and is immutable after construction, so one
    instance can be shared by every concurrent RPC call in the process.
    `timeout_seconds` bounds each call end to end, including time spent
    waiting for a free transport thread.
    """

    def __init__(
        self,
        *,
        api_key: str,
        model: str = DEFAULT_OPENAI_MODEL,
        temperature: float | None = None,
        transport: OpenAiHttpTransportPort | None = None,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        base_url: str = DEFAULT_OPENAI_BASE_URL,
        max_concurrent_requests: int = DEFAULT_MAX_CONCURRENT_REQUESTS,
    ) -> None:
        api_key_value = api_key.strip()
        model_value = model.strip()
        if not api_key_value:
            raise ValueError("api_key must be a non-empty string")
        if not model_value:
            raise ValueError("model must be a non-empty string")
        if temperature is not None and not (0.0 <= temperature <= 2.0):
            raise ValueError("temperature must be between 0.0 and 2.0")
        if timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be positive")

        self._api_key = api_key_value
        self._model = model_value
        self._temperature = temperature
        self._transport = transport or UrllibOpenAiHttpTransport(
            max_workers=max_concurrent_requests
        )
        self._timeout_seconds = timeout_seconds
        self._base_url = base_url.rstrip("/")

    @property
    def model_name(self) -> str:
        return self._model

    async def complete(self, *, prompt: str) -> str:
        """Return the first choice's assistant text for `prompt`."""

        payload: dict[str, object] = {
            "model": self._model,
            "messages": [{"role": "user", "content": prompt}],
        }
        if self._temperature is not None:
            payload["temperature"] = self._temperature

        response = await self._post_json(operation="chat_completions", payload=payload)
        return _first_choice_text(response=response)

    def close(self) -> None:
        """Release transport resources owned by this client."""

        close_transport = getattr(self._transport, "close", None)
        if callable(close_transport):
            close_transport()

    async def _post_json(
        self,
        *,
        operation: str,
        payload: dict[str, object],
    ) -> dict[str, object]:
        headers = {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
        }
        body = json.dumps(payload, ensure_ascii=False).encode("utf-8")
        try:
            response = await asyncio.wait_for(
                self._transport.request(
                    method="POST",
                    url=f"{self._base_url}{_CHAT_COMPLETIONS_PATH}",
                    headers=headers,
                    body=body,
                    timeout_seconds=self._timeout_seconds,
                ),
                timeout=self._timeout_seconds,
            )
        except OpenAiAdapterError:
            raise
        except TimeoutError as error:
            raise OpenAiAdapterError(
                f"{operation} exceeded deadline of {self._timeout_seconds} seconds"
            ) from error
        except Exception as error:  # noqa: BLE001
            raise OpenAiAdapterError(f"{operation} transport failure") from error

        if response.status_code < 200 or response.status_code >= 300:
            raise OpenAiAdapterError(
                f"{operation} failed with status {response.status_code}: "
                f"{_error_excerpt(response.body_bytes)}"
            )

        try:
            decoded = json.loads(response.body_bytes.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as error:
            raise OpenAiAdapterError(f"{operation} returned invalid JSON payload") from error
        if not isinstance(decoded, dict):
            raise OpenAiAdapterError(f"{operation} returned non-object JSON payload")
        return cast("dict[str, object]", decoded)


def _first_choice_text(*, response: Mapping[str, Any]) -> str:
    choices = response.get("choices")
    if not isinstance(choices, list) or not choices:
        raise OpenAiAdapterError("chat_completions response missing choices")

    first_choice = choices[0]
    message = first_choice.get("message") if isinstance(first_choice, Mapping) else None
    if not isinstance(message, Mapping):
        raise OpenAiAdapterError("chat_completions response missing message payload")

    content = message.get("content")
    if not isinstance(content, str):
        raise OpenAiAdapterError("chat_completions response missing assistant content")
    return content


def _error_excerpt(payload: bytes) -> str:
    if not payload:
        return "empty response body"
    return payload.decode("utf-8", errors="replace")[:200]
