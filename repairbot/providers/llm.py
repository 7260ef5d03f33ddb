"""
Language-model provider client.

``LanguageModelProvider`` is the collaborator interface the orchestrator
depends on; ``OpenAICompatibleProvider`` implements it against any
``/chat/completions`` endpoint (OpenAI, OpenRouter, local gateways).

The client makes exactly one request per call. Transport errors and
non-success statuses raise ``ProviderUnavailable``; an unreadable
completion envelope raises ``ProviderMalformedOutput``.
"""

import logging
from typing import Optional, Protocol

import httpx

from repairbot.config import settings

logger = logging.getLogger(__name__)


class ProviderError(Exception):
    """Base class for failures of the language-model provider."""


class ProviderUnavailable(ProviderError):
    """The provider could not be reached, timed out, or refused the request."""


class ProviderMalformedOutput(ProviderError):
    """The provider answered, but not with the structure we asked for."""


class LanguageModelProvider(Protocol):
    """Anything that turns chat messages into a completion string."""

    model_name: str

    async def complete(self, messages: list[dict[str, str]]) -> str:
        ...


def _provider_error_message(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        return f"provider returned HTTP {response.status_code}"
    if isinstance(payload, dict):
        error = payload.get("error")
        if isinstance(error, dict) and error.get("message"):
            return f"provider returned HTTP {response.status_code}: {error['message']}"
    return f"provider returned HTTP {response.status_code}"


class OpenAICompatibleProvider:
    """Chat-completions client with bounded temperature, tokens and time."""

    def __init__(
        self,
        api_key: str,
        model: Optional[str] = None,
        base_url: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        timeout_seconds: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        cfg = settings.model
        self._api_key = api_key
        self.model_name = model or cfg.llm_model
        self._base_url = (base_url or cfg.base_url).rstrip("/")
        self._temperature = cfg.llm_temperature if temperature is None else temperature
        self._max_tokens = cfg.max_tokens if max_tokens is None else max_tokens
        self._timeout = httpx.Timeout(
            cfg.timeout_seconds if timeout_seconds is None else timeout_seconds,
            connect=cfg.connect_timeout_seconds,
        )
        self._transport = transport

    async def complete(self, messages: list[dict[str, str]]) -> str:
        payload = {
            "model": self.model_name,
            "messages": messages,
            "temperature": self._temperature,
            "max_tokens": self._max_tokens,
        }
        headers = {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
        }
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout, transport=self._transport
            ) as client:
                response = await client.post(
                    f"{self._base_url}/chat/completions", headers=headers, json=payload
                )
        except httpx.HTTPError as exc:
            raise ProviderUnavailable(f"{type(exc).__name__}: {exc}") from exc

        if response.status_code >= 400:
            raise ProviderUnavailable(_provider_error_message(response))

        try:
            text = response.json()["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as exc:
            raise ProviderMalformedOutput("unexpected completion envelope") from exc
        if not isinstance(text, str):
            raise ProviderMalformedOutput("completion content is not text")
        return text
