"""Reasoning service clients.

This module provides ReasoningClient implementations for:
- Gemini (generateContent REST endpoint via httpx)
- Anthropic (official async SDK)
- OpenAI (official async SDK)

Every client maps transport failures, non-2xx statuses and empty replies
to ReasoningServiceError so the decision engine has one failure type to
count.

Example:
    >>> from minebot.reasoning.clients import create_reasoning_client
    >>> from minebot.config.loader import LLMConfig
    >>>
    >>> client = create_reasoning_client(LLMConfig(provider="gemini"), api_key="...")
    >>> text = await client.complete("What next?")
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from minebot.config.loader import LLMConfig
from minebot.interfaces.reasoning import ReasoningClient, ReasoningServiceError

logger = logging.getLogger(__name__)

VALID_PROVIDERS = {"gemini", "anthropic", "openai"}

DEFAULT_MODELS = {
    "gemini": "gemini-1.5-flash-latest",
    "anthropic": "claude-3-haiku-20240307",
    "openai": "gpt-4o-mini",
}

GEMINI_ENDPOINT = "https://generativelanguage.googleapis.com/v1beta/models"


class ReasoningConfigError(Exception):
    """Raised when a reasoning client cannot be constructed."""

    pass


class GeminiClient(ReasoningClient):
    """Client for the Gemini generateContent REST API."""

    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_MODELS["gemini"],
        max_tokens: int = 500,
        temperature: float = 0.7,
        timeout: float = 20.0,
        endpoint: str = GEMINI_ENDPOINT,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            api_key: Gemini API key.
            model: Model name.
            max_tokens: Maximum output tokens.
            temperature: Sampling temperature.
            timeout: Request timeout in seconds.
            endpoint: Base models URL.
            http_client: Shared httpx client. Created lazily if None.
        """
        self._api_key = api_key
        self._model = model
        self._max_tokens = max_tokens
        self._temperature = temperature
        self._endpoint = endpoint.rstrip("/")
        self._http = http_client or httpx.AsyncClient(timeout=timeout)

    @property
    def model_name(self) -> str:
        return self._model

    async def complete(self, prompt: str) -> str:
        body = {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": {
                "temperature": self._temperature,
                "maxOutputTokens": self._max_tokens,
            },
        }
        url = f"{self._endpoint}/{self._model}:generateContent"

        try:
            response = await self._http.post(url, params={"key": self._api_key}, json=body)
        except httpx.HTTPError as e:
            raise ReasoningServiceError(f"Gemini request failed: {e}") from e

        if response.status_code >= 400:
            raise ReasoningServiceError(response.text[:500], status=response.status_code)

        try:
            data = response.json()
        except ValueError as e:
            raise ReasoningServiceError(f"Invalid JSON from Gemini: {e}", status=response.status_code) from e

        text = self._extract_text(data)
        if not text:
            raise ReasoningServiceError("Empty response from Gemini", status=response.status_code)
        return text

    @staticmethod
    def _extract_text(data: Any) -> str:
        try:
            return str(data["candidates"][0]["content"]["parts"][0]["text"] or "")
        except (KeyError, IndexError, TypeError):
            return ""

    async def aclose(self) -> None:
        await self._http.aclose()


class AnthropicClient(ReasoningClient):
    """Client for the Anthropic Messages API."""

    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_MODELS["anthropic"],
        max_tokens: int = 500,
        temperature: float = 0.7,
        timeout: float = 20.0,
    ) -> None:
        try:
            import anthropic
        except ImportError as e:
            raise ReasoningConfigError(
                "anthropic package not installed. Run: pip install anthropic"
            ) from e

        self._sdk = anthropic
        self._client = anthropic.AsyncAnthropic(api_key=api_key, timeout=timeout)
        self._model = model
        self._max_tokens = max_tokens
        self._temperature = temperature

    @property
    def model_name(self) -> str:
        return self._model

    async def complete(self, prompt: str) -> str:
        try:
            message = await self._client.messages.create(
                model=self._model,
                max_tokens=self._max_tokens,
                temperature=self._temperature,
                messages=[{"role": "user", "content": prompt}],
            )
        except self._sdk.APIStatusError as e:
            raise ReasoningServiceError(str(e), status=e.status_code) from e
        except self._sdk.APIError as e:
            raise ReasoningServiceError(f"Anthropic request failed: {e}") from e

        text = "".join(
            str(block.text) for block in message.content if hasattr(block, "text")
        )
        if not text.strip():
            raise ReasoningServiceError("Empty response from Anthropic")
        return text

    async def aclose(self) -> None:
        await self._client.close()


class OpenAIClient(ReasoningClient):
    """Client for the OpenAI Chat Completions API."""

    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_MODELS["openai"],
        max_tokens: int = 500,
        temperature: float = 0.7,
        timeout: float = 20.0,
    ) -> None:
        try:
            import openai
        except ImportError as e:
            raise ReasoningConfigError(
                "openai package not installed. Run: pip install openai"
            ) from e

        self._sdk = openai
        self._client = openai.AsyncOpenAI(api_key=api_key, timeout=timeout)
        self._model = model
        self._max_tokens = max_tokens
        self._temperature = temperature

    @property
    def model_name(self) -> str:
        return self._model

    async def complete(self, prompt: str) -> str:
        try:
            response = await self._client.chat.completions.create(
                model=self._model,
                max_tokens=self._max_tokens,
                temperature=self._temperature,
                messages=[{"role": "user", "content": prompt}],
            )
        except self._sdk.APIStatusError as e:
            raise ReasoningServiceError(str(e), status=e.status_code) from e
        except self._sdk.APIError as e:
            raise ReasoningServiceError(f"OpenAI request failed: {e}") from e

        text = response.choices[0].message.content if response.choices else None
        if not text or not text.strip():
            raise ReasoningServiceError("Empty response from OpenAI")
        return text

    async def aclose(self) -> None:
        await self._client.close()


class UnavailableReasoningClient(ReasoningClient):
    """Stand-in used when no API key is configured.

    Every call fails, so the decision engine serves holding plans and then
    circuit-breaker fallback plans.
    """

    def __init__(self, provider: str, reason: str = "no API key configured") -> None:
        self._provider = provider
        self._reason = reason

    @property
    def model_name(self) -> str:
        return f"{self._provider} (unavailable)"

    async def complete(self, prompt: str) -> str:
        raise ReasoningServiceError(f"{self._provider} unavailable: {self._reason}")


def create_reasoning_client(config: LLMConfig, api_key: str) -> ReasoningClient:
    """Build the client for the configured provider.

    Args:
        config: Provider settings.
        api_key: Key for that provider.

    Returns:
        A ReasoningClient.

    Raises:
        ReasoningConfigError: If the provider is unknown or its SDK is missing.
    """
    provider = config.provider
    if provider not in VALID_PROVIDERS:
        raise ReasoningConfigError(
            f"Invalid provider: {provider}. Must be one of {sorted(VALID_PROVIDERS)}"
        )

    model = config.model or DEFAULT_MODELS[provider]
    kwargs: dict[str, Any] = {
        "api_key": api_key,
        "model": model,
        "max_tokens": config.max_tokens,
        "temperature": config.temperature,
        "timeout": config.request_timeout,
    }

    logger.debug(f"Creating reasoning client: provider={provider}, model={model}")
    if provider == "gemini":
        return GeminiClient(**kwargs)
    if provider == "anthropic":
        return AnthropicClient(**kwargs)
    return OpenAIClient(**kwargs)
