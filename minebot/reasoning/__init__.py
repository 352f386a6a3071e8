"""Reasoning service clients."""

from minebot.interfaces.reasoning import ReasoningClient, ReasoningServiceError
from minebot.reasoning.clients import (
    DEFAULT_MODELS,
    AnthropicClient,
    GeminiClient,
    OpenAIClient,
    ReasoningConfigError,
    UnavailableReasoningClient,
    create_reasoning_client,
)

__all__ = [
    "DEFAULT_MODELS",
    "AnthropicClient",
    "GeminiClient",
    "OpenAIClient",
    "ReasoningClient",
    "ReasoningConfigError",
    "ReasoningServiceError",
    "UnavailableReasoningClient",
    "create_reasoning_client",
]
