"""Base LLM provider interface."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any


@dataclass
class LLMResponse:
    """Response from an LLM provider."""
    content: str | None
    finish_reason: str = "stop"
    usage: dict[str, int] = field(default_factory=dict)

    @property
    def has_error(self) -> bool:
        return self.finish_reason == "error"

    @property
    def total_tokens(self) -> int:
        return int(self.usage.get("total_tokens", 0))


class LLMProvider(ABC):
    """
    Abstract base class for text generators.

    Given a message list and a model id, an implementation returns the
    generated text together with token usage. Implementations should report
    failures as an ``LLMResponse`` with ``finish_reason="error"`` rather
    than raising.
    """

    def __init__(self, api_key: str | None = None, api_base: str | None = None):
        self.api_key = api_key
        self.api_base = api_base

    @abstractmethod
    async def chat(
        self,
        messages: list[dict[str, Any]],
        model: str | None = None,
        max_tokens: int = 4096,
        temperature: float = 0.7,
        response_format: dict[str, Any] | None = None,
    ) -> LLMResponse:
        """
        Send a chat completion request.

        Args:
            messages: List of message dicts with 'role' and 'content'.
            model: Model identifier (provider-specific).
            max_tokens: Maximum tokens in response.
            temperature: Sampling temperature.
            response_format: Optional structured-output hint, e.g. ``{"type": "json_object"}``.

        Returns:
            LLMResponse with content and usage.
        """
        pass

    @abstractmethod
    def get_default_model(self) -> str:
        """Get the default model for this provider."""
        pass
