"""LLM provider abstraction module."""

from counsellor.providers.base import LLMProvider, LLMResponse
from counsellor.providers.litellm_provider import LiteLLMProvider

__all__ = ["LLMProvider", "LLMResponse", "LiteLLMProvider"]
