"""LiteLLM provider implementation for OpenAI, Anthropic and Google models."""

import asyncio
import time
from typing import Any

import litellm
from litellm import acompletion

from counsellor.config.schema import ResilienceConfig, vendor_for_model
from counsellor.logging import get_logger, mask_secret
from counsellor.providers.base import LLMProvider, LLMResponse

logger = get_logger("counsellor.providers.litellm")


# LiteLLM routing prefix per vendor
_VENDOR_PREFIXES = {
    "openai": "openai",
    "anthropic": "anthropic",
    "gemini": "gemini",
}

# Model ids the product offers that the vendor API does not serve under that name
_MODEL_ALIASES = {
    "o3-preview": "gpt-4.5-preview",
    "gemini-pro": "gemini-1.5-flash",
    "gemini-ultra": "gemini-1.5-flash",
}

_ALLOWED_MSG_KEYS = frozenset({"role", "content"})


class LiteLLMProvider(LLMProvider):
    """
    LLM provider using LiteLLM for multi-vendor support.

    Model ids are routed to the OpenAI, Anthropic or Gemini backend by name.
    Timeouts, retries and a circuit breaker come from ``ResilienceConfig``.
    """

    def __init__(
        self,
        api_key: str | None = None,
        api_base: str | None = None,
        default_model: str = "gpt-4.5-preview",
        extra_headers: dict[str, str] | None = None,
        resilience_config: ResilienceConfig | None = None,
    ):
        super().__init__(api_key, api_base)
        self.default_model = default_model
        self.extra_headers = extra_headers or {}

        self._resilience = resilience_config
        self._consecutive_failures: int = 0
        self._circuit_open_until: float = 0.0

        if api_key:
            logger.info("provider_initialized", model=default_model, api_key=mask_secret(api_key))

        # Disable LiteLLM logging noise
        litellm.suppress_debug_info = True
        # Drop unsupported parameters for providers (e.g. response_format on Anthropic)
        litellm.drop_params = True

    def _resolve_model(self, model: str) -> str:
        """Apply aliases and the LiteLLM vendor prefix."""
        if "/" in model:
            return model
        alias = _MODEL_ALIASES.get(model)
        if alias:
            logger.warning("model_alias_applied", requested=model, using=alias)
            model = alias
        return f"{_VENDOR_PREFIXES[vendor_for_model(model)]}/{model}"

    @staticmethod
    def _sanitize_messages(messages: list[dict[str, Any]]) -> list[dict[str, Any]]:
        """Strip non-standard keys and coerce missing content to an empty string."""
        sanitized = []
        for msg in messages:
            clean = {k: v for k, v in msg.items() if k in _ALLOWED_MSG_KEYS}
            if clean.get("content") is None:
                clean["content"] = ""
            sanitized.append(clean)
        return sanitized

    def _check_circuit_breaker(self) -> str | None:
        """Return an error message if the circuit is open, else None."""
        rc = self._resilience
        if not rc or rc.circuit_breaker_threshold <= 0:
            return None
        if self._consecutive_failures < rc.circuit_breaker_threshold:
            return None
        now = time.monotonic()
        if now < self._circuit_open_until:
            return (
                f"Circuit breaker open: {self._consecutive_failures} consecutive failures. "
                f"Retry after {int(self._circuit_open_until - now)}s cooldown."
            )
        # Cooldown expired → half-open: allow one probe attempt
        return None

    def _record_result(self, success: bool) -> None:
        """Update circuit-breaker counters after a call."""
        rc = self._resilience
        if not rc or rc.circuit_breaker_threshold <= 0:
            return
        if success:
            self._consecutive_failures = 0
            self._circuit_open_until = 0.0
        else:
            self._consecutive_failures += 1
            if self._consecutive_failures >= rc.circuit_breaker_threshold:
                self._circuit_open_until = time.monotonic() + rc.circuit_breaker_cooldown
                logger.warning(
                    "circuit_breaker_opened",
                    failures=self._consecutive_failures,
                    cooldown=rc.circuit_breaker_cooldown,
                )

    async def chat(
        self,
        messages: list[dict[str, Any]],
        model: str | None = None,
        max_tokens: int = 4096,
        temperature: float = 0.7,
        response_format: dict[str, Any] | None = None,
    ) -> LLMResponse:
        """
        Send a chat completion request via LiteLLM.

        Args:
            messages: List of message dicts with 'role' and 'content'.
            model: Model identifier (e.g., 'claude-4-sonnet').
            max_tokens: Maximum tokens in response.
            temperature: Sampling temperature.
            response_format: Optional structured-output hint.

        Returns:
            LLMResponse with content and usage.
        """
        model = self._resolve_model(model or self.default_model)

        kwargs: dict[str, Any] = {
            "model": model,
            "messages": self._sanitize_messages(messages),
            "max_tokens": max(1, max_tokens),
            "temperature": temperature,
        }
        if response_format:
            kwargs["response_format"] = response_format
        if self.api_key:
            kwargs["api_key"] = self.api_key
        if self.api_base:
            kwargs["api_base"] = self.api_base
        if self.extra_headers:
            kwargs["extra_headers"] = self.extra_headers

        try:
            cb_error = self._check_circuit_breaker()
            if cb_error:
                return LLMResponse(content=f"Error calling LLM: {cb_error}", finish_reason="error")

            rc = self._resilience
            if rc:
                kwargs["request_timeout"] = rc.timeout
                kwargs["num_retries"] = rc.max_retries

            safety_timeout = (rc.timeout + 30) if rc else None
            coro = acompletion(**kwargs)
            if safety_timeout:
                response = await asyncio.wait_for(coro, timeout=safety_timeout)
            else:
                response = await coro

            self._record_result(True)
            return self._parse_response(response)
        except asyncio.TimeoutError:
            self._record_result(False)
            logger.error("llm_call_timeout", model=model)
            return LLMResponse(
                content="Error calling LLM: request timed out",
                finish_reason="error",
            )
        except Exception as e:
            self._record_result(False)
            error_msg = str(e)
            if self.api_key and self.api_key in error_msg:
                error_msg = error_msg.replace(self.api_key, mask_secret(self.api_key))
            logger.error("llm_call_failed", model=model, error=error_msg)
            return LLMResponse(
                content=f"Error calling LLM: {error_msg}",
                finish_reason="error",
            )

    @staticmethod
    def _parse_response(response: Any) -> LLMResponse:
        """Parse LiteLLM response into our standard format."""
        choice = response.choices[0]
        usage = {}
        raw_usage = getattr(response, "usage", None)
        if raw_usage:
            usage = {
                "prompt_tokens": int(getattr(raw_usage, "prompt_tokens", 0) or 0),
                "completion_tokens": int(getattr(raw_usage, "completion_tokens", 0) or 0),
                "total_tokens": int(getattr(raw_usage, "total_tokens", 0) or 0),
            }
        return LLMResponse(
            content=choice.message.content,
            finish_reason=choice.finish_reason or "stop",
            usage=usage,
        )

    def get_default_model(self) -> str:
        """Get the default model."""
        return self.default_model
