"""Configuration schema using Pydantic."""

import os
import re

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

_ENV_REF_RE = re.compile(r"^\$\{?([A-Za-z_][A-Za-z0-9_]*)\}?$")


def _resolve_env(value: str) -> str:
    """Expand a ``$VAR`` or ``${VAR}`` reference; anything else is returned as-is."""
    if not value:
        return value
    m = _ENV_REF_RE.match(value.strip())
    if not m:
        return value
    return os.environ.get(m.group(1), value)


class Base(BaseModel):
    """Base model that accepts both camelCase and snake_case keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ResilienceConfig(Base):
    """Timeout, retry and circuit-breaker settings for LLM calls."""

    timeout: int = 120
    max_retries: int = 3
    circuit_breaker_threshold: int = 5
    circuit_breaker_cooldown: int = 60


class ProviderConfig(Base):
    """LLM provider configuration."""

    api_key: str = ""
    api_base: str | None = None
    extra_headers: dict[str, str] | None = None
    resilience: ResilienceConfig = Field(default_factory=ResilienceConfig)

    @property
    def resolved_api_key(self) -> str:
        return _resolve_env(self.api_key)


class TruncationConfig(Base):
    """Context window budgeting for conversation history."""

    model_token_limits: dict[str, int] = Field(default_factory=dict)
    default_token_limit: int = 12_000
    system_prompt_overhead: int = 2_000
    response_buffer: int = 2_000


class MergeConfig(Base):
    """Personal details learning settings."""

    sensitive_fields: list[str] = Field(
        default_factory=lambda: ["password", "ssn", "credit_card", "bank_account"]
    )


class ProvidersConfig(Base):
    """Configuration for the supported LLM vendors."""

    openai: ProviderConfig = Field(default_factory=ProviderConfig)
    anthropic: ProviderConfig = Field(default_factory=ProviderConfig)
    gemini: ProviderConfig = Field(default_factory=ProviderConfig)


class Config(Base):
    """Root configuration for counsellor."""

    default_model: str = "gpt-4.5-preview"
    providers: ProvidersConfig = Field(default_factory=ProvidersConfig)
    truncation: TruncationConfig = Field(default_factory=TruncationConfig)
    merge: MergeConfig = Field(default_factory=MergeConfig)
    log_level: str = "INFO"
    log_json: bool = True

    def get_provider(self, model: str | None = None) -> ProviderConfig:
        """Return the vendor config that serves *model* (defaults to ``default_model``)."""
        name = vendor_for_model(model or self.default_model)
        return getattr(self.providers, name)


def vendor_for_model(model: str) -> str:
    """Map a model id to its vendor key (``openai``, ``anthropic`` or ``gemini``)."""
    lower = model.lower().split("/")[-1]
    if lower.startswith("claude"):
        return "anthropic"
    if lower.startswith("gemini"):
        return "gemini"
    return "openai"
