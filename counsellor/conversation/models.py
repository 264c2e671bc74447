"""Chat message shapes and per-model context budgets."""

from typing import Any, Literal

Role = Literal["system", "user", "assistant"]

ROLE_SYSTEM = "system"
ROLE_USER = "user"
ROLE_ASSISTANT = "assistant"

ChatMessage = dict[str, Any]

DEFAULT_TOKEN_LIMIT = 12_000

# Maximum context tokens budgeted per supported model id
MODEL_TOKEN_LIMITS: dict[str, int] = {
    # OpenAI
    "gpt-4.5-preview": 12_000,
    "gpt-4-turbo-preview": 12_000,
    "gpt-4": 8_000,
    "o3-preview": 12_000,
    # Anthropic
    "claude-4-opus": 16_000,
    "claude-4-sonnet": 16_000,
    "claude-3-opus-20240229": 16_000,
    "claude-3-sonnet-20240229": 16_000,
    # Google
    "gemini-2.5-pro": 20_000,
    "gemini-2.5-flash": 20_000,
    "gemini-pro": 15_000,
    "gemini-ultra": 20_000,
}


def make_message(role: Role, content: str) -> ChatMessage:
    return {"role": role, "content": content}


def resolve_token_limit(
    model: str,
    overrides: dict[str, int] | None = None,
    default: int = DEFAULT_TOKEN_LIMIT,
) -> int:
    """Return the context budget for *model*; unknown ids get *default*.

    A vendor prefix such as ``anthropic/`` is ignored for the lookup.
    """
    limits = {**MODEL_TOKEN_LIMITS, **(overrides or {})}
    if model in limits:
        return limits[model]
    bare = model.split("/")[-1]
    return limits.get(bare, default)
