"""Token estimation helpers for context budgeting."""

import json
import math
from typing import Any

# Rough char-to-token ratio; no tokenizer is loaded
CHARS_PER_TOKEN = 4
ROLE_TOKENS = 4
FORMATTING_TOKENS = 3
MESSAGE_OVERHEAD_TOKENS = ROLE_TOKENS + FORMATTING_TOKENS


def estimate_tokens(text: str) -> int:
    """Estimate the token count of *text* as ``ceil(len / 4)``."""
    return math.ceil(len(text) / CHARS_PER_TOKEN)


def estimate_message_tokens(msg: dict[str, Any]) -> int:
    """Estimate one chat message, including role and formatting overhead."""
    content = msg.get("content") or ""
    if not isinstance(content, str):
        content = json.dumps(content, ensure_ascii=False)
    return MESSAGE_OVERHEAD_TOKENS + estimate_tokens(content)


def estimate_messages_tokens(messages: list[dict[str, Any]]) -> int:
    return sum(estimate_message_tokens(m) for m in messages)


def estimate_payload_tokens(payload: Any) -> int:
    """Estimate the cost of a JSON-serialized payload injected as system context."""
    if payload is None:
        return 0
    return estimate_tokens(json.dumps(payload, ensure_ascii=False, separators=(",", ":"), default=str))
