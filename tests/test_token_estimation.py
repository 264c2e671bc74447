from counsellor.conversation import MODEL_TOKEN_LIMITS, resolve_token_limit
from counsellor.conversation.tokens import (
    estimate_message_tokens,
    estimate_messages_tokens,
    estimate_payload_tokens,
    estimate_tokens,
)


def test_estimate_tokens_rounds_up_quarter_length() -> None:
    assert estimate_tokens("") == 0
    assert estimate_tokens("abc") == 1
    assert estimate_tokens("abcd") == 1
    assert estimate_tokens("abcde") == 2


def test_message_cost_includes_role_and_formatting_overhead() -> None:
    assert estimate_message_tokens({"role": "user", "content": "x" * 40}) == 17
    assert estimate_message_tokens({"role": "assistant", "content": None}) == 7


def test_messages_cost_is_sum_of_parts() -> None:
    messages = [
        {"role": "system", "content": "x" * 8},
        {"role": "user", "content": "x" * 40},
    ]
    assert estimate_messages_tokens(messages) == 9 + 17
    assert estimate_messages_tokens([]) == 0


def test_payload_cost_uses_serialized_json() -> None:
    assert estimate_payload_tokens(None) == 0
    # '{"a":"bb"}' is 10 characters
    assert estimate_payload_tokens({"a": "bb"}) == 3
    # compact separators: 112 characters, not 113
    assert estimate_payload_tokens({"notes": "x" * 100}) == 28


def test_resolve_token_limit() -> None:
    assert resolve_token_limit("gpt-4") == 8_000
    assert resolve_token_limit("anthropic/claude-4-opus") == 16_000
    assert resolve_token_limit("mystery-model") == 12_000
    assert resolve_token_limit("mystery-model", default=4_000) == 4_000
    assert resolve_token_limit("gpt-4", overrides={"gpt-4": 32_000}) == 32_000


def test_every_model_has_one_budget() -> None:
    assert len(MODEL_TOKEN_LIMITS) == 12
    assert all(limit > 0 for limit in MODEL_TOKEN_LIMITS.values())
