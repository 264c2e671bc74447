"""Conversation history budgeting."""

from counsellor.conversation.models import MODEL_TOKEN_LIMITS, ChatMessage, resolve_token_limit
from counsellor.conversation.tokens import (
    estimate_message_tokens,
    estimate_messages_tokens,
    estimate_tokens,
)
from counsellor.conversation.truncation import (
    ConversationTruncator,
    create_conversation_summary,
    truncate_messages,
)

__all__ = [
    "ChatMessage",
    "ConversationTruncator",
    "MODEL_TOKEN_LIMITS",
    "create_conversation_summary",
    "estimate_message_tokens",
    "estimate_messages_tokens",
    "estimate_tokens",
    "resolve_token_limit",
    "truncate_messages",
]
