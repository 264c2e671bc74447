"""Fit conversation history into a model's context window."""

from __future__ import annotations

from typing import Any

from counsellor.config.schema import TruncationConfig
from counsellor.conversation.models import (
    ROLE_ASSISTANT,
    ROLE_SYSTEM,
    ROLE_USER,
    ChatMessage,
    make_message,
    resolve_token_limit,
)
from counsellor.conversation.tokens import (
    estimate_message_tokens,
    estimate_messages_tokens,
    estimate_payload_tokens,
)
from counsellor.logging import get_logger

logger = get_logger(__name__)


class ConversationTruncator:
    """
    Shortens a chat history so it fits the token budget of a target model.

    Retention priority: system messages, the opening assistant greeting,
    a trailing window around the latest user message, then as many of the
    messages in between as still fit. The result is always a subsequence of
    the input in chronological order, plus at most one synthetic marker.
    """

    _MAX_RECENT_MESSAGES = 10
    _RECENT_FRACTION = 3
    _TRUNCATION_NOTICE = (
        "[Previous conversation truncated. Keeping system context and most recent {count} messages.]"
    )

    def __init__(self, config: TruncationConfig | None = None):
        self.config = config or TruncationConfig()

    def available_tokens(self, model: str, profile: Any | None = None) -> int:
        """Budget left for history once profile, system prompt and reply are reserved."""
        max_tokens = resolve_token_limit(
            model,
            self.config.model_token_limits,
            self.config.default_token_limit,
        )
        return (
            max_tokens
            - estimate_payload_tokens(profile)
            - self.config.system_prompt_overhead
            - self.config.response_buffer
        )

    def truncate(
        self,
        messages: list[ChatMessage],
        model: str,
        profile: Any | None = None,
    ) -> list[ChatMessage]:
        """
        Return *messages* shortened to fit the budget of *model*.

        Args:
            messages: Full conversation, oldest first.
            model: Model id used to look up the context budget.
            profile: Optional profile payload that will be injected as system
                context elsewhere; its estimated size is reserved.

        Returns:
            The same list object when it already fits, otherwise a new list.
        """
        available = self.available_tokens(model, profile)
        current = estimate_messages_tokens(messages)
        if current <= available:
            return messages

        system_idx = [i for i, m in enumerate(messages) if m.get("role") == ROLE_SYSTEM]
        conv_idx = [i for i, m in enumerate(messages) if m.get("role") != ROLE_SYSTEM]
        if not conv_idx:
            return messages

        conversation = [messages[i] for i in conv_idx]
        last_user = self._last_user_position(conversation)
        if last_user is None:
            return messages

        logger.info(
            "conversation_over_budget",
            model=model,
            tokens=current,
            available=available,
        )

        head_len = 1 if conversation[0].get("role") == ROLE_ASSISTANT else 0
        window_size = max(1, min(self._MAX_RECENT_MESSAGES, len(conversation) // self._RECENT_FRACTION))
        window_start = max(last_user - window_size + 1, head_len)
        window_start = min(window_start, last_user)
        window = list(range(window_start, len(conversation)))
        head = list(range(head_len))

        kept = head + window
        tokens = self._cost(messages, system_idx, conv_idx, kept)

        if tokens > available:
            marker = make_message(ROLE_SYSTEM, self._TRUNCATION_NOTICE.format(count=len(window)))
            keep_tail = len(window) // 2
            tail_start = min(len(window) - keep_tail, window.index(last_user))
            kept = window[tail_start:]
            result = self._assemble(messages, system_idx, conv_idx, kept, marker)

            if estimate_messages_tokens(result) > available:
                kept = [last_user]
                if last_user > 0 and conversation[last_user - 1].get("role") == ROLE_ASSISTANT:
                    kept.insert(0, last_user - 1)
                result = self._assemble(messages, system_idx, conv_idx, kept, marker)
        else:
            kept = head + self._backfill(conversation, head_len, window_start, available - tokens) + window
            result = self._assemble(messages, system_idx, conv_idx, kept)

        final_tokens = estimate_messages_tokens(result)
        if final_tokens >= current:
            # Nothing droppable outweighs the marker; the original is already minimal.
            return messages

        logger.info(
            "conversation_truncated",
            model=model,
            from_messages=len(messages),
            to_messages=len(result),
            from_tokens=current,
            to_tokens=final_tokens,
        )
        return result

    @staticmethod
    def _last_user_position(conversation: list[ChatMessage]) -> int | None:
        for pos in range(len(conversation) - 1, -1, -1):
            if conversation[pos].get("role") == ROLE_USER:
                return pos
        return None

    @staticmethod
    def _backfill(
        conversation: list[ChatMessage],
        start: int,
        end: int,
        remaining: int,
    ) -> list[int]:
        """Take middle positions newest-first while they fit into *remaining*."""
        taken: list[int] = []
        for pos in range(end - 1, start - 1, -1):
            cost = estimate_message_tokens(conversation[pos])
            if cost > remaining:
                break
            taken.append(pos)
            remaining -= cost
        taken.reverse()
        return taken

    @staticmethod
    def _cost(
        messages: list[ChatMessage],
        system_idx: list[int],
        conv_idx: list[int],
        kept: list[int],
    ) -> int:
        total = sum(estimate_message_tokens(messages[i]) for i in system_idx)
        return total + sum(estimate_message_tokens(messages[conv_idx[pos]]) for pos in kept)

    @staticmethod
    def _assemble(
        messages: list[ChatMessage],
        system_idx: list[int],
        conv_idx: list[int],
        kept: list[int],
        marker: ChatMessage | None = None,
    ) -> list[ChatMessage]:
        """Rebuild a list in original order; *marker* goes right before the first kept turn."""
        keep = set(system_idx)
        keep.update(conv_idx[pos] for pos in kept)
        first_turn = min((conv_idx[pos] for pos in kept), default=None)
        result: list[ChatMessage] = []
        for i, msg in enumerate(messages):
            if marker is not None and i == first_turn:
                result.append(marker)
            if i in keep:
                result.append(msg)
        return result


def truncate_messages(
    messages: list[ChatMessage],
    model: str,
    profile: Any | None = None,
    config: TruncationConfig | None = None,
) -> list[ChatMessage]:
    """Convenience wrapper around :meth:`ConversationTruncator.truncate`."""
    return ConversationTruncator(config).truncate(messages, model, profile)


def create_conversation_summary(messages: list[ChatMessage]) -> str:
    """One-line description of the turns contained in *messages*."""
    total = sum(1 for m in messages if m.get("role") != ROLE_SYSTEM)
    users = sum(1 for m in messages if m.get("role") == ROLE_USER)
    assistants = sum(1 for m in messages if m.get("role") == ROLE_ASSISTANT)
    return f"Conversation context: {total} messages ({users} from user, {assistants} from assistant)"
