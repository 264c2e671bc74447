"""Session orchestration: budgeted generation and end-of-session learning."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any

from counsellor.config.schema import Config
from counsellor.conversation.models import ROLE_SYSTEM, ROLE_USER, ChatMessage, make_message
from counsellor.conversation.truncation import ConversationTruncator
from counsellor.logging import get_logger
from counsellor.profile.details import CloneError, PersonalDetails, clone_details
from counsellor.profile.merger import MergeResult, PersonalDetailsMerger
from counsellor.profile.sanitize import sanitize_personal_details
from counsellor.providers.base import LLMProvider, LLMResponse
from counsellor.session.prompts import (
    JSON_REMINDER,
    PERSONAL_DETAILS_EXTRACTION_PROMPT,
    SUMMARY_PROMPT,
    build_therapy_system_prompt,
)
from counsellor.utils.helpers import parse_llm_json, safe_parse_object

logger = get_logger(__name__)


@dataclass
class SessionSummary:
    """What the model made of a finished session."""

    summary: str
    patterns: list[str] = field(default_factory=list)
    followup_suggestions: list[str] = field(default_factory=list)

    @classmethod
    def fallback(cls) -> SessionSummary:
        return cls(
            summary="Session completed",
            patterns=["Unable to generate patterns"],
            followup_suggestions=["Continue conversation in next session"],
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "summary": self.summary,
            "patterns": list(self.patterns),
            "followupSuggestions": list(self.followup_suggestions),
        }


def _string_list(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [item if isinstance(item, str) else json.dumps(item, ensure_ascii=False) for item in value]


class SessionLifecycle:
    """
    Glue between a conversation session and the text generator.

    Before each generation the history is truncated to the model's budget.
    Without an explicit system prompt, replies use the therapist prompt
    built from the user's profile. When a session ends, the model
    summarizes it, and personal details are extracted, sanitized and
    merged into the stored profile.
    """

    _EXTRACTION_TEMPERATURE = 0.3
    _EXTRACTION_MAX_TOKENS = 2000
    _SUMMARY_TEMPERATURE = 0.7
    _SUMMARY_MAX_TOKENS = 1000

    def __init__(
        self,
        provider: LLMProvider,
        config: Config | None = None,
        *,
        merger: PersonalDetailsMerger | None = None,
    ):
        self.provider = provider
        self.config = config or Config()
        self.truncator = ConversationTruncator(self.config.truncation)
        self.merger = merger or PersonalDetailsMerger()

    def _model(self, model: str | None) -> str:
        return model or self.config.default_model

    def prepare_messages(
        self,
        history: list[ChatMessage],
        model: str | None = None,
        profile: Any | None = None,
    ) -> list[ChatMessage]:
        return self.truncator.truncate(history, self._model(model), profile)

    async def respond(
        self,
        history: list[ChatMessage],
        model: str | None = None,
        profile: Any | None = None,
        system_prompt: str | None = None,
        last_session_time: str | None = None,
    ) -> LLMResponse:
        """
        Generate the next assistant turn for *history*.

        *profile* is the stored user profile; it counts against the token
        budget and, unless *system_prompt* is given, is rendered into the
        therapist system prompt along with *last_session_time*.
        """
        model = self._model(model)
        if system_prompt is None:
            system_prompt = build_therapy_system_prompt(
                profile if isinstance(profile, dict) else None,
                last_session_time,
            )
        messages = list(history)
        if system_prompt:
            messages.insert(0, make_message(ROLE_SYSTEM, system_prompt))
        messages = self.prepare_messages(messages, model, profile)
        response = await self.provider.chat(messages=messages, model=model)
        if response.has_error:
            logger.warning("session_response_failed", model=model)
        else:
            logger.debug("session_response_generated", model=model, total_tokens=response.total_tokens)
        return response

    async def extract_personal_details(
        self,
        history: list[ChatMessage],
        model: str | None = None,
    ) -> PersonalDetails:
        """Ask the model for details mentioned in *history*; sanitized, never raises."""
        model = self._model(model)
        messages = [make_message(ROLE_SYSTEM, PERSONAL_DETAILS_EXTRACTION_PROMPT)]
        messages.extend(m for m in history if m.get("role") != ROLE_SYSTEM)
        messages.append(make_message(ROLE_USER, JSON_REMINDER))
        messages = self.prepare_messages(messages, model)

        response = await self.provider.chat(
            messages=messages,
            model=model,
            max_tokens=self._EXTRACTION_MAX_TOKENS,
            temperature=self._EXTRACTION_TEMPERATURE,
            response_format={"type": "json_object"},
        )
        if response.has_error:
            logger.error("personal_details_extraction_failed", model=model)
            return {}
        extracted = parse_llm_json(response.content)
        return sanitize_personal_details(extracted, self.config.merge.sensitive_fields)

    async def summarize_session(
        self,
        history: list[ChatMessage],
        model: str | None = None,
    ) -> SessionSummary:
        """Summarize a finished session; falls back to a stock summary on any failure."""
        model = self._model(model)
        messages = [make_message(ROLE_SYSTEM, SUMMARY_PROMPT)]
        messages.extend(m for m in history if m.get("role") != ROLE_SYSTEM)
        messages.append(make_message(ROLE_USER, JSON_REMINDER))
        messages = self.prepare_messages(messages, model)

        response = await self.provider.chat(
            messages=messages,
            model=model,
            max_tokens=self._SUMMARY_MAX_TOKENS,
            temperature=self._SUMMARY_TEMPERATURE,
            response_format={"type": "json_object"},
        )
        if response.has_error:
            logger.error("session_summary_failed", model=model, reason="provider_error")
            return SessionSummary.fallback()

        parsed = parse_llm_json(response.content)
        summary = parsed.get("summary")
        if not isinstance(summary, str) or not summary.strip():
            logger.error("session_summary_failed", model=model, reason="missing_summary")
            return SessionSummary.fallback()
        return SessionSummary(
            summary=summary.strip(),
            patterns=_string_list(parsed.get("patterns")),
            followup_suggestions=_string_list(parsed.get("followupSuggestions")),
        )

    async def learn_from_session(
        self,
        history: list[ChatMessage],
        existing: PersonalDetails,
        model: str | None = None,
    ) -> MergeResult:
        """Extract, sanitize and merge what *history* revealed about the user."""
        extracted = await self.extract_personal_details(history, model)
        if not extracted:
            logger.info("personal_details_nothing_extracted")
            try:
                unchanged = clone_details(existing or {})
            except CloneError as e:
                logger.error("personal_details_clone_failed", step="learn", error=str(e))
                unchanged = {}
            return MergeResult(merged=unchanged, changes=[])
        return self.merger.merge(existing or {}, extracted)

    @staticmethod
    def load_details(text: str | None) -> PersonalDetails:
        """Deserialize stored personal details, tolerating empty or corrupt text."""
        return safe_parse_object(text, context="personal_details")

    @staticmethod
    def dump_details(details: PersonalDetails) -> str:
        return json.dumps(details, ensure_ascii=False)
