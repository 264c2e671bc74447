"""JSON parsing helpers for stored profile text and model output."""

import json
from typing import Any, TypeVar

import json_repair

from counsellor.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

_LOG_SAMPLE_CHARS = 100


def safe_parse(text: str | None, fallback: T, context: str | None = None) -> Any | T:
    """Parse JSON *text*, returning *fallback* when it is empty or malformed.

    Failures are logged only when a *context* label is given.
    """
    if not text:
        return fallback
    try:
        return json.loads(text)
    except (json.JSONDecodeError, TypeError) as e:
        if context:
            logger.error("json_parse_failed", context=context, error=str(e))
            logger.debug("json_parse_sample", context=context, sample=text[:_LOG_SAMPLE_CHARS])
        return fallback


def safe_parse_object(text: str | None, context: str | None = None) -> dict[str, Any]:
    value = safe_parse(text, {}, context)
    return value if isinstance(value, dict) else {}


def safe_parse_array(text: str | None, context: str | None = None) -> list[Any]:
    value = safe_parse(text, [], context)
    return value if isinstance(value, list) else []


def parse_llm_json(text: str | None) -> dict[str, Any]:
    """Leniently parse a JSON object from model output (code fences, trailing commas)."""
    if not text or not text.strip():
        return {}
    try:
        value = json_repair.loads(text)
    except Exception as e:
        logger.warning("llm_json_unparseable", error=str(e))
        return {}
    if not isinstance(value, dict):
        logger.warning("llm_json_not_object", value_type=type(value).__name__)
        return {}
    return value
