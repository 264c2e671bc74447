"""Personal details: the categorized fact base learned about a user."""

from __future__ import annotations

import json
from typing import Any, Union

DetailValue = Union[str, list[Any], dict[str, Any]]
PersonalDetails = dict[str, dict[str, DetailValue]]

CATEGORIES: tuple[str, ...] = (
    "personalProfile",
    "relationships",
    "workPurpose",
    "healthWellbeing",
    "lifestyleHabits",
    "goalsPlans",
    "patternsInsights",
    "preferencesBoundaries",
)

PATTERNS_CATEGORY = "patternsInsights"
# Fields kept as an append-only dated log instead of a point-in-time fact
APPEND_ONLY_FIELDS: tuple[str, ...] = (
    "recurring_themes",
    "behavioral_patterns",
    "progress_markers",
)

_DISPLAY_MAX_CHARS = 50
_SCALARS = (str, int, float, bool, type(None))


class CloneError(ValueError):
    """Raised when a value cannot be copied as plain personal-details data."""


def clone_details(details: Any) -> Any:
    """Deep-copy JSON-shaped data (dicts, lists, scalars).

    Raises:
        CloneError: on unsupported types or reference cycles, and when the
            nesting is too deep to walk.
    """
    try:
        return _clone(details, set())
    except RecursionError as e:
        raise CloneError("personal details nested too deeply") from e


def _clone(value: Any, active: set[int]) -> Any:
    if isinstance(value, _SCALARS):
        return value
    if not isinstance(value, (dict, list, tuple)):
        raise CloneError(f"unsupported value type: {type(value).__name__}")
    marker = id(value)
    if marker in active:
        raise CloneError("circular reference in personal details")
    active.add(marker)
    try:
        if isinstance(value, dict):
            return {str(k): _clone(v, active) for k, v in value.items()}
        return [_clone(v, active) for v in value]
    finally:
        active.discard(marker)


def is_empty_value(value: Any) -> bool:
    """True for values that carry no information (None, blank string, empty container)."""
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    if isinstance(value, (list, dict)):
        return len(value) == 0
    return False


def display_value(value: Any) -> str:
    """Short human-readable form of *value* for change notes."""
    text = value if isinstance(value, str) else json.dumps(value, ensure_ascii=False, default=str)
    if len(text) > _DISPLAY_MAX_CHARS:
        return text[:_DISPLAY_MAX_CHARS] + "..."
    return text
