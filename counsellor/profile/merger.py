"""Incremental learning of personal details across sessions."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Callable

from counsellor.logging import get_logger
from counsellor.profile.details import (
    APPEND_ONLY_FIELDS,
    CATEGORIES,
    PATTERNS_CATEGORY,
    CloneError,
    PersonalDetails,
    clone_details,
    display_value,
    is_empty_value,
)

logger = get_logger(__name__)

_DIGIT_RE = re.compile(r"\d")
_WORD_GROWTH_RATIO = 1.5


@dataclass
class MergeResult:
    merged: PersonalDetails
    changes: list[str] = field(default_factory=list)


def is_more_detailed(new: str, old: str) -> bool:
    """Heuristic: does *new* say more than *old*?

    True when the new text is longer, introduces a conjunction or list
    separator, introduces numbers, or has at least 1.5x the words.
    """
    if len(new) > len(old):
        return True
    if " and " in new and " and " not in old:
        return True
    if ", " in new and ", " not in old:
        return True
    if _DIGIT_RE.search(new) and not _DIGIT_RE.search(old):
        return True
    return len(new.split()) > len(old.split()) * _WORD_GROWTH_RATIO


def _item_text(item: Any) -> str:
    return item if isinstance(item, str) else json.dumps(item, ensure_ascii=False, default=str)


class PersonalDetailsMerger:
    """
    Folds newly extracted details into an existing profile.

    Existing facts are only overwritten by more detailed strings or grown
    by array unions; pattern fields in ``patternsInsights`` form a dated,
    append-only log. The caller's objects are never mutated.
    """

    def __init__(self, today: Callable[[], date] | None = None):
        self._today = today or date.today

    def merge(self, existing: PersonalDetails, incoming: PersonalDetails) -> MergeResult:
        merged = self._clone_or_empty(existing, "existing")
        updates = self._clone_or_empty(incoming, "incoming")
        changes: list[str] = []

        for category in CATEGORIES:
            fields = updates.get(category)
            if not isinstance(fields, dict) or not fields:
                continue
            target = merged.get(category)
            if target is not None and not isinstance(target, dict):
                logger.debug("personal_details_category_skipped", category=category)
                continue

            for name, value in fields.items():
                if is_empty_value(value):
                    continue
                if target is None:
                    target = merged[category] = {}
                if category == PATTERNS_CATEGORY and name in APPEND_ONLY_FIELDS:
                    note = self._append_pattern(target, name, value)
                else:
                    note = self._merge_field(target, category, name, value)
                if note:
                    changes.append(note)

        logger.info("personal_details_merged", changes=len(changes))
        return MergeResult(merged=merged, changes=changes)

    @staticmethod
    def _clone_or_empty(details: PersonalDetails, which: str) -> PersonalDetails:
        try:
            cloned = clone_details(details or {})
        except CloneError as e:
            logger.error("personal_details_clone_failed", step="merge", source=which, error=str(e))
            return {}
        return cloned if isinstance(cloned, dict) else {}

    @staticmethod
    def _merge_field(target: dict[str, Any], category: str, name: str, value: Any) -> str | None:
        current = target.get(name)
        path = f"{category}.{name}"

        if is_empty_value(current):
            target[name] = value
            return f"Learned {path}: {display_value(value)}"

        if isinstance(value, str) and isinstance(current, str):
            if value != current and is_more_detailed(value, current):
                target[name] = value
                return f"Updated {path}: {display_value(value)}"
            return None

        if isinstance(value, list) and isinstance(current, list):
            union: list[Any] = []
            for item in [*current, *value]:
                if item not in union:
                    union.append(item)
            if len(union) <= len(current):
                return None
            added = [item for item in union if item not in current]
            target[name] = union
            return f"Added to {path}: {', '.join(_item_text(item) for item in added)}"

        # TODO: define a resolution rule for type-mismatched fields once product settles one
        logger.debug(
            "personal_details_type_mismatch",
            field=path,
            existing_type=type(current).__name__,
            incoming_type=type(value).__name__,
        )
        return None

    def _append_pattern(self, target: dict[str, Any], name: str, value: Any) -> str | None:
        text = _item_text(value)
        current = target.get(name)

        stamp = self._today().isoformat()
        if is_empty_value(current):
            target[name] = f"[{stamp}] {text}"
            return f"Added pattern: {display_value(text)}"
        if not isinstance(current, str):
            logger.debug("personal_details_type_mismatch", field=f"{PATTERNS_CATEGORY}.{name}")
            return None
        if text in current:
            return None

        target[name] = f"{current}\n[{stamp}] {text}"
        return f"Added pattern: {display_value(text)}"


def merge_personal_details(
    existing: PersonalDetails,
    incoming: PersonalDetails,
) -> MergeResult:
    """Merge *incoming* into a copy of *existing* using today's date for pattern entries."""
    return PersonalDetailsMerger().merge(existing, incoming)
