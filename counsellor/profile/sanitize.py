"""Strip sensitive fields from extracted personal details before they are merged."""

from __future__ import annotations

from typing import Iterable

from counsellor.logging import get_logger
from counsellor.profile.details import CloneError, PersonalDetails, clone_details

logger = get_logger(__name__)

SENSITIVE_FIELDS: tuple[str, ...] = ("password", "ssn", "credit_card", "bank_account")


def is_sensitive_field(name: str, blocklist: Iterable[str] = SENSITIVE_FIELDS) -> bool:
    lower = name.lower()
    return any(term.lower() in lower for term in blocklist)


def sanitize_personal_details(
    details: PersonalDetails,
    blocklist: Iterable[str] = SENSITIVE_FIELDS,
) -> PersonalDetails:
    """
    Return a copy of *details* without any field whose name looks sensitive.

    Matching is a case-insensitive substring test on the field name and
    applies to every category. The input is never modified.
    """
    try:
        sanitized = clone_details(details)
    except CloneError as e:
        logger.error("personal_details_clone_failed", step="sanitize", error=str(e))
        return {}
    if not isinstance(sanitized, dict):
        return {}

    terms = tuple(blocklist)
    removed: list[str] = []
    for category, fields in sanitized.items():
        if not isinstance(fields, dict):
            continue
        for field in [f for f in fields if is_sensitive_field(f, terms)]:
            del fields[field]
            removed.append(f"{category}.{field}")

    if removed:
        logger.warning("sensitive_fields_removed", count=len(removed), fields=removed)
    return sanitized
