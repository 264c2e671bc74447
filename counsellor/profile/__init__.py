"""Personal details learning: sanitize, then merge."""

from counsellor.profile.details import CATEGORIES, PersonalDetails, clone_details
from counsellor.profile.merger import (
    MergeResult,
    PersonalDetailsMerger,
    is_more_detailed,
    merge_personal_details,
)
from counsellor.profile.sanitize import sanitize_personal_details

__all__ = [
    "CATEGORIES",
    "MergeResult",
    "PersonalDetails",
    "PersonalDetailsMerger",
    "clone_details",
    "is_more_detailed",
    "merge_personal_details",
    "sanitize_personal_details",
]
