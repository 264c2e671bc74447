"""Utility functions for counsellor."""

from counsellor.utils.helpers import parse_llm_json, safe_parse, safe_parse_array, safe_parse_object

__all__ = ["parse_llm_json", "safe_parse", "safe_parse_array", "safe_parse_object"]
