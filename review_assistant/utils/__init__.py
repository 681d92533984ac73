"""
Utilities package for AI Code Review Assistant.

Contains helper functions and common utilities.
"""

from review_assistant.utils.helpers import (
    SUPPORTED_LANGUAGES,
    detect_language,
    estimate_tokens,
    extract_line_range,
    truncate_string,
)

__all__ = [
    "SUPPORTED_LANGUAGES",
    "detect_language",
    "estimate_tokens",
    "extract_line_range",
    "truncate_string",
]
