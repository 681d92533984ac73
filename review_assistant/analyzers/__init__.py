"""
Analyzers package for AI Code Review Assistant.

Contains prompt construction and model response parsing.
"""

from review_assistant.analyzers.prompt_builder import (
    build_analysis_prompt,
    build_effort_prompt,
    build_fix_prompt,
    filter_standards,
    format_standards,
)
from review_assistant.analyzers.response_parser import (
    extract_fixed_code,
    parse_analysis_response,
    parse_effort_response,
)

__all__ = [
    "build_analysis_prompt",
    "build_effort_prompt",
    "build_fix_prompt",
    "filter_standards",
    "format_standards",
    "extract_fixed_code",
    "parse_analysis_response",
    "parse_effort_response",
]
