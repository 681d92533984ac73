"""
Helper utilities for AI Code Review Assistant.

Contains common utility functions used across the application.
"""

import math
import os
from typing import Optional

# Extensions the reviewer analyzes, mapped to the language named in prompts.
SUPPORTED_LANGUAGES: dict[str, str] = {
    ".js": "javascript",
    ".jsx": "javascript",
    ".ts": "typescript",
    ".tsx": "typescript",
    ".py": "python",
    ".java": "java",
    ".cpp": "cpp",
    ".c": "c",
    ".cs": "csharp",
    ".go": "go",
    ".rb": "ruby",
    ".php": "php",
    ".rs": "rust",
}


def detect_language(file_path: str) -> Optional[str]:
    """
    Detect the programming language from a file path.

    Args:
        file_path: Path to the file.

    Returns:
        Language identifier, or None if the extension is not supported.
    """
    _, ext = os.path.splitext(file_path)
    return SUPPORTED_LANGUAGES.get(ext)


def extract_line_range(
    code: str,
    line_number: int,
    line_end: Optional[int] = None,
    context_lines: int = 5,
) -> str:
    """
    Extract a block of lines around an issue.

    Args:
        code: The full source code.
        line_number: First line of the issue (1-based).
        line_end: Last line of the issue, defaults to ``line_number``.
        context_lines: Number of lines before and after.

    Returns:
        The selected lines joined with newlines.
    """
    lines = code.split("\n")
    start = max(0, line_number - context_lines)
    end = min(len(lines), (line_end or line_number) + context_lines)
    return "\n".join(lines[start:end])


def truncate_string(
    text: str,
    max_length: int = 500,
    suffix: str = "",
) -> str:
    """
    Truncate a string to a maximum length.

    Args:
        text: The text to truncate.
        max_length: Maximum length including suffix.
        suffix: Suffix to append when truncated.

    Returns:
        Truncated string.
    """
    if len(text) <= max_length:
        return text

    return text[: max_length - len(suffix)] + suffix


def estimate_tokens(*texts: str) -> int:
    """Rough token count used when a provider reports none (4 chars per token)."""
    return math.ceil(sum(len(t) for t in texts) / 4)
