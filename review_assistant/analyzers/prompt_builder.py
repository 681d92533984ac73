"""
Prompt templates for AI Code Review Assistant.

Pure functions rendering the analysis, effort estimation and fix prompts.
"""

from typing import Any, Iterable, Optional

ANALYSIS_TEMPLATE = """You are an expert code reviewer specialized in {language}. Perform a comprehensive multi-dimensional analysis of the following code.{standards_text}

File: {file_path}
Language: {language}

Code:
```{language}
{code}
```

Provide a detailed analysis in the following JSON format:
{{
  "issues": [
    {{
      "line": <line number>,
      "lineEnd": <end line number if multi-line>,
      "severity": "CRITICAL" | "MAJOR" | "MINOR" | "INFO",
      "category": "bug" | "security" | "performance" | "style" | "maintainability" | "testing" | "architecture" | "documentation" | "ci-cd",
      "title": "<short issue title>",
      "description": "<detailed explanation>",
      "suggestion": "<how to fix it>",
      "autoFixable": true | false,
      "standard": "<applicable standard name if any>",
      "documentationNeeded": "<documentation changes needed, if any>"
    }}
  ],
  "summary": {{
    "critical": <count>,
    "major": <count>,
    "minor": <count>,
    "info": <count>
  }},
  "recommendations": {{
    "documentation": ["<documentation recommendations>"],
    "testing": ["<testing recommendations>"],
    "architecture": ["<architecture recommendations>"],
    "cicd": ["<CI/CD recommendations>"]
  }}
}}

Analyze across multiple dimensions:
1. **Security**: SQL injection, XSS, authentication flaws, data exposure, insecure dependencies
2. **Bugs & Logic**: Error handling, edge cases, null checks, logic errors, race conditions
3. **Performance**: Algorithm efficiency, memory leaks, database queries, caching opportunities
4. **Code Quality**: Style violations, code smells, complexity, readability, maintainability
5. **Testing**: Missing tests, test coverage, test quality, testability
6. **Architecture**: Design patterns, separation of concerns, coupling, scalability
7. **Documentation**: Missing docstrings, unclear comments, outdated documentation
8. **CI/CD**: Build issues, deployment concerns, environment configuration

Be specific, actionable, and provide clear explanations with line numbers."""

EFFORT_TEMPLATE = """You are a technical project manager. Estimate the development effort (in hours) needed to fix these code issues:

{issues_summary}

For each issue, provide an effort estimate. Consider:
- Issue complexity
- File changes required
- Testing needs
- Documentation updates

Respond in this JSON format:
{{
  "totalEffort": <number in hours>,
  "breakdown": [
    {{"issue": "<issue title>", "effort": <hours>, "reasoning": "<brief explanation>"}}
  ]
}}"""

FIX_TEMPLATE = """You are an expert code reviewer. Generate a fixed version of the following code to address this issue:

Issue: {title}
Description: {description}
Language: {language}
File: {file_path}
Line: {line_number}

Original Code:
```{language}
{code}
```

Provide ONLY the fixed code without explanations. Format your response as:
FIXED_CODE:
```{language}
<your fixed code here>
```"""


def _field(item: Any, name: str, default: Any = None) -> Any:
    """Read a field from an ORM row, a pydantic model or a dict."""
    if isinstance(item, dict):
        return item.get(name, default)
    return getattr(item, name, default)


def filter_standards(standards: Iterable[Any], language: str) -> list[Any]:
    """Standards that apply to ``language`` (or to all languages)."""
    return [s for s in standards if _field(s, "language") in (language, "all")]


def format_standards(standards: Optional[Iterable[Any]]) -> str:
    """
    Render standards as a bulleted block.

    Malformed input (not iterable, entries without a name) counts as no standards.
    """
    if not standards or isinstance(standards, (str, bytes)):
        return ""

    try:
        lines = [
            f"- {_field(s, 'name')}: {_field(s, 'description') or ''}"
            for s in standards
            if _field(s, "name")
        ]
    except TypeError:
        return ""

    if not lines:
        return ""
    return "\n\nCoding Standards to check:\n" + "\n".join(lines)


def build_analysis_prompt(
    code: str,
    file_path: str,
    language: str,
    standards: Optional[Iterable[Any]] = None,
) -> str:
    """
    Build the code analysis prompt.

    Args:
        code: Changed code of the file.
        file_path: Path of the file in the repository.
        language: Language name used in the prompt.
        standards: Applicable coding standards.

    Returns:
        Prompt text.
    """
    return ANALYSIS_TEMPLATE.format(
        language=language,
        standards_text=format_standards(standards),
        file_path=file_path,
        code=code,
    )


def build_effort_prompt(issues: Iterable[Any]) -> str:
    """Build the effort estimation prompt over all issues of a review."""
    issues_summary = "\n".join(
        f"- {_severity_value(_field(i, 'severity'))}: {_field(i, 'title')} in {_field(i, 'file_path')}"
        for i in issues
    )
    return EFFORT_TEMPLATE.format(issues_summary=issues_summary)


def build_fix_prompt(code: str, issue: Any, language: str) -> str:
    """Build the fix generation prompt for one issue."""
    return FIX_TEMPLATE.format(
        title=_field(issue, "title"),
        description=_field(issue, "description"),
        language=language,
        file_path=_field(issue, "file_path"),
        line_number=_field(issue, "line_number"),
        code=code,
    )


def _severity_value(severity: Any) -> str:
    return getattr(severity, "value", severity)
