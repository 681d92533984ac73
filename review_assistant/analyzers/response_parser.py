"""
Response parsing for AI Code Review Assistant.

Locates the JSON object in a model reply and validates it against the
response contracts. Parsing never raises: a reply that cannot be used
yields an empty result tagged with a ParseOutcome.
"""

import json
import logging
import re
from typing import Any, Iterator, Optional

from pydantic import ValidationError

from review_assistant.models.analysis import (
    AnalysisResponse,
    AnalysisResult,
    AnalysisSummary,
    EffortEstimate,
    EffortItem,
    ParsedIssue,
    ParseOutcome,
    Recommendations,
)

logger = logging.getLogger("code_review.response_parser")

FENCED_JSON = re.compile(r"```(?:json)?\s*(\{[\s\S]*?\})\s*```")
BRACED_JSON = re.compile(r"\{[\s\S]*\}")
FIXED_CODE_BLOCK = re.compile(r"FIXED_CODE:\s*```[\w+#.-]*\s*([\s\S]*?)```")
ANY_CODE_BLOCK = re.compile(r"```[\w+#.-]*\s*([\s\S]*?)```")


def _json_candidates(text: str) -> Iterator[str]:
    """Fenced code block first, then everything from the first '{' to the last '}'."""
    fenced = FENCED_JSON.search(text)
    if fenced:
        yield fenced.group(1)
    braced = BRACED_JSON.search(text)
    if braced:
        yield braced.group(0)


def extract_json_object(text: Optional[str]) -> tuple[ParseOutcome, Optional[dict[str, Any]]]:
    """
    Find and decode the JSON object embedded in a model reply.

    Returns:
        Tuple of outcome and the decoded object (None unless PARSED).
    """
    if not text:
        return ParseOutcome.NO_JSON, None

    outcome = ParseOutcome.NO_JSON
    for candidate in _json_candidates(text):
        try:
            decoded = json.loads(candidate)
        except json.JSONDecodeError:
            outcome = ParseOutcome.INVALID_JSON
            continue
        if isinstance(decoded, dict):
            return ParseOutcome.PARSED, decoded
        outcome = ParseOutcome.INVALID_JSON

    return outcome, None


def parse_analysis_response(text: Optional[str]) -> AnalysisResult:
    """
    Parse a code analysis reply.

    Issues missing title, description, severity, category or line are
    dropped individually; the rest of the reply is kept.

    Args:
        text: Raw model output.

    Returns:
        AnalysisResult. Empty with a non-PARSED outcome when the reply is unusable.
    """
    outcome, data = extract_json_object(text)
    if data is None:
        logger.warning(
            f"Could not parse model response as JSON ({outcome.value}): {(text or '')[:200]!r}"
        )
        return AnalysisResult.empty(outcome)

    try:
        response = AnalysisResponse.model_validate(data)
    except ValidationError as e:
        logger.warning(f"Model response does not match the analysis contract: {e.error_count()} error(s)")
        return AnalysisResult.empty(ParseOutcome.INVALID_SHAPE)

    issues: list[ParsedIssue] = []
    dropped = 0
    for candidate in response.issues:
        try:
            issues.append(ParsedIssue.model_validate(candidate))
        except ValidationError:
            dropped += 1

    if dropped:
        logger.warning(f"Dropped {dropped} invalid issue(s) from model response")

    summary = AnalysisSummary.from_issues(issues)
    if isinstance(response.summary, dict):
        try:
            summary = AnalysisSummary.model_validate(response.summary)
        except ValidationError:
            pass

    recommendations = Recommendations.model_validate(
        response.recommendations if isinstance(response.recommendations, dict) else {}
    )

    return AnalysisResult(
        outcome=ParseOutcome.PARSED,
        issues=issues,
        summary=summary,
        recommendations=recommendations,
        dropped_issues=dropped,
    )


def parse_effort_response(text: Optional[str]) -> Optional[EffortEstimate]:
    """
    Parse an effort estimation reply.

    Returns:
        EffortEstimate, or None when the reply has no usable ``totalEffort``.
        Breakdown entries that do not validate are skipped.
    """
    outcome, data = extract_json_object(text)
    if data is None:
        logger.warning(f"Could not parse effort response ({outcome.value})")
        return None

    raw_breakdown = data.get("breakdown")
    breakdown = []
    if isinstance(raw_breakdown, list):
        for item in raw_breakdown:
            try:
                breakdown.append(EffortItem.model_validate(item))
            except ValidationError:
                continue

    try:
        return EffortEstimate(total_effort=data.get("totalEffort"), breakdown=breakdown)
    except ValidationError:
        logger.warning("Effort response has no valid totalEffort")
        return None


def extract_fixed_code(text: str) -> str:
    """
    Extract the fixed code from a fix generation reply.

    Prefers the FIXED_CODE block, then any fenced block, then the whole reply.
    """
    match = FIXED_CODE_BLOCK.search(text) or ANY_CODE_BLOCK.search(text)
    if match:
        return match.group(1).strip()
    return text.strip()
