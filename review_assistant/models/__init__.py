"""
Models package for AI Code Review Assistant.

Contains Pydantic schemas, model response contracts and the ORM tables.
"""

from review_assistant.models.analysis import (
    AnalysisResult,
    EffortEstimate,
    ParsedIssue,
    ParseOutcome,
    Recommendations,
)
from review_assistant.models.schemas import (
    CommentType,
    IssueSeverity,
    ProviderName,
    ReviewStatus,
)
from review_assistant.models.tables import (
    CodeIssue,
    CodeReview,
    CodingStandard,
    ReviewComment,
    User,
)

__all__ = [
    "AnalysisResult",
    "EffortEstimate",
    "ParsedIssue",
    "ParseOutcome",
    "Recommendations",
    "CommentType",
    "IssueSeverity",
    "ProviderName",
    "ReviewStatus",
    "CodeIssue",
    "CodeReview",
    "CodingStandard",
    "ReviewComment",
    "User",
]
