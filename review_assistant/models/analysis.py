"""
Model response contracts for AI Code Review Assistant.

Defines the JSON shape the analysis prompt asks the model to produce and the
typed result the response parser hands to the review pipeline.
"""

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from review_assistant.models.schemas import IssueSeverity


class ParseOutcome(str, Enum):
    """How a model reply was interpreted."""

    PARSED = "parsed"
    NO_JSON = "no_json"
    INVALID_JSON = "invalid_json"
    INVALID_SHAPE = "invalid_shape"


class _ModelReply(BaseModel):
    """Base for models decoded from model output (camelCase keys)."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class ParsedIssue(_ModelReply):
    """
    A single issue reported by the model.

    Attributes:
        line: First affected line.
        line_end: Last affected line, defaults to ``line``.
        severity: CRITICAL, MAJOR, MINOR or INFO.
        category: Free-form category (bug, security, style, ...).
        title: Short issue title.
        description: Detailed explanation.
        suggestion: How to fix it.
        auto_fixable: Whether a fix can be generated automatically.
        standard: Name of the violated coding standard, if any.
        documentation_needed: Documentation changes the model asks for.
    """

    line: int
    line_end: Optional[int] = None
    severity: IssueSeverity
    category: str = Field(..., min_length=1)
    title: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    suggestion: str = ""
    auto_fixable: bool = False
    standard: Optional[str] = None
    documentation_needed: Optional[str] = None

    @field_validator("line", mode="after")
    @classmethod
    def clamp_line(cls, v: int) -> int:
        """Lines are 1-based."""
        return max(v, 1)

    @field_validator("severity", mode="before")
    @classmethod
    def normalize_severity(cls, v: Any) -> Any:
        """Accept severities in any case."""
        if isinstance(v, str):
            return v.strip().upper()
        return v

    @field_validator("suggestion", mode="before")
    @classmethod
    def default_suggestion(cls, v: Any) -> str:
        if v is None:
            return ""
        return v if isinstance(v, str) else str(v)

    @field_validator("auto_fixable", mode="before")
    @classmethod
    def coerce_auto_fixable(cls, v: Any) -> bool:
        """Models emit booleans as strings now and then."""
        if isinstance(v, str):
            return v.strip().lower() in ("true", "yes", "1")
        return bool(v)

    @field_validator("standard", "documentation_needed", mode="before")
    @classmethod
    def empty_to_none(cls, v: Any) -> Optional[str]:
        if not v:
            return None
        return v if isinstance(v, str) else str(v)

    @model_validator(mode="after")
    def default_line_end(self) -> "ParsedIssue":
        if self.line_end is None or self.line_end < self.line:
            self.line_end = self.line
        return self


class AnalysisSummary(_ModelReply):
    """Issue counts per severity."""

    critical: int = Field(default=0, ge=0)
    major: int = Field(default=0, ge=0)
    minor: int = Field(default=0, ge=0)
    info: int = Field(default=0, ge=0)

    @classmethod
    def from_issues(cls, issues: list[ParsedIssue]) -> "AnalysisSummary":
        """Count issues by severity."""
        return cls(
            critical=sum(1 for i in issues if i.severity == IssueSeverity.CRITICAL),
            major=sum(1 for i in issues if i.severity == IssueSeverity.MAJOR),
            minor=sum(1 for i in issues if i.severity == IssueSeverity.MINOR),
            info=sum(1 for i in issues if i.severity == IssueSeverity.INFO),
        )


class Recommendations(_ModelReply):
    """Recommendations grouped by category."""

    documentation: list[str] = Field(default_factory=list)
    testing: list[str] = Field(default_factory=list)
    architecture: list[str] = Field(default_factory=list)
    cicd: list[str] = Field(default_factory=list)

    @field_validator("documentation", "testing", "architecture", "cicd", mode="before")
    @classmethod
    def only_lists(cls, v: Any) -> list[str]:
        """Non-list values are discarded, non-string items stringified."""
        if not isinstance(v, list):
            return []
        return [item if isinstance(item, str) else str(item) for item in v]

    def extend(self, other: "Recommendations") -> None:
        """Concatenate another set of recommendations onto this one."""
        self.documentation.extend(other.documentation)
        self.testing.extend(other.testing)
        self.architecture.extend(other.architecture)
        self.cicd.extend(other.cicd)


class AnalysisResponse(_ModelReply):
    """Top-level contract of an analysis reply. ``issues`` must be a list."""

    issues: list[Any]
    summary: Optional[Any] = None
    recommendations: Optional[Any] = None


class AnalysisResult(BaseModel):
    """
    Result of parsing one analysis reply.

    Attributes:
        outcome: Named parse outcome.
        issues: Issues that passed validation.
        summary: Counts per severity.
        recommendations: Categorized recommendations.
        dropped_issues: Number of candidate issues rejected by validation.
    """

    outcome: ParseOutcome = ParseOutcome.PARSED
    issues: list[ParsedIssue] = Field(default_factory=list)
    summary: AnalysisSummary = Field(default_factory=AnalysisSummary)
    recommendations: Recommendations = Field(default_factory=Recommendations)
    dropped_issues: int = 0

    @classmethod
    def empty(cls, outcome: ParseOutcome) -> "AnalysisResult":
        """Well-formed result with no issues."""
        return cls(outcome=outcome)


class EffortItem(_ModelReply):
    """Effort estimate for a single issue, keyed by issue title."""

    issue: str
    effort: Optional[float] = Field(default=None, ge=0.0)
    reasoning: str = ""


class EffortEstimate(_ModelReply):
    """Effort estimate over all issues of a review."""

    total_effort: float = Field(..., ge=0.0)
    breakdown: list[EffortItem] = Field(default_factory=list)
