"""
Pydantic schemas for AI Code Review Assistant.

Defines enums shared with the ORM tables and the API request/response models.
API payloads use camelCase keys.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class ReviewStatus(str, Enum):
    """Status of a code review."""

    PENDING = "PENDING"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


class IssueSeverity(str, Enum):
    """Severity levels for issues."""

    CRITICAL = "CRITICAL"
    MAJOR = "MAJOR"
    MINOR = "MINOR"
    INFO = "INFO"


class CommentType(str, Enum):
    """Kinds of review comments."""

    COMMENT = "COMMENT"
    QUESTION = "QUESTION"
    SUGGESTION = "SUGGESTION"
    RESOLVED = "RESOLVED"


class ProviderName(str, Enum):
    """Available AI providers."""

    OLLAMA = "ollama"
    GEMINI = "gemini"


class HealthStatus(str, Enum):
    """Health states reported by providers and the database."""

    OK = "ok"
    WARNING = "warning"
    ERROR = "error"


class CamelModel(BaseModel):
    """Base model serialized with camelCase keys."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# Requests


class AnalyzeStagedRequest(CamelModel):
    """
    Request to analyze the staged changes of a repository.

    Attributes:
        repository_path: Path to the git working tree.
        user_id: Owner of the review.
        provider: Optional provider for this review only.
    """

    repository_path: str = Field(..., min_length=1, description="Path to the git working tree")
    user_id: int = Field(..., ge=1, description="Owning user")
    provider: Optional[ProviderName] = Field(None, description="Provider for this review")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "repositoryPath": "/home/dev/projects/shop",
                "userId": 1,
                "provider": "ollama",
            }
        }
    )

    @field_validator("provider", mode="before")
    @classmethod
    def normalize_provider(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip().lower() or None
        return v


class AnalyzeCommitRequest(AnalyzeStagedRequest):
    """Request to analyze one commit."""

    commit_hash: str = Field(..., min_length=4, description="Commit to analyze")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "repositoryPath": "/home/dev/projects/shop",
                "commitHash": "9fceb02",
                "userId": 1,
            }
        }
    )


class CommentCreate(CamelModel):
    """Request to add a comment to a review."""

    user_id: int = Field(..., ge=1)
    content: str = Field(..., min_length=1)
    issue_id: Optional[str] = None
    type: CommentType = CommentType.COMMENT


class ResolveIssueRequest(CamelModel):
    """Request to set an issue's resolved flag."""

    resolved: bool = True


class FixRequest(CamelModel):
    """Request to generate a fix for an issue."""

    repository_path: str = Field(..., min_length=1)
    provider: Optional[ProviderName] = None


class StandardCreate(CamelModel):
    """Request to create a coding standard."""

    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    language: str = Field(..., min_length=1)
    rules: dict[str, Any]
    is_active: bool = True


class StandardUpdate(CamelModel):
    """Partial update of a coding standard."""

    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    language: Optional[str] = Field(None, min_length=1)
    rules: Optional[dict[str, Any]] = None
    is_active: Optional[bool] = None


class ProviderSwitchRequest(CamelModel):
    """Request to change the default AI provider."""

    provider: ProviderName

    @field_validator("provider", mode="before")
    @classmethod
    def normalize_provider(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip().lower()
        return v


# Responses


class UserOut(CamelModel):
    id: int
    name: Optional[str] = None
    email: str


class IssueOut(CamelModel):
    """A persisted issue."""

    id: str
    review_id: str
    file_path: str
    line_number: int
    line_end: Optional[int] = None
    severity: IssueSeverity
    category: str
    title: str
    description: str
    code_snippet: Optional[str] = None
    suggestion: Optional[str] = None
    auto_fixable: bool = False
    fix_code: Optional[str] = None
    effort: Optional[float] = None
    standard: Optional[str] = None
    documentation_needed: Optional[str] = None
    resolved: bool = False
    created_at: datetime


class CommentOut(CamelModel):
    """A persisted comment."""

    id: str
    review_id: str
    user_id: int
    issue_id: Optional[str] = None
    content: str
    type: CommentType
    created_at: datetime
    user: Optional[UserOut] = None


class ReviewSummaryOut(CamelModel):
    """
    A persisted review with its aggregates, without its issues.

    Attributes:
        issues_found: All issues, INFO included.
        critical_issues: CRITICAL issues only.
        major_issues: MAJOR issues only.
        minor_issues: MINOR issues only.
    """

    id: str
    user_id: int
    repository_path: str
    branch: str
    commit_hash: Optional[str] = None
    status: ReviewStatus
    files_analyzed: int = 0
    issues_found: int = 0
    critical_issues: int = 0
    major_issues: int = 0
    minor_issues: int = 0
    estimated_effort: Optional[float] = None
    tokens_used: int = 0
    analysis_time: Optional[float] = None
    recommendations: Optional[dict[str, list[str]]] = None
    created_at: datetime
    updated_at: datetime


class ReviewOut(ReviewSummaryOut):
    issues: list[IssueOut] = Field(default_factory=list)


class ReviewDetailOut(ReviewOut):
    """A review with comments and owner."""

    comments: list[CommentOut] = Field(default_factory=list)
    user: Optional[UserOut] = None


class ReviewListItem(ReviewSummaryOut):
    comment_count: int = 0


class AnalysisResponseOut(CamelModel):
    """Response of analyze-staged and analyze-commit."""

    success: bool = True
    review: ReviewOut
    provider: ProviderName
    message: str


class Pagination(CamelModel):
    total: int
    limit: int
    offset: int


class ReviewListResponse(CamelModel):
    success: bool = True
    reviews: list[ReviewListItem]
    pagination: Pagination


class ReviewDetailResponse(CamelModel):
    success: bool = True
    review: ReviewDetailOut


class CommentResponse(CamelModel):
    success: bool = True
    comment: CommentOut


class IssueResponse(CamelModel):
    success: bool = True
    issue: IssueOut


class FixOut(CamelModel):
    fixed_code: str
    original_code: str


class FixResponse(CamelModel):
    success: bool = True
    fix: FixOut


class ReviewStats(CamelModel):
    """Aggregate statistics over a user's reviews."""

    total_reviews: int = 0
    total_issues: int = 0
    total_critical: int = 0
    total_major: int = 0
    total_minor: int = 0
    total_tokens: int = 0
    avg_analysis_time: float = 0.0


class StatsResponse(CamelModel):
    success: bool = True
    stats: ReviewStats


class StandardOut(CamelModel):
    """A persisted coding standard."""

    id: str
    name: str
    description: Optional[str] = None
    language: str
    rules: dict[str, Any]
    is_active: bool
    is_built_in: bool
    created_at: datetime
    updated_at: datetime


class StandardResponse(CamelModel):
    success: bool = True
    standard: StandardOut


class StandardListResponse(CamelModel):
    success: bool = True
    standards: list[StandardOut]


class SeedResponse(CamelModel):
    success: bool = True
    message: str
    standards: list[StandardOut]


class MessageResponse(CamelModel):
    success: bool = True
    message: str


class ProviderHealth(CamelModel):
    """Health of one AI provider."""

    status: HealthStatus
    message: str
    model: Optional[str] = None
    available_models: Optional[list[str]] = None
    error: Optional[str] = None


class ProviderInfoResponse(CamelModel):
    success: bool = True
    provider: ProviderName
    available: list[ProviderName] = Field(default_factory=lambda: list(ProviderName))


class ProviderSwitchResponse(CamelModel):
    success: bool = True
    provider: ProviderName
    health: ProviderHealth
    message: str


class AllProvidersHealthResponse(CamelModel):
    success: bool = True
    current_provider: ProviderName
    providers: dict[str, ProviderHealth]


class DatabaseHealth(CamelModel):
    status: HealthStatus
    message: str


class HealthResponse(CamelModel):
    """Health check response model."""

    status: str = Field(default="ok", description="Service status")
    version: str = Field(default="1.0.0", description="Application version")
    timestamp: datetime = Field(default_factory=datetime.utcnow, description="Check timestamp")
    database: DatabaseHealth
    current_provider: ProviderName
    providers: dict[str, ProviderHealth]


class ErrorResponse(BaseModel):
    """Error response model for API errors."""

    error: str = Field(..., description="Error type")
    message: str = Field(..., description="Error message")
    detail: Optional[str] = Field(None, description="Additional details")
    timestamp: datetime = Field(default_factory=datetime.utcnow, description="Error timestamp")
