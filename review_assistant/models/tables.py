"""
ORM tables for AI Code Review Assistant.

Reviews own their issues and comments; standards are managed independently.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any, Optional

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    Enum as SAEnum,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    case,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from review_assistant.database import Base
from review_assistant.models.schemas import CommentType, IssueSeverity, ReviewStatus


def _uuid() -> str:
    return str(uuid.uuid4())


class User(Base):
    """Minimal identity record."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    name: Mapped[Optional[str]] = mapped_column(String(255))
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    reviews: Mapped[list[CodeReview]] = relationship(back_populates="user")


class CodeReview(Base):
    """One analysis run over a repository's changed files."""

    __tablename__ = "code_reviews"
    __table_args__ = (
        Index("ix_code_reviews_user_created", "user_id", "created_at"),
        Index("ix_code_reviews_status", "status"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False)
    repository_path: Mapped[str] = mapped_column(Text, nullable=False)
    branch: Mapped[str] = mapped_column(String(255), nullable=False)
    commit_hash: Mapped[Optional[str]] = mapped_column(String(64))
    status: Mapped[ReviewStatus] = mapped_column(
        SAEnum(ReviewStatus, native_enum=False, length=20),
        default=ReviewStatus.PENDING,
        nullable=False,
    )

    # Aggregates, written once at completion
    files_analyzed: Mapped[int] = mapped_column(Integer, default=0)
    issues_found: Mapped[int] = mapped_column(Integer, default=0)
    critical_issues: Mapped[int] = mapped_column(Integer, default=0)
    major_issues: Mapped[int] = mapped_column(Integer, default=0)
    minor_issues: Mapped[int] = mapped_column(Integer, default=0)
    estimated_effort: Mapped[Optional[float]] = mapped_column(Float)
    tokens_used: Mapped[int] = mapped_column(Integer, default=0)
    analysis_time: Mapped[Optional[float]] = mapped_column(Float)
    recommendations: Mapped[Optional[dict[str, Any]]] = mapped_column(JSON)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    user: Mapped[User] = relationship(back_populates="reviews")
    issues: Mapped[list[CodeIssue]] = relationship(
        back_populates="review",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by=lambda: [severity_rank(), CodeIssue.line_number],
    )
    comments: Mapped[list[ReviewComment]] = relationship(
        back_populates="review",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by=lambda: ReviewComment.created_at.desc(),
    )

    @property
    def comment_count(self) -> int:
        return len(self.comments)

    def __repr__(self) -> str:
        return f"CodeReview(id='{self.id}', status={self.status.value})"


class CodeIssue(Base):
    """One defect reported in one file of a review."""

    __tablename__ = "code_issues"
    __table_args__ = (
        Index("ix_code_issues_review_severity", "review_id", "severity"),
        Index("ix_code_issues_file_path", "file_path"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    review_id: Mapped[str] = mapped_column(
        ForeignKey("code_reviews.id", ondelete="CASCADE"), nullable=False
    )
    file_path: Mapped[str] = mapped_column(Text, nullable=False)
    line_number: Mapped[int] = mapped_column(Integer, nullable=False)
    line_end: Mapped[Optional[int]] = mapped_column(Integer)
    severity: Mapped[IssueSeverity] = mapped_column(
        SAEnum(IssueSeverity, native_enum=False, length=10), nullable=False
    )
    category: Mapped[str] = mapped_column(String(100), nullable=False)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    code_snippet: Mapped[Optional[str]] = mapped_column(Text)
    suggestion: Mapped[Optional[str]] = mapped_column(Text)
    auto_fixable: Mapped[bool] = mapped_column(Boolean, default=False)
    fix_code: Mapped[Optional[str]] = mapped_column(Text)
    effort: Mapped[Optional[float]] = mapped_column(Float)
    standard: Mapped[Optional[str]] = mapped_column(String(255))
    documentation_needed: Mapped[Optional[str]] = mapped_column(Text)
    resolved: Mapped[bool] = mapped_column(Boolean, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    review: Mapped[CodeReview] = relationship(back_populates="issues")


def severity_rank():
    """SQL expression ordering issues from CRITICAL to INFO."""
    return case(
        (CodeIssue.severity == IssueSeverity.CRITICAL, 0),
        (CodeIssue.severity == IssueSeverity.MAJOR, 1),
        (CodeIssue.severity == IssueSeverity.MINOR, 2),
        else_=3,
    )


class ReviewComment(Base):
    """Free-text note on a review or one of its issues. Append-only."""

    __tablename__ = "review_comments"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    review_id: Mapped[str] = mapped_column(
        ForeignKey("code_reviews.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False)
    issue_id: Mapped[Optional[str]] = mapped_column(String(36))
    content: Mapped[str] = mapped_column(Text, nullable=False)
    type: Mapped[CommentType] = mapped_column(
        SAEnum(CommentType, native_enum=False, length=20), default=CommentType.COMMENT
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    review: Mapped[CodeReview] = relationship(back_populates="comments")
    user: Mapped[User] = relationship()


class CodingStandard(Base):
    """Named, language-scoped rule-set considered during analysis."""

    __tablename__ = "coding_standards"
    __table_args__ = (Index("ix_coding_standards_language_active", "language", "is_active"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    name: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)
    language: Mapped[str] = mapped_column(String(50), nullable=False)
    rules: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    is_built_in: Mapped[bool] = mapped_column(Boolean, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )
