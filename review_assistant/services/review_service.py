"""
Review Service for AI Code Review Assistant.

Main entry point for code reviews: extracts changes, drives the AI provider
file by file, persists issues and aggregates, and serves stored reviews.
"""

import asyncio
import logging
import time
from typing import Callable, Optional

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from review_assistant.analyzers.prompt_builder import (
    build_analysis_prompt,
    build_effort_prompt,
    build_fix_prompt,
    filter_standards,
)
from review_assistant.analyzers.response_parser import (
    extract_fixed_code,
    parse_analysis_response,
    parse_effort_response,
)
from review_assistant.config import Settings, get_settings
from review_assistant.exceptions import (
    IssueNotFoundError,
    NoSupportedFilesError,
    NotAutoFixableError,
    ProviderError,
    ReviewNotFoundError,
    UnsupportedLanguageError,
    UserNotFoundError,
)
from review_assistant.models.analysis import ParsedIssue, Recommendations
from review_assistant.models.schemas import (
    CommentCreate,
    FixOut,
    IssueSeverity,
    ReviewStats,
    ReviewStatus,
)
from review_assistant.models.tables import CodeIssue, CodeReview, ReviewComment, User
from review_assistant.providers.base import AIProvider
from review_assistant.providers.registry import ProviderRegistry
from review_assistant.services.git_service import ChangeSet, FileChange, GitService
from review_assistant.services.standards_service import StandardsService
from review_assistant.utils.helpers import detect_language, extract_line_range, truncate_string


class ReviewService:
    """
    Main service for code reviews.

    The provider adapter is passed in by the caller when a review starts, so
    a change of the default provider never affects a review in flight.
    Files are analyzed one after another.
    """

    def __init__(
        self,
        registry: ProviderRegistry,
        git_service: Optional[GitService] = None,
        standards_service: Optional[StandardsService] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        """
        Initialize the Review Service.

        Args:
            registry: Provider registry used for availability checks.
            git_service: Git service instance. Created if not provided.
            standards_service: Standards service instance. Created if not provided.
            settings: Optional settings instance.
        """
        self._logger = logging.getLogger("code_review.review_service")
        self._settings = settings or get_settings()
        self._registry = registry
        self._git = git_service or GitService(self._settings.min_changed_code_length)
        self._standards = standards_service or StandardsService()

    @property
    def git(self) -> GitService:
        return self._git

    async def analyze_staged(
        self,
        session: Session,
        repository_path: str,
        user_id: int,
        provider: AIProvider,
    ) -> CodeReview:
        """
        Review the staged (or, failing that, modified) changes of a working tree.

        Args:
            session: Database session.
            repository_path: Path inside the repository.
            user_id: Owner of the review.
            provider: Adapter used for every model call of this review.

        Returns:
            The completed review.
        """
        return await self._run(
            session,
            lambda: self._git.get_staged_changes(repository_path),
            repository_path,
            user_id,
            provider,
        )

    async def analyze_commit(
        self,
        session: Session,
        repository_path: str,
        commit_hash: str,
        user_id: int,
        provider: AIProvider,
    ) -> CodeReview:
        """Review the changes introduced by one commit."""
        return await self._run(
            session,
            lambda: self._git.get_commit_changes(repository_path, commit_hash),
            repository_path,
            user_id,
            provider,
        )

    async def _run(
        self,
        session: Session,
        load_changes: Callable[[], ChangeSet],
        repository_path: str,
        user_id: int,
        provider: AIProvider,
    ) -> CodeReview:
        if session.get(User, user_id) is None:
            raise UserNotFoundError(user_id)

        # Raises before any review row exists.
        changes = await asyncio.to_thread(load_changes)

        review = CodeReview(
            user_id=user_id,
            repository_path=repository_path,
            branch=changes.branch,
            commit_hash=changes.commit_hash,
            status=ReviewStatus.IN_PROGRESS,
        )
        session.add(review)
        session.commit()
        review_id = review.id

        self._logger.info(
            f"Starting review {review_id} of {repository_path} "
            f"({changes.source}, {len(changes.files)} files) with {provider.name}"
        )

        try:
            await self._analyze(session, review, changes, provider)
        except Exception:
            session.rollback()
            self._mark_failed(session, review_id)
            raise

        session.refresh(review)
        return review

    async def _analyze(
        self,
        session: Session,
        review: CodeReview,
        changes: ChangeSet,
        provider: AIProvider,
    ) -> None:
        start_time = time.monotonic()
        standards = self._standards.list_active(session)
        recommendations = Recommendations()
        tokens_used = 0
        files_analyzed = 0

        for change in self._git.analyzable_files(changes.files):
            language = change.language
            self._logger.info(f"Analyzing {change.path} ({language})")

            prompt = build_analysis_prompt(
                change.code,
                change.path,
                language,
                filter_standards(standards, language),
            )

            await self._registry.ensure_available(provider)
            response = await provider.analyze_code(prompt)
            tokens_used += response.tokens_used

            result = parse_analysis_response(response.text)
            for parsed in result.issues:
                self._save_issue(session, review, change, parsed)

            recommendations.extend(result.recommendations)
            files_analyzed += 1
            session.commit()

        if files_analyzed == 0:
            raise NoSupportedFilesError(
                "No supported files with meaningful changes found to analyze."
            )

        issues = list(session.scalars(select(CodeIssue).where(CodeIssue.review_id == review.id)))

        estimated_effort = 0.0
        if issues:
            estimated_effort, effort_tokens = await self._estimate_effort(provider, issues)
            tokens_used += effort_tokens

        review.files_analyzed = files_analyzed
        review.issues_found = len(issues)
        review.critical_issues = sum(1 for i in issues if i.severity == IssueSeverity.CRITICAL)
        review.major_issues = sum(1 for i in issues if i.severity == IssueSeverity.MAJOR)
        review.minor_issues = sum(1 for i in issues if i.severity == IssueSeverity.MINOR)
        review.estimated_effort = estimated_effort
        review.tokens_used = tokens_used
        review.analysis_time = round(time.monotonic() - start_time, 2)
        review.recommendations = recommendations.model_dump()
        review.status = ReviewStatus.COMPLETED
        session.commit()

        self._logger.info(
            f"Review {review.id} completed: {files_analyzed} files, "
            f"{len(issues)} issues, {tokens_used} tokens in {review.analysis_time}s"
        )

    def _save_issue(
        self,
        session: Session,
        review: CodeReview,
        change: FileChange,
        parsed: ParsedIssue,
    ) -> None:
        """Persist one issue inside a savepoint; a failure only loses that issue."""
        try:
            with session.begin_nested():
                session.add(
                    CodeIssue(
                        review_id=review.id,
                        file_path=change.path,
                        line_number=change.file_line(parsed.line),
                        line_end=change.file_line(parsed.line_end),
                        severity=parsed.severity,
                        category=parsed.category,
                        title=parsed.title,
                        description=parsed.description,
                        code_snippet=truncate_string(change.code, self._settings.max_snippet_length),
                        suggestion=parsed.suggestion,
                        auto_fixable=parsed.auto_fixable,
                        standard=parsed.standard,
                        documentation_needed=parsed.documentation_needed,
                    )
                )
        except SQLAlchemyError as e:
            self._logger.error(f"Failed to save issue '{parsed.title}' in {change.path}: {e}")

    async def _estimate_effort(
        self,
        provider: AIProvider,
        issues: list[CodeIssue],
    ) -> tuple[float, int]:
        """
        Ask the provider for an effort estimate and apply it to the issues.

        Returns:
            Tuple of total effort in hours and tokens used.
        """
        fallback = len(issues) * self._settings.default_effort_per_issue

        try:
            response = await provider.estimate_effort(build_effort_prompt(issues))
        except ProviderError as e:
            self._logger.warning(f"Effort estimation failed, using default: {e}")
            return fallback, 0

        estimate = parse_effort_response(response.text)
        if estimate is None:
            return fallback, response.tokens_used

        efforts = {item.issue: item.effort for item in estimate.breakdown if item.effort is not None}
        for issue in issues:
            if issue.title in efforts:
                issue.effort = efforts[issue.title]

        return estimate.total_effort, response.tokens_used

    def _mark_failed(self, session: Session, review_id: str) -> None:
        try:
            review = session.get(CodeReview, review_id)
            if review is not None and review.status == ReviewStatus.IN_PROGRESS:
                review.status = ReviewStatus.FAILED
                session.commit()
                self._logger.warning(f"Review {review_id} marked as FAILED")
        except SQLAlchemyError as e:
            session.rollback()
            self._logger.error(f"Could not mark review {review_id} as failed: {e}")

    def list_reviews(
        self,
        session: Session,
        user_id: Optional[int] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> tuple[list[CodeReview], int]:
        """
        List reviews, newest first.

        Returns:
            Tuple of the requested page and the total count.
        """
        query = select(CodeReview).options(selectinload(CodeReview.comments))
        count_query = select(func.count()).select_from(CodeReview)
        if user_id is not None:
            query = query.where(CodeReview.user_id == user_id)
            count_query = count_query.where(CodeReview.user_id == user_id)

        reviews = list(
            session.scalars(query.order_by(CodeReview.created_at.desc()).limit(limit).offset(offset))
        )
        total = session.scalar(count_query) or 0
        return reviews, total

    def get_review(self, session: Session, review_id: str) -> CodeReview:
        review = session.get(CodeReview, review_id)
        if review is None:
            raise ReviewNotFoundError(review_id)
        return review

    def delete_review(self, session: Session, review_id: str) -> None:
        """Delete a review together with its issues and comments."""
        review = self.get_review(session, review_id)
        session.delete(review)
        session.commit()
        self._logger.info(f"Deleted review {review_id}")

    def add_comment(self, session: Session, review_id: str, data: CommentCreate) -> ReviewComment:
        """Append a comment to a review, optionally pointing at one of its issues."""
        self.get_review(session, review_id)

        if session.get(User, data.user_id) is None:
            raise UserNotFoundError(data.user_id)

        if data.issue_id is not None:
            issue = session.get(CodeIssue, data.issue_id)
            if issue is None or issue.review_id != review_id:
                raise IssueNotFoundError(data.issue_id)

        comment = ReviewComment(
            review_id=review_id,
            user_id=data.user_id,
            issue_id=data.issue_id,
            content=data.content,
            type=data.type,
        )
        session.add(comment)
        session.commit()
        return comment

    def resolve_issue(self, session: Session, issue_id: str, resolved: bool = True) -> CodeIssue:
        issue = session.get(CodeIssue, issue_id)
        if issue is None:
            raise IssueNotFoundError(issue_id)

        issue.resolved = resolved
        session.commit()
        return issue

    async def generate_fix(
        self,
        session: Session,
        issue_id: str,
        repository_path: str,
        provider: AIProvider,
    ) -> FixOut:
        """
        Generate a fix for an auto-fixable issue from the current working tree.

        Raises:
            IssueNotFoundError: If the issue does not exist.
            NotAutoFixableError: If the issue is not auto-fixable.
            UnsupportedLanguageError: If the file type is not supported.
        """
        issue = session.get(CodeIssue, issue_id)
        if issue is None:
            raise IssueNotFoundError(issue_id)

        if not issue.auto_fixable:
            raise NotAutoFixableError()

        language = detect_language(issue.file_path)
        if language is None:
            raise UnsupportedLanguageError(f"Unsupported file type: {issue.file_path}")

        content = await asyncio.to_thread(self._git.read_file, repository_path, issue.file_path)
        original_code = extract_line_range(content, issue.line_number, issue.line_end)

        await self._registry.ensure_available(provider)
        response = await provider.generate_fix(build_fix_prompt(original_code, issue, language))
        fixed_code = extract_fixed_code(response.text)

        issue.fix_code = fixed_code
        session.commit()

        return FixOut(fixed_code=fixed_code, original_code=original_code)

    def get_stats(self, session: Session, user_id: int) -> ReviewStats:
        """Totals over all reviews of a user."""
        row = session.execute(
            select(
                func.count(CodeReview.id),
                func.coalesce(func.sum(CodeReview.issues_found), 0),
                func.coalesce(func.sum(CodeReview.critical_issues), 0),
                func.coalesce(func.sum(CodeReview.major_issues), 0),
                func.coalesce(func.sum(CodeReview.minor_issues), 0),
                func.coalesce(func.sum(CodeReview.tokens_used), 0),
                func.coalesce(func.sum(CodeReview.analysis_time), 0.0),
            ).where(CodeReview.user_id == user_id)
        ).one()

        total_reviews, issues, critical, major, minor, tokens, total_time = row
        avg_time = round(total_time / total_reviews, 2) if total_reviews else 0.0

        return ReviewStats(
            total_reviews=total_reviews,
            total_issues=issues,
            total_critical=critical,
            total_major=major,
            total_minor=minor,
            total_tokens=tokens,
            avg_analysis_time=avg_time,
        )
