"""
Review endpoints for AI Code Review Assistant.

Running reviews, browsing stored reviews, comments, issue resolution and
fix generation.
"""

import logging

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from review_assistant.database import get_db
from review_assistant.dependencies import get_registry, get_review_service
from review_assistant.models.schemas import (
    AnalysisResponseOut,
    AnalyzeCommitRequest,
    AnalyzeStagedRequest,
    CommentCreate,
    CommentOut,
    CommentResponse,
    FixRequest,
    FixResponse,
    IssueOut,
    IssueResponse,
    MessageResponse,
    Pagination,
    ProviderName,
    ResolveIssueRequest,
    ReviewDetailOut,
    ReviewDetailResponse,
    ReviewListItem,
    ReviewListResponse,
    ReviewOut,
    StatsResponse,
)
from review_assistant.models.tables import CodeReview
from review_assistant.providers.registry import ProviderRegistry
from review_assistant.services.review_service import ReviewService

logger = logging.getLogger("code_review.routes.reviews")

router = APIRouter(prefix="/api/reviews", tags=["Reviews"])

ANALYSIS_RESPONSES = {
    200: {"description": "Review completed"},
    400: {"description": "Invalid request or provider"},
    404: {"description": "User not found"},
    500: {"description": "No changes, no supported files, or provider failure"},
}


def _analysis_response(review: CodeReview, provider: str) -> AnalysisResponseOut:
    return AnalysisResponseOut(
        review=ReviewOut.model_validate(review),
        provider=ProviderName(provider),
        message=f"Analysis complete. Found {review.issues_found} issues.",
    )


@router.post(
    "/analyze-staged",
    response_model=AnalysisResponseOut,
    summary="Analyze Staged Changes",
    description="Review the staged (or modified) changes of a local git repository.",
    responses=ANALYSIS_RESPONSES,
)
async def analyze_staged(
    request: AnalyzeStagedRequest,
    db: Session = Depends(get_db),
    registry: ProviderRegistry = Depends(get_registry),
    review_service: ReviewService = Depends(get_review_service),
) -> AnalysisResponseOut:
    """
    Analyze staged changes.

    The provider named in the request is used for this review only; without
    one the current default provider is used.
    """
    provider = registry.resolve(request.provider)
    logger.info(f"Received staged review request for {request.repository_path} ({provider.name})")

    review = await review_service.analyze_staged(
        db, request.repository_path, request.user_id, provider
    )
    return _analysis_response(review, provider.name)


@router.post(
    "/analyze-commit",
    response_model=AnalysisResponseOut,
    summary="Analyze Commit",
    description="Review the changes introduced by one commit.",
    responses=ANALYSIS_RESPONSES,
)
async def analyze_commit(
    request: AnalyzeCommitRequest,
    db: Session = Depends(get_db),
    registry: ProviderRegistry = Depends(get_registry),
    review_service: ReviewService = Depends(get_review_service),
) -> AnalysisResponseOut:
    """Analyze a single commit."""
    provider = registry.resolve(request.provider)
    logger.info(
        f"Received commit review request for {request.repository_path}@{request.commit_hash} "
        f"({provider.name})"
    )

    review = await review_service.analyze_commit(
        db, request.repository_path, request.commit_hash, request.user_id, provider
    )
    return _analysis_response(review, provider.name)


@router.get(
    "",
    response_model=ReviewListResponse,
    summary="List Reviews",
)
def list_reviews(
    user_id: int = Query(..., alias="userId", ge=1),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
    review_service: ReviewService = Depends(get_review_service),
) -> ReviewListResponse:
    """List a user's reviews, newest first."""
    reviews, total = review_service.list_reviews(db, user_id, limit, offset)
    return ReviewListResponse(
        reviews=[ReviewListItem.model_validate(r) for r in reviews],
        pagination=Pagination(total=total, limit=limit, offset=offset),
    )


@router.get(
    "/stats/{user_id}",
    response_model=StatsResponse,
    summary="Review Statistics",
)
def get_stats(
    user_id: int,
    db: Session = Depends(get_db),
    review_service: ReviewService = Depends(get_review_service),
) -> StatsResponse:
    return StatsResponse(stats=review_service.get_stats(db, user_id))


@router.put(
    "/issues/{issue_id}/resolve",
    response_model=IssueResponse,
    summary="Resolve Issue",
    responses={404: {"description": "Issue not found"}},
)
def resolve_issue(
    issue_id: str,
    request: ResolveIssueRequest,
    db: Session = Depends(get_db),
    review_service: ReviewService = Depends(get_review_service),
) -> IssueResponse:
    issue = review_service.resolve_issue(db, issue_id, request.resolved)
    return IssueResponse(issue=IssueOut.model_validate(issue))


@router.post(
    "/issues/{issue_id}/fix",
    response_model=FixResponse,
    summary="Generate Fix",
    description="Generate a fixed version of the code around an auto-fixable issue.",
    responses={
        404: {"description": "Issue not found"},
        500: {"description": "Issue not auto-fixable or provider failure"},
    },
)
async def generate_fix(
    issue_id: str,
    request: FixRequest,
    db: Session = Depends(get_db),
    registry: ProviderRegistry = Depends(get_registry),
    review_service: ReviewService = Depends(get_review_service),
) -> FixResponse:
    """
    Generate a fix for an issue.

    Reads the affected lines from the working tree at ``repositoryPath`` and
    stores the generated code on the issue.
    """
    provider = registry.resolve(request.provider)
    fix = await review_service.generate_fix(db, issue_id, request.repository_path, provider)
    return FixResponse(fix=fix)


@router.get(
    "/{review_id}",
    response_model=ReviewDetailResponse,
    summary="Get Review",
    responses={404: {"description": "Review not found"}},
)
def get_review(
    review_id: str,
    db: Session = Depends(get_db),
    review_service: ReviewService = Depends(get_review_service),
) -> ReviewDetailResponse:
    """Get a review with its issues (by severity, then line) and comments (newest first)."""
    review = review_service.get_review(db, review_id)
    return ReviewDetailResponse(review=ReviewDetailOut.model_validate(review))


@router.delete(
    "/{review_id}",
    response_model=MessageResponse,
    summary="Delete Review",
    responses={404: {"description": "Review not found"}},
)
def delete_review(
    review_id: str,
    db: Session = Depends(get_db),
    review_service: ReviewService = Depends(get_review_service),
) -> MessageResponse:
    review_service.delete_review(db, review_id)
    return MessageResponse(message="Review deleted successfully")


@router.post(
    "/{review_id}/comments",
    response_model=CommentResponse,
    summary="Add Comment",
    responses={404: {"description": "Review, user or issue not found"}},
)
def add_comment(
    review_id: str,
    request: CommentCreate,
    db: Session = Depends(get_db),
    review_service: ReviewService = Depends(get_review_service),
) -> CommentResponse:
    comment = review_service.add_comment(db, review_id, request)
    return CommentResponse(comment=CommentOut.model_validate(comment))
