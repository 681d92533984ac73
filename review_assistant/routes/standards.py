"""
Coding standard endpoints for AI Code Review Assistant.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from review_assistant.database import get_db
from review_assistant.dependencies import get_standards_service
from review_assistant.models.schemas import (
    MessageResponse,
    SeedResponse,
    StandardCreate,
    StandardListResponse,
    StandardOut,
    StandardResponse,
    StandardUpdate,
)
from review_assistant.services.standards_service import StandardsService

router = APIRouter(prefix="/api/standards", tags=["Coding Standards"])

BUILT_IN_RESPONSES = {
    403: {"description": "Built-in standards are read-only"},
    404: {"description": "Standard not found"},
}


@router.get(
    "",
    response_model=StandardListResponse,
    summary="List Standards",
    description="List coding standards, built-in standards first.",
)
def list_standards(
    language: Optional[str] = Query(None),
    is_active: Optional[bool] = Query(None, alias="isActive"),
    db: Session = Depends(get_db),
    standards_service: StandardsService = Depends(get_standards_service),
) -> StandardListResponse:
    standards = standards_service.list_standards(db, language, is_active)
    return StandardListResponse(standards=[StandardOut.model_validate(s) for s in standards])


@router.post(
    "/seed",
    response_model=SeedResponse,
    summary="Seed Built-in Standards",
    description="Create the built-in standards that are missing. Safe to call repeatedly.",
)
def seed_standards(
    db: Session = Depends(get_db),
    standards_service: StandardsService = Depends(get_standards_service),
) -> SeedResponse:
    created = standards_service.seed_built_in(db)
    return SeedResponse(
        message=f"Seeded {len(created)} built-in standards",
        standards=[StandardOut.model_validate(s) for s in created],
    )


@router.get(
    "/{standard_id}",
    response_model=StandardResponse,
    summary="Get Standard",
    responses={404: {"description": "Standard not found"}},
)
def get_standard(
    standard_id: str,
    db: Session = Depends(get_db),
    standards_service: StandardsService = Depends(get_standards_service),
) -> StandardResponse:
    standard = standards_service.get_standard(db, standard_id)
    return StandardResponse(standard=StandardOut.model_validate(standard))


@router.post(
    "",
    response_model=StandardResponse,
    summary="Create Standard",
    responses={400: {"description": "Invalid standard or duplicate name"}},
)
def create_standard(
    request: StandardCreate,
    db: Session = Depends(get_db),
    standards_service: StandardsService = Depends(get_standards_service),
) -> StandardResponse:
    standard = standards_service.create_standard(db, request)
    return StandardResponse(standard=StandardOut.model_validate(standard))


@router.put(
    "/{standard_id}",
    response_model=StandardResponse,
    summary="Update Standard",
    responses=BUILT_IN_RESPONSES,
)
def update_standard(
    standard_id: str,
    request: StandardUpdate,
    db: Session = Depends(get_db),
    standards_service: StandardsService = Depends(get_standards_service),
) -> StandardResponse:
    standard = standards_service.update_standard(db, standard_id, request)
    return StandardResponse(standard=StandardOut.model_validate(standard))


@router.delete(
    "/{standard_id}",
    response_model=MessageResponse,
    summary="Delete Standard",
    responses=BUILT_IN_RESPONSES,
)
def delete_standard(
    standard_id: str,
    db: Session = Depends(get_db),
    standards_service: StandardsService = Depends(get_standards_service),
) -> MessageResponse:
    standards_service.delete_standard(db, standard_id)
    return MessageResponse(message="Standard deleted successfully")
