"""
FastAPI dependencies for AI Code Review Assistant.

Services are built once in the application lifespan and stored on
``app.state``.
"""

from fastapi import Request

from review_assistant.providers.registry import ProviderRegistry
from review_assistant.services.review_service import ReviewService
from review_assistant.services.standards_service import StandardsService


def get_registry(request: Request) -> ProviderRegistry:
    return request.app.state.registry


def get_review_service(request: Request) -> ReviewService:
    return request.app.state.review_service


def get_standards_service(request: Request) -> StandardsService:
    return request.app.state.standards_service
