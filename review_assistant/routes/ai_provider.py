"""
AI provider endpoints for AI Code Review Assistant.

Inspect and switch the default provider used by newly started reviews.
"""

import logging

from fastapi import APIRouter, Depends

from review_assistant.dependencies import get_registry
from review_assistant.models.schemas import (
    AllProvidersHealthResponse,
    ProviderInfoResponse,
    ProviderName,
    ProviderSwitchRequest,
    ProviderSwitchResponse,
)
from review_assistant.providers.registry import ProviderRegistry

logger = logging.getLogger("code_review.routes.ai_provider")

router = APIRouter(prefix="/api/ai", tags=["AI Provider"])


@router.get(
    "/provider",
    response_model=ProviderInfoResponse,
    summary="Current Provider",
)
async def get_provider(registry: ProviderRegistry = Depends(get_registry)) -> ProviderInfoResponse:
    return ProviderInfoResponse(provider=ProviderName(registry.get_default()))


@router.post(
    "/provider",
    response_model=ProviderSwitchResponse,
    summary="Switch Provider",
    description="Change the default provider. Reviews already running keep their provider.",
    responses={400: {"description": "Invalid provider"}},
)
async def set_provider(
    request: ProviderSwitchRequest,
    registry: ProviderRegistry = Depends(get_registry),
) -> ProviderSwitchResponse:
    """
    Switch the default provider.

    Returns a fresh health check of the newly selected provider.
    """
    name = registry.set_default(request.provider)
    health = await registry.check_health(name, use_cache=False)

    return ProviderSwitchResponse(
        provider=ProviderName(name),
        health=health,
        message=f"AI provider switched to {name}",
    )


@router.get(
    "/health/all",
    response_model=AllProvidersHealthResponse,
    summary="All Providers Health",
)
async def all_providers_health(
    registry: ProviderRegistry = Depends(get_registry),
) -> AllProvidersHealthResponse:
    providers = await registry.check_all_health(use_cache=False)
    return AllProvidersHealthResponse(
        current_provider=ProviderName(registry.get_default()),
        providers=providers,
    )
