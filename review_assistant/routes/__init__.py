"""
API routers for AI Code Review Assistant.
"""

from review_assistant.routes.ai_provider import router as ai_provider_router
from review_assistant.routes.reviews import router as reviews_router
from review_assistant.routes.standards import router as standards_router

__all__ = [
    "ai_provider_router",
    "reviews_router",
    "standards_router",
]
