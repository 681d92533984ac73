"""
FastAPI Application Entry Point for AI Code Review Assistant.

Provides REST API endpoints for reviewing local git changes.
"""

from contextlib import asynccontextmanager
from datetime import datetime
from typing import AsyncGenerator

from fastapi import Depends, FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from review_assistant import __version__
from review_assistant.config import get_settings, setup_logging
from review_assistant.database import get_database
from review_assistant.dependencies import get_registry
from review_assistant.exceptions import ReviewAssistantError
from review_assistant.models.schemas import (
    DatabaseHealth,
    ErrorResponse,
    HealthResponse,
    HealthStatus,
    ProviderName,
)
from review_assistant.providers.registry import ProviderRegistry
from review_assistant.routes import ai_provider_router, reviews_router, standards_router
from review_assistant.services.review_service import ReviewService
from review_assistant.services.standards_service import StandardsService

# Setup logging
logger = setup_logging()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan manager.

    Initializes the database and the provider registry on startup and
    releases them on shutdown.
    """
    logger.info("Starting AI Code Review Assistant...")

    settings = get_settings()
    database = get_database()
    database.init()

    registry = ProviderRegistry(settings=settings)
    app.state.registry = registry
    app.state.standards_service = StandardsService()
    app.state.review_service = ReviewService(
        registry,
        standards_service=app.state.standards_service,
        settings=settings,
    )

    logger.info(f"Default AI provider: {registry.get_default()}")
    logger.info(f"Gemini configured: {settings.is_gemini_configured}")

    yield

    logger.info("Shutting down AI Code Review Assistant...")
    await registry.close()
    database.dispose()


# Create FastAPI application
app = FastAPI(
    title="AI Code Review Assistant",
    description="""
    AI-powered review of local git changes.

    ## Features
    - **Staged & Commit Analysis**: Review staged changes or a single commit
    - **Pluggable Providers**: Local Ollama models or Google Gemini, switchable at runtime
    - **Coding Standards**: Language-scoped standards included in every analysis
    - **Effort Estimation**: Hours needed to address the issues found
    - **Fix Generation**: Suggested code for auto-fixable issues
    """,
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=[get_settings().frontend_url],
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE"],
    allow_headers=["*"],
)

app.include_router(reviews_router)
app.include_router(standards_router)
app.include_router(ai_provider_router)


def _error_response(status_code: int, error: str, message: str, detail: str | None = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(
            error=error,
            message=message,
            detail=detail,
            timestamp=datetime.utcnow(),
        ).model_dump(mode="json"),
    )


# Exception handlers
@app.exception_handler(ReviewAssistantError)
async def review_assistant_exception_handler(request: Request, exc: ReviewAssistantError):
    """Handle application errors with the status they carry."""
    if exc.status_code >= 500:
        logger.error(f"{exc.error}: {exc.message}")
    return _error_response(exc.status_code, exc.error, exc.message)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle invalid request bodies and parameters."""
    problems = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        problems.append(f"{location}: {error.get('msg')}" if location else error.get("msg"))

    return _error_response(
        status.HTTP_400_BAD_REQUEST,
        "Bad Request",
        "; ".join(problems) or "Invalid request",
    )


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    """Handle HTTP exceptions."""
    return _error_response(
        exc.status_code,
        exc.detail if isinstance(exc.detail, str) else "HTTP Error",
        str(exc.detail),
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Handle general exceptions."""
    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    return _error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "Internal Server Error",
        "An unexpected error occurred",
        detail=str(exc) if get_settings().debug else None,
    )


# Health check endpoint
@app.get(
    "/health",
    response_model=HealthResponse,
    tags=["Health"],
    summary="Health Check",
    description="Check the health of the database and both AI providers.",
)
async def health_check(registry: ProviderRegistry = Depends(get_registry)) -> HealthResponse:
    """
    Health check endpoint.

    Reports the database status, the current default provider and the
    (briefly cached) health of every provider.
    """
    database = DatabaseHealth(**get_database().check_health())
    providers = await registry.check_all_health()

    return HealthResponse(
        status="ok" if database.status == HealthStatus.OK else "error",
        version=__version__,
        timestamp=datetime.utcnow(),
        database=database,
        current_provider=ProviderName(registry.get_default()),
        providers=providers,
    )


def run() -> None:
    """Run the API server with uvicorn."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "review_assistant.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )


# Run with uvicorn when executed directly
if __name__ == "__main__":
    run()
