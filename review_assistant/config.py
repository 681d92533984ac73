"""
Configuration module for AI Code Review Assistant.

Uses pydantic-settings for configuration management with environment variables.
"""

import logging
from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Database Configuration
    database_url: str = Field(
        default="sqlite:///./code_review.db",
        description="SQLAlchemy database connection string",
    )
    sql_echo: bool = Field(
        default=False,
        description="Log every SQL statement",
    )

    # AI Provider Selection
    ai_provider: Literal["ollama", "gemini"] = Field(
        default="ollama",
        description="Default AI provider for new reviews",
    )
    provider_health_ttl: int = Field(
        default=30,
        ge=0,
        description="Seconds a provider health check result is reused",
    )
    llm_timeout: float = Field(
        default=300.0,
        gt=0,
        description="Transport timeout in seconds for model calls",
    )

    # Ollama Configuration
    ollama_host: str = Field(
        default="http://127.0.0.1:11434",
        description="Ollama server URL",
    )
    ollama_model: str = Field(
        default="llama3.2:latest",
        description="Ollama model used for analysis",
    )
    max_tokens: int = Field(
        default=4096,
        ge=100,
        description="Maximum tokens to generate for a code analysis",
    )

    # Gemini Configuration
    gemini_api_key: str = Field(
        default="",
        description="Google Gemini API key",
    )
    gemini_model: str = Field(
        default="gemini-2.0-flash-lite",
        description="Gemini model used for analysis",
    )
    gemini_base_url: str = Field(
        default="https://generativelanguage.googleapis.com/v1beta/openai/",
        description="OpenAI-compatible Gemini endpoint",
    )

    # Analysis Settings
    min_changed_code_length: int = Field(
        default=5,
        ge=0,
        description="Files whose changed code is shorter than this are skipped",
    )
    max_snippet_length: int = Field(
        default=5000,
        ge=100,
        description="Maximum stored code snippet length per issue",
    )
    default_effort_per_issue: float = Field(
        default=0.5,
        ge=0.0,
        description="Fallback effort in hours per issue",
    )

    # Application Settings
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )
    debug: bool = Field(
        default=False,
        description="Enable debug mode",
    )

    # Server Configuration
    host: str = Field(
        default="0.0.0.0",
        description="Server host",
    )
    port: int = Field(
        default=5000,
        ge=1,
        le=65535,
        description="Server port",
    )
    frontend_url: str = Field(
        default="http://localhost:5173",
        description="Frontend origin allowed by CORS",
    )

    # Pre-commit Hook
    code_review_backend: str = Field(
        default="http://localhost:5000",
        description="Backend URL the pre-commit hook posts reviews to",
    )
    code_review_user_id: int = Field(
        default=1,
        ge=1,
        description="User the pre-commit hook reviews on behalf of",
    )
    skip_code_review: bool = Field(
        default=False,
        description="Let the pre-commit hook pass without reviewing",
    )
    hook_timeout: float = Field(
        default=600.0,
        gt=0,
        description="Seconds the pre-commit hook waits for a review",
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate and normalize log level."""
        if isinstance(v, str):
            return v.upper()
        return v

    @field_validator("ai_provider", mode="before")
    @classmethod
    def normalize_provider(cls, v: str) -> str:
        """Normalize provider name."""
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @property
    def is_gemini_configured(self) -> bool:
        """Check if Gemini is properly configured."""
        return bool(self.gemini_api_key and self.gemini_api_key != "your_gemini_api_key_here")


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached application settings.

    Returns:
        Settings: Application settings instance.
    """
    return Settings()


def setup_logging(settings: Settings | None = None) -> logging.Logger:
    """
    Configure application logging.

    Args:
        settings: Optional settings instance. If not provided, uses cached settings.

    Returns:
        logging.Logger: Configured logger instance.
    """
    if settings is None:
        settings = get_settings()

    logging.basicConfig(
        level=getattr(logging, settings.log_level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    logger = logging.getLogger("code_review")
    logger.setLevel(getattr(logging, settings.log_level))

    return logger
