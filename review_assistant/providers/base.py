"""
Base provider module for AI Code Review Assistant.

Defines the abstract base class every AI provider adapter inherits from.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass

from review_assistant.models.schemas import ProviderHealth
from review_assistant.utils.helpers import estimate_tokens


@dataclass
class ProviderResponse:
    """Raw text returned by a provider and the tokens it consumed."""

    text: str
    tokens_used: int = 0


class AIProvider(ABC):
    """
    Abstract base class for AI provider adapters.

    Adapters return the model's raw text and never interpret it; a malformed
    reply is the response parser's concern. Transport and HTTP failures are
    raised as ProviderError carrying the provider name.

    Attributes:
        name: Provider identifier (ollama, gemini).
        model: Model used for generation.
        logger: Logger instance for the provider.
    """

    def __init__(self, name: str, model: str) -> None:
        """
        Initialize the base provider.

        Args:
            name: Provider identifier.
            model: Model used for generation.
        """
        self._name = name
        self._model = model
        self._logger = logging.getLogger(f"code_review.providers.{name}")

    @property
    def name(self) -> str:
        """Get the provider name."""
        return self._name

    @property
    def model(self) -> str:
        """Get the model name."""
        return self._model

    @property
    def logger(self) -> logging.Logger:
        """Get the provider logger."""
        return self._logger

    @abstractmethod
    async def health_check(self) -> ProviderHealth:
        """
        Check whether the provider can serve requests.

        Never raises; failures are reported as an ``error`` status.
        """

    @abstractmethod
    async def analyze_code(self, prompt: str) -> ProviderResponse:
        """Run a code analysis prompt."""

    @abstractmethod
    async def estimate_effort(self, prompt: str) -> ProviderResponse:
        """Run an effort estimation prompt."""

    @abstractmethod
    async def generate_fix(self, prompt: str) -> ProviderResponse:
        """Run a fix generation prompt."""

    async def close(self) -> None:
        """Release network resources."""

    def _fallback_tokens(self, *texts: str) -> int:
        return estimate_tokens(*texts)

    def __repr__(self) -> str:
        """Return string representation of the provider."""
        return f"{self.__class__.__name__}(name='{self.name}', model='{self.model}')"
