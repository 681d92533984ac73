"""
Provider registry for AI Code Review Assistant.

Holds the provider adapters, the process-wide default provider and a short
lived cache of health check results.
"""

import logging
from typing import Optional

from cachetools import TTLCache

from review_assistant.config import Settings, get_settings
from review_assistant.exceptions import InvalidProviderError, ProviderUnavailableError
from review_assistant.models.schemas import HealthStatus, ProviderHealth, ProviderName
from review_assistant.providers.base import AIProvider
from review_assistant.providers.gemini import GeminiProvider
from review_assistant.providers.ollama import OllamaProvider


class ProviderRegistry:
    """
    Resolves provider adapters by name.

    A review resolves its adapter once when it starts, so changing the default
    only affects reviews started afterwards.
    """

    def __init__(
        self,
        providers: Optional[dict[str, AIProvider]] = None,
        default: Optional[str] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        """
        Initialize the registry.

        Args:
            providers: Adapters by name. Builds Ollama and Gemini from settings if not provided.
            default: Default provider name. Uses settings if not provided.
            settings: Optional settings instance.
        """
        self._logger = logging.getLogger("code_review.providers.registry")
        settings = settings or get_settings()

        if providers is None:
            providers = {
                ProviderName.OLLAMA.value: OllamaProvider(),
                ProviderName.GEMINI.value: GeminiProvider(),
            }
        self._providers = providers

        self._default = self._validate_name(default or settings.ai_provider)
        self._health_cache: TTLCache = TTLCache(
            maxsize=len(self._providers) or 1,
            ttl=settings.provider_health_ttl,
        )

    @property
    def names(self) -> list[str]:
        return list(self._providers)

    def get_default(self) -> str:
        """Name of the current default provider."""
        return self._default

    def set_default(self, name: str) -> str:
        """
        Change the default provider.

        Raises:
            InvalidProviderError: If the name is unknown.
        """
        name = self._validate_name(name)
        if name != self._default:
            self._logger.info(f"Switched default AI provider from {self._default} to {name}")
        self._default = name
        return name

    def resolve(self, name: Optional[str] = None) -> AIProvider:
        """
        Get the adapter for ``name``, or for the current default.

        Raises:
            InvalidProviderError: If the name is unknown.
        """
        return self._providers[self._validate_name(name or self._default)]

    async def check_health(self, name: str, use_cache: bool = True) -> ProviderHealth:
        """Health of one provider, reusing a recent result when allowed."""
        name = self._validate_name(name)
        if use_cache and name in self._health_cache:
            return self._health_cache[name]

        health = await self._providers[name].health_check()
        self._health_cache[name] = health
        return health

    async def check_all_health(self, use_cache: bool = True) -> dict[str, ProviderHealth]:
        """Health of every registered provider."""
        return {name: await self.check_health(name, use_cache) for name in self._providers}

    async def ensure_available(self, provider: AIProvider) -> None:
        """
        Fail fast when a provider is known to be down.

        Raises:
            ProviderUnavailableError: If the health status is ``error``.
        """
        health = await self.check_health(provider.name)
        if health.status == HealthStatus.ERROR:
            raise ProviderUnavailableError(provider.name, health.error or health.message)

    async def close(self) -> None:
        for provider in self._providers.values():
            await provider.close()

    def _validate_name(self, name: str) -> str:
        if isinstance(name, ProviderName):
            name = name.value
        normalized = (name or "").strip().lower()
        if normalized not in self._providers:
            raise InvalidProviderError(name)
        return normalized
