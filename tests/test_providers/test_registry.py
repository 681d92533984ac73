"""
Tests for the provider registry.
"""

import pytest

from conftest import StubProvider
from review_assistant.config import Settings
from review_assistant.exceptions import InvalidProviderError, ProviderUnavailableError
from review_assistant.models.schemas import HealthStatus, ProviderHealth, ProviderName
from review_assistant.providers.registry import ProviderRegistry


class TestProviderRegistry:
    """Tests for ProviderRegistry."""

    def test_default_from_settings(self, ollama_stub, gemini_stub):
        registry = ProviderRegistry(
            providers={"ollama": ollama_stub, "gemini": gemini_stub},
            settings=Settings(_env_file=None, ai_provider="gemini"),
        )
        assert registry.get_default() == "gemini"

    def test_resolve_default(self, registry, ollama_stub):
        assert registry.resolve() is ollama_stub

    def test_resolve_explicit(self, registry, gemini_stub):
        assert registry.resolve("gemini") is gemini_stub
        assert registry.resolve(ProviderName.GEMINI) is gemini_stub

    def test_resolve_unknown(self, registry):
        with pytest.raises(InvalidProviderError) as exc_info:
            registry.resolve("openai")

        assert exc_info.value.status_code == 400

    def test_set_default(self, registry, gemini_stub):
        registry.set_default("GEMINI")

        assert registry.get_default() == "gemini"
        assert registry.resolve() is gemini_stub

    def test_set_default_unknown_keeps_current(self, registry):
        with pytest.raises(InvalidProviderError):
            registry.set_default("claude")

        assert registry.get_default() == "ollama"

    def test_resolved_provider_survives_switch(self, registry, ollama_stub):
        """Test a provider resolved before a switch is unaffected by it."""
        in_flight = registry.resolve()
        registry.set_default("gemini")

        assert in_flight is ollama_stub
        assert registry.resolve().name == "gemini"

    @pytest.mark.asyncio
    async def test_health_is_cached(self, registry, ollama_stub):
        first = await registry.check_health("ollama")
        ollama_stub.health = ProviderHealth(status=HealthStatus.ERROR, message="down")

        assert await registry.check_health("ollama") is first
        fresh = await registry.check_health("ollama", use_cache=False)
        assert fresh.status == HealthStatus.ERROR

    @pytest.mark.asyncio
    async def test_check_all_health(self, registry):
        health = await registry.check_all_health()
        assert set(health) == {"ollama", "gemini"}

    @pytest.mark.asyncio
    async def test_ensure_available_ok(self, registry, ollama_stub):
        await registry.ensure_available(ollama_stub)

    @pytest.mark.asyncio
    async def test_ensure_available_warning_allowed(self, registry):
        provider = StubProvider(
            "ollama",
            health=ProviderHealth(status=HealthStatus.WARNING, message="model not pulled"),
        )
        registry = ProviderRegistry(
            providers={"ollama": provider},
            settings=Settings(_env_file=None, ai_provider="ollama"),
        )

        await registry.ensure_available(provider)

    @pytest.mark.asyncio
    async def test_ensure_available_error(self, registry, gemini_stub):
        gemini_stub.health = ProviderHealth(
            status=HealthStatus.ERROR, message="Gemini API key not configured"
        )

        with pytest.raises(ProviderUnavailableError) as exc_info:
            await registry.ensure_available(gemini_stub)

        assert "gemini" in exc_info.value.message
        assert "not configured" in exc_info.value.message
