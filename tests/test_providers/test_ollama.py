"""
Tests for the Ollama provider.

Uses httpx.MockTransport in place of a running Ollama server.
"""

import json

import httpx
import pytest

from review_assistant.exceptions import ProviderError
from review_assistant.models.schemas import HealthStatus
from review_assistant.providers.ollama import OllamaProvider


def _provider(handler, model="llama3.2:latest", max_tokens=4096) -> OllamaProvider:
    return OllamaProvider(
        host="http://ollama.test:11434",
        model=model,
        max_tokens=max_tokens,
        timeout=5.0,
        transport=httpx.MockTransport(handler),
    )


class TestOllamaHealth:
    """Tests for OllamaProvider.health_check."""

    @pytest.mark.asyncio
    async def test_model_available(self):
        def handler(request):
            assert request.url.path == "/api/tags"
            return httpx.Response(200, json={"models": [{"name": "llama3.2:latest"}]})

        health = await _provider(handler).health_check()

        assert health.status == HealthStatus.OK
        assert health.model == "llama3.2:latest"

    @pytest.mark.asyncio
    async def test_model_missing(self):
        def handler(request):
            return httpx.Response(200, json={"models": [{"name": "mistral:7b"}, {"name": "phi3"}]})

        health = await _provider(handler).health_check()

        assert health.status == HealthStatus.WARNING
        assert health.available_models == ["mistral:7b", "phi3"]

    @pytest.mark.asyncio
    async def test_unreachable(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        health = await _provider(handler).health_check()

        assert health.status == HealthStatus.ERROR
        assert "connection refused" in health.error

    @pytest.mark.asyncio
    async def test_http_error(self):
        health = await _provider(lambda request: httpx.Response(500)).health_check()
        assert health.status == HealthStatus.ERROR


class TestOllamaGenerate:
    """Tests for the generation calls."""

    @pytest.mark.asyncio
    async def test_analyze_code_payload(self):
        captured = {}

        def handler(request):
            captured.update(json.loads(request.content))
            return httpx.Response(
                200,
                json={"response": '{"issues": []}', "eval_count": 40, "prompt_eval_count": 60},
            )

        response = await _provider(handler, max_tokens=3000).analyze_code("review this")

        assert response.text == '{"issues": []}'
        assert response.tokens_used == 100
        assert captured["model"] == "llama3.2:latest"
        assert captured["prompt"] == "review this"
        assert captured["stream"] is False
        assert captured["options"] == {"temperature": 0.3, "num_predict": 3000}

    @pytest.mark.asyncio
    async def test_fix_uses_lower_temperature(self):
        captured = {}

        def handler(request):
            captured.update(json.loads(request.content))
            return httpx.Response(200, json={"response": "FIXED_CODE:"})

        await _provider(handler).generate_fix("fix it")

        assert captured["options"] == {"temperature": 0.2, "num_predict": 2048}

    @pytest.mark.asyncio
    async def test_effort_token_budget(self):
        captured = {}

        def handler(request):
            captured.update(json.loads(request.content))
            return httpx.Response(200, json={"response": "{}"})

        await _provider(handler).estimate_effort("estimate")

        assert captured["options"]["num_predict"] == 2048

    @pytest.mark.asyncio
    async def test_token_estimate_without_counts(self):
        """Test tokens fall back to a character estimate."""
        handler = lambda request: httpx.Response(200, json={"response": "ok"})

        response = await _provider(handler).analyze_code("x" * 10)

        assert response.tokens_used == 3

    @pytest.mark.asyncio
    async def test_malformed_reply_returned_as_is(self):
        handler = lambda request: httpx.Response(200, json={"response": "I think the code is fine"})

        response = await _provider(handler).analyze_code("prompt")

        assert response.text == "I think the code is fine"

    @pytest.mark.asyncio
    async def test_http_error_raises_provider_error(self):
        handler = lambda request: httpx.Response(404, text="model not found")

        with pytest.raises(ProviderError) as exc_info:
            await _provider(handler).analyze_code("prompt")

        assert exc_info.value.provider == "ollama"
        assert "404" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_connection_error_raises_provider_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(ProviderError) as exc_info:
            await _provider(handler).analyze_code("prompt")

        assert exc_info.value.message.startswith("ollama:")
