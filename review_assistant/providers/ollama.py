"""
Ollama provider for AI Code Review Assistant.

Talks to a local Ollama server over its native HTTP API.
"""

from typing import Any, Optional

import httpx

from review_assistant.config import get_settings
from review_assistant.exceptions import ProviderError
from review_assistant.models.schemas import HealthStatus, ProviderHealth
from review_assistant.providers.base import AIProvider, ProviderResponse

ANALYSIS_TEMPERATURE = 0.3
FIX_TEMPERATURE = 0.2
SHORT_PREDICT = 2048


class OllamaProvider(AIProvider):
    """
    Local model inference through Ollama.

    Health is ``GET /api/tags`` and checks the configured model is pulled;
    generation is a non-streaming ``POST /api/generate``.
    """

    def __init__(
        self,
        host: Optional[str] = None,
        model: Optional[str] = None,
        max_tokens: Optional[int] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """
        Initialize the Ollama provider.

        Args:
            host: Ollama server URL. Uses settings if not provided.
            model: Model to use. Uses settings if not provided.
            max_tokens: Token budget for analyses. Uses settings if not provided.
            timeout: Request timeout in seconds. Uses settings if not provided.
            transport: Optional httpx transport, used by tests.
        """
        settings = get_settings()
        super().__init__("ollama", model or settings.ollama_model)

        self._host = (host or settings.ollama_host).rstrip("/")
        self._max_tokens = max_tokens or settings.max_tokens
        self._client = httpx.AsyncClient(
            base_url=self._host,
            timeout=timeout or settings.llm_timeout,
            transport=transport,
        )

    @property
    def host(self) -> str:
        return self._host

    async def health_check(self) -> ProviderHealth:
        try:
            response = await self._client.get("/api/tags")
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            self.logger.warning(f"Ollama health check failed: {e}")
            return ProviderHealth(
                status=HealthStatus.ERROR,
                message=f"Cannot connect to Ollama at {self._host}",
                model=self.model,
                error=str(e),
            )

        models = [
            m.get("name")
            for m in data.get("models", [])
            if isinstance(m, dict) and isinstance(m.get("name"), str)
        ]

        if self.model in models:
            return ProviderHealth(
                status=HealthStatus.OK,
                message="Ollama is running and model is available",
                model=self.model,
            )

        return ProviderHealth(
            status=HealthStatus.WARNING,
            message=f"Ollama is running but model {self.model} not found",
            model=self.model,
            available_models=models,
        )

    async def analyze_code(self, prompt: str) -> ProviderResponse:
        return await self._generate(prompt, ANALYSIS_TEMPERATURE, self._max_tokens)

    async def estimate_effort(self, prompt: str) -> ProviderResponse:
        return await self._generate(prompt, ANALYSIS_TEMPERATURE, SHORT_PREDICT)

    async def generate_fix(self, prompt: str) -> ProviderResponse:
        return await self._generate(prompt, FIX_TEMPERATURE, SHORT_PREDICT)

    async def close(self) -> None:
        await self._client.aclose()

    async def _generate(self, prompt: str, temperature: float, num_predict: int) -> ProviderResponse:
        payload: dict[str, Any] = {
            "model": self.model,
            "prompt": prompt,
            "stream": False,
            "options": {
                "temperature": temperature,
                "num_predict": num_predict,
            },
        }

        try:
            response = await self._client.post("/api/generate", json=payload)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            self.logger.error(f"Ollama returned HTTP {e.response.status_code}")
            raise ProviderError(self.name, f"HTTP {e.response.status_code}: {e.response.text[:200]}")
        except httpx.HTTPError as e:
            self.logger.error(f"Ollama request failed: {e}")
            raise ProviderError(self.name, f"request failed: {e}")
        except ValueError as e:
            raise ProviderError(self.name, f"invalid response body: {e}")

        text = data.get("response") or ""
        eval_count = data.get("eval_count")
        prompt_eval_count = data.get("prompt_eval_count")

        if isinstance(eval_count, int) and isinstance(prompt_eval_count, int):
            tokens = eval_count + prompt_eval_count
        else:
            tokens = self._fallback_tokens(prompt)

        self.logger.debug(f"Ollama generated {len(text)} chars, {tokens} tokens")
        return ProviderResponse(text=text, tokens_used=tokens)
