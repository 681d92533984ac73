"""
Gemini provider for AI Code Review Assistant.

Google Gemini through its OpenAI-compatible endpoint.
"""

from typing import Optional

from openai import AsyncOpenAI, OpenAIError

from review_assistant.config import get_settings
from review_assistant.exceptions import ProviderError, ProviderNotConfiguredError
from review_assistant.models.schemas import HealthStatus, ProviderHealth
from review_assistant.providers.base import AIProvider, ProviderResponse

ANALYSIS_TEMPERATURE = 0.3
FIX_TEMPERATURE = 0.2
SHORT_MAX_TOKENS = 2048


class GeminiProvider(AIProvider):
    """
    Hosted model inference through Gemini.

    Without an API key the provider stays registered but reports an
    ``error`` health status and refuses to generate.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        base_url: Optional[str] = None,
        max_tokens: Optional[int] = None,
        timeout: Optional[float] = None,
    ) -> None:
        """
        Initialize the Gemini provider.

        Args:
            api_key: Gemini API key. Uses settings if not provided.
            model: Model to use. Uses settings if not provided.
            base_url: OpenAI-compatible endpoint. Uses settings if not provided.
            max_tokens: Token budget for analyses. Uses settings if not provided.
            timeout: Request timeout in seconds. Uses settings if not provided.
        """
        settings = get_settings()
        super().__init__("gemini", model or settings.gemini_model)

        self._api_key = api_key if api_key is not None else settings.gemini_api_key
        self._max_tokens = max_tokens or settings.max_tokens

        self._client: Optional[AsyncOpenAI] = None
        if self._api_key and self._api_key != "your_gemini_api_key_here":
            self._client = AsyncOpenAI(
                api_key=self._api_key,
                base_url=base_url or settings.gemini_base_url,
                timeout=timeout or settings.llm_timeout,
                max_retries=0,
            )

    @property
    def is_configured(self) -> bool:
        """Check if an API key is set."""
        return self._client is not None

    async def health_check(self) -> ProviderHealth:
        if not self.is_configured:
            return ProviderHealth(
                status=HealthStatus.ERROR,
                message="Gemini API key not configured",
                model=self.model,
            )

        try:
            await self._client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": "Hello"}],
                max_tokens=5,
            )
        except OpenAIError as e:
            self.logger.warning(f"Gemini health check failed: {e}")
            return ProviderHealth(
                status=HealthStatus.ERROR,
                message="Gemini API error",
                model=self.model,
                error=str(e),
            )

        return ProviderHealth(
            status=HealthStatus.OK,
            message="Gemini API is configured and working",
            model=self.model,
        )

    async def analyze_code(self, prompt: str) -> ProviderResponse:
        return await self._complete(prompt, ANALYSIS_TEMPERATURE, self._max_tokens)

    async def estimate_effort(self, prompt: str) -> ProviderResponse:
        return await self._complete(prompt, ANALYSIS_TEMPERATURE, SHORT_MAX_TOKENS)

    async def generate_fix(self, prompt: str) -> ProviderResponse:
        return await self._complete(prompt, FIX_TEMPERATURE, SHORT_MAX_TOKENS)

    async def close(self) -> None:
        if self._client is not None:
            await self._client.close()

    async def _complete(self, prompt: str, temperature: float, max_tokens: int) -> ProviderResponse:
        if not self.is_configured:
            raise ProviderNotConfiguredError(self.name, "GEMINI_API_KEY is not set")

        try:
            response = await self._client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": prompt}],
                temperature=temperature,
                max_tokens=max_tokens,
            )
        except OpenAIError as e:
            self.logger.error(f"Gemini API error: {e}")
            raise ProviderError(self.name, str(e))

        text = ""
        if response.choices:
            text = response.choices[0].message.content or ""

        usage = getattr(response, "usage", None)
        total_tokens = getattr(usage, "total_tokens", None) if usage else None
        tokens = total_tokens if isinstance(total_tokens, int) else self._fallback_tokens(prompt, text)

        return ProviderResponse(text=text, tokens_used=tokens)
