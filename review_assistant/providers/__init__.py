"""
Providers package for AI Code Review Assistant.

Contains the AI provider adapters and the registry selecting between them.
"""

from review_assistant.providers.base import AIProvider, ProviderResponse
from review_assistant.providers.gemini import GeminiProvider
from review_assistant.providers.ollama import OllamaProvider
from review_assistant.providers.registry import ProviderRegistry

__all__ = [
    "AIProvider",
    "ProviderResponse",
    "GeminiProvider",
    "OllamaProvider",
    "ProviderRegistry",
]
