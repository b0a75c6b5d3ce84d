"""
Upstream provider adapters
"""

from app.providers.base import DeltaNormalizer, Provider, UpstreamRequest
from app.providers.factory import get_provider, supported_provider_types
from app.providers.gemini_provider import GeminiDeltaNormalizer, GeminiProvider
from app.providers.openai_provider import OpenAIDeltaNormalizer, OpenAIProvider

__all__ = [
    "DeltaNormalizer",
    "Provider",
    "UpstreamRequest",
    "OpenAIProvider",
    "OpenAIDeltaNormalizer",
    "GeminiProvider",
    "GeminiDeltaNormalizer",
    "get_provider",
    "supported_provider_types",
]
