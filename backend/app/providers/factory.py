"""
Provider Factory Module

Creates the upstream provider for the type named in the gateway path.
"""

from typing import Callable, Optional

from app.common.errors import BadRequestError
from app.common.token_estimator import TokenEstimator
from app.common.utils import generate_id
from app.providers.base import Provider
from app.providers.gemini_provider import GeminiProvider
from app.providers.openai_provider import OpenAIProvider


# Registered provider variants
_providers: dict[str, type[Provider]] = {
    OpenAIProvider.name: OpenAIProvider,
    GeminiProvider.name: GeminiProvider,
}


def supported_provider_types() -> list[str]:
    """Provider types accepted in the gateway path."""
    return sorted(_providers)


def get_provider(
    provider_type: str,
    estimator: Optional[TokenEstimator] = None,
    id_generator: Callable[[], str] = generate_id,
) -> Provider:
    """
    Get provider for the specified type

    Args:
        provider_type: Provider type, "openai" or "gemini"
        estimator: Token estimator used for usage fallback
        id_generator: Identifier generator for messages and tool uses

    Returns:
        Provider: Corresponding provider instance

    Raises:
        BadRequestError: Unsupported provider type
    """
    provider_cls = _providers.get(provider_type.lower())
    if provider_cls is None:
        raise BadRequestError("Unsupported type", details={"type": provider_type})

    return provider_cls(estimator=estimator, id_generator=id_generator)
