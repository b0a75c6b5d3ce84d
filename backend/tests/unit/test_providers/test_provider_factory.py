"""
Provider factory unit tests
"""

import pytest

from app.common.errors import BadRequestError
from app.providers import GeminiProvider, OpenAIProvider, get_provider, supported_provider_types


def test_get_openai_provider(estimator):
    provider = get_provider("openai", estimator=estimator)
    assert isinstance(provider, OpenAIProvider)
    assert provider.estimator is estimator


def test_get_gemini_provider_case_insensitive():
    assert isinstance(get_provider("Gemini"), GeminiProvider)


def test_unsupported_type():
    with pytest.raises(BadRequestError) as exc_info:
        get_provider("anthropic")
    assert exc_info.value.message == "Unsupported type"
    assert exc_info.value.status_code == 400


def test_supported_provider_types():
    assert supported_provider_types() == ["gemini", "openai"]
