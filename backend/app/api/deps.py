"""
API Dependency Injection Module

Provides dependencies required by FastAPI routes. Tests override
`get_http_client` to route upstream calls to a mock transport.
"""

from typing import Annotated, Optional

from fastapi import Depends

from app.common.http_client import HttpClient
from app.common.token_estimator import TokenEstimator
from app.common.token_estimator import get_token_estimator as _get_token_estimator
from app.config import Settings, get_settings
from app.services import ProxyService


def get_http_client() -> HttpClient:
    """Get upstream HTTP client"""
    return HttpClient()


def get_token_estimator() -> Optional[TokenEstimator]:
    """Get configured token estimator"""
    return _get_token_estimator()


# Dependency type aliases for the components above
HttpClientDep = Annotated[HttpClient, Depends(get_http_client)]
TokenEstimatorDep = Annotated[Optional[TokenEstimator], Depends(get_token_estimator)]
SettingsDep = Annotated[Settings, Depends(get_settings)]


def get_proxy_service(
    http_client: HttpClientDep,
    estimator: TokenEstimatorDep,
    settings: SettingsDep,
) -> ProxyService:
    """Get proxy service"""
    return ProxyService(http_client, estimator, settings)


ProxyServiceDep = Annotated[ProxyService, Depends(get_proxy_service)]
