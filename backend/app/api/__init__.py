"""
API Router Module Initialization
"""

from app.api.deps import get_http_client, get_proxy_service, get_token_estimator

__all__ = [
    "get_http_client",
    "get_proxy_service",
    "get_token_estimator",
]
