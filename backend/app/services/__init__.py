"""
Service Layer Module Initialization
"""

from app.services.proxy_service import ProxyService

__all__ = [
    "ProxyService",
]
