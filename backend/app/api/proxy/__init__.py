"""
Proxy API Module Initialization
"""

from app.api.proxy.messages import router as messages_router

__all__ = [
    "messages_router",
]
