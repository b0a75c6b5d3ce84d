"""
Domain Model Module Initialization
"""

from app.domain.stream import (
    NormalizedDelta,
    StreamState,
    ToolFragment,
    UsageRecord,
)
from app.domain.openai import (
    OpenAIChatResponse,
    OpenAIStreamChunk,
)
from app.domain.gemini import GeminiResponse

__all__ = [
    "NormalizedDelta",
    "StreamState",
    "ToolFragment",
    "UsageRecord",
    "OpenAIChatResponse",
    "OpenAIStreamChunk",
    "GeminiResponse",
]
