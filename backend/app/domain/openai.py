"""
OpenAI Chat Completions Wire Models

Validated views over upstream OpenAI-compatible payloads. Unknown fields are ignored
and every field is optional, since compatible providers vary in what they send.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class _OpenAIModel(BaseModel):
    model_config = ConfigDict(extra="ignore")


class OpenAIFunctionCall(_OpenAIModel):
    """Function name and JSON-string arguments (possibly partial in streams)."""

    name: Optional[str] = None
    arguments: Optional[str] = None


class OpenAIToolCall(_OpenAIModel):
    index: Optional[int] = None
    id: Optional[str] = None
    type: Optional[str] = None
    function: Optional[OpenAIFunctionCall] = None


class OpenAIUsage(_OpenAIModel):
    prompt_tokens: Optional[int] = None
    completion_tokens: Optional[int] = None
    total_tokens: Optional[int] = None


# =============================================================================
# Streaming chunks
# =============================================================================


class OpenAIDelta(_OpenAIModel):
    role: Optional[str] = None
    content: Optional[str] = None
    tool_calls: Optional[list[OpenAIToolCall]] = None


class OpenAIStreamChoice(_OpenAIModel):
    index: Optional[int] = None
    delta: OpenAIDelta = Field(default_factory=OpenAIDelta)
    finish_reason: Optional[str] = None


class OpenAIStreamChunk(_OpenAIModel):
    """One `chat.completion.chunk` payload."""

    id: Optional[str] = None
    choices: list[OpenAIStreamChoice] = Field(default_factory=list)
    usage: Optional[OpenAIUsage] = None


# =============================================================================
# Complete responses
# =============================================================================


class OpenAIMessage(_OpenAIModel):
    role: Optional[str] = None
    content: Optional[str] = None
    tool_calls: Optional[list[OpenAIToolCall]] = None


class OpenAIChoice(_OpenAIModel):
    index: Optional[int] = None
    message: OpenAIMessage = Field(default_factory=OpenAIMessage)
    finish_reason: Optional[str] = None


class OpenAIChatResponse(_OpenAIModel):
    """One `chat.completion` payload."""

    id: Optional[str] = None
    model: Optional[str] = None
    choices: list[OpenAIChoice] = Field(default_factory=list)
    usage: Optional[OpenAIUsage] = None
