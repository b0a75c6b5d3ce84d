"""
Gemini generateContent Wire Models

Streaming chunks (`streamGenerateContent?alt=sse`) and complete responses share
one shape, so a single set of models covers both.
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class _GeminiModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class GeminiFunctionCall(_GeminiModel):
    name: Optional[str] = None
    args: Optional[Any] = None


class GeminiPart(_GeminiModel):
    text: Optional[str] = None
    function_call: Optional[GeminiFunctionCall] = Field(default=None, alias="functionCall")


class GeminiContent(_GeminiModel):
    role: Optional[str] = None
    parts: list[GeminiPart] = Field(default_factory=list)


class GeminiCandidate(_GeminiModel):
    content: Optional[GeminiContent] = None
    finish_reason: Optional[str] = Field(default=None, alias="finishReason")
    index: Optional[int] = None


class GeminiUsageMetadata(_GeminiModel):
    prompt_token_count: Optional[int] = Field(default=None, alias="promptTokenCount")
    candidates_token_count: Optional[int] = Field(default=None, alias="candidatesTokenCount")
    total_token_count: Optional[int] = Field(default=None, alias="totalTokenCount")


class GeminiResponse(_GeminiModel):
    """One generateContent response, or one chunk of a streamed response."""

    candidates: list[GeminiCandidate] = Field(default_factory=list)
    usage_metadata: Optional[GeminiUsageMetadata] = Field(default=None, alias="usageMetadata")

    @property
    def parts(self) -> list[GeminiPart]:
        """Parts of the first candidate (empty when absent)."""
        if not self.candidates or self.candidates[0].content is None:
            return []
        return self.candidates[0].content.parts
