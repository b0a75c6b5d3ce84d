"""
Streaming Domain Model

Defines the provider-neutral delta shape produced by normalizers and the
per-stream state owned by the transcoder.
"""

from dataclasses import dataclass, field
from typing import Any, Optional


@dataclass(frozen=True)
class ToolFragment:
    """One tool invocation carried by a single upstream chunk."""

    # Function name
    name: str
    # Decoded arguments (any JSON-serializable value)
    args: Any


@dataclass(frozen=True)
class NormalizedDelta:
    """
    Normalized Delta

    Result of parsing one provider-native streaming chunk.
    """

    # At most one text fragment per chunk
    text: Optional[str] = None
    # Tool fragments in upstream order
    tool_fragments: tuple[ToolFragment, ...] = ()
    # Token counts the upstream reported in this chunk, if any
    upstream_input_tokens: Optional[int] = None
    upstream_output_tokens: Optional[int] = None

    @property
    def has_content(self) -> bool:
        return bool(self.text) or bool(self.tool_fragments)


@dataclass
class UsageRecord:
    """Token usage attached to the terminal event of a response."""

    input_tokens: int = 0
    output_tokens: int = 0

    def to_dict(self) -> dict[str, int]:
        return {"input_tokens": self.input_tokens, "output_tokens": self.output_tokens}


@dataclass
class StreamState:
    """
    Stream State

    Mutable state of one transcoder run; lives exactly as long as one upstream body.
    """

    # Index for the next text block
    text_block_index: int = 0
    # Index for the next tool_use block (independent of text_block_index)
    tool_use_block_index: int = 0
    # Running estimate of emitted output tokens
    accumulated_output_tokens: int = 0
    # Decoded text not yet terminated by a newline
    line_buffer: str = ""
    # Latest upstream-reported counts seen in the stream
    upstream_input_tokens: Optional[int] = None
    upstream_output_tokens: Optional[int] = None
    # Whether the upstream handle has been released
    released: bool = field(default=False, repr=False)
