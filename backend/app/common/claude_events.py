"""
Claude Event Encoder

Stateless rendering of Claude streaming events into SSE records:

    event: <name>
    data: <compact JSON>

"""

from typing import Any, Optional

from app.common.utils import dump_json

MESSAGE_START = "message_start"
CONTENT_BLOCK_START = "content_block_start"
CONTENT_BLOCK_DELTA = "content_block_delta"
CONTENT_BLOCK_STOP = "content_block_stop"
MESSAGE_STOP = "message_stop"


def encode_event(event: str, payload: dict[str, Any]) -> bytes:
    """Encode one named event with its JSON payload as an SSE record."""
    return f"event: {event}\ndata: {dump_json(payload)}\n\n".encode("utf-8")


def message_start(message_id: str) -> bytes:
    return encode_event(
        MESSAGE_START,
        {
            "type": MESSAGE_START,
            "message": {
                "id": message_id,
                "type": "message",
                "role": "assistant",
                "content": [],
            },
        },
    )


def message_stop(usage: Optional[dict[str, int]] = None) -> bytes:
    payload: dict[str, Any] = {"type": MESSAGE_STOP}
    if usage is not None:
        payload["usage"] = usage
    return encode_event(MESSAGE_STOP, payload)


def content_block_start(index: int, content_block: dict[str, Any]) -> bytes:
    return encode_event(
        CONTENT_BLOCK_START,
        {"type": CONTENT_BLOCK_START, "index": index, "content_block": content_block},
    )


def content_block_delta(index: int, delta: dict[str, Any]) -> bytes:
    return encode_event(
        CONTENT_BLOCK_DELTA,
        {"type": CONTENT_BLOCK_DELTA, "index": index, "delta": delta},
    )


def content_block_stop(index: int) -> bytes:
    return encode_event(CONTENT_BLOCK_STOP, {"type": CONTENT_BLOCK_STOP, "index": index})


def text_block(index: int, text: str) -> list[bytes]:
    """
    Render a complete text block as its start/delta/stop triple.

    Args:
        index: Block index
        text: Fragment text

    Returns:
        list[bytes]: Three encoded events
    """
    return [
        content_block_start(index, {"type": "text", "text": ""}),
        content_block_delta(index, {"type": "text_delta", "text": text}),
        content_block_stop(index),
    ]


def tool_use_block(index: int, tool_use_id: str, name: str, partial_json: str) -> list[bytes]:
    """
    Render a complete tool_use block as its start/delta/stop triple.

    Args:
        index: Block index
        tool_use_id: Tool invocation id
        name: Function name
        partial_json: Serialized arguments

    Returns:
        list[bytes]: Three encoded events
    """
    return [
        content_block_start(
            index,
            {"type": "tool_use", "id": tool_use_id, "name": name, "input": {}},
        ),
        content_block_delta(index, {"type": "input_json_delta", "partial_json": partial_json}),
        content_block_stop(index),
    ]
