"""
Claude event encoder unit tests
"""

from app.common import claude_events


class TestEncodeEvent:
    def test_wire_format(self):
        data = claude_events.encode_event("ping", {"type": "ping", "n": 1})
        assert data == b'event: ping\ndata: {"type":"ping","n":1}\n\n'

    def test_non_ascii_kept_as_utf8(self):
        data = claude_events.encode_event("x", {"text": "é"})
        assert data == 'event: x\ndata: {"text":"é"}\n\n'.encode("utf-8")


class TestEventBuilders:
    def test_message_start(self, parse_sse):
        [(name, payload)] = parse_sse(claude_events.message_start("msg_1"))
        assert name == "message_start"
        assert payload == {
            "type": "message_start",
            "message": {"id": "msg_1", "type": "message", "role": "assistant", "content": []},
        }

    def test_message_stop_without_usage(self, parse_sse):
        [(name, payload)] = parse_sse(claude_events.message_stop())
        assert name == "message_stop"
        assert payload == {"type": "message_stop"}

    def test_message_stop_with_usage(self, parse_sse):
        data = claude_events.message_stop({"input_tokens": 3, "output_tokens": 5})
        [(_, payload)] = parse_sse(data)
        assert payload["usage"] == {"input_tokens": 3, "output_tokens": 5}

    def test_text_block_triple(self, parse_sse):
        events = parse_sse(b"".join(claude_events.text_block(2, "Hi")))
        assert events == [
            ("content_block_start", {"type": "content_block_start", "index": 2, "content_block": {"type": "text", "text": ""}}),
            ("content_block_delta", {"type": "content_block_delta", "index": 2, "delta": {"type": "text_delta", "text": "Hi"}}),
            ("content_block_stop", {"type": "content_block_stop", "index": 2}),
        ]

    def test_tool_use_block_triple(self, parse_sse):
        events = parse_sse(b"".join(claude_events.tool_use_block(0, "tu_1", "search", '{"q":"x"}')))
        assert [name for name, _ in events] == [
            "content_block_start",
            "content_block_delta",
            "content_block_stop",
        ]
        assert events[0][1]["content_block"] == {
            "type": "tool_use",
            "id": "tu_1",
            "name": "search",
            "input": {},
        }
        assert events[1][1]["delta"] == {"type": "input_json_delta", "partial_json": '{"q":"x"}'}
