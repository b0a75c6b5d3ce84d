"""
Streaming Response Transcoding

Converts an upstream provider's SSE stream into a Claude event stream in real
time, while estimating output tokens for the terminal usage record.

Each upstream fragment becomes one self-contained content block
(start/delta/stop), so every opened block is closed even when the upstream
never signals the end of a logical block.
"""

from __future__ import annotations

import codecs
import logging
from typing import Any, AsyncIterator, Awaitable, Callable, Iterator, Optional

from app.common import claude_events
from app.common.token_estimator import TokenEstimator
from app.common.utils import dump_json, generate_id
from app.domain.stream import NormalizedDelta, StreamState, UsageRecord
from app.providers.base import DeltaNormalizer

logger = logging.getLogger(__name__)

DATA_PREFIX = "data: "
DONE_SENTINEL = "[DONE]"


class LineFramer:
    """
    Incremental line splitter over a byte stream.

    - Multi-byte UTF-8 sequences split across reads are reassembled
    - The trailing incomplete line is held in the stream state's line buffer
    - A trailing \\r is removed from every complete line (CRLF framing)
    """

    def __init__(self, state: StreamState) -> None:
        self._state = state
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")

    def feed(self, chunk: bytes) -> list[str]:
        if not chunk:
            return []
        text = self._state.line_buffer + self._decoder.decode(chunk)
        lines = text.split("\n")
        self._state.line_buffer = lines.pop()
        return [line[:-1] if line.endswith("\r") else line for line in lines]

    def flush(self) -> str:
        """Return and clear whatever remains once the body has ended."""
        remainder = self._state.line_buffer + self._decoder.decode(b"", final=True)
        self._state.line_buffer = ""
        return remainder.rstrip("\r")


def extract_data_payload(line: str) -> Optional[str]:
    """
    Return the payload of an actionable data line, or None.

    Blank lines, non-data fields (event:, id:, comments) and the [DONE]
    sentinel are not actionable.
    """
    if not line.strip() or not line.startswith(DATA_PREFIX):
        return None
    payload = line[len(DATA_PREFIX):]
    if payload.strip() == DONE_SENTINEL:
        return None
    return payload


class StreamTranscoder:
    """
    Upstream SSE → Claude SSE transcoder

    One instance serves one upstream response body.

    Usage:
        transcoder = StreamTranscoder(normalizer, estimator, original_request)
        async for event in transcoder.transcode(body_iterator, release=response.aclose):
            ...
    """

    def __init__(
        self,
        normalizer: DeltaNormalizer,
        estimator: Optional[TokenEstimator] = None,
        original_request: Optional[dict[str, Any]] = None,
        id_generator: Callable[[], str] = generate_id,
        prefer_upstream_usage: bool = True,
    ) -> None:
        self.normalizer = normalizer
        self.estimator = estimator
        self.original_request = original_request
        self.id_generator = id_generator
        self.prefer_upstream_usage = prefer_upstream_usage
        self.state = StreamState()

    async def transcode(
        self,
        chunks: Optional[AsyncIterator[bytes]],
        release: Optional[Callable[[], Awaitable[None]]] = None,
    ) -> AsyncIterator[bytes]:
        """
        Transcode an upstream byte stream into encoded Claude events.

        Args:
            chunks: Upstream body reader; None when the upstream has no readable body
            release: Releases the upstream handle; awaited exactly once on every exit path

        Yields:
            bytes: Encoded Claude SSE records
        """
        try:
            if chunks is None:
                return

            framer = LineFramer(self.state)
            yield claude_events.message_start(self.id_generator())

            reader = aiter(chunks)
            while True:
                # Only the read is guarded; processing errors propagate
                try:
                    chunk = await anext(reader)
                except StopAsyncIteration:
                    break
                except Exception as e:
                    logger.warning("Upstream stream read failed, finishing stream early: %s", e)
                    break
                for line in framer.feed(chunk):
                    for event in self._process_line(line):
                        yield event

            remainder = framer.flush()
            if remainder.strip():
                for event in self._process_line(remainder):
                    yield event

            await self._release(release)
            usage = self._final_usage()
            yield claude_events.message_stop(usage.to_dict() if usage else None)
        finally:
            await self._release(release)

    def _process_line(self, line: str) -> Iterator[bytes]:
        payload = extract_data_payload(line)
        if payload is None:
            return
        delta = self.normalizer.normalize(payload)
        if delta is None:
            return
        yield from self._process_delta(delta)

    def _process_delta(self, delta: NormalizedDelta) -> Iterator[bytes]:
        state = self.state
        if delta.upstream_input_tokens is not None:
            state.upstream_input_tokens = delta.upstream_input_tokens
        if delta.upstream_output_tokens is not None:
            state.upstream_output_tokens = delta.upstream_output_tokens

        if delta.text:
            yield from claude_events.text_block(state.text_block_index, delta.text)
            state.text_block_index += 1
            state.accumulated_output_tokens += self._estimate(delta.text)

        for fragment in delta.tool_fragments:
            partial_json = dump_json(fragment.args)
            yield from claude_events.tool_use_block(
                state.tool_use_block_index,
                self.id_generator(),
                fragment.name,
                partial_json,
            )
            state.tool_use_block_index += 1
            state.accumulated_output_tokens += self._estimate(fragment.name)
            state.accumulated_output_tokens += self._estimate(partial_json)

    def _estimate(self, text: str) -> int:
        if self.estimator is None:
            return 0
        return self.estimator.estimate(text)

    def _final_usage(self) -> Optional[UsageRecord]:
        if self.original_request is None or self.estimator is None:
            return None

        state = self.state
        usage = UsageRecord(
            input_tokens=self.estimator.estimate_messages(self.original_request.get("messages")),
            output_tokens=state.accumulated_output_tokens,
        )
        if self.prefer_upstream_usage:
            if state.upstream_input_tokens is not None:
                usage.input_tokens = state.upstream_input_tokens
            if state.upstream_output_tokens is not None:
                usage.output_tokens = state.upstream_output_tokens
        return usage

    async def _release(self, release: Optional[Callable[[], Awaitable[None]]]) -> None:
        if self.state.released:
            return
        self.state.released = True
        if release is not None:
            await release()
