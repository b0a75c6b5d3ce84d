"""
OpenAI Protocol Provider

Maps Claude Messages requests to OpenAI Chat Completions and translates
responses (complete and streamed) back.
"""

import logging
from typing import Any, Optional

from app.common.utils import build_url, clean_json_schema, dump_json, safe_json_loads
from app.domain.openai import OpenAIChatResponse, OpenAIStreamChunk
from app.domain.stream import NormalizedDelta, ToolFragment
from app.providers.base import (
    DeltaNormalizer,
    Provider,
    UpstreamRequest,
    flatten_system_prompt,
    forward_headers,
)

logger = logging.getLogger(__name__)


class OpenAIDeltaNormalizer(DeltaNormalizer):
    """
    OpenAI streaming chunk normalizer

    Reads choices[0].delta: `content` is the text fragment, and every tool call
    carrying both a function name and arguments is a tool fragment.
    """

    provider_name = "openai"

    def _normalize(self, payload: str) -> Optional[NormalizedDelta]:
        chunk = OpenAIStreamChunk.model_validate_json(payload)

        input_tokens = chunk.usage.prompt_tokens if chunk.usage else None
        output_tokens = chunk.usage.completion_tokens if chunk.usage else None

        if not chunk.choices:
            if input_tokens is None and output_tokens is None:
                return None
            # Usage-only chunk (stream_options.include_usage)
            return NormalizedDelta(
                upstream_input_tokens=input_tokens,
                upstream_output_tokens=output_tokens,
            )

        delta = chunk.choices[0].delta
        fragments: list[ToolFragment] = []
        for tool_call in delta.tool_calls or []:
            function = tool_call.function
            if function is None or not function.name or not function.arguments:
                continue
            fragments.append(
                ToolFragment(name=function.name, args=safe_json_loads(function.arguments))
            )

        return NormalizedDelta(
            text=delta.content or None,
            tool_fragments=tuple(fragments),
            upstream_input_tokens=input_tokens,
            upstream_output_tokens=output_tokens,
        )


class OpenAIProvider(Provider):
    """OpenAI-compatible upstream (POST {base}/chat/completions)."""

    name = "openai"

    def create_normalizer(self) -> DeltaNormalizer:
        return OpenAIDeltaNormalizer()

    def build_request(
        self,
        claude_request: dict[str, Any],
        base_url: str,
        api_key: str,
        headers: Optional[dict[str, str]] = None,
    ) -> UpstreamRequest:
        prepared_headers = forward_headers(headers)
        prepared_headers["Authorization"] = f"Bearer {api_key}"
        prepared_headers["Content-Type"] = "application/json"

        url = build_url(base_url, "chat/completions")
        body = self.convert_request_body(claude_request)
        logger.debug("OpenAI Request: url=%s body=%s", url, dump_json(body))

        return UpstreamRequest(method="POST", url=url, headers=prepared_headers, body=body)

    def convert_request_body(self, claude_request: dict[str, Any]) -> dict[str, Any]:
        """
        Convert a Claude request body to an OpenAI Chat Completions body

        Args:
            claude_request: Claude Messages request

        Returns:
            dict: OpenAI request body
        """
        messages: list[dict[str, Any]] = []
        system_text = flatten_system_prompt(claude_request.get("system"))
        if system_text:
            messages.append({"role": "system", "content": system_text})
        messages.extend(convert_messages(claude_request.get("messages") or []))

        body: dict[str, Any] = {
            "model": claude_request.get("model"),
            "messages": messages,
        }
        if "stream" in claude_request:
            body["stream"] = claude_request["stream"]

        tools = claude_request.get("tools")
        if tools:
            body["tools"] = [
                {
                    "type": "function",
                    "function": {
                        "name": tool.get("name"),
                        "description": tool.get("description"),
                        "parameters": clean_json_schema(tool.get("input_schema")),
                    },
                }
                for tool in tools
                if isinstance(tool, dict)
            ]

        if claude_request.get("temperature") is not None:
            body["temperature"] = claude_request["temperature"]
        if claude_request.get("max_tokens") is not None:
            body["max_tokens"] = claude_request["max_tokens"]

        return body

    def map_response(
        self,
        body: Any,
        original_request: Optional[dict[str, Any]] = None,
    ) -> dict[str, Any]:
        upstream = OpenAIChatResponse.model_validate(body)
        response = self._new_response(original_request)
        content: list[dict[str, Any]] = response["content"]

        if upstream.choices:
            choice = upstream.choices[0]
            message = choice.message

            if message.content:
                content.append({"type": "text", "text": message.content})

            if message.tool_calls:
                for tool_call in message.tool_calls:
                    function = tool_call.function
                    content.append(
                        {
                            "type": "tool_use",
                            "id": tool_call.id or self.id_generator(),
                            "name": function.name if function else None,
                            "input": safe_json_loads(function.arguments if function else None),
                        }
                    )
                response["stop_reason"] = "tool_use"
            elif choice.finish_reason == "length":
                response["stop_reason"] = "max_tokens"
            else:
                response["stop_reason"] = "end_turn"

        usage = upstream.usage
        response["usage"] = self._resolve_usage(
            content,
            original_request,
            upstream_input_tokens=usage.prompt_tokens if usage else None,
            upstream_output_tokens=usage.completion_tokens if usage else None,
            has_upstream_usage=usage is not None,
        )
        return response


def convert_messages(claude_messages: list[Any]) -> list[dict[str, Any]]:
    """
    Convert Claude messages to OpenAI chat messages

    - String content keeps its role (anything but assistant becomes user)
    - Text blocks are joined with newlines
    - tool_use blocks become tool_calls on the same message
    - tool_result blocks become separate `tool` messages following it

    Args:
        claude_messages: Claude message list

    Returns:
        list[dict]: OpenAI message list
    """
    openai_messages: list[dict[str, Any]] = []

    for message in claude_messages:
        if not isinstance(message, dict):
            continue
        role = "assistant" if message.get("role") == "assistant" else "user"
        content = message.get("content")

        if isinstance(content, str):
            openai_messages.append({"role": role, "content": content})
            continue

        texts: list[str] = []
        tool_calls: list[dict[str, Any]] = []
        tool_results: list[dict[str, Any]] = []

        for block in content or []:
            if not isinstance(block, dict):
                continue
            block_type = block.get("type")
            if block_type == "text":
                texts.append(block.get("text", ""))
            elif block_type == "tool_use":
                tool_calls.append(
                    {
                        "id": block.get("id"),
                        "type": "function",
                        "function": {
                            "name": block.get("name"),
                            "arguments": dump_json(block.get("input", {})),
                        },
                    }
                )
            elif block_type == "tool_result":
                result_content = block.get("content", "")
                if not isinstance(result_content, str):
                    result_content = dump_json(result_content)
                tool_results.append(
                    {
                        "role": "tool",
                        "tool_call_id": block.get("tool_use_id"),
                        "content": result_content,
                    }
                )

        if texts or tool_calls:
            openai_message: dict[str, Any] = {"role": role}
            if texts:
                openai_message["content"] = "\n".join(texts)
            if tool_calls:
                openai_message["tool_calls"] = tool_calls
            openai_messages.append(openai_message)

        openai_messages.extend(tool_results)

    return openai_messages

