"""
Google Gemini Native API Provider

Maps Claude Messages requests to Gemini generateContent requests and
translates responses (complete and streamed) back.
"""

import logging
from typing import Any, Optional

from app.common.utils import build_url, clean_json_schema, dump_json
from app.domain.gemini import GeminiResponse
from app.domain.stream import NormalizedDelta, ToolFragment
from app.providers.base import (
    DeltaNormalizer,
    Provider,
    UpstreamRequest,
    flatten_system_prompt,
    forward_headers,
)

logger = logging.getLogger(__name__)


class GeminiDeltaNormalizer(DeltaNormalizer):
    """
    Gemini streaming chunk normalizer

    Text parts of the first candidate are concatenated into one text fragment;
    every named functionCall part is a tool fragment with its structured args.
    """

    provider_name = "gemini"

    def _normalize(self, payload: str) -> Optional[NormalizedDelta]:
        chunk = GeminiResponse.model_validate_json(payload)

        usage = chunk.usage_metadata
        input_tokens = usage.prompt_token_count if usage else None
        output_tokens = usage.candidates_token_count if usage else None

        parts = chunk.parts
        text = "".join(part.text for part in parts if part.text)
        fragments = tuple(
            ToolFragment(
                name=part.function_call.name,
                args=part.function_call.args if part.function_call.args is not None else {},
            )
            for part in parts
            if part.function_call is not None and part.function_call.name
        )

        if not text and not fragments and input_tokens is None and output_tokens is None:
            return None

        return NormalizedDelta(
            text=text or None,
            tool_fragments=fragments,
            upstream_input_tokens=input_tokens,
            upstream_output_tokens=output_tokens,
        )


class GeminiProvider(Provider):
    """Gemini upstream (POST {base}/models/{model}:generateContent)."""

    name = "gemini"

    def create_normalizer(self) -> DeltaNormalizer:
        return GeminiDeltaNormalizer()

    def build_request(
        self,
        claude_request: dict[str, Any],
        base_url: str,
        api_key: str,
        headers: Optional[dict[str, str]] = None,
    ) -> UpstreamRequest:
        prepared_headers = forward_headers(headers, extra_dropped=("x-goog-api-key",))
        prepared_headers["x-goog-api-key"] = api_key
        prepared_headers["Content-Type"] = "application/json"

        model = str(claude_request.get("model") or "")
        if model.startswith("models/"):
            model = model[len("models/"):]
        if claude_request.get("stream"):
            endpoint = f"models/{model}:streamGenerateContent?alt=sse"
        else:
            endpoint = f"models/{model}:generateContent"

        url = build_url(base_url, endpoint)
        body = self.convert_request_body(claude_request)
        logger.debug("Gemini Request: url=%s body=%s", url, dump_json(body))

        return UpstreamRequest(method="POST", url=url, headers=prepared_headers, body=body)

    def convert_request_body(self, claude_request: dict[str, Any]) -> dict[str, Any]:
        """
        Convert a Claude request body to a Gemini generateContent body

        Args:
            claude_request: Claude Messages request

        Returns:
            dict: Gemini request body
        """
        body: dict[str, Any] = {
            "contents": convert_contents(claude_request.get("messages") or []),
        }

        system_text = flatten_system_prompt(claude_request.get("system"))
        if system_text:
            body["systemInstruction"] = {"parts": [{"text": system_text}]}

        tools = claude_request.get("tools")
        if tools:
            body["tools"] = [
                {
                    "functionDeclarations": [
                        {
                            "name": tool.get("name"),
                            "description": tool.get("description"),
                            "parameters": clean_json_schema(tool.get("input_schema")),
                        }
                        for tool in tools
                        if isinstance(tool, dict)
                    ]
                }
            ]

        generation_config: dict[str, Any] = {}
        for claude_key, gemini_key in (
            ("temperature", "temperature"),
            ("max_tokens", "maxOutputTokens"),
            ("top_p", "topP"),
            ("top_k", "topK"),
            ("stop_sequences", "stopSequences"),
        ):
            if claude_request.get(claude_key) is not None:
                generation_config[gemini_key] = claude_request[claude_key]
        if generation_config:
            body["generationConfig"] = generation_config

        return body

    def map_response(
        self,
        body: Any,
        original_request: Optional[dict[str, Any]] = None,
    ) -> dict[str, Any]:
        upstream = GeminiResponse.model_validate(body)
        response = self._new_response(original_request)
        content: list[dict[str, Any]] = response["content"]

        if upstream.candidates:
            parts = upstream.parts
            text = "".join(part.text for part in parts if part.text)
            if text:
                content.append({"type": "text", "text": text})

            has_tool_use = False
            for part in parts:
                function_call = part.function_call
                if function_call is None or not function_call.name:
                    continue
                has_tool_use = True
                content.append(
                    {
                        "type": "tool_use",
                        "id": self.id_generator(),
                        "name": function_call.name,
                        "input": function_call.args if function_call.args is not None else {},
                    }
                )

            if has_tool_use:
                response["stop_reason"] = "tool_use"
            elif upstream.candidates[0].finish_reason == "MAX_TOKENS":
                response["stop_reason"] = "max_tokens"
            else:
                response["stop_reason"] = "end_turn"

        usage = upstream.usage_metadata
        response["usage"] = self._resolve_usage(
            content,
            original_request,
            upstream_input_tokens=usage.prompt_token_count if usage else None,
            upstream_output_tokens=usage.candidates_token_count if usage else None,
            has_upstream_usage=usage is not None,
        )
        return response


def convert_contents(claude_messages: list[Any]) -> list[dict[str, Any]]:
    """
    Convert Claude messages to Gemini contents

    - assistant → model, everything else → user
    - tool_use → functionCall, tool_result → functionResponse (name resolved
      from the earlier tool_use with the same id)
    - base64 images → inlineData

    Args:
        claude_messages: Claude message list

    Returns:
        list[dict]: Gemini contents
    """
    contents: list[dict[str, Any]] = []
    tool_names: dict[str, str] = {}

    for message in claude_messages:
        if not isinstance(message, dict):
            continue
        role = "model" if message.get("role") == "assistant" else "user"
        content = message.get("content")

        if isinstance(content, str):
            contents.append({"role": role, "parts": [{"text": content}]})
            continue

        parts: list[dict[str, Any]] = []
        for block in content or []:
            if not isinstance(block, dict):
                continue
            block_type = block.get("type")
            if block_type == "text":
                parts.append({"text": block.get("text", "")})
            elif block_type == "tool_use":
                name = block.get("name") or ""
                if block.get("id"):
                    tool_names[block["id"]] = name
                parts.append({"functionCall": {"name": name, "args": block.get("input") or {}}})
            elif block_type == "tool_result":
                tool_use_id = block.get("tool_use_id") or ""
                parts.append(
                    {
                        "functionResponse": {
                            "name": tool_names.get(tool_use_id, tool_use_id),
                            "response": {"content": _tool_result_content(block.get("content"))},
                        }
                    }
                )
            elif block_type == "image":
                source = block.get("source") or {}
                if source.get("type") == "base64":
                    parts.append(
                        {
                            "inlineData": {
                                "mimeType": source.get("media_type"),
                                "data": source.get("data"),
                            }
                        }
                    )

        if parts:
            contents.append({"role": role, "parts": parts})

    return contents


def _tool_result_content(content: Any) -> Any:
    if isinstance(content, list):
        texts = [
            block["text"]
            for block in content
            if isinstance(block, dict) and isinstance(block.get("text"), str)
        ]
        if len(texts) == len(content):
            return "\n".join(texts)
    return content if content is not None else ""
