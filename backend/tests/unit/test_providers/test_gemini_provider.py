"""
Gemini provider unit tests
"""

from app.providers.gemini_provider import GeminiProvider, convert_contents


class TestBuildRequest:
    def test_streaming_url_and_key_header(self):
        request = GeminiProvider().build_request(
            {"model": "gemini-2.0-flash", "messages": [{"role": "user", "content": "Hi"}], "stream": True},
            base_url="https://generativelanguage.googleapis.com/v1beta",
            api_key="g-key",
            headers={"x-api-key": "g-key", "user-agent": "test"},
        )

        assert request.url == (
            "https://generativelanguage.googleapis.com/v1beta/models/"
            "gemini-2.0-flash:streamGenerateContent?alt=sse"
        )
        assert request.headers == {
            "user-agent": "test",
            "x-goog-api-key": "g-key",
            "Content-Type": "application/json",
        }
        assert request.body == {"contents": [{"role": "user", "parts": [{"text": "Hi"}]}]}

    def test_non_streaming_url(self):
        request = GeminiProvider().build_request(
            {"model": "models/gemini-pro", "messages": []},
            base_url="https://generativelanguage.googleapis.com/v1beta/",
            api_key="g-key",
        )
        assert request.url == (
            "https://generativelanguage.googleapis.com/v1beta/models/gemini-pro:generateContent"
        )

    def test_body_system_tools_and_generation_config(self):
        body = GeminiProvider().convert_request_body(
            {
                "model": "gemini-pro",
                "system": [{"type": "text", "text": "Be brief."}],
                "messages": [],
                "max_tokens": 256,
                "temperature": 0.5,
                "tools": [
                    {
                        "name": "search",
                        "description": "Search",
                        "input_schema": {"type": "object", "title": "Args", "properties": {}},
                    }
                ],
            }
        )

        assert body["systemInstruction"] == {"parts": [{"text": "Be brief."}]}
        assert body["tools"] == [
            {
                "functionDeclarations": [
                    {"name": "search", "description": "Search", "parameters": {"type": "object", "properties": {}}}
                ]
            }
        ]
        assert body["generationConfig"] == {"temperature": 0.5, "maxOutputTokens": 256}


class TestConvertContents:
    def test_tool_round_trip_roles_and_names(self):
        contents = convert_contents(
            [
                {"role": "user", "content": "Weather?"},
                {
                    "role": "assistant",
                    "content": [
                        {"type": "text", "text": "Checking"},
                        {"type": "tool_use", "id": "tu_1", "name": "weather", "input": {"city": "Paris"}},
                    ],
                },
                {
                    "role": "user",
                    "content": [
                        {"type": "tool_result", "tool_use_id": "tu_1", "content": [{"type": "text", "text": "Sunny"}]}
                    ],
                },
            ]
        )

        assert contents == [
            {"role": "user", "parts": [{"text": "Weather?"}]},
            {
                "role": "model",
                "parts": [
                    {"text": "Checking"},
                    {"functionCall": {"name": "weather", "args": {"city": "Paris"}}},
                ],
            },
            {
                "role": "user",
                "parts": [{"functionResponse": {"name": "weather", "response": {"content": "Sunny"}}}],
            },
        ]

    def test_base64_image(self):
        contents = convert_contents(
            [
                {
                    "role": "user",
                    "content": [
                        {"type": "image", "source": {"type": "base64", "media_type": "image/png", "data": "AAAA"}}
                    ],
                }
            ]
        )
        assert contents == [
            {"role": "user", "parts": [{"inlineData": {"mimeType": "image/png", "data": "AAAA"}}]}
        ]


class TestMapResponse:
    def test_text_and_function_call(self, id_generator):
        response = GeminiProvider(id_generator=id_generator).map_response(
            {
                "candidates": [
                    {
                        "content": {
                            "role": "model",
                            "parts": [
                                {"text": "Let me "},
                                {"text": "check."},
                                {"functionCall": {"name": "weather", "args": {"city": "Paris"}}},
                            ],
                        },
                        "finishReason": "STOP",
                    }
                ],
                "usageMetadata": {"promptTokenCount": 10, "candidatesTokenCount": 4, "totalTokenCount": 14},
            },
            original_request={"model": "gemini-pro", "messages": []},
        )

        assert response == {
            "id": "id_1",
            "type": "message",
            "role": "assistant",
            "model": "gemini-pro",
            "content": [
                {"type": "text", "text": "Let me check."},
                {"type": "tool_use", "id": "id_2", "name": "weather", "input": {"city": "Paris"}},
            ],
            "stop_reason": "tool_use",
            "usage": {"input_tokens": 10, "output_tokens": 4},
        }

    def test_max_tokens(self):
        response = GeminiProvider().map_response(
            {
                "candidates": [{"content": {"parts": [{"text": "cut"}]}, "finishReason": "MAX_TOKENS"}],
                "usageMetadata": {"promptTokenCount": 1, "candidatesTokenCount": 1},
            }
        )
        assert response["stop_reason"] == "max_tokens"

    def test_usage_estimated_when_absent(self, estimator):
        request = {"messages": [{"role": "user", "content": "Hello"}]}
        response = GeminiProvider(estimator=estimator).map_response(
            {"candidates": [{"content": {"parts": [{"text": "Bonjour"}]}, "finishReason": "STOP"}]},
            original_request=request,
        )
        assert response["stop_reason"] == "end_turn"
        assert response["usage"] == {
            "input_tokens": estimator.estimate_messages(request["messages"]),
            "output_tokens": estimator.estimate("Bonjour"),
        }
