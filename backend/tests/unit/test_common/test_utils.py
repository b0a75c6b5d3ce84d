"""
Utility function unit tests
"""

from app.common.utils import (
    build_url,
    clean_json_schema,
    dump_json,
    generate_id,
    safe_json_loads,
)


class TestGenerateId:
    def test_unique_ids(self):
        ids = [generate_id() for _ in range(100)]
        assert len(set(ids)) == 100
        assert all(len(i) == 32 for i in ids)


class TestSafeJsonLoads:
    def test_valid_json(self):
        assert safe_json_loads('{"q": "x"}') == {"q": "x"}

    def test_invalid_json_returns_empty_object(self):
        assert safe_json_loads('{"q": ') == {}

    def test_none_returns_empty_object(self):
        assert safe_json_loads(None) == {}

    def test_non_string_passthrough(self):
        assert safe_json_loads({"already": "decoded"}) == {"already": "decoded"}


class TestDumpJson:
    def test_compact_separators(self):
        assert dump_json({"q": "x", "n": [1, 2]}) == '{"q":"x","n":[1,2]}'

    def test_non_ascii_unescaped(self):
        assert dump_json({"city": "東京"}) == '{"city":"東京"}'


class TestBuildUrl:
    def test_adds_missing_slash(self):
        assert build_url("https://api.openai.com/v1", "chat/completions") == (
            "https://api.openai.com/v1/chat/completions"
        )

    def test_no_duplicate_slash(self):
        assert build_url("https://api.openai.com/v1/", "/chat/completions") == (
            "https://api.openai.com/v1/chat/completions"
        )


class TestCleanJsonSchema:
    def test_drops_rejected_keywords_recursively(self):
        schema = {
            "$schema": "http://json-schema.org/draft-07/schema#",
            "title": "Args",
            "type": "object",
            "additionalProperties": False,
            "properties": {
                "when": {"type": "string", "format": "date-time", "examples": ["2024-01-01"]},
                "count": {"type": "integer", "format": "int32"},
                "nested": {
                    "type": "object",
                    "additionalProperties": False,
                    "properties": {"x": {"type": "string", "title": "X"}},
                },
            },
            "required": ["when"],
        }

        assert clean_json_schema(schema) == {
            "type": "object",
            "properties": {
                "when": {"type": "string"},
                "count": {"type": "integer", "format": "int32"},
                "nested": {"type": "object", "properties": {"x": {"type": "string"}}},
            },
            "required": ["when"],
        }

    def test_property_named_like_keyword_is_kept(self):
        schema = {"type": "object", "properties": {"title": {"type": "string", "title": "T"}}}
        assert clean_json_schema(schema) == {
            "type": "object",
            "properties": {"title": {"type": "string"}},
        }

    def test_any_of_items_cleaned(self):
        schema = {"anyOf": [{"type": "string", "format": "uri"}, {"type": "null", "title": "None"}]}
        assert clean_json_schema(schema) == {"anyOf": [{"type": "string"}, {"type": "null"}]}

    def test_input_not_mutated(self):
        schema = {"type": "object", "title": "Args"}
        clean_json_schema(schema)
        assert schema == {"type": "object", "title": "Args"}

    def test_non_dict_passthrough(self):
        assert clean_json_schema(None) is None
