"""
Utility Functions Module

Identifier generation, lenient JSON helpers, URL joining and JSON schema cleaning.
"""

import json
import uuid
from typing import Any


def generate_id() -> str:
    """
    Generate a probably-unique identifier

    Used for Claude message ids and tool-use ids.

    Returns:
        str: 32-character hex string

    Example:
        >>> generate_id()
        '3f0c5a0e6a7b4f0b9d1c2e3f4a5b6c7d'
    """
    return uuid.uuid4().hex


def safe_json_loads(text: Any) -> Any:
    """
    Decode a JSON document, returning an empty object when it cannot be decoded.

    Args:
        text: JSON text (non-string values are returned unchanged)

    Returns:
        Any: Decoded value or {}
    """
    if not isinstance(text, str):
        return text if text is not None else {}
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        return {}


def dump_json(value: Any) -> str:
    """Compact JSON serialization (no spaces after separators, non-ASCII kept)."""
    return json.dumps(value, ensure_ascii=False, separators=(",", ":"))


def build_url(base_url: str, endpoint: str) -> str:
    """
    Join an upstream base URL and an endpoint with exactly one slash.

    Example:
        >>> build_url("https://api.openai.com/v1", "chat/completions")
        'https://api.openai.com/v1/chat/completions'
    """
    if not base_url.endswith("/"):
        base_url += "/"
    return base_url + endpoint.lstrip("/")


# Keys upstream function-calling schemas commonly reject
_DROPPED_SCHEMA_KEYS = ("$schema", "additionalProperties", "title", "examples")


def clean_json_schema(schema: Any) -> Any:
    """
    Recursively remove JSON schema keywords that upstream providers reject.

    Drops $schema, additionalProperties, title and examples everywhere, and
    format on string-typed schemas. Other lists (e.g. enum, required) are kept as-is.

    Args:
        schema: Tool input schema

    Returns:
        Any: Cleaned copy of the schema
    """
    if not isinstance(schema, dict):
        return schema

    cleaned: dict[str, Any] = {}
    for key, value in schema.items():
        if key in _DROPPED_SCHEMA_KEYS:
            continue
        if key == "format" and schema.get("type") == "string":
            continue
        if key == "properties" and isinstance(value, dict):
            # Property names are user data, only their schemas are cleaned
            cleaned[key] = {name: clean_json_schema(prop) for name, prop in value.items()}
        elif isinstance(value, dict):
            cleaned[key] = clean_json_schema(value)
        elif key in ("anyOf", "oneOf", "allOf") and isinstance(value, list):
            cleaned[key] = [clean_json_schema(item) for item in value]
        else:
            cleaned[key] = value
    return cleaned
