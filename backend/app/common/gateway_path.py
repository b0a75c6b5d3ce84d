"""
Gateway Path Parsing

The gateway path encodes the provider type and the upstream base URL:

    /{type}/{provider_url...}/v1/messages

e.g. /openai/api.openai.com/v1/v1/messages → type "openai",
base URL "https://api.openai.com/v1".
"""

import re
from dataclasses import dataclass

from app.common.errors import BadRequestError, NotFoundError

MESSAGES_SUFFIX = ("v1", "messages")

# Path normalization collapses "https://" into "https:/"
_COLLAPSED_SCHEME = re.compile(r"^(https?):/+", re.IGNORECASE)


@dataclass(frozen=True)
class GatewayTarget:
    """Provider type and upstream base URL resolved from a gateway path."""

    provider_type: str
    base_url: str


def parse_gateway_path(path: str) -> GatewayTarget:
    """
    Parse a gateway path

    Args:
        path: Request path, e.g. "/gemini/generativelanguage.googleapis.com/v1beta/v1/messages"

    Returns:
        GatewayTarget: Resolved provider type and base URL

    Raises:
        BadRequestError: Too few segments, or empty type / provider URL
        NotFoundError: Path does not end with /v1/messages
    """
    parts = [part for part in path.split("/") if part]
    if len(parts) < 3:
        raise BadRequestError(
            "Invalid path format. Expected: /{type}/{provider_url}/v1/messages"
        )
    if tuple(parts[-2:]) != MESSAGES_SUFFIX:
        raise NotFoundError("Path must end with /v1/messages")

    provider_type = parts[0]
    base_url = "/".join(parts[1:-2])
    if not provider_type or not base_url:
        raise BadRequestError("Missing type or provider_url in path")

    return GatewayTarget(provider_type=provider_type, base_url=normalize_base_url(base_url))


def normalize_base_url(base_url: str) -> str:
    """
    Restore the scheme of a base URL taken from a path

    Example:
        >>> normalize_base_url("https:/api.openai.com/v1")
        'https://api.openai.com/v1'
        >>> normalize_base_url("api.openai.com/v1")
        'https://api.openai.com/v1'
    """
    match = _COLLAPSED_SCHEME.match(base_url)
    if match:
        return f"{match.group(1).lower()}://{base_url[match.end():]}"
    return f"https://{base_url}"
