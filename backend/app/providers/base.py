"""
Upstream Provider Base Classes

Defines the interfaces every upstream provider variant implements:
request mapping, streaming delta normalization and response mapping.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from pydantic import ValidationError

from app.common.token_estimator import TokenEstimator
from app.common.utils import generate_id
from app.domain.stream import NormalizedDelta

logger = logging.getLogger(__name__)


@dataclass
class UpstreamRequest:
    """
    Upstream Request Data Class

    A fully mapped request ready to be sent to the provider.
    """

    # HTTP method
    method: str
    # Absolute upstream URL
    url: str
    # Request headers (credentials included)
    headers: dict[str, str] = field(default_factory=dict)
    # JSON request body
    body: dict[str, Any] = field(default_factory=dict)


class DeltaNormalizer(ABC):
    """
    Streaming Delta Normalizer

    Parses one provider-native chunk payload (the text after "data: ") into a
    NormalizedDelta. Implementations are pure: the same payload always yields
    the same result, and malformed payloads yield None instead of raising.
    """

    # Provider name used in log messages
    provider_name: str = "upstream"

    def normalize(self, payload: str) -> Optional[NormalizedDelta]:
        """
        Normalize one chunk payload

        Args:
            payload: Raw JSON text of one streaming chunk

        Returns:
            Optional[NormalizedDelta]: None when the chunk carries nothing actionable
        """
        try:
            return self._normalize(payload)
        except (ValueError, ValidationError) as e:
            # pydantic's ValidationError covers JSON decode failures as well
            logger.debug("Skipping unparsable %s chunk: %s", self.provider_name, e)
            return None

    @abstractmethod
    def _normalize(self, payload: str) -> Optional[NormalizedDelta]:
        pass


class Provider(ABC):
    """
    Upstream Provider Abstract Base Class

    One variant per upstream wire protocol. Adding a provider means adding a
    subclass and registering it in the factory.
    """

    # Provider type as it appears in the gateway path
    name: str = ""

    def __init__(
        self,
        estimator: Optional[TokenEstimator] = None,
        id_generator: Callable[[], str] = generate_id,
    ):
        """
        Initialize provider

        Args:
            estimator: Token estimator for usage fallback
            id_generator: Produces message and tool-use identifiers
        """
        self.estimator = estimator
        self.id_generator = id_generator

    @abstractmethod
    def build_request(
        self,
        claude_request: dict[str, Any],
        base_url: str,
        api_key: str,
        headers: Optional[dict[str, str]] = None,
    ) -> UpstreamRequest:
        """
        Map a Claude Messages request to the provider request

        Args:
            claude_request: Claude request body
            base_url: Upstream base URL
            api_key: Upstream credential
            headers: Client request headers to forward

        Returns:
            UpstreamRequest: Mapped request
        """
        pass

    @abstractmethod
    def create_normalizer(self) -> DeltaNormalizer:
        """Create the streaming delta normalizer for this provider."""
        pass

    @abstractmethod
    def map_response(
        self,
        body: Any,
        original_request: Optional[dict[str, Any]] = None,
    ) -> dict[str, Any]:
        """
        Map a complete upstream response body to a Claude response

        Args:
            body: Decoded upstream JSON body
            original_request: Claude request, used for usage estimation

        Returns:
            dict: Claude Messages response
        """
        pass

    def _new_response(self, original_request: Optional[dict[str, Any]]) -> dict[str, Any]:
        response: dict[str, Any] = {
            "id": self.id_generator(),
            "type": "message",
            "role": "assistant",
            "content": [],
        }
        if original_request and original_request.get("model"):
            response["model"] = original_request["model"]
        return response

    def _resolve_usage(
        self,
        content: list[dict[str, Any]],
        original_request: Optional[dict[str, Any]],
        upstream_input_tokens: Optional[int],
        upstream_output_tokens: Optional[int],
        has_upstream_usage: bool,
    ) -> dict[str, int]:
        """
        Pick upstream-reported usage, falling back to estimates.

        - No usage at all and the original request is known: estimate both sides
        - Output count missing (or zero) with non-empty content: estimate the output side
        """
        input_tokens = upstream_input_tokens or 0
        output_tokens = upstream_output_tokens or 0

        if self.estimator is not None:
            if not has_upstream_usage and original_request is not None:
                input_tokens = self.estimator.estimate_messages(original_request.get("messages"))
                output_tokens = self.estimator.estimate_claude_content(content)
            elif not upstream_output_tokens and content:
                output_tokens = self.estimator.estimate_claude_content(content)

        return {"input_tokens": input_tokens, "output_tokens": output_tokens}


def forward_headers(headers: Optional[dict[str, str]], extra_dropped: tuple[str, ...] = ()) -> dict[str, str]:
    """
    Copy client headers that are safe to forward upstream.

    Drops client credentials, hop-by-hop headers and headers describing the
    original body, which no longer match the mapped request.
    """
    dropped = {
        "authorization",
        "x-api-key",
        "api-key",
        "host",
        "content-length",
        "content-type",
        "accept-encoding",
        "connection",
        "transfer-encoding",
        "anthropic-version",
        "anthropic-beta",
        *extra_dropped,
    }
    return {key: value for key, value in (headers or {}).items() if key.lower() not in dropped}


def flatten_system_prompt(system: Any) -> str:
    """Flatten a Claude system prompt (a string or a list of text blocks) to text."""
    if isinstance(system, str):
        return system
    if isinstance(system, list):
        return "\n".join(
            block["text"]
            for block in system
            if isinstance(block, dict) and isinstance(block.get("text"), str)
        )
    return ""
