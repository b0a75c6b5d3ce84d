"""Proxy Core Service Module

Implements the gateway flow for one Claude Messages request."""

import json
import logging
from typing import Any, Callable, Optional

from fastapi.responses import JSONResponse, Response, StreamingResponse
from pydantic import ValidationError
from starlette.types import Receive, Scope, Send

from app.common.errors import AuthenticationError, BadRequestError, UpstreamError
from app.common.gateway_path import parse_gateway_path
from app.common.http_client import HttpClient, UpstreamResponse
from app.common.stream_transcoder import StreamTranscoder
from app.common.token_estimator import TokenEstimator
from app.common.utils import generate_id
from app.config import Settings
from app.providers import Provider, get_provider

logger = logging.getLogger(__name__)

# Headers recomputed by the server when an upstream response is passed through
_PASSTHROUGH_DROPPED_HEADERS = {
    "content-length",
    "content-encoding",
    "transfer-encoding",
    "connection",
    "keep-alive",
}

STREAM_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
}


class UpstreamStreamingResponse(StreamingResponse):
    """
    Streaming response bound to an upstream handle

    The handle is closed when the response finishes, including when the
    client disconnects before the body generator has started.
    """

    def __init__(self, content: Any, upstream: UpstreamResponse, **kwargs: Any):
        super().__init__(content, **kwargs)
        self.upstream = upstream

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        try:
            await super().__call__(scope, receive, send)
        finally:
            await self.upstream.aclose()


class ProxyService:
    """
    Proxy Core Service

    Handles the complete flow of a gateway request:
    1. Parse the gateway path (provider type and upstream base URL)
    2. Check the forwarded credential
    3. Map the Claude request to the provider request and send it
    4. Pass non-success responses through unchanged
    5. Transcode streaming responses, or map complete responses
    """

    def __init__(
        self,
        http_client: HttpClient,
        estimator: Optional[TokenEstimator],
        settings: Settings,
        id_generator: Callable[[], str] = generate_id,
    ):
        """
        Initialize Service

        Args:
            http_client: Upstream HTTP client
            estimator: Token estimator for usage fallback
            settings: Gateway configuration
            id_generator: Identifier generator for messages and tool uses
        """
        self.http_client = http_client
        self.estimator = estimator
        self.settings = settings
        self.id_generator = id_generator

    async def process_request(
        self,
        path: str,
        headers: dict[str, str],
        raw_body: bytes,
    ) -> Response:
        """
        Process a gateway request

        Args:
            path: Request path
            headers: Request headers (lower-case names)
            raw_body: Raw request body

        Returns:
            Response: Streaming, JSON or passthrough response

        Raises:
            BadRequestError: Malformed path, unsupported type or invalid body
            NotFoundError: Path is not a messages endpoint
            AuthenticationError: Missing x-api-key header
            UpstreamError: Upstream unreachable or unreadable
        """
        target = parse_gateway_path(path)

        api_key = headers.get("x-api-key")
        if not api_key:
            raise AuthenticationError("Missing x-api-key header")

        provider = get_provider(
            target.provider_type,
            estimator=self.estimator,
            id_generator=self.id_generator,
        )
        claude_request = self._parse_body(raw_body)

        upstream_request = provider.build_request(
            claude_request,
            base_url=target.base_url,
            api_key=api_key,
            headers=headers,
        )
        logger.info(
            "Forwarding request: provider=%s url=%s model=%s stream=%s",
            provider.name,
            upstream_request.url,
            claude_request.get("model"),
            bool(claude_request.get("stream")),
        )

        upstream = await self.http_client.send(upstream_request)

        if not upstream.is_success:
            return await self._passthrough(upstream)

        if upstream.is_event_stream:
            return self._stream_response(provider, upstream, claude_request)

        return await self._json_response(provider, upstream, claude_request)

    @staticmethod
    def _parse_body(raw_body: bytes) -> dict[str, Any]:
        try:
            body = json.loads(raw_body)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise BadRequestError("Request body must be valid JSON") from e
        if not isinstance(body, dict):
            raise BadRequestError("Request body must be a JSON object")
        return body

    async def _passthrough(self, upstream: UpstreamResponse) -> Response:
        """Return a non-success upstream response unchanged."""
        try:
            content = await upstream.aread()
        finally:
            await upstream.aclose()

        logger.warning("Upstream returned non-success status: status=%s", upstream.status_code)
        headers = {
            key: value
            for key, value in upstream.headers.items()
            if key.lower() not in _PASSTHROUGH_DROPPED_HEADERS
        }
        return Response(content=content, status_code=upstream.status_code, headers=headers)

    def _stream_response(
        self,
        provider: Provider,
        upstream: UpstreamResponse,
        claude_request: dict[str, Any],
    ) -> StreamingResponse:
        transcoder = StreamTranscoder(
            provider.create_normalizer(),
            estimator=self.estimator,
            original_request=claude_request,
            id_generator=self.id_generator,
            prefer_upstream_usage=self.settings.PREFER_UPSTREAM_USAGE,
        )
        return UpstreamStreamingResponse(
            transcoder.transcode(upstream.aiter_bytes(), release=upstream.aclose),
            upstream=upstream,
            status_code=upstream.status_code,
            media_type="text/event-stream",
            headers=STREAM_HEADERS,
        )

    async def _json_response(
        self,
        provider: Provider,
        upstream: UpstreamResponse,
        claude_request: dict[str, Any],
    ) -> JSONResponse:
        try:
            content = await upstream.aread()
        finally:
            await upstream.aclose()

        try:
            body = json.loads(content)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            logger.warning("Upstream returned an invalid JSON body: %s", e)
            raise UpstreamError("Upstream returned an invalid JSON body") from e

        try:
            content = provider.map_response(body, original_request=claude_request)
        except ValidationError as e:
            logger.warning("Upstream returned an unexpected response body: %s", e)
            raise UpstreamError("Upstream returned an unexpected response body") from e

        return JSONResponse(content=content, status_code=upstream.status_code)
