"""
HTTP Client Wrapper Module

Sends mapped requests to upstream providers and exposes the response as a
streamable handle that must be released exactly once.
"""

import logging
from typing import AsyncIterator, Optional

import httpx

from app.common.errors import UpstreamError
from app.config import get_settings
from app.providers.base import UpstreamRequest

logger = logging.getLogger(__name__)


class UpstreamResponse:
    """
    Upstream Response Handle

    Wraps a streamed httpx.Response together with the client that owns it.
    Closing the handle closes both; repeated closes are no-ops.
    """

    def __init__(self, response: httpx.Response, client: httpx.AsyncClient):
        self._response = response
        self._client = client
        self._closed = False

    @property
    def status_code(self) -> int:
        return self._response.status_code

    @property
    def headers(self) -> httpx.Headers:
        return self._response.headers

    @property
    def is_success(self) -> bool:
        return 200 <= self._response.status_code < 300

    @property
    def is_event_stream(self) -> bool:
        """Whether the upstream answered with an SSE body."""
        return "text/event-stream" in self._response.headers.get("content-type", "")

    def aiter_bytes(self) -> AsyncIterator[bytes]:
        return self._response.aiter_bytes()

    async def aread(self) -> bytes:
        return await self._response.aread()

    async def aclose(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            await self._response.aclose()
        finally:
            await self._client.aclose()


class HttpClient:
    """
    Asynchronous HTTP Client Wrapper

    Creates one httpx.AsyncClient per upstream call so that each response
    owns its connection for the lifetime of the outbound stream.
    """

    def __init__(
        self,
        timeout: Optional[int] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize HTTP Client

        Args:
            timeout: Request timeout (seconds), defaults to configuration
            transport: Custom httpx transport (tests use httpx.MockTransport)
        """
        settings = get_settings()
        self.timeout = timeout or settings.HTTP_TIMEOUT
        self.transport = transport

    def _create_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=httpx.Timeout(self.timeout),
            transport=self.transport,
        )

    async def send(self, upstream_request: UpstreamRequest) -> UpstreamResponse:
        """
        Send a mapped request and return once response headers arrive

        The body is not read; callers stream it or read it, then close the handle.

        Args:
            upstream_request: Mapped upstream request

        Returns:
            UpstreamResponse: Open response handle

        Raises:
            UpstreamError: Connection failure (502) or timeout (504)
        """
        client = self._create_client()
        request = client.build_request(
            method=upstream_request.method,
            url=upstream_request.url,
            headers=upstream_request.headers,
            json=upstream_request.body,
        )
        try:
            response = await client.send(request, stream=True)
        except httpx.TimeoutException as e:
            await client.aclose()
            logger.warning("Upstream request timed out: url=%s error=%s", upstream_request.url, e)
            raise UpstreamError(
                "Upstream request timed out",
                details={"url": upstream_request.url},
                status_code=504,
            ) from e
        except httpx.RequestError as e:
            await client.aclose()
            logger.warning("Upstream request failed: url=%s error=%s", upstream_request.url, e)
            raise UpstreamError(
                f"Upstream request failed: {e}",
                details={"url": upstream_request.url},
            ) from e
        except BaseException:
            await client.aclose()
            raise

        logger.debug(
            "Upstream responded: url=%s status=%s content_type=%s",
            upstream_request.url,
            response.status_code,
            response.headers.get("content-type"),
        )
        return UpstreamResponse(response, client)
