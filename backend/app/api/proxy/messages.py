"""
Claude Messages Gateway Endpoint

Accepts Claude Messages requests at /{type}/{provider_url...}/v1/messages
and forwards them to the provider named in the path.
"""

from fastapi import APIRouter, Request
from fastapi.responses import Response

from app.api.deps import ProxyServiceDep
from app.common.errors import MethodNotAllowedError

router = APIRouter(tags=["Claude Gateway"])


@router.api_route(
    "/{full_path:path}",
    methods=["GET", "POST", "PUT", "PATCH", "DELETE", "HEAD"],
)
async def messages(
    full_path: str,
    request: Request,
    proxy_service: ProxyServiceDep,
) -> Response:
    """
    Claude Messages gateway

    Translates the request for the upstream provider and converts its
    response (streaming or complete) back to the Claude format.
    """
    if request.method != "POST":
        raise MethodNotAllowedError()

    raw_body = await request.body()
    return await proxy_service.process_request(
        path=request.url.path,
        headers=dict(request.headers),
        raw_body=raw_body,
    )
