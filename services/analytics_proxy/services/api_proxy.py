"""
API Proxy Handler

Forwards every non-static request to the API upstream with client
credentials stripped and the client address appended to X-Forwarded-For,
then streams the upstream response back.
"""

import logging
from typing import List, Optional, Tuple

from fastapi import Request
from fastapi.responses import StreamingResponse
from starlette.background import BackgroundTask

from ..core.headers import (
    build_upstream_headers,
    declared_content_length,
    filter_response_headers,
    is_form_content_type,
)
from ..core.routing import RoutingDecision, upstream_path
from .transport import UpstreamTransport

logger = logging.getLogger("analytics_proxy.api_proxy")

JSON_CONTENT_TYPE = "application/json"


async def read_request_body(request: Request) -> Tuple[Optional[bytes], Optional[str]]:
    """
    Decide the outbound body and its content-type.

    Returns:
        (body, content_type); body is None when nothing is forwarded
    """
    content_type = request.headers.get("content-type")
    content_length = declared_content_length(request.headers.get("content-length"))

    if (content_length is not None and content_length > 0) or is_form_content_type(content_type):
        return await request.body(), content_type

    if content_type and "json" in content_type.lower():
        # JSON declared without a body: forward an empty JSON request.
        return b"", JSON_CONTENT_TYPE

    return None, None


class ApiProxyHandler:
    def __init__(self, transport: UpstreamTransport, upstream_hostname: str):
        """
        Args:
            transport: upstream transport
            upstream_hostname: Host header sent to the API upstream
        """
        self.transport = transport
        self.upstream_hostname = upstream_hostname

    async def build_request(self, request: Request) -> Tuple[List[Tuple[str, str]], Optional[bytes]]:
        """Build the outbound header list and body for an inbound request."""
        body, content_type = await read_request_body(request)

        client_ip = request.client.host if request.client else None
        headers = build_upstream_headers(
            request.headers.items(), self.upstream_hostname, client_ip
        )
        if content_type:
            headers.append(("Content-Type", content_type))
        return headers, body

    async def handle(self, request: Request, path: str, decision: RoutingDecision) -> StreamingResponse:
        """
        Proxy one API request.

        Raises:
            UpstreamError: the API upstream could not be reached
        """
        api_url = f"{decision.upstream_host}{upstream_path(path, request.url.query)}"

        headers, body = await self.build_request(request)
        logger.debug(f"Proxying {request.method} {request.url.path} -> {api_url}")

        upstream = await self.transport.send(request.method, api_url, headers, body)

        response = StreamingResponse(
            self.transport.iter_body(upstream, api_url),
            status_code=upstream.status_code,
            background=BackgroundTask(upstream.aclose),
        )
        for name, value in filter_response_headers(upstream.headers.multi_items()):
            response.headers.append(name, value)
        return response
