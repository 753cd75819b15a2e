"""
Static Asset Handler

Serves requests under the static prefix from the asset cache, falling back
to a GET against the asset upstream.
"""

import logging
from typing import Optional

from fastapi import Request, Response

from ..core.routing import RoutingDecision, upstream_path
from .asset_cache import AssetCache
from .transport import UpstreamTransport

logger = logging.getLogger("analytics_proxy.static_assets")

DEFAULT_CONTENT_TYPE = "application/octet-stream"
JAVASCRIPT_CONTENT_TYPE = "application/javascript"


def guess_content_type(full_path: str, upstream_content_type: Optional[str]) -> str:
    """Use the upstream content-type, else infer it from the path extension."""
    if upstream_content_type:
        return upstream_content_type
    if full_path.lower().endswith(".js"):
        return JAVASCRIPT_CONTENT_TYPE
    return DEFAULT_CONTENT_TYPE


class StaticAssetHandler:
    def __init__(self, cache: AssetCache, transport: UpstreamTransport, ttl: Optional[float] = None):
        """
        Args:
            cache: asset cache shared by all requests
            transport: upstream transport
            ttl: lifetime of stored assets in seconds (default: the cache default)
        """
        self.cache = cache
        self.transport = transport
        self.ttl = ttl

    def _cache_get(self, key: str) -> Optional[bytes]:
        try:
            return self.cache.get(key)
        except Exception as e:
            logger.warning(f"Asset cache read failed for {key}, treating as miss: {e}")
            return None

    def _cache_set(self, key: str, data: bytes) -> None:
        try:
            self.cache.set(key, data, self.ttl)
        except Exception as e:
            logger.warning(f"Asset cache write failed for {key}: {e}")

    async def handle(self, request: Request, path: str, decision: RoutingDecision) -> Response:
        """
        Serve one static asset request.

        The upstream is always asked with GET, whatever the inbound method.
        Cached responses carry application/octet-stream since only the body
        is stored.

        Raises:
            UpstreamError: the asset upstream could not be reached
        """
        key = upstream_path(path, request.url.query)

        cached = self._cache_get(key)
        if cached is not None:
            logger.debug(f"Asset cache hit: {key}")
            return Response(content=cached, status_code=200, media_type=DEFAULT_CONTENT_TYPE)

        asset_url = f"{decision.upstream_host}{key}"
        logger.debug(f"Asset cache miss, fetching {asset_url}")
        upstream = await self.transport.fetch(asset_url)

        if not upstream.is_success:
            logger.info(
                f"Asset upstream returned {upstream.status_code} for {key}",
                extra={"target_url": asset_url, "status": upstream.status_code},
            )
            return Response(status_code=upstream.status_code)

        data = upstream.content
        self._cache_set(key, data)

        content_type = guess_content_type(key, upstream.headers.get("content-type"))
        # Only Content-Type and Content-Length are set; upstream framing is not copied.
        return Response(content=data, status_code=200, media_type=content_type)
