"""
Where: services/analytics_proxy/lifecycle.py
What: Startup/shutdown of the shared upstream client and the proxy pipeline.
Why: Keep main.py focused on app assembly.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI

from services.common.core.http_client import HttpClientFactory

from .config import ProxyConfig
from .core.routing import UpstreamRouter
from .services.api_proxy import ApiProxyHandler
from .services.asset_cache import AssetCache
from .services.static_assets import StaticAssetHandler
from .services.transport import UpstreamTransport

logger = logging.getLogger("analytics_proxy.main")


def init_pipeline(
    app: FastAPI,
    proxy_config: ProxyConfig,
    transport: UpstreamTransport,
    cache: Optional[AssetCache] = None,
) -> None:
    """Create the router, cache and handlers and store them on app.state."""
    if cache is None:
        cache = AssetCache(
            default_ttl=proxy_config.ASSET_CACHE_TTL_SECONDS,
            max_entries=proxy_config.ASSET_CACHE_MAX_ENTRIES,
        )

    app.state.transport = transport
    app.state.asset_cache = cache
    app.state.upstream_router = UpstreamRouter(
        api_host=proxy_config.API_HOST,
        asset_host=proxy_config.ASSET_HOST,
        static_prefix=proxy_config.STATIC_PREFIX,
    )
    app.state.static_asset_handler = StaticAssetHandler(
        cache, transport, ttl=proxy_config.ASSET_CACHE_TTL_SECONDS
    )
    app.state.api_proxy_handler = ApiProxyHandler(transport, proxy_config.api_hostname)


@asynccontextmanager
async def manage_lifespan(app: FastAPI, proxy_config: ProxyConfig) -> AsyncIterator[None]:
    """Manage application lifecycle."""
    factory = HttpClientFactory(proxy_config)
    factory.configure_global_settings()
    client = factory.create_async_client(timeout=proxy_config.UPSTREAM_TIMEOUT)

    try:
        init_pipeline(app, proxy_config, UpstreamTransport(client))
        logger.info(
            "Proxy initialized",
            extra={
                "api_host": proxy_config.API_HOST,
                "asset_host": proxy_config.ASSET_HOST,
                "verify_ssl": proxy_config.VERIFY_SSL,
            },
        )
        yield
    finally:
        logger.info("Proxy shutting down, closing http client.")
        await client.aclose()
