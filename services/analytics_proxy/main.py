"""
Analytics Proxy - reverse proxy for a split API/asset analytics provider

Every path is accepted. Paths under the static prefix are served from the
asset upstream through an in-memory cache; everything else is forwarded to
the API upstream with client credentials stripped.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.types import Receive, Scope, Send

from .api.deps import get_api_proxy_handler, get_static_asset_handler, get_upstream_router
from .config import config
from .core.cors import SubdomainCORSMiddleware
from .core.exceptions import (
    UpstreamError,
    global_exception_handler,
    http_exception_handler,
    upstream_exception_handler,
)
from .core.logging_config import setup_logging
from .core.routing import RequestKind, request_path
from .lifecycle import manage_lifespan
from .middleware import access_log_middleware

# Logger setup
setup_logging(config.LOG_CONFIG_PATH)
logger = logging.getLogger("analytics_proxy.main")


@asynccontextmanager
async def lifespan(app: FastAPI):
    async with manage_lifespan(app, config):
        yield


# Docs routes are disabled so that every path reaches the upstream.
app = FastAPI(
    title="Analytics Proxy",
    version="1.0.0",
    lifespan=lifespan,
    root_path=config.root_path,
    docs_url=None,
    redoc_url=None,
    openapi_url=None,
)

app.add_middleware(SubdomainCORSMiddleware, base_domain=config.CORS_BASE_DOMAIN)
app.middleware("http")(access_log_middleware)

# Register exception handlers.
app.add_exception_handler(Exception, global_exception_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(UpstreamError, upstream_exception_handler)


async def proxy_handler(request: Request):
    """
    Classify the request path and hand it to the matching handler.
    """
    path = request_path(request.scope)
    decision = get_upstream_router(request).classify(path)
    request.state.route_kind = decision.kind.value

    if decision.kind is RequestKind.STATIC_ASSET:
        return await get_static_asset_handler(request).handle(request, path, decision)
    return await get_api_proxy_handler(request).handle(request, path, decision)


class ProxyEndpoint:
    """
    Catch-all ASGI endpoint.

    Registered as a plain Starlette route without a method list, so every
    HTTP method (including TRACE and custom verbs) reaches the upstream.
    """

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        request = Request(scope, receive, send)
        response = await proxy_handler(request)
        await response(scope, receive, send)


app.add_route("/{path:path}", ProxyEndpoint(), methods=None, include_in_schema=False)


if __name__ == "__main__":
    import uvicorn

    host, _, port = config.UVICORN_BIND_ADDR.rpartition(":")
    uvicorn.run(
        "services.analytics_proxy.main:app",
        host=host or "0.0.0.0",
        port=int(port),
        workers=config.UVICORN_WORKERS,
        log_config=None,
    )
