"""
Accessors for the request pipeline stored on app.state.

The catch-all endpoint is a plain ASGI route, so these are called directly
with the request instead of through Depends.
"""

from fastapi import Request

from ..core.routing import UpstreamRouter
from ..services.api_proxy import ApiProxyHandler
from ..services.static_assets import StaticAssetHandler


def get_upstream_router(request: Request) -> UpstreamRouter:
    return request.app.state.upstream_router


def get_static_asset_handler(request: Request) -> StaticAssetHandler:
    return request.app.state.static_asset_handler


def get_api_proxy_handler(request: Request) -> ApiProxyHandler:
    return request.app.state.api_proxy_handler
