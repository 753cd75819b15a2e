"""
Services package.

Provides the proxy pipeline and its upstream integrations.
"""

from .asset_cache import AssetCache
from .api_proxy import ApiProxyHandler
from .static_assets import StaticAssetHandler
from .transport import UpstreamTransport

__all__ = [
    "AssetCache",
    "ApiProxyHandler",
    "StaticAssetHandler",
    "UpstreamTransport",
]
