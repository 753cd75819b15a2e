"""
Request classification.

Decides per request path which upstream serves it.
"""

from dataclasses import dataclass
from enum import Enum
from urllib.parse import quote


class RequestKind(str, Enum):
    STATIC_ASSET = "static-asset"
    API_CALL = "api-call"


@dataclass(frozen=True)
class RoutingDecision:
    kind: RequestKind
    upstream_host: str


class UpstreamRouter:
    """
    Classifies request paths as static assets or API calls.

    Args:
        api_host: base URL of the API upstream
        asset_host: base URL of the static asset upstream
        static_prefix: path prefix (without leading slash) reserved for assets
    """

    def __init__(self, api_host: str, asset_host: str, static_prefix: str = "static/"):
        self.api_host = api_host
        self.asset_host = asset_host
        self.static_prefix = static_prefix

    def classify(self, path: str) -> RoutingDecision:
        """
        Args:
            path: request path with the leading "/" already stripped

        Returns:
            RoutingDecision for the path
        """
        if path.startswith(self.static_prefix):
            return RoutingDecision(RequestKind.STATIC_ASSET, self.asset_host)
        return RoutingDecision(RequestKind.API_CALL, self.api_host)


def upstream_path(path: str, query: str) -> str:
    """
    Build the path+query forwarded upstream, also used as the asset cache key.

    Example: ("static/app.js", "v=1") -> "/static/app.js?v=1"
    """
    full_path = "/" + path
    if query:
        full_path += "?" + query
    return full_path


def request_path(scope) -> str:
    """
    Path of the request as the client sent it, without the leading "/".

    Percent-escapes are kept so that "%23", "%3F" and "%2F" reach the upstream
    unchanged. The root path is removed when the server left it in place.
    """
    raw_path = scope.get("raw_path")
    if raw_path is not None:
        path = raw_path.decode("latin-1")
    else:
        path = quote(scope["path"])

    root_path = scope.get("root_path", "")
    if root_path and path.startswith(root_path):
        path = path[len(root_path):]
    return path.lstrip("/")
