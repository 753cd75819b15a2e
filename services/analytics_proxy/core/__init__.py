"""
Core logic package.

Provides request classification, header rules and error types.
"""

from .routing import RequestKind, RoutingDecision, UpstreamRouter, request_path, upstream_path
from .headers import build_upstream_headers, filter_response_headers

__all__ = [
    "RequestKind",
    "RoutingDecision",
    "UpstreamRouter",
    "request_path",
    "upstream_path",
    "build_upstream_headers",
    "filter_response_headers",
]
