"""
Cross-origin policy.

Allows browser requests from a base domain and any of its subdomains.
"""

import logging
from urllib.parse import urlsplit

from starlette.middleware.cors import CORSMiddleware
from starlette.types import ASGIApp

logger = logging.getLogger("analytics_proxy.cors")


def origin_matches_domain(origin: str, base_domain: str) -> bool:
    """
    Return True when the origin's hostname is base_domain or a subdomain of it.

    Malformed origins are never allowed.
    """
    try:
        parts = urlsplit(origin)
        hostname = parts.hostname
    except ValueError:
        return False

    if not parts.scheme or not hostname:
        return False

    base_domain = base_domain.lower()
    return hostname == base_domain or hostname.endswith("." + base_domain)


class SubdomainCORSMiddleware(CORSMiddleware):
    """
    CORSMiddleware that checks origins against a base domain.

    Any method and header is allowed, and credentials are permitted, so the
    allowed origin is echoed back instead of "*".
    """

    def __init__(self, app: ASGIApp, base_domain: str) -> None:
        super().__init__(
            app,
            allow_origins=(),
            allow_methods=("*",),
            allow_headers=("*",),
            allow_credentials=True,
        )
        self.base_domain = base_domain

    def is_allowed_origin(self, origin: str) -> bool:
        allowed = origin_matches_domain(origin, self.base_domain)
        if not allowed:
            logger.debug("Origin not allowed: %s", origin)
        return allowed
