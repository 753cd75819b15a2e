"""
Custom exception classes.

Represent errors related to reaching the upstream hosts.
"""

import logging
from fastapi import Request, status
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class ProxyError(Exception):
    """Base exception class for the proxy."""

    pass


class UpstreamError(ProxyError):
    """Raised when an upstream call fails before a response is received."""

    status_code = status.HTTP_502_BAD_GATEWAY
    message = "Bad Gateway"

    def __init__(self, upstream_url: str, cause: Exception):
        self.upstream_url = upstream_url
        self.cause = cause
        super().__init__(f"Upstream request to {upstream_url} failed: {cause!r}")


class UpstreamUnreachableError(UpstreamError):
    """Connection or protocol failure talking to the upstream."""

    pass


class UpstreamTimeoutError(UpstreamError):
    """The upstream did not answer within the configured timeout."""

    status_code = status.HTTP_504_GATEWAY_TIMEOUT
    message = "Gateway Timeout"


# ===========================================
# Exception Handlers
# ===========================================


async def upstream_exception_handler(request: Request, exc: UpstreamError):
    """
    Handler for upstream transport failures.
    """
    logger.error(
        str(exc),
        extra={
            "path": request.url.path,
            "method": request.method,
            "upstream_url": exc.upstream_url,
            "error_type": type(exc.cause).__name__,
        },
    )
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.message, "detail": str(exc)},
    )


async def global_exception_handler(request: Request, exc: Exception):
    """
    Catch-all handler for unhandled exceptions.
    """
    logger.error(
        f"Global exception handler caught: {exc}",
        exc_info=exc,
        extra={
            "path": request.url.path,
            "method": request.method,
        },
    )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"message": "Internal Server Error", "detail": str(exc)},
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """
    Handler for HTTPException.
    """
    return JSONResponse(status_code=exc.status_code, content={"message": exc.detail})
