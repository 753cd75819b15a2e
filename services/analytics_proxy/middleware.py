"""
Where: services/analytics_proxy/middleware.py
What: HTTP middleware for request IDs and access logging.
Why: Isolate cross-cutting request concerns from app assembly.
"""

import logging
import time

from fastapi import Request

from services.common.core.request_context import clear_request_id, generate_request_id

logger = logging.getLogger("analytics_proxy.access")

REQUEST_ID_HEADER = "X-Request-Id"


async def access_log_middleware(request: Request, call_next):
    """Middleware for request ID assignment and structured access logging."""
    start_time = time.perf_counter()
    req_id = generate_request_id()

    try:
        response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = req_id

        process_time_ms = round((time.perf_counter() - start_time) * 1000, 2)

        logger.info(
            f"{request.method} {request.url.path} {response.status_code}",
            extra={
                "request_id": req_id,
                "method": request.method,
                "path": request.url.path,
                "query_params": str(request.query_params),
                "status": response.status_code,
                "latency_ms": process_time_ms,
                "route_kind": getattr(request.state, "route_kind", None),
                "user_agent": request.headers.get("user-agent"),
                "client_ip": request.client.host if request.client else None,
            },
        )

        return response
    finally:
        clear_request_id()
