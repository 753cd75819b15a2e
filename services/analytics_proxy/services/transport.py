"""
Upstream transport.

Wraps the shared httpx.AsyncClient and maps transport failures to proxy
exceptions. Every call is attempted exactly once.
"""

import logging
from contextlib import contextmanager
from typing import Iterator, List, Optional, Tuple

import httpx

from ..core.exceptions import UpstreamTimeoutError, UpstreamUnreachableError

logger = logging.getLogger("analytics_proxy.transport")


@contextmanager
def _translate_errors(method: str, url: str) -> Iterator[None]:
    try:
        yield
    except httpx.TimeoutException as e:
        raise UpstreamTimeoutError(url, e) from e
    except httpx.RequestError as e:
        logger.warning(
            f"Upstream request failed: {method} {url}",
            extra={"target_url": url, "error_type": type(e).__name__, "error_detail": str(e)},
        )
        raise UpstreamUnreachableError(url, e) from e


class UpstreamTransport:
    def __init__(self, client: httpx.AsyncClient):
        """
        Args:
            client: Shared httpx.AsyncClient (timeout and TLS settings live on it)
        """
        self.client = client

    async def fetch(self, url: str) -> httpx.Response:
        """
        GET url and read the whole body.

        Redirects are followed, so the final resource is returned.

        Raises:
            UpstreamUnreachableError: connection or protocol failure
            UpstreamTimeoutError: no answer within the timeout
        """
        with _translate_errors("GET", url):
            return await self.client.get(url, follow_redirects=True)

    async def send(
        self,
        method: str,
        url: str,
        headers: List[Tuple[str, str]],
        body: Optional[bytes] = None,
    ) -> httpx.Response:
        """
        Send a request and return once the response headers arrive.

        The caller owns the returned response and must close it
        (response.aclose()) after consuming the body stream.
        """
        request = self.client.build_request(method, url, headers=headers, content=body)
        with _translate_errors(method, url):
            return await self.client.send(request, stream=True)

    @staticmethod
    async def iter_body(response: httpx.Response, url: str):
        """Yield the decoded body of a streamed response, then close it."""
        try:
            async for chunk in response.aiter_bytes():
                yield chunk
        except httpx.HTTPError as e:
            # Headers are already sent; the connection is aborted instead.
            logger.error(
                f"Upstream body stream failed: {url}",
                extra={"target_url": url, "error_type": type(e).__name__, "error_detail": str(e)},
            )
            raise
        finally:
            await response.aclose()
