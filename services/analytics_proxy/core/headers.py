"""
Header transformation for upstream requests and client responses.

Inbound and upstream headers are treated as case-insensitive multimaps of
(name, value) pairs.
"""

from typing import Iterable, List, Optional, Tuple

HeaderList = List[Tuple[str, str]]

# Request headers re-derived from the buffered body instead of being copied.
BODY_REQUEST_HEADERS = frozenset(
    {"content-type", "content-length", "content-encoding", "transfer-encoding"}
)

# Credentials and routing headers never forwarded from the client.
SENSITIVE_REQUEST_HEADERS = frozenset({"cookie", "authorization", "host"})

# Response headers that conflict with the server's own framing.
DROPPED_RESPONSE_HEADERS = frozenset({"transfer-encoding", "content-encoding"})

FORM_CONTENT_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")


def is_form_content_type(content_type: Optional[str]) -> bool:
    if not content_type:
        return False
    return content_type.split(";", 1)[0].strip().lower() in FORM_CONTENT_TYPES


def declared_content_length(value: Optional[str]) -> Optional[int]:
    """Parse a Content-Length header, returning None when absent or invalid."""
    if value is None:
        return None
    try:
        length = int(value.strip())
    except ValueError:
        return None
    return length if length >= 0 else None


def build_upstream_headers(
    inbound: Iterable[Tuple[str, str]],
    upstream_hostname: str,
    client_ip: Optional[str],
) -> HeaderList:
    """
    Build the header list for an API upstream request.

    - Body headers (Content-*, Transfer-Encoding) are skipped.
    - A header name is copied with all of its values only on first sight.
    - Cookie, Authorization and Host are dropped; Host is pinned to the upstream.
    - The client address is appended to X-Forwarded-For.

    Args:
        inbound: inbound (name, value) pairs, possibly repeating names
        upstream_hostname: value for the Host header
        client_ip: remote address of the client, if known
    """
    pairs = list(inbound)
    headers: HeaderList = []
    copied = set()

    for name, _ in pairs:
        key = name.lower()
        if key in BODY_REQUEST_HEADERS or key in copied:
            continue
        copied.add(key)
        headers.extend((n, v) for n, v in pairs if n.lower() == key)

    headers = remove_headers(headers, SENSITIVE_REQUEST_HEADERS)
    headers.append(("Host", upstream_hostname))

    if client_ip and client_ip.strip():
        forwarded = [v for n, v in headers if n.lower() == "x-forwarded-for"]
        if forwarded:
            headers = remove_headers(headers, {"x-forwarded-for"})
            value = ", ".join(forwarded) + ", " + client_ip
        else:
            value = client_ip
        headers.append(("X-Forwarded-For", value))

    return headers


def filter_response_headers(upstream: Iterable[Tuple[str, str]]) -> HeaderList:
    """
    Copy upstream response headers for the client.

    Transfer-Encoding and Content-Encoding are dropped. The body is relayed
    decoded, so a Content-Length describing an encoded body is dropped too.
    """
    pairs = list(upstream)
    encoded = any(n.lower() == "content-encoding" for n, _ in pairs)
    dropped = DROPPED_RESPONSE_HEADERS
    if encoded:
        dropped = dropped | {"content-length"}
    return remove_headers(pairs, dropped)


def remove_headers(headers: Iterable[Tuple[str, str]], names) -> HeaderList:
    return [(n, v) for n, v in headers if n.lower() not in names]
