import os
from typing import Callable, List, Optional

import httpx
import pytest
from fastapi.testclient import TestClient
from starlette.requests import Request

# Keep the test run independent from a local .env and logging file.
os.environ.setdefault("LOG_CONFIG_PATH", "/tmp/analytics-proxy-missing-logging.yml")

from services.analytics_proxy.config import ProxyConfig  # noqa: E402
from services.analytics_proxy.services.asset_cache import AssetCache  # noqa: E402
from services.analytics_proxy.services.transport import UpstreamTransport  # noqa: E402

API_HOST = "https://us.i.posthog.com"
ASSET_HOST = "https://us-assets.i.posthog.com"


class FakeClock:
    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeUpstream:
    """
    httpx.MockTransport handler that records every request it receives.

    The response is produced by `responder`, which defaults to an empty 200.
    """

    def __init__(self):
        self.requests: List[httpx.Request] = []
        self.bodies: List[bytes] = []
        self.responder: Callable[[httpx.Request], httpx.Response] = lambda r: httpx.Response(200)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.bodies.append(request.read())
        self.requests.append(request)
        return self.responder(request)

    @property
    def call_count(self) -> int:
        return len(self.requests)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


@pytest.fixture
def proxy_config() -> ProxyConfig:
    return ProxyConfig(_env_file=None, API_HOST=API_HOST, ASSET_HOST=ASSET_HOST)


@pytest.fixture
def fake_upstream() -> FakeUpstream:
    return FakeUpstream()


@pytest.fixture
def transport(fake_upstream) -> UpstreamTransport:
    client = httpx.AsyncClient(transport=httpx.MockTransport(fake_upstream))
    return UpstreamTransport(client)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def asset_cache(clock) -> AssetCache:
    return AssetCache(default_ttl=3600.0, max_entries=16, timer=clock)


@pytest.fixture
def client(proxy_config, transport, asset_cache) -> TestClient:
    """
    TestClient over the real app with the pipeline wired to the fake upstream.

    The lifespan is not entered, so app.state keeps the fakes.
    """
    from services.analytics_proxy.lifecycle import init_pipeline
    from services.analytics_proxy.main import app

    init_pipeline(app, proxy_config, transport, cache=asset_cache)
    return TestClient(app)


@pytest.fixture
def request_factory():
    return make_request


def make_request(
    method: str = "GET",
    path: str = "/",
    query: str = "",
    headers: Optional[List[tuple]] = None,
    body: bytes = b"",
    client_addr: Optional[tuple] = ("1.2.3.4", 50000),
) -> Request:
    """Build a Starlette Request from a raw ASGI scope."""
    scope = {
        "type": "http",
        "method": method,
        "path": path,
        "raw_path": path.encode(),
        "query_string": query.encode(),
        "headers": [(k.lower().encode("latin-1"), v.encode("latin-1")) for k, v in headers or []],
        "client": client_addr,
        "server": ("proxy.domain.local", 443),
        "scheme": "https",
        "root_path": "",
    }
    sent = False

    async def receive():
        nonlocal sent
        if sent:
            return {"type": "http.disconnect"}
        sent = True
        return {"type": "http.request", "body": body, "more_body": False}

    return Request(scope, receive)
