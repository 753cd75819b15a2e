import pytest

from services.analytics_proxy.core.routing import (
    RequestKind,
    RoutingDecision,
    UpstreamRouter,
    request_path,
    upstream_path,
)

API = "https://us.i.posthog.com"
ASSETS = "https://us-assets.i.posthog.com"


@pytest.fixture
def router():
    return UpstreamRouter(api_host=API, asset_host=ASSETS)


@pytest.mark.parametrize(
    "path",
    ["static/", "static/array.js", "static/recorder.js", "static/a/b/c.css", "static/app.js?v=1"],
)
def test_static_prefix_routes_to_asset_host(router, path):
    assert router.classify(path) == RoutingDecision(RequestKind.STATIC_ASSET, ASSETS)


@pytest.mark.parametrize(
    "path",
    ["", "capture", "e/", "decide/", "static", "Static/app.js", "api/static/app.js", "staticfiles/x"],
)
def test_other_paths_route_to_api_host(router, path):
    assert router.classify(path) == RoutingDecision(RequestKind.API_CALL, API)


def test_classify_is_deterministic(router):
    assert router.classify("static/x.js") == router.classify("static/x.js")


def test_custom_static_prefix():
    router = UpstreamRouter(api_host=API, asset_host=ASSETS, static_prefix="assets/")
    assert router.classify("assets/app.js").kind is RequestKind.STATIC_ASSET
    assert router.classify("static/app.js").kind is RequestKind.API_CALL


def test_request_kind_values():
    assert RequestKind.STATIC_ASSET.value == "static-asset"
    assert RequestKind.API_CALL.value == "api-call"


@pytest.mark.parametrize(
    "path,query,expected",
    [
        ("static/app.js", "", "/static/app.js"),
        ("static/app.js", "v=1.2&x=y", "/static/app.js?v=1.2&x=y"),
        ("", "", "/"),
        ("e/", "ip=1&_=1700000000", "/e/?ip=1&_=1700000000"),
    ],
)
def test_upstream_path(path, query, expected):
    assert upstream_path(path, query) == expected


@pytest.mark.parametrize(
    "scope,expected",
    [
        ({"path": "/api/a#b", "raw_path": b"/api/a%23b"}, "api/a%23b"),
        ({"path": "/static/a/b.js", "raw_path": b"/static%2Fa/b.js"}, "static%2Fa/b.js"),
        ({"path": "/", "raw_path": b"/"}, ""),
        ({"path": "/a b", "raw_path": None}, "a%20b"),
        ({"path": "/e/", "raw_path": b"/proxy/e/", "root_path": "/proxy"}, "e/"),
        ({"path": "/e/", "raw_path": b"/e/", "root_path": "/proxy"}, "e/"),
    ],
)
def test_request_path_keeps_client_escapes(scope, expected):
    assert request_path(scope) == expected


def test_encoded_slash_does_not_enter_static_prefix(router):
    path = request_path({"path": "/static/x", "raw_path": b"/static%2Fx"})
    assert router.classify(path).kind is RequestKind.API_CALL
