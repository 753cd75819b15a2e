import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from services.analytics_proxy.core.cors import SubdomainCORSMiddleware, origin_matches_domain


@pytest.mark.parametrize(
    "origin,expected",
    [
        ("https://domain.local", True),
        ("http://domain.local:3000", True),
        ("https://app.domain.local", True),
        ("https://a.b.domain.local", True),
        ("https://APP.Domain.Local", True),
        ("https://evildomain.local", False),
        ("https://domain.local.evil.com", False),
        ("https://example.com", False),
        ("domain.local", False),
        ("null", False),
        ("", False),
        ("https://[::1", False),
    ],
)
def test_origin_matches_domain(origin, expected):
    assert origin_matches_domain(origin, "domain.local") is expected


@pytest.fixture
def cors_client():
    app = FastAPI()
    app.add_middleware(SubdomainCORSMiddleware, base_domain="domain.local")

    @app.post("/capture")
    async def capture():
        return {"status": 1}

    return TestClient(app)


def test_preflight_from_subdomain_is_allowed(cors_client):
    response = cors_client.options(
        "/capture",
        headers={
            "Origin": "https://app.domain.local",
            "Access-Control-Request-Method": "POST",
            "Access-Control-Request-Headers": "content-type,x-custom",
        },
    )

    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "https://app.domain.local"
    assert response.headers["access-control-allow-credentials"] == "true"
    assert "x-custom" in response.headers["access-control-allow-headers"]


def test_preflight_from_foreign_origin_is_rejected(cors_client):
    response = cors_client.options(
        "/capture",
        headers={"Origin": "https://example.com", "Access-Control-Request-Method": "POST"},
    )

    assert response.status_code == 400
    assert "access-control-allow-origin" not in response.headers


def test_simple_request_echoes_allowed_origin(cors_client):
    response = cors_client.post("/capture", headers={"Origin": "https://domain.local"})

    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "https://domain.local"
    assert response.headers["access-control-allow-credentials"] == "true"


def test_simple_request_from_malformed_origin_gets_no_cors_headers(cors_client):
    response = cors_client.post("/capture", headers={"Origin": "not a url"})

    assert response.status_code == 200
    assert "access-control-allow-origin" not in response.headers
