"""
Proxy configuration definition.

Loads configuration from environment variables and provides a Pydantic model.
Uses pydantic-settings for type safety and defaults.
"""

import sys
from urllib.parse import urlsplit

from pydantic import Field, field_validator
from services.common.core.config import BaseAppConfig


class ProxyConfig(BaseAppConfig):
    """
    Configuration management for the analytics proxy.
    """

    # Server settings
    UVICORN_WORKERS: int = Field(default=1, description="Number of worker processes")
    UVICORN_BIND_ADDR: str = Field(default="0.0.0.0:8000", description="Listen address")
    LOG_CONFIG_PATH: str = Field(default="config/logging.yml", description="Logging YAML path")

    # Upstreams
    API_HOST: str = Field(default="https://us.i.posthog.com", description="API upstream base URL")
    ASSET_HOST: str = Field(
        default="https://us-assets.i.posthog.com", description="Static asset upstream base URL"
    )
    STATIC_PREFIX: str = Field(default="static/", description="Path prefix of static assets")
    UPSTREAM_TIMEOUT: float = Field(default=30.0, description="Upstream call timeout (seconds)")

    # Asset cache
    ASSET_CACHE_TTL_SECONDS: float = Field(default=3600.0, gt=0, description="Asset TTL (seconds)")
    ASSET_CACHE_MAX_ENTRIES: int = Field(default=1024, gt=0, description="Asset cache capacity")

    # Cross-origin policy
    CORS_BASE_DOMAIN: str = Field(default="domain.local", description="Allowed origin domain")

    # FastAPI settings
    root_path: str = Field(default="", description="API root path (for proxy)")

    @field_validator("API_HOST", "ASSET_HOST")
    @classmethod
    def _normalize_upstream_url(cls, value: str) -> str:
        if not urlsplit(value).hostname:
            raise ValueError(f"upstream URL must be absolute: {value!r}")
        return value.rstrip("/")

    @property
    def api_hostname(self) -> str:
        """Host header value sent to the API upstream."""
        return urlsplit(self.API_HOST).netloc


# Load config as a singleton.
# pydantic-settings reads environment variables during instantiation.
try:
    config = ProxyConfig()
except Exception as e:
    sys.stderr.write(f"Failed to load configuration: {e}\n")
    raise
