"""
Common Configuration
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class BaseAppConfig(BaseSettings):
    """
    Common application settings.
    """

    LOG_LEVEL: str = Field(default="INFO", description="Log level")
    # Upstream certificates are not validated unless explicitly enabled.
    VERIFY_SSL: bool = Field(default=False, description="Whether to verify SSL certificates")

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=True, extra="ignore"
    )
