"""Schema registry connection settings."""

import logging
import os
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

logger = logging.getLogger(__name__)

DEFAULT_REGISTRY_URL = "http://localhost:8081"
DEFAULT_TIMEOUT = 10.0


class RegistrySettings(BaseModel):
    """Connection settings for a Confluent-compatible schema registry."""

    url: str = Field(DEFAULT_REGISTRY_URL, description="Base URL of the registry.")
    username: Optional[str] = Field(None, description="Basic auth user name.")
    password: Optional[str] = Field(None, description="Basic auth password.")
    timeout: float = Field(
        DEFAULT_TIMEOUT, description="Request timeout in seconds."
    )

    @field_validator("url")
    @classmethod
    def check_url(cls, url: str) -> str:
        """Require an http(s) URL and drop any trailing slash."""
        url = url.strip()
        if not url.startswith(("http://", "https://")):
            raise ValueError("url must start with http:// or https://")
        return url.rstrip("/")

    @field_validator("timeout")
    @classmethod
    def check_timeout(cls, timeout: float) -> float:
        if timeout <= 0:
            raise ValueError("timeout must be a positive number of seconds")
        return timeout

    @model_validator(mode="after")
    def check_auth(self) -> "RegistrySettings":
        if (self.username is None) != (self.password is None):
            raise ValueError("username and password must be set together")
        return self

    @classmethod
    def from_env(cls) -> "RegistrySettings":
        """Build settings from SCHEMA_REGISTRY_* environment variables."""
        values = {
            "url": os.getenv("SCHEMA_REGISTRY_URL"),
            "username": os.getenv("SCHEMA_REGISTRY_USERNAME"),
            "password": os.getenv("SCHEMA_REGISTRY_PASSWORD"),
            "timeout": os.getenv("SCHEMA_REGISTRY_TIMEOUT"),
        }
        # Unset variables fall back to field defaults
        settings = cls(**{k: v for k, v in values.items() if v is not None})
        logger.debug(f"Loaded registry settings for {settings.url}")
        return settings
