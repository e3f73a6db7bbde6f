"""
Shared configuration management for the GitHub cache gateway.
"""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class BaseConfig(BaseSettings):
    """Base configuration class with common settings."""

    model_config = SettingsConfigDict(
        env_prefix="GATEWAY_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    # Environment
    env: str = Field(default="local")
    log_level: str = Field(default="info")

    # Key-value store
    redis_url: str = Field(default="redis://localhost:6379/0")
    redis_max_connections: int = Field(default=50, ge=1)
    redis_socket_timeout: float = Field(default=5.0, gt=0)


class GatewayConfig(BaseConfig):
    """Gateway configuration: upstream GitHub API and per-route cache TTLs."""

    service_name: str = "gateway"
    host: str = "0.0.0.0"
    port: int = 8000

    # Upstream
    github_api_url: str = Field(default="https://api.github.com")
    github_token: Optional[str] = Field(default=None)
    github_api_version: str = Field(default="2022-11-28")
    github_user_agent: str = Field(default="github-cache-gateway")
    upstream_timeout: float = Field(default=10.0, gt=0)

    # Routing and caching
    github_api_prefix: str = Field(default="/api/v1/github")
    repositories_cache_ttl: int = Field(default=600, ge=0)
    issues_cache_ttl: int = Field(default=600, ge=0)

    @property
    def is_local(self) -> bool:
        return self.env == "local"


def get_config(**overrides) -> GatewayConfig:
    """Get configuration for the gateway, with optional explicit overrides."""
    return GatewayConfig(**overrides)
