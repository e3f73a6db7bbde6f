"""
GitHub cache gateway service.
"""

from typing import Dict, Optional

import httpx

from shared.base_service import BaseService
from shared.config import GatewayConfig, get_config
from shared.errors import StoreError

from .adapters.github_client import GithubClient
from .caching.store import KeyValueStore, create_store
from .github.router import build_github_router


class GatewayService(BaseService):
    """Gateway in front of the GitHub API with response caching and rate limit protection."""

    def __init__(
        self,
        config: Optional[GatewayConfig] = None,
        *,
        store: Optional[KeyValueStore] = None,
        github_client: Optional[GithubClient] = None,
        upstream_transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        config = config or get_config()
        super().__init__(config.service_name, config)

        self.store = store or create_store(
            config.redis_url,
            max_connections=config.redis_max_connections,
            socket_timeout=config.redis_socket_timeout,
        )
        self.github_client = github_client or GithubClient(
            config.github_api_url,
            config.github_token,
            api_version=config.github_api_version,
            user_agent=config.github_user_agent,
            timeout=config.upstream_timeout,
            transport=upstream_transport,
        )

        self.app.include_router(
            build_github_router(config, self.store, self.github_client, metrics=self.metrics)
        )

        @self.app.get("/")
        async def root():
            """Service metadata."""
            return {
                "service": self.service_name,
                "version": "1.0.0",
                "github_api_prefix": config.github_api_prefix,
            }

        @self.app.on_event("shutdown")
        async def _shutdown():
            await self.github_client.close()
            await self.store.close()

        # Expose service instance via app state for introspection/testing
        self.app.state.gateway_service = self

    async def _check_dependencies(self) -> Dict[str, str]:
        """Report key-value store reachability."""
        try:
            await self.store.ping()
        except StoreError as exc:
            self.logger.error("Store health check failed", error=exc.message)
            return {"redis": "error"}
        return {"redis": "ok"}


def create_app(config: Optional[GatewayConfig] = None, **kwargs):
    """Create the gateway FastAPI application."""
    return GatewayService(config, **kwargs).app


if __name__ == "__main__":
    GatewayService().run()
