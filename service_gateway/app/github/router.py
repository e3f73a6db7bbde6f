"""
GitHub routes wired through the rate limit breaker and the response cache.
"""

from typing import Optional

from fastapi import APIRouter

from shared.config import GatewayConfig
from shared.metrics import MetricsCollector

from ..adapters.github_client import GithubClient
from ..caching.response_cache import ResponseCacheInterceptor
from ..caching.store import KeyValueStore
from ..pipeline import as_endpoint, build_pipeline
from ..ratelimit.breaker import RateLimitBreaker
from .handlers import GOOD_FIRST_ISSUES_CODEC, REPOSITORIES_CODEC, GithubHandlers


def build_github_router(
    config: GatewayConfig,
    store: KeyValueStore,
    client: GithubClient,
    metrics: Optional[MetricsCollector] = None,
) -> APIRouter:
    """Build the GitHub router. Every route runs breaker -> cache -> handler."""
    prefix = config.github_api_prefix.rstrip("/")
    router = APIRouter(prefix=prefix, tags=["github"])
    handlers = GithubHandlers(client)
    breaker = RateLimitBreaker(store, path_prefix=prefix, metrics=metrics)

    repositories_cache = ResponseCacheInterceptor(
        store,
        REPOSITORIES_CODEC,
        ttl=config.repositories_cache_ttl,
        path_prefix=prefix,
        metrics=metrics,
    )
    router.add_api_route(
        "/repositories",
        as_endpoint(build_pipeline(handlers.get_repositories, breaker, repositories_cache)),
        methods=["GET"],
        name="get_github_repositories",
    )

    issues_cache = ResponseCacheInterceptor(
        store,
        GOOD_FIRST_ISSUES_CODEC,
        ttl=config.issues_cache_ttl,
        path_prefix=prefix,
        metrics=metrics,
    )
    router.add_api_route(
        "/repositories/{repo}/good-first-issues",
        as_endpoint(build_pipeline(handlers.get_repository_good_first_issues, breaker, issues_cache)),
        methods=["GET"],
        name="get_github_repository_good_first_issues",
    )

    return router
