"""
Upstream rate limit breaker.

Stops calling an upstream route once it has answered with an active rate limit,
until the computed cooldown elapses. The only state is a sentinel key in the
shared store whose TTL is the cooldown, so every worker sees the same block.
"""

import time
from typing import Callable, Dict, Mapping, Optional

from fastapi import Request, Response
from fastapi.responses import JSONResponse

from shared.errors import RateLimitError, StoreError
from shared.logging import get_logger
from shared.metrics import MetricsCollector

from ..caching.keys import derive_cache_key, rate_limit_key, relative_path
from ..caching.store import KeyValueStore
from ..pipeline import CallNext, route_label
from .policy import RATE_LIMIT_HEADERS, RETRY_AFTER_HEADER, RateLimitSignal, cooldown_seconds

# Upstream statuses that may carry an active rate limit.
RATE_LIMIT_STATUS_CODES = frozenset({403, 429})


def too_many_requests(headers: Optional[Mapping[str, str]] = None) -> Response:
    error = RateLimitError(details={"reason": "upstream_rate_limited"})
    return JSONResponse(
        status_code=error.status_code,
        content=error.to_response().model_dump(),
        headers=dict(headers) if headers else None,
    )


class RateLimitBreaker:
    """Interceptor blocking routes whose upstream is currently rate limited.

    Store failures are surfaced as ``StoreError`` (HTTP 500): the breaker never
    lets traffic through when it cannot tell whether the route is blocked.
    """

    def __init__(
        self,
        store: KeyValueStore,
        *,
        path_prefix: str = "",
        clock: Callable[[], float] = time.time,
        metrics: Optional[MetricsCollector] = None,
    ):
        self.store = store
        self.path_prefix = path_prefix
        self.clock = clock
        self.metrics = metrics
        self.logger = get_logger("gateway.rate_limit_breaker")

    def _count(self, metric_name: str, route: str):
        if self.metrics:
            self.metrics.increment_counter(metric_name, route=route)

    async def __call__(self, request: Request, call_next: CallNext) -> Response:
        path = relative_path(request.url.path, self.path_prefix)
        # Raises ValidationError for requests with no path or query, before any store access.
        derive_cache_key(path, request.url.query)
        key = rate_limit_key(path)
        route = route_label(request, self.path_prefix)

        try:
            blocked = await self.store.exists(key)
        except StoreError as exc:
            self.logger.error("Rate limit check failed", key=key, error=exc.message)
            raise

        if blocked:
            self.logger.warning("Upstream route rate limited, request blocked", key=key)
            self._count("rate_limit_blocks_total", route)
            return too_many_requests()

        response = await call_next(request)

        if response.status_code not in RATE_LIMIT_STATUS_CODES:
            return response

        signal = RateLimitSignal.from_headers(response.headers)
        cooldown = cooldown_seconds(signal, now=self.clock())
        if cooldown <= 0:
            return response

        try:
            await self.store.set(key, {"cooldown_seconds": cooldown}, ttl=cooldown)
        except StoreError as exc:
            self.logger.error("Could not record rate limit window", key=key, error=exc.message)
            raise

        self.logger.warning(
            "Upstream rate limit recorded",
            key=key,
            status_code=response.status_code,
            cooldown_seconds=cooldown,
            signal=signal.to_dict(),
        )
        self._count("rate_limit_windows_total", route)
        return too_many_requests(self._forwarded_headers(response, cooldown))

    @staticmethod
    def _forwarded_headers(response: Response, cooldown: int) -> Dict[str, str]:
        headers = {
            name: response.headers[name]
            for name in RATE_LIMIT_HEADERS
            if name in response.headers
        }
        headers[RETRY_AFTER_HEADER] = str(cooldown)
        return headers
