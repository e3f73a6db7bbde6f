"""
Response cache interceptor.

Serves previously seen successful responses from the key-value store and
stores new ones. The cache is best-effort: when the store cannot be reached
the request is forwarded upstream and nothing is cached.
"""

from typing import Generic, List, Optional, Tuple, TypeVar

from fastapi import Request, Response

from shared.errors import SerializationError, StoreError
from shared.logging import get_logger
from shared.metrics import MetricsCollector

from ..pipeline import CallNext, route_label
from .codec import PayloadCodec
from .keys import derive_cache_key, relative_path
from .store import KeyNotFoundError, KeyValueStore

T = TypeVar("T")

CACHE_CONTROL_HEADER = "Cache-Control"


def cache_control(ttl: int) -> str:
    return f"max-age={ttl}"


def is_error_status(status_code: int) -> bool:
    return status_code >= 400


async def read_body(response: Response) -> bytes:
    """Buffer the full body of a response, draining streaming bodies."""
    body_iterator = getattr(response, "body_iterator", None)
    if body_iterator is None:
        return bytes(response.body)

    chunks: List[bytes] = []
    async for chunk in body_iterator:
        chunks.append(chunk.encode(response.charset) if isinstance(chunk, str) else bytes(chunk))
    return b"".join(chunks)


def replay(response: Response, body: bytes) -> Response:
    """Rebuild a response around an already-buffered body, keeping status and headers."""
    replayed = Response(content=body, status_code=response.status_code)
    raw_headers: List[Tuple[bytes, bytes]] = [
        (name, value) for name, value in response.raw_headers if name.lower() != b"content-length"
    ]
    raw_headers.append((b"content-length", str(len(body)).encode("latin-1")))
    replayed.raw_headers = raw_headers
    replayed.background = response.background
    return replayed


class ResponseCacheInterceptor(Generic[T]):
    """Cache successful responses of one route under their path and query key.

    Args:
        store: Shared key-value store.
        codec: Codec for the payload type the route returns.
        ttl: Seconds to keep entries. ``None`` or ``0`` stores without expiry.
        path_prefix: Router mount prefix stripped before deriving keys.
        metrics: Optional collector for hit/miss counters.
    """

    def __init__(
        self,
        store: KeyValueStore,
        codec: PayloadCodec[T],
        *,
        ttl: Optional[int] = None,
        path_prefix: str = "",
        metrics: Optional[MetricsCollector] = None,
    ):
        self.store = store
        self.codec = codec
        self.ttl = ttl if ttl else None
        self.path_prefix = path_prefix
        self.metrics = metrics
        self.logger = get_logger("gateway.response_cache")

    def _count(self, metric_name: str, route: str, **labels):
        if self.metrics:
            self.metrics.increment_counter(metric_name, route=route, **labels)

    async def __call__(self, request: Request, call_next: CallNext) -> Response:
        key = derive_cache_key(relative_path(request.url.path, self.path_prefix), request.url.query)
        route = route_label(request, self.path_prefix)

        try:
            cached = await self._load(key)
        except StoreError as exc:
            self.logger.warning("Cache unavailable, forwarding upstream", key=key, error=exc.message)
            self._count("cache_errors_total", route, operation="read")
            return await call_next(request)
        except SerializationError as exc:
            # Unreadable entries are refetched and overwritten.
            self.logger.warning("Discarding unreadable cache entry", key=key, error=exc.message)
            self._count("cache_errors_total", route, operation="decode")
            cached = None

        if cached is not None:
            self._count("cache_hits_total", route)
            return cached

        self._count("cache_misses_total", route)
        response = await call_next(request)

        if is_error_status(response.status_code):
            self.logger.debug("Upstream error not cached", key=key, status_code=response.status_code)
            return response

        return await self._store_and_respond(key, route, response)

    async def _load(self, key: str) -> Optional[Response]:
        """Build the response for a stored entry, or ``None`` on a miss."""
        if not await self.store.exists(key):
            return None

        try:
            value = await self.store.get(key)
        except KeyNotFoundError:
            # Expired between the existence check and the read.
            return None

        payload = self.codec.from_store(value)

        headers = {}
        try:
            remaining = await self.store.ttl(key)
        except StoreError as exc:
            self.logger.warning("Could not read cache TTL", key=key, error=exc.message)
            remaining = 0
        if remaining > 0:
            headers[CACHE_CONTROL_HEADER] = cache_control(remaining)

        self.logger.debug("Cache hit", key=key, ttl=remaining)
        return self.codec.render(payload, status_code=200, headers=headers)

    async def _store_and_respond(self, key: str, route: str, response: Response) -> Response:
        body = await read_body(response)
        payload = self.codec.decode(body)

        try:
            await self.store.set(key, self.codec.to_store(payload), ttl=self.ttl)
        except StoreError as exc:
            self.logger.warning("Could not store response", key=key, error=exc.message)
            self._count("cache_errors_total", route, operation="write")
            return replay(response, body)

        self.logger.info("Cached response", key=key, ttl=self.ttl)
        replayed = replay(response, body)
        if self.ttl:
            replayed.headers[CACHE_CONTROL_HEADER] = cache_control(self.ttl)
        return replayed
