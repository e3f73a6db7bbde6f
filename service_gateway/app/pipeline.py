"""
Interceptor chaining for gateway routes.

An interceptor is an async callable ``(request, call_next) -> response``, the
same shape as a Starlette HTTP middleware, but bound to a single route so each
route can carry its own cache codec and TTL. ``build_pipeline`` wraps a route
handler so interceptors run outermost-first:

    build_pipeline(handler, breaker, cache)
    # request -> breaker -> cache -> handler -> cache -> breaker -> response
"""

from typing import Awaitable, Callable

from fastapi import Request, Response

from .caching.keys import relative_path

CallNext = Callable[[Request], Awaitable[Response]]
Interceptor = Callable[[Request, CallNext], Awaitable[Response]]


def _bind(interceptor: Interceptor, call_next: CallNext) -> CallNext:
    async def call(request: Request) -> Response:
        return await interceptor(request, call_next)

    return call


def build_pipeline(handler: CallNext, *interceptors: Interceptor) -> CallNext:
    """Compose interceptors around a handler, first interceptor outermost."""
    call = handler
    for interceptor in reversed(interceptors):
        call = _bind(interceptor, call)
    return call


def as_endpoint(pipeline: CallNext) -> CallNext:
    """Expose a pipeline as a FastAPI endpoint taking the raw request."""

    async def endpoint(request: Request) -> Response:
        return await pipeline(request)

    return endpoint


def route_label(request: Request, prefix: str = "") -> str:
    """Route template for metric labels, e.g. ``/repositories/{repo}/good-first-issues``.

    Falls back to the request path when no route has been matched.
    """
    route = request.scope.get("route")
    path = getattr(route, "path", None) or request.url.path
    return relative_path(path, prefix)
