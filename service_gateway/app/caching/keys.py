"""
Store key derivation for cached responses and rate limit sentinels.

Keys are built from the request path relative to the router mount point and
the raw query string:

    GET /api/v1/github/repositories?page=3&per_page=10  (mounted at /api/v1/github)
    -> repositories:page=3:per_page=10

Query tokens are sorted as raw ``name=value`` strings, so the same set of
parameters always yields the same key regardless of the order the client sent
them in.
"""

from shared.errors import ValidationError

KEY_DELIMITER = ":"
RATE_LIMIT_KEY_PREFIX = "errors:rate_limit"


def relative_path(path: str, prefix: str = "") -> str:
    """Strip the router mount prefix from a request path."""
    prefix = prefix.rstrip("/")
    if prefix and (path == prefix or path.startswith(prefix + "/")):
        return path[len(prefix):]
    return path


def path_key(path: str) -> str:
    """Convert a URL path into its colon-delimited key form."""
    return path.replace("/", KEY_DELIMITER).strip(KEY_DELIMITER)


def derive_cache_key(path: str, query: str = "") -> str:
    """Build the cache key for a path and raw query string.

    Raises:
        ValidationError: when neither the path nor the query identify anything.
    """
    tokens = sorted(token for token in (query or "").split("&") if token)
    pieces = [path_key(path or "")] + tokens
    key = KEY_DELIMITER.join(piece for piece in pieces if piece).strip(KEY_DELIMITER)

    if not key:
        raise ValidationError(
            "Request has no path segments or query parameters to identify it",
            details={"path": path, "query": query},
        )
    return key


def rate_limit_key(path: str) -> str:
    """Build the rate limit sentinel key for a route. Query parameters are ignored."""
    route = path_key(path or "")
    if not route:
        return RATE_LIMIT_KEY_PREFIX
    return f"{RATE_LIMIT_KEY_PREFIX}{KEY_DELIMITER}{route}"
