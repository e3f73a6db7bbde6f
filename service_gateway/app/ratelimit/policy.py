"""
Upstream rate limit policy.

Turns the rate limit headers of an upstream response into a cooldown: the
number of seconds during which the gateway must not call that upstream route
again. Follows the GitHub guidance for handling rate limit errors:
https://docs.github.com/en/rest/using-the-rest-api/best-practices-for-using-the-rest-api#handle-rate-limit-errors-appropriately
"""

import time
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional

RETRY_AFTER_HEADER = "retry-after"
RATELIMIT_REMAINING_HEADER = "x-ratelimit-remaining"
RATELIMIT_RESET_HEADER = "x-ratelimit-reset"

RATE_LIMIT_HEADERS = (RETRY_AFTER_HEADER, RATELIMIT_REMAINING_HEADER, RATELIMIT_RESET_HEADER)

DEFAULT_COOLDOWN_SECONDS = 600


def _parse_int(value: Optional[str]) -> Optional[int]:
    if value is None:
        return None
    try:
        return int(value.strip())
    except ValueError:
        return None


def _lowercase(headers: Mapping[str, str]) -> Dict[str, str]:
    return {name.lower(): value for name, value in headers.items()}


@dataclass(frozen=True)
class RateLimitSignal:
    """Rate limit information carried by an upstream response.

    Attributes:
        retry_after: Seconds to wait before the next request.
        remaining: Requests left in the current window.
        reset_epoch_seconds: UTC epoch second at which the window resets.
    """

    retry_after: Optional[int] = None
    remaining: Optional[int] = None
    reset_epoch_seconds: Optional[int] = None

    @classmethod
    def from_headers(cls, headers: Mapping[str, str]) -> "RateLimitSignal":
        """Parse the signal. Missing or non-numeric headers become ``None``."""
        lowered = _lowercase(headers)
        return cls(
            retry_after=_parse_int(lowered.get(RETRY_AFTER_HEADER)),
            remaining=_parse_int(lowered.get(RATELIMIT_REMAINING_HEADER)),
            reset_epoch_seconds=_parse_int(lowered.get(RATELIMIT_RESET_HEADER)),
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def cooldown_seconds(signal: RateLimitSignal, now: Optional[float] = None) -> int:
    """Seconds to block the route. Zero or negative means not rate limited."""
    # retry-after is already expressed in seconds
    if signal.retry_after is not None:
        return signal.retry_after

    # Without x-ratelimit-remaining the window is treated as unlimited.
    if signal.remaining is None or signal.remaining > 0:
        return 0

    if not signal.reset_epoch_seconds:
        return 0

    now = time.time() if now is None else now
    try:
        reset_at = datetime.fromtimestamp(signal.reset_epoch_seconds, tz=timezone.utc)
        current = datetime.fromtimestamp(now, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        return DEFAULT_COOLDOWN_SECONDS

    return int((reset_at - current).total_seconds())


def is_limited(signal: RateLimitSignal, now: Optional[float] = None) -> bool:
    return cooldown_seconds(signal, now=now) > 0
