"""
Unit tests for the upstream rate limit policy.
"""

import time

import pytest

from service_gateway.app.ratelimit.policy import (
    DEFAULT_COOLDOWN_SECONDS,
    RateLimitSignal,
    cooldown_seconds,
    is_limited,
)

NOW = 1_700_000_000


class TestRateLimitSignal:
    """Test cases for header parsing."""

    def test_from_headers(self):
        signal = RateLimitSignal.from_headers({
            "retry-after": "30",
            "x-ratelimit-remaining": "0",
            "x-ratelimit-reset": str(NOW + 60),
        })

        assert signal == RateLimitSignal(retry_after=30, remaining=0, reset_epoch_seconds=NOW + 60)

    def test_header_names_are_case_insensitive(self):
        signal = RateLimitSignal.from_headers({"Retry-After": "5", "X-RateLimit-Remaining": "12"})

        assert signal.retry_after == 5
        assert signal.remaining == 12

    def test_missing_headers(self):
        assert RateLimitSignal.from_headers({}) == RateLimitSignal()

    def test_non_numeric_headers_are_absent(self):
        signal = RateLimitSignal.from_headers({
            "retry-after": "Wed, 21 Oct 2015 07:28:00 GMT",
            "x-ratelimit-remaining": "lots",
            "x-ratelimit-reset": "",
        })

        assert signal == RateLimitSignal()

    def test_to_dict(self):
        signal = RateLimitSignal(remaining=0, reset_epoch_seconds=NOW)

        assert signal.to_dict() == {"retry_after": None, "remaining": 0, "reset_epoch_seconds": NOW}


class TestCooldownSeconds:
    """Test cases for cooldown_seconds and is_limited."""

    def test_retry_after_wins(self):
        signal = RateLimitSignal(retry_after=10, remaining=0, reset_epoch_seconds=NOW + 3600)

        assert cooldown_seconds(signal, now=NOW) == 10
        assert is_limited(signal, now=NOW)

    def test_retry_after_only(self):
        assert cooldown_seconds(RateLimitSignal(retry_after=10)) == 10

    def test_zero_retry_after_is_not_limited(self):
        signal = RateLimitSignal(retry_after=0, remaining=0, reset_epoch_seconds=NOW + 60)

        assert cooldown_seconds(signal, now=NOW) == 0
        assert not is_limited(signal, now=NOW)

    def test_requests_remaining(self):
        signal = RateLimitSignal(remaining=10, reset_epoch_seconds=NOW + 60)

        assert cooldown_seconds(signal, now=NOW) == 0
        assert not is_limited(signal, now=NOW)

    def test_missing_remaining_is_unlimited(self):
        assert cooldown_seconds(RateLimitSignal(reset_epoch_seconds=NOW + 60), now=NOW) == 0

    def test_exhausted_without_reset(self):
        assert cooldown_seconds(RateLimitSignal(remaining=0), now=NOW) == 0

    def test_exhausted_with_zero_reset(self):
        assert cooldown_seconds(RateLimitSignal(remaining=0, reset_epoch_seconds=0), now=NOW) == 0

    def test_exhausted_until_reset(self):
        signal = RateLimitSignal(remaining=0, reset_epoch_seconds=NOW + 86400)

        assert cooldown_seconds(signal, now=NOW + 0.5) == 86399
        assert is_limited(signal, now=NOW)

    def test_exhausted_until_reset_wall_clock(self):
        signal = RateLimitSignal(remaining=0, reset_epoch_seconds=int(time.time()) + 86400)

        assert 86390 <= cooldown_seconds(signal) <= 86400

    def test_reset_in_the_past(self):
        signal = RateLimitSignal(remaining=0, reset_epoch_seconds=NOW - 30)

        assert cooldown_seconds(signal, now=NOW) == -30
        assert not is_limited(signal, now=NOW)

    @pytest.mark.parametrize("reset", [10 ** 20, -(10 ** 20)])
    def test_unrepresentable_reset_falls_back_to_default(self, reset):
        signal = RateLimitSignal(remaining=0, reset_epoch_seconds=reset)

        assert cooldown_seconds(signal, now=NOW) == DEFAULT_COOLDOWN_SECONDS
