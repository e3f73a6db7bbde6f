"""
Rate limiting package for the Gateway.

Holds the upstream rate limit policy (cooldown computed from GitHub rate
limit headers) and the breaker interceptor that blocks a route until the
cooldown elapses.
"""
