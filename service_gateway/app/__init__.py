"""
GitHub cache gateway service package.

The gateway fronts the GitHub REST API and protects it with two per-route
interceptors:
- Rate limit breaker: blocks a route while GitHub has it rate limited
- Response cache: serves repeated requests from the shared key-value store

Structure:
- app.main: FastAPI app and service wiring.
- app.pipeline: Interceptor chaining.
- app.adapters: HTTP client for the GitHub API.
- app.caching: Key derivation, store adapters, payload codecs and the response cache.
- app.ratelimit: Rate limit policy and breaker.
- app.github: Models, handlers and router for the GitHub routes.
"""
