"""
Gateway caching package.

Provides key derivation, key-value store adapters (Redis and in-process),
payload codecs and the response cache interceptor. Entries expire through
their TTL only; there is no explicit invalidation.
"""
