"""
Adapters package for the Gateway Service.

Contains the HTTP client wrapper for the GitHub API. Adapters encapsulate:

- Base URLs, default headers and request shapes
- Mapping of upstream payloads to gateway models
- Error handling that maps to shared errors

Keep adapters thin and side-effect free outside of explicit calls.
"""
