"""
Shared fixtures for Gateway tests.
"""

import json
from typing import Any, Dict, List, Optional, Tuple

import pytest
from fastapi import Request, Response

from service_gateway.app.caching.store import InMemoryStore


class FakeClock:
    """Manually advanced clock."""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


class DummyMetrics:
    """Minimal metrics collector stub."""

    def __init__(self):
        self.counters: List[Tuple[str, Dict[str, Any]]] = []

    def increment_counter(self, metric_name: str, **labels):
        self.counters.append((metric_name, labels))

    def names(self) -> List[str]:
        return [name for name, _ in self.counters]


def make_request(path: str, query: str = "", path_params: Optional[Dict[str, str]] = None) -> Request:
    """Build a bare GET request for interceptor tests."""
    scope = {
        "type": "http",
        "method": "GET",
        "scheme": "http",
        "server": ("testserver", 80),
        "path": path,
        "root_path": "",
        "query_string": query.encode(),
        "headers": [(b"host", b"testserver")],
        "path_params": path_params or {},
    }
    return Request(scope)


def json_response(payload: Any, status_code: int = 200, headers: Optional[Dict[str, str]] = None) -> Response:
    return Response(
        content=json.dumps(payload, separators=(",", ":")).encode(),
        status_code=status_code,
        headers=headers,
        media_type="application/json",
    )


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store(clock):
    return InMemoryStore(clock=clock)


@pytest.fixture
def metrics():
    return DummyMetrics()


@pytest.fixture
def repositories_payload():
    return {
        "total_count": 1,
        "items": [
            {
                "id": 724712,
                "url": "https://github.com/rust-lang/rust",
                "name": "rust-lang/rust",
                "private": False,
                "avatar_url": "https://avatars.githubusercontent.com/u/5430905?v=4",
                "description": "Empowering everyone to build reliable and efficient software.",
                "stars_count": 98000,
                "open_issues_count": 9800,
                "has_issues": True,
                "license": "Other",
            }
        ],
    }


@pytest.fixture
def github_search_payload():
    """Raw GitHub /search/repositories answer."""
    return {
        "total_count": 1,
        "incomplete_results": False,
        "items": [
            {
                "id": 724712,
                "full_name": "rust-lang/rust",
                "private": False,
                "html_url": "https://github.com/rust-lang/rust",
                "description": "Empowering everyone to build reliable and efficient software.",
                "stargazers_count": 98000,
                "open_issues_count": 9800,
                "has_issues": True,
                "owner": {"login": "rust-lang", "avatar_url": "https://avatars.githubusercontent.com/u/5430905?v=4"},
                "license": {"key": "other", "name": "Other"},
            }
        ],
    }


@pytest.fixture
def github_issues_payload():
    """Raw GitHub /repos/{owner}/{repo}/issues answer."""
    return [
        {
            "id": 1,
            "title": "Improve diagnostics for missing lifetimes",
            "body": "Steps to reproduce...",
            "html_url": "https://github.com/rust-lang/rust/issues/1",
            "state": "open",
        },
        {
            "id": 2,
            "title": "Fix typo in docs",
            "body": None,
            "html_url": "https://github.com/rust-lang/rust/pull/2",
            "state": "open",
            "pull_request": {"html_url": "https://github.com/rust-lang/rust/pull/2"},
        },
    ]
