"""
Unit tests for store key derivation.
"""

import pytest

from service_gateway.app.caching.keys import (
    derive_cache_key,
    path_key,
    rate_limit_key,
    relative_path,
)
from shared.errors import ValidationError


class TestDeriveCacheKey:
    """Test cases for derive_cache_key."""

    def test_path_and_query(self):
        assert derive_cache_key("/repositories", "per_page=10&page=3") == "repositories:page=3:per_page=10"

    def test_query_order_does_not_matter(self):
        first = derive_cache_key("/repositories", "page=3&per_page=10")
        second = derive_cache_key("/repositories", "per_page=10&page=3")

        assert first == second

    def test_different_values_give_different_keys(self):
        assert derive_cache_key("/repositories", "page=1") != derive_cache_key("/repositories", "page=2")

    def test_different_paths_give_different_keys(self):
        assert derive_cache_key("/repositories", "page=1") != derive_cache_key("/repositories/rust", "page=1")

    def test_nested_path(self):
        key = derive_cache_key("/repositories/rust/good-first-issues", "owner=rust-lang")

        assert key == "repositories:rust:good-first-issues:owner=rust-lang"

    def test_path_only(self):
        assert derive_cache_key("/repositories/") == "repositories"

    def test_query_only(self):
        assert derive_cache_key("/", "page=1") == "page=1"

    def test_empty_query_tokens_are_dropped(self):
        assert derive_cache_key("/repositories", "page=1&&per_page=5&") == "repositories:page=1:per_page=5"

    def test_tokens_sort_as_raw_strings(self):
        # "page=10" < "page=2" lexicographically
        assert derive_cache_key("/r", "page=2&page=10") == "r:page=10:page=2"

    @pytest.mark.parametrize("path,query", [("", ""), ("/", ""), ("///", "&&")])
    def test_empty_key_is_rejected(self, path, query):
        with pytest.raises(ValidationError) as exc_info:
            derive_cache_key(path, query)

        assert exc_info.value.status_code == 400


class TestRelativePath:
    """Test cases for relative_path and path_key."""

    def test_strips_prefix(self):
        assert relative_path("/api/v1/github/repositories", "/api/v1/github") == "/repositories"

    def test_prefix_with_trailing_slash(self):
        assert relative_path("/api/v1/github/repositories", "/api/v1/github/") == "/repositories"

    def test_prefix_must_match_whole_segment(self):
        assert relative_path("/api/v1/githubber/repositories", "/api/v1/github") == "/api/v1/githubber/repositories"

    def test_no_prefix(self):
        assert relative_path("/repositories") == "/repositories"

    def test_path_key(self):
        assert path_key("/repositories/rust/good-first-issues/") == "repositories:rust:good-first-issues"


class TestRateLimitKey:
    """Test cases for rate_limit_key."""

    def test_sentinel_key(self):
        assert rate_limit_key("/repositories") == "errors:rate_limit:repositories"

    def test_nested_route(self):
        key = rate_limit_key("/repositories/rust/good-first-issues")

        assert key == "errors:rate_limit:repositories:rust:good-first-issues"

    def test_empty_path(self):
        assert rate_limit_key("/") == "errors:rate_limit"
