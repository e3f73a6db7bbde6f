"""
Route handlers calling the GitHub API.

Handlers are the innermost stage of each route pipeline. Upstream failures are
returned as responses, not raised, so the cache and the rate limit breaker can
inspect the upstream status and headers.
"""

from typing import Type, TypeVar

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from shared.errors import ExternalServiceError, ValidationError, validation_errors

from ..adapters.github_client import GithubAPIError, GithubClient
from ..caching.codec import PayloadCodec
from ..ratelimit.policy import RATE_LIMIT_HEADERS
from .models import (
    GetGithubRepositoriesParams,
    GetGithubRepositoriesResponse,
    GetGithubRepositoryGoodFirstIssuesParams,
    GetGithubRepositoryGoodFirstIssuesResponse,
)

P = TypeVar("P", bound=BaseModel)

REPOSITORIES_CODEC = PayloadCodec(GetGithubRepositoriesResponse)
GOOD_FIRST_ISSUES_CODEC = PayloadCodec(GetGithubRepositoryGoodFirstIssuesResponse)


def parse_params(model: Type[P], request: Request) -> P:
    """Validate query parameters against a model."""
    try:
        return model.model_validate(dict(request.query_params))
    except PydanticValidationError as exc:
        raise ValidationError(
            "Invalid query parameters",
            details={"errors": validation_errors(exc)},
        ) from exc


def upstream_error_response(exc: ExternalServiceError) -> Response:
    """Turn an upstream failure into a response.

    GitHub API errors keep their status and only the rate limit headers; transport
    failures become 502.
    """
    if isinstance(exc, GithubAPIError):
        headers = {
            name: exc.headers[name]
            for name in RATE_LIMIT_HEADERS
            if name in exc.headers
        }
        return JSONResponse(
            status_code=exc.upstream_status,
            content=exc.to_response().model_dump(),
            headers=headers,
        )

    return JSONResponse(status_code=exc.status_code, content=exc.to_response().model_dump())


class GithubHandlers:
    """Handlers for the GitHub routes."""

    def __init__(self, client: GithubClient):
        self.client = client

    async def get_repositories(self, request: Request) -> Response:
        params = parse_params(GetGithubRepositoriesParams, request)
        try:
            result = await self.client.search_rust_repositories(params.per_page, params.page)
        except ExternalServiceError as exc:
            return upstream_error_response(exc)

        return REPOSITORIES_CODEC.render(result)

    async def get_repository_good_first_issues(self, request: Request) -> Response:
        params = parse_params(GetGithubRepositoryGoodFirstIssuesParams, request)
        repo = request.path_params["repo"]
        try:
            result = await self.client.get_good_first_issues(params.owner, repo, params.per_page, params.page)
        except ExternalServiceError as exc:
            return upstream_error_response(exc)

        return GOOD_FIRST_ISSUES_CODEC.render(result)
