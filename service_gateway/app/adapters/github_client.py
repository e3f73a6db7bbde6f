"""
GitHub REST API client for the gateway.
"""

from typing import Any, Dict, Mapping, Optional

import httpx

from shared.errors import ExternalServiceError
from shared.logging import get_logger

from ..github.models import (
    GetGithubRepositoriesResponse,
    GetGithubRepositoryGoodFirstIssuesResponse,
    GithubApiErrorPayload,
    GithubIssue,
    GithubIssueAPI,
    GithubRepository,
    SearchGithubRepositoriesResponseAPI,
)

SERVICE_NAME = "github"


class GithubAPIError(ExternalServiceError):
    """Non-success answer from the GitHub API.

    Keeps the upstream status and headers so the gateway can pass them on
    (the rate limit breaker reads them).
    """

    def __init__(self, upstream_status: int, headers: Mapping[str, str], message: str):
        self.upstream_status = upstream_status
        self.headers = dict(headers)
        super().__init__(
            SERVICE_NAME,
            message,
            details={"status_code": upstream_status},
        )


class GithubClient:
    """Thin async client over the GitHub search and issues endpoints."""

    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        *,
        api_version: str = "2022-11-28",
        user_agent: str = "github-cache-gateway",
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip('/')
        self.logger = get_logger("gateway.github_client")

        headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": api_version,
            "User-Agent": user_agent,
        }
        if token:
            headers["Authorization"] = f"Bearer {token}"

        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            headers=headers,
            timeout=timeout,
            transport=transport,
        )

    async def search_rust_repositories(self, per_page: int, page: int) -> GetGithubRepositoriesResponse:
        """Rust repositories ordered by number of help-wanted issues."""
        params = {
            "q": "language:rust",
            "sort": "help-wanted-issues",
            "order": "desc",
            "per_page": per_page,
            "page": page,
        }
        data = await self._get("/search/repositories", params)
        result = SearchGithubRepositoriesResponseAPI.model_validate(data)

        return GetGithubRepositoriesResponse(
            total_count=result.total_count,
            items=[GithubRepository.from_api(repo) for repo in result.items],
        )

    async def get_good_first_issues(
        self,
        owner: str,
        repo: str,
        per_page: int,
        page: int,
    ) -> GetGithubRepositoryGoodFirstIssuesResponse:
        """Open issues labelled "good first issue", most recently updated first."""
        params = {
            "labels": "good first issue",
            "sort": "updated",
            "direction": "desc",
            "per_page": per_page,
            "page": page,
        }
        data = await self._get(f"/repos/{owner}/{repo}/issues", params)
        issues = [GithubIssueAPI.model_validate(item) for item in data]

        return GetGithubRepositoryGoodFirstIssuesResponse(
            items=[GithubIssue.from_api(issue) for issue in issues],
        )

    async def _get(self, path: str, params: Dict[str, Any]) -> Any:
        try:
            response = await self._client.get(path, params=params)
        except httpx.HTTPError as exc:
            self.logger.error("GitHub request failed", path=path, error=str(exc))
            raise ExternalServiceError(SERVICE_NAME, str(exc), details={"path": path}) from exc

        if response.is_success:
            self.logger.debug("GitHub response received", path=path, status_code=response.status_code)
            return response.json()

        raise self._parse_error(response)

    def _parse_error(self, response: httpx.Response) -> GithubAPIError:
        try:
            message = GithubApiErrorPayload.model_validate(response.json()).message
        except ValueError:
            message = response.text or response.reason_phrase

        self.logger.warning(
            "GitHub API error",
            url=str(response.request.url),
            status_code=response.status_code,
            message=message,
        )
        return GithubAPIError(response.status_code, response.headers, message)

    async def close(self):
        await self._client.aclose()
