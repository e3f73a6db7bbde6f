"""
GitHub payloads: upstream API shapes and the gateway's response models.
"""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field

DEFAULT_PER_PAGE = 10
DEFAULT_PAGE = 1


# Upstream API shapes

class GithubRepositoryOwnerAPI(BaseModel):
    avatar_url: str


class GithubRepositoryLicenseAPI(BaseModel):
    name: str


class GithubRepositoryAPI(BaseModel):
    id: int
    full_name: str
    private: bool
    html_url: str
    description: Optional[str] = None
    stargazers_count: int
    open_issues_count: int
    has_issues: bool
    owner: GithubRepositoryOwnerAPI
    license: Optional[GithubRepositoryLicenseAPI] = None


class SearchGithubRepositoriesResponseAPI(BaseModel):
    total_count: int
    items: List[GithubRepositoryAPI]


class GithubPullRequestAPI(BaseModel):
    html_url: str


class GithubIssueState(str, Enum):
    OPEN = "open"
    CLOSED = "closed"


class GithubIssueAPI(BaseModel):
    id: int
    title: str
    description: Optional[str] = None
    body: Optional[str] = None
    html_url: str
    state: GithubIssueState
    pull_request: Optional[GithubPullRequestAPI] = None


class GithubApiErrorPayload(BaseModel):
    message: str


# Gateway responses

class GithubRepository(BaseModel):
    id: int
    url: str
    name: str
    private: bool
    avatar_url: str
    description: Optional[str] = None
    stars_count: int
    open_issues_count: int
    has_issues: bool
    license: Optional[str] = None

    @classmethod
    def from_api(cls, repo: GithubRepositoryAPI) -> "GithubRepository":
        return cls(
            id=repo.id,
            url=repo.html_url,
            name=repo.full_name,
            private=repo.private,
            avatar_url=repo.owner.avatar_url,
            description=repo.description,
            stars_count=repo.stargazers_count,
            open_issues_count=repo.open_issues_count,
            has_issues=repo.has_issues,
            license=repo.license.name if repo.license else None,
        )


class GithubPullRequest(BaseModel):
    url: str


class GithubIssue(BaseModel):
    id: int
    title: str
    description: Optional[str] = None
    body: Optional[str] = None
    url: str
    state: GithubIssueState
    pull_request: Optional[GithubPullRequest] = None

    @classmethod
    def from_api(cls, issue: GithubIssueAPI) -> "GithubIssue":
        return cls(
            id=issue.id,
            title=issue.title,
            description=issue.description,
            body=issue.body,
            url=issue.html_url,
            state=issue.state,
            pull_request=GithubPullRequest(url=issue.pull_request.html_url) if issue.pull_request else None,
        )


class GetGithubRepositoriesResponse(BaseModel):
    total_count: int
    items: List[GithubRepository]


class GetGithubRepositoryGoodFirstIssuesResponse(BaseModel):
    items: List[GithubIssue]


# Request parameters

class GetGithubRepositoriesParams(BaseModel):
    per_page: int = Field(default=DEFAULT_PER_PAGE, ge=1, le=100)
    page: int = Field(default=DEFAULT_PAGE, ge=1)


class GetGithubRepositoryGoodFirstIssuesParams(BaseModel):
    owner: str = Field(min_length=1)
    per_page: int = Field(default=DEFAULT_PER_PAGE, ge=1, le=100)
    page: int = Field(default=DEFAULT_PAGE, ge=1)
