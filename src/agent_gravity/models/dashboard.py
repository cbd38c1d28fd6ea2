from datetime import UTC, datetime
from typing import Any, Literal, Self
from uuid import uuid4

from pydantic import BaseModel, Field

from agent_gravity.clients.models.github import CommitSummary, PullRequestSummary
from agent_gravity.clients.models.github import Repository as GitHubRepository
from agent_gravity.models.roles import AgentRoleSpec


def new_id() -> str:
    return str(uuid4())


def utc_now() -> datetime:
    return datetime.now(tz=UTC)


class Repository(BaseModel):
    """A GitHub repository attached to the dashboard."""

    id: str = Field(default_factory=new_id)
    owner: str
    name: str
    full_name: str
    description: str | None = None
    default_branch: str | None = None
    last_analyzed_at: datetime | None = None
    gravity_score: int | None = None
    total_prs: int | None = None
    total_commits: int | None = None
    created_at: datetime = Field(default_factory=utc_now)

    @classmethod
    def from_github_repository(cls, github_repository: GitHubRepository) -> Self:
        return cls(
            owner=github_repository.owner,
            name=github_repository.name,
            full_name=github_repository.full_name,
            description=github_repository.description or None,
            default_branch=github_repository.default_branch,
        )


class AgentRole(AgentRoleSpec):
    """An agent role stored against a repository."""

    id: str = Field(default_factory=new_id)
    repository_id: str
    plan_count: int | None = None
    pr_count: int | None = None
    last_active_at: datetime | None = None
    created_at: datetime = Field(default_factory=utc_now)

    @classmethod
    def from_spec(cls, repository_id: str, spec: AgentRoleSpec) -> Self:
        return cls(
            **spec.model_dump(),  # pyright: ignore[reportAny]
            repository_id=repository_id,
            plan_count=spec.count_plans(),
            last_active_at=spec.latest_file_date(),
        )


class ActivityEvent(BaseModel):
    """A commit or pull request collected for an analysis."""

    id: str = Field(default_factory=new_id)
    repository_id: str | None = None
    agent_role_id: str | None = None
    type: Literal["commit", "pull_request"]
    title: str
    description: str | None = None
    sha: str | None = None
    pr_number: int | None = None
    author: str | None = None
    files_changed: int | None = None
    additions: int | None = None
    deletions: int | None = None
    created_at: datetime = Field(default_factory=utc_now)

    @classmethod
    def from_commit(cls, commit: CommitSummary) -> Self:
        return cls(
            type="commit",
            title=commit.title,
            description=commit.message,
            sha=commit.sha,
            author=commit.author,
            files_changed=commit.files_changed or 0,
            additions=commit.additions or 0,
            deletions=commit.deletions or 0,
            created_at=commit.authored_at or utc_now(),
        )

    @classmethod
    def from_pull_request(cls, pull_request: PullRequestSummary) -> Self:
        return cls(
            type="pull_request",
            title=pull_request.title,
            description=pull_request.body,
            pr_number=pull_request.number,
            author=pull_request.author,
            created_at=pull_request.updated_at,
        )


class AnalysisResult(BaseModel):
    """The outcome of one analysis of a repository's activity."""

    id: str = Field(default_factory=new_id)
    repository_id: str
    type: str
    summary: str
    details: dict[str, Any] | None = None
    score: int | None = None
    created_at: datetime = Field(default_factory=utc_now)
