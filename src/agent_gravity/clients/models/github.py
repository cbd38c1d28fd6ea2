from datetime import datetime
from typing import Literal, Self

from githubkit.versions.v2022_11_28.models import Commit as GitHubKitCommit
from githubkit.versions.v2022_11_28.models import (
    FullRepository as GitHubKitFullRepository,
)
from githubkit.versions.v2022_11_28.models import PullRequestSimple as GitHubKitPullRequestSimple
from pydantic import BaseModel, ConfigDict, Field

from agent_gravity.servers.shared.utility import decode_content

UNKNOWN_AUTHOR = "unknown"


class Repository(BaseModel):
    """A repository."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    owner: str = Field(description="The login of the owner of the repository.")
    name: str = Field(description="The name of the repository.")
    full_name: str = Field(description="The owner and name of the repository, e.g. `octocat/hello-world`.")
    description: str | None = Field(description="The description of the repository.")
    url: str = Field(description="The URL of the repository.")
    default_branch: str = Field(description="The default branch of the repository.")
    archived: bool = Field(description="Whether the repository is archived.")
    pushed_at: datetime = Field(description="The date and time the repository was pushed to.")

    @classmethod
    def from_full_repository(cls, full_repository: GitHubKitFullRepository) -> Self:
        return cls(
            owner=full_repository.owner.login,
            name=full_repository.name,
            full_name=full_repository.full_name,
            description=full_repository.description,
            url=full_repository.url,
            default_branch=full_repository.default_branch,
            archived=full_repository.archived,
            pushed_at=full_repository.pushed_at,
        )


class RepositoryFileWithContent(BaseModel):
    """A file with its path and decoded text content."""

    path: str = Field(description="The path of the file.")
    content: str = Field(description="The decoded content of the file.")

    @classmethod
    def from_encoded_content(cls, path: str, encoded_content: str) -> Self:
        return cls(path=path, content=decode_content(encoded_content))


def _int_or_none(value: object) -> int | None:
    # githubkit leaves absent fields as UNSET rather than None
    return value if isinstance(value, int) else None


class CommitSummary(BaseModel):
    """A commit from the repository's history."""

    sha: str = Field(description="The SHA of the commit.")
    message: str = Field(description="The full commit message.")
    author: str = Field(description="The name of the commit author, or their login when the name is unavailable.")
    authored_at: datetime | None = Field(default=None, description="When the commit was authored.")
    additions: int | None = Field(default=None, description="Lines added, when GitHub reports it.")
    deletions: int | None = Field(default=None, description="Lines deleted, when GitHub reports it.")
    files_changed: int | None = Field(default=None, description="Files changed, when GitHub reports it.")

    @property
    def title(self) -> str:
        return self.message.split("\n")[0]

    @classmethod
    def from_commit(cls, commit: GitHubKitCommit) -> Self:
        git_author = commit.commit.author

        author_name: str | None = git_author.name if git_author is not None and isinstance(git_author.name, str) else None
        if author_name is None:
            author_name = getattr(commit.author, "login", None)

        authored_at: datetime | None = None
        if git_author is not None and isinstance(git_author.date, datetime):
            authored_at = git_author.date

        files = commit.files if isinstance(commit.files, list) else None

        return cls(
            sha=commit.sha,
            message=commit.commit.message,
            author=author_name or UNKNOWN_AUTHOR,
            authored_at=authored_at,
            additions=_int_or_none(getattr(commit.stats, "additions", None)),
            deletions=_int_or_none(getattr(commit.stats, "deletions", None)),
            files_changed=len(files) if files is not None else None,
        )


class PullRequestSummary(BaseModel):
    """A pull request from the repository."""

    number: int = Field(description="The number of the pull request.")
    title: str = Field(description="The title of the pull request.")
    body: str = Field(default="", description="The body of the pull request.")
    state: Literal["open", "closed"] | str = Field(description="The state of the pull request.")
    author: str = Field(description="The login of the pull request author.")
    created_at: datetime = Field(description="When the pull request was opened.")
    updated_at: datetime = Field(description="When the pull request was last updated.")
    merged_at: datetime | None = Field(default=None, description="When the pull request was merged, if it was.")

    @classmethod
    def from_pull_request_simple(cls, pull_request: GitHubKitPullRequestSimple) -> Self:
        return cls(
            number=pull_request.number,
            title=pull_request.title,
            body=pull_request.body or "",
            state=pull_request.state,
            author=pull_request.user.login if pull_request.user else UNKNOWN_AUTHOR,
            created_at=pull_request.created_at,
            updated_at=pull_request.updated_at,
            merged_at=pull_request.merged_at,
        )
