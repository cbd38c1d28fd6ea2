import os
from collections.abc import Awaitable, Callable
from datetime import datetime
from logging import Logger, getLogger
from typing import TYPE_CHECKING, Any, Literal, overload

from githubkit import GitHub as GitHubKit
from githubkit.auth.token import TokenAuthStrategy
from githubkit.exception import GitHubException as GitHubKitGitHubException
from githubkit.exception import RequestFailed as GitHubKitRequestFailed
from githubkit.response import Response as GitHubKitResponse
from githubkit.retry import RetryChainDecision, RetryRateLimit, RetryServerError
from githubkit.versions.v2022_11_28.models import ContentFile as GitHubKitContentFile

from agent_gravity.clients.errors.github import RequestError, ResourceNotFoundError, ResourceTypeMismatchError
from agent_gravity.clients.models.github import CommitSummary, PullRequestSummary, Repository, RepositoryFileWithContent
from agent_gravity.models.repository.tree import RepositoryTree
from agent_gravity.servers.shared.utility import GITHUBKIT_RESPONSE_TYPE, extract_response

if TYPE_CHECKING:
    from githubkit.versions.v2022_11_28.models import Commit as GitHubKitCommit
    from githubkit.versions.v2022_11_28.models import GitTree as GitHubKitGitTree
    from githubkit.versions.v2022_11_28.models import PullRequestSimple as GitHubKitPullRequestSimple

NOT_FOUND_ERROR = 404

GITHUB_TOKEN_ENV_VARS = ("GITHUB_TOKEN", "GITHUB_PERSONAL_ACCESS_TOKEN")

DEFAULT_COMMITS_LIMIT = 100
DEFAULT_PULL_REQUESTS_LIMIT = 50

# GitHub caps every paginated listing at 100 items per page.
MAX_PER_PAGE = 100

MAX_RATE_LIMIT_RETRIES = 3


def get_github_token() -> str:
    for env_var in GITHUB_TOKEN_ENV_VARS:
        if token := os.getenv(env_var):
            return token

    msg = f"One of {', '.join(GITHUB_TOKEN_ENV_VARS)} must be set"
    raise ValueError(msg)


def get_githubkit_client() -> GitHubKit[Any]:
    """A githubkit client that retries server errors and, up to 3 times, rate limited requests."""

    auto_retry = RetryChainDecision(RetryServerError(), RetryRateLimit(max_retry=MAX_RATE_LIMIT_RETRIES))

    return GitHubKit[TokenAuthStrategy](auth=TokenAuthStrategy(token=get_github_token()), auto_retry=auto_retry)


class GitHubGravityClient:
    """Reads repository trees, file contents and history from GitHub.

    Implements the `RepositoryContentProvider` protocol consumed by the agent role scanner."""

    githubkit_client: GitHubKit[Any]
    logger: Logger

    log_requests: bool
    log_responses: bool

    def __init__(
        self,
        githubkit_client: GitHubKit[Any] | None = None,
        logger: Logger | None = None,
        log_requests: bool = True,
        log_responses: bool = False,
    ):
        self.githubkit_client = githubkit_client or get_githubkit_client()
        self.logger = logger or getLogger(__name__)
        self.log_requests = log_requests
        self.log_responses = log_responses

    def _get_loggers(self, quiet: bool = False) -> tuple[Callable[[str], Any], Callable[[str], Any]]:
        request_logger = self.logger.info if self.log_requests and not quiet else self.logger.debug
        response_logger = self.logger.info if self.log_responses and not quiet else self.logger.debug
        return request_logger, response_logger

    @overload
    async def _perform_rest_request[T: GITHUBKIT_RESPONSE_TYPE](
        self,
        action: str,
        quiet: bool = False,
        error_on_not_found: Literal[False] = False,
        *,
        method: Callable[..., Awaitable[GitHubKitResponse[T]]],
        **request_args: Any,  # pyright: ignore[reportAny]
    ) -> T | None: ...

    @overload
    async def _perform_rest_request[T: GITHUBKIT_RESPONSE_TYPE](
        self,
        action: str,
        quiet: bool = False,
        error_on_not_found: Literal[True] = True,
        *,
        method: Callable[..., Awaitable[GitHubKitResponse[T]]],
        **request_args: Any,  # pyright: ignore[reportAny]
    ) -> T: ...

    async def _perform_rest_request[T: GITHUBKIT_RESPONSE_TYPE](
        self,
        action: str,
        quiet: bool = False,
        error_on_not_found: bool = False,
        *,
        method: Callable[..., Awaitable[GitHubKitResponse[T]]],
        **request_args: Any,  # pyright: ignore[reportAny]
    ) -> T | None:
        """Call a githubkit REST method and return its parsed data.

        Args:
            action: What the request does, used in logs and errors.
            quiet: Log the request and response at debug level, for requests issued in large batches.
            error_on_not_found: Raise instead of returning None when GitHub answers 404.

        Raises:
            ResourceNotFoundError: If GitHub answers 404 and error_on_not_found is True.
            RequestError: If the request fails for any other reason.
        """

        request_logger, response_logger = self._get_loggers(quiet=quiet)

        request_logger(f"{action}: calling {method.__name__} with {request_args}")

        try:
            response: GitHubKitResponse[T] = await method(**request_args)
        except GitHubKitRequestFailed as e:
            if e.response.status_code != NOT_FOUND_ERROR:
                self.logger.exception(f"{action}: {method.__name__} failed with status {e.response.status_code}")
                raise RequestError(action=action, message=str(e)) from e

            if error_on_not_found:
                raise ResourceNotFoundError(action=action, resource=e.request.url.path) from e

            return None
        except GitHubKitGitHubException as e:
            self.logger.exception(f"{action}: {method.__name__} failed")
            raise RequestError(action=action, message=str(e)) from e

        parsed_data: T = extract_response(response)

        response_logger(f"{action}: {method.__name__} returned {parsed_data}")

        return parsed_data

    @overload
    async def get_repository(self, owner: str, repo: str, error_on_not_found: Literal[True] = True) -> Repository: ...

    @overload
    async def get_repository(self, owner: str, repo: str, error_on_not_found: Literal[False] = False) -> Repository | None: ...

    async def get_repository(
        self,
        owner: str,
        repo: str,
        error_on_not_found: bool = False,
    ) -> Repository | None:
        """Get a repository."""

        if githubkit_repository := await self._perform_rest_request(
            action="Get repository",
            error_on_not_found=error_on_not_found,
            method=self.githubkit_client.rest.repos.async_get,
            owner=owner,
            repo=repo,
        ):
            return Repository.from_full_repository(full_repository=githubkit_repository)

        return None

    async def get_default_branch(self, owner: str, repo: str) -> str:
        """Get the default branch of a repository."""

        repository: Repository = await self.get_repository(owner=owner, repo=repo, error_on_not_found=True)

        return repository.default_branch

    async def list_files(self, owner: str, repo: str, branch: str | None = None) -> RepositoryTree:
        """List every file in the repository at the given branch, recursively.

        Args:
            owner: The owner of the repository.
            repo: The name of the repository.
            branch: The branch to list. If not provided, the default branch will be used.
        """

        if branch is None:
            branch = await self.get_default_branch(owner=owner, repo=repo)

        tree: GitHubKitGitTree = await self._perform_rest_request(
            action="Get repository tree",
            error_on_not_found=True,
            method=self.githubkit_client.rest.git.async_get_tree,
            owner=owner,
            repo=repo,
            tree_sha=branch,
            recursive="1",
        )

        repository_tree: RepositoryTree = RepositoryTree.from_git_tree(git_tree=tree)

        if repository_tree.truncated:
            self.logger.warning(f"The tree of {owner}/{repo}@{branch} was truncated by GitHub, some files will not be scanned.")

        return repository_tree

    @overload
    async def get_file(
        self, owner: str, repo: str, path: str, ref: str | None = None, error_on_not_found: Literal[False] = False
    ) -> RepositoryFileWithContent | None: ...

    @overload
    async def get_file(
        self, owner: str, repo: str, path: str, ref: str | None = None, error_on_not_found: Literal[True] = True
    ) -> RepositoryFileWithContent: ...

    async def get_file(
        self,
        owner: str,
        repo: str,
        path: str,
        ref: str | None = None,
        error_on_not_found: bool = False,
    ) -> RepositoryFileWithContent | None:
        """Get a file from a repository.

        Args:
            owner: The owner of the repository.
            repo: The name of the repository.
            path: The path of the file.
            ref: The ref of the branch or tag to get the file from. If not provided, the default branch will be used.
            error_on_not_found: Whether to raise an error if the file is not found.
        """

        if ref is None:
            ref = await self.get_default_branch(owner=owner, repo=repo)

        if file := await self._perform_rest_request(
            action="Get file",
            error_on_not_found=error_on_not_found,
            method=self.githubkit_client.rest.repos.async_get_content,
            owner=owner,
            repo=repo,
            path=path,
            ref=ref,
        ):
            if not isinstance(file, GitHubKitContentFile):
                raise ResourceTypeMismatchError(action="Get file", resource=path, expected_type=GitHubKitContentFile, actual_type=type(file))

            # Files over 1MB come back without inline content.
            if file.encoding != "base64" or not file.content:
                return RepositoryFileWithContent(path=file.path, content="")

            return RepositoryFileWithContent.from_encoded_content(path=file.path, encoded_content=file.content)

        return None

    async def read_file(self, owner: str, repo: str, path: str, ref: str | None = None) -> str:
        """Read the decoded text of a file. Raises ResourceNotFoundError when the file does not exist at the ref."""

        file: RepositoryFileWithContent = await self.get_file(owner=owner, repo=repo, path=path, ref=ref, error_on_not_found=True)

        return file.content

    async def last_commit_date(self, owner: str, repo: str, path: str) -> datetime:
        """Get the author date of the most recent commit that touched the path.

        Raises:
            ResourceNotFoundError: If no commit touches the path or the commit carries no author date.
        """

        commits: list[GitHubKitCommit] = await self._perform_rest_request(
            action="Get last commit for path",
            quiet=True,
            error_on_not_found=True,
            method=self.githubkit_client.rest.repos.async_list_commits,
            owner=owner,
            repo=repo,
            path=path,
            per_page=1,
        )

        if not commits:
            raise ResourceNotFoundError(action="Get last commit for path", resource=f"{owner}/{repo}/{path}")

        commit: CommitSummary = CommitSummary.from_commit(commit=commits[0])

        if commit.authored_at is None:
            raise ResourceNotFoundError(
                action="Get last commit for path", resource=f"{owner}/{repo}/{path}", extra_info={"sha": commit.sha}
            )

        return commit.authored_at

    async def list_commits(self, owner: str, repo: str, limit: int = DEFAULT_COMMITS_LIMIT) -> list[CommitSummary]:
        """List the most recent commits on the default branch."""

        commits: list[GitHubKitCommit] = await self._perform_rest_request(
            action="List commits",
            error_on_not_found=True,
            method=self.githubkit_client.rest.repos.async_list_commits,
            owner=owner,
            repo=repo,
            per_page=min(limit, MAX_PER_PAGE),
        )

        return [CommitSummary.from_commit(commit=commit) for commit in commits[:limit]]

    async def list_pull_requests(self, owner: str, repo: str, limit: int = DEFAULT_PULL_REQUESTS_LIMIT) -> list[PullRequestSummary]:
        """List open and closed pull requests, most recently updated first."""

        pull_requests: list[GitHubKitPullRequestSimple] = await self._perform_rest_request(
            action="List pull requests",
            error_on_not_found=True,
            method=self.githubkit_client.rest.pulls.async_list,
            owner=owner,
            repo=repo,
            state="all",
            sort="updated",
            direction="desc",
            per_page=min(limit, MAX_PER_PAGE),
        )

        return [PullRequestSummary.from_pull_request_simple(pull_request=pull_request) for pull_request in pull_requests[:limit]]
