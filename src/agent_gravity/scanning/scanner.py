import asyncio
from datetime import datetime
from logging import Logger

from fastmcp.utilities.logging import get_logger

from agent_gravity.clients.errors.github import ClientError, ScanError
from agent_gravity.models.repository.tree import RepositoryTree
from agent_gravity.models.roles import DATED_FILE_KINDS, AgentRoleSpec, ClassifiedFile, ScanResult
from agent_gravity.scanning.aggregation import AgentGroup, aggregate_roles, content_paths_for, date_paths_for
from agent_gravity.scanning.attribution import loose_plan_pass
from agent_gravity.scanning.builder import build_roles
from agent_gravity.scanning.patterns import primary_pass
from agent_gravity.scanning.provider import RepositoryContentProvider
from agent_gravity.scanning.resolution import MemoizedPathFetcher, content_fetcher, date_fetcher


def classify_paths(paths: list[str]) -> list[ClassifiedFile]:
    """Run the primary pass and the loose plan pass, primary matches first."""

    primary: list[ClassifiedFile] = primary_pass(paths)

    return [*primary, *loose_plan_pass(paths, primary)]


class AgentRoleScanner:
    """Discovers the agent roles of a repository from its file layout."""

    provider: RepositoryContentProvider
    logger: Logger

    def __init__(self, provider: RepositoryContentProvider, logger: Logger | None = None):
        self.provider = provider
        self.logger = logger or get_logger(name=__name__)

    async def _list_paths(self, owner: str, repo: str, branch: str | None) -> tuple[str, list[str]]:
        try:
            if branch is None:
                branch = await self.provider.get_default_branch(owner=owner, repo=repo)

            repository_tree: RepositoryTree = await self.provider.list_files(owner=owner, repo=repo, branch=branch)
        except ClientError as e:
            self.logger.exception(f"Failed to fetch the tree of {owner}/{repo}@{branch}")
            raise ScanError(owner=owner, repo=repo, branch=branch, cause=e) from e

        return branch, repository_tree.file_paths()

    async def scan_with_report(self, owner: str, repo: str, branch: str | None = None) -> ScanResult:
        """Scan the repository and report which paths could not be fetched along with the roles."""

        branch, paths = await self._list_paths(owner=owner, repo=repo, branch=branch)

        classified_files: list[ClassifiedFile] = classify_paths(paths)

        groups: list[AgentGroup] = aggregate_roles(classified_files)

        self.logger.info(f"Scanning {owner}/{repo}@{branch}: {len(paths)} files, {len(classified_files)} agent files, {len(groups)} agents.")

        contents: MemoizedPathFetcher[str] = content_fetcher(provider=self.provider, owner=owner, repo=repo, ref=branch, logger=self.logger)
        dates: MemoizedPathFetcher[datetime] = date_fetcher(provider=self.provider, owner=owner, repo=repo, logger=self.logger)

        _ = await asyncio.gather(
            contents.resolve(content_paths_for(groups)),
            dates.resolve(date_paths_for(classified_files, DATED_FILE_KINDS)),
        )

        roles: list[AgentRoleSpec] = build_roles(groups=groups, contents=contents, dates=dates)

        unresolved_paths: list[str] = list(dict.fromkeys([*contents.failed_paths, *dates.failed_paths]))

        if unresolved_paths:
            self.logger.warning(f"Scanning {owner}/{repo}@{branch}: {len(unresolved_paths)} paths could not be fetched: {unresolved_paths}")

        return ScanResult(owner=owner, repo=repo, branch=branch, roles=roles, unresolved_paths=unresolved_paths)

    async def scan(self, owner: str, repo: str, branch: str | None = None) -> list[AgentRoleSpec]:
        """Scan the repository for agent prompt, status and plan files and build one role per agent.

        Raises:
            ScanError: If the repository tree could not be listed.
        """

        scan_result: ScanResult = await self.scan_with_report(owner=owner, repo=repo, branch=branch)

        return scan_result.roles
