from logging import Logger
from typing import Any

from fastmcp.server.server import FastMCP
from fastmcp.tools import Tool
from fastmcp.utilities.logging import get_logger

from agent_gravity.clients.github import GitHubGravityClient
from agent_gravity.clients.models.github import Repository as GitHubRepository
from agent_gravity.models.analysis import ActivityAnalysis
from agent_gravity.models.dashboard import ActivityEvent, AgentRole, AnalysisResult, Repository, utc_now
from agent_gravity.models.roles import ScanResult
from agent_gravity.scanning.scanner import AgentRoleScanner
from agent_gravity.servers.analysis import AnalysisServer
from agent_gravity.servers.shared.annotations import BRANCH, LIMIT, OWNER, REPO, REPOSITORY_ID
from agent_gravity.stores.memory import InMemoryDashboardStore

AI_ANALYSIS_RESULT_TYPE = "ai_analysis"


class DashboardServer:
    """Tracks repositories, their agent roles and the analyses of their activity."""

    store: InMemoryDashboardStore
    client: GitHubGravityClient
    scanner: AgentRoleScanner
    analysis_server: AnalysisServer | None
    logger: Logger

    def __init__(
        self,
        store: InMemoryDashboardStore | None = None,
        client: GitHubGravityClient | None = None,
        analysis_server: AnalysisServer | None = None,
        logger: Logger | None = None,
    ):
        self.logger = logger or get_logger(name=__name__)
        self.store = store or InMemoryDashboardStore(logger=self.logger)
        self.client = client or GitHubGravityClient(logger=self.logger)
        self.scanner = AgentRoleScanner(provider=self.client, logger=self.logger)
        self.analysis_server = analysis_server

    def register_tools(self, fastmcp: FastMCP[Any]) -> FastMCP[Any]:
        _ = fastmcp.add_tool(tool=Tool.from_function(fn=self.add_repository))
        _ = fastmcp.add_tool(tool=Tool.from_function(fn=self.list_repositories))
        _ = fastmcp.add_tool(tool=Tool.from_function(fn=self.get_repository))
        _ = fastmcp.add_tool(tool=Tool.from_function(fn=self.delete_repository))
        _ = fastmcp.add_tool(tool=Tool.from_function(fn=self.scan_repository))
        _ = fastmcp.add_tool(tool=Tool.from_function(fn=self.get_agent_roles))
        _ = fastmcp.add_tool(tool=Tool.from_function(fn=self.get_activity_events))
        _ = fastmcp.add_tool(tool=Tool.from_function(fn=self.get_analysis_results))

        if self.analysis_server is not None:
            _ = fastmcp.add_tool(tool=Tool.from_function(fn=self.analyze_repository))

        return fastmcp

    async def add_repository(self, owner: OWNER, repo: REPO) -> Repository:
        """Attach a GitHub repository to the dashboard. Attaching a repository twice returns the existing entry."""

        if existing := self.store.find_repository(owner=owner, name=repo):
            return existing

        github_repository: GitHubRepository = await self.client.get_repository(owner=owner, repo=repo, error_on_not_found=True)

        return self.store.create_repository(Repository.from_github_repository(github_repository))

    async def list_repositories(self) -> list[Repository]:
        """List the repositories attached to the dashboard, most recently attached first."""

        return self.store.list_repositories()

    async def get_repository(self, repository_id: REPOSITORY_ID) -> Repository:
        """Get a repository attached to the dashboard."""

        return self.store.require_repository(repository_id)

    async def delete_repository(self, repository_id: REPOSITORY_ID) -> None:
        """Detach a repository from the dashboard, deleting its agent roles, activity and analyses."""

        self.store.delete_repository(repository_id)

    async def scan_repository(self, repository_id: REPOSITORY_ID, branch: BRANCH = None) -> list[AgentRole]:
        """Scan an attached repository for agent roles, replacing the roles found by any previous scan."""

        repository: Repository = await self.get_repository(repository_id)

        scan_result: ScanResult = await self.scanner.scan_with_report(
            owner=repository.owner, repo=repository.name, branch=branch or repository.default_branch
        )

        return self.store.replace_agent_roles(repository_id=repository_id, specs=scan_result.roles)

    async def get_agent_roles(self, repository_id: REPOSITORY_ID) -> list[AgentRole]:
        """Get the agent roles found by the last scan of an attached repository."""

        return self.store.get_agent_roles(repository_id)

    async def analyze_repository(self, repository_id: REPOSITORY_ID) -> AnalysisResult:
        """Analyze the recent activity of an attached repository and record its gravity score.

        The commits and pull requests that were analyzed replace the repository's stored activity events."""

        if self.analysis_server is None:
            msg = "Analysis is disabled on this server."
            raise ValueError(msg)

        repository: Repository = await self.get_repository(repository_id)

        activity_analysis: ActivityAnalysis = await self.analysis_server.analyze_repository(
            owner=repository.owner, repo=repository.name, roles=list(self.store.get_agent_roles(repository_id))
        )

        _ = self.store.replace_activity_events(repository_id=repository_id, events=activity_analysis.activity_events)

        gravity_score: int = activity_analysis.analysis.gravity_score

        analysis_result: AnalysisResult = self.store.create_analysis_result(
            AnalysisResult(
                repository_id=repository_id,
                type=AI_ANALYSIS_RESULT_TYPE,
                summary=activity_analysis.analysis.executive_summary,
                score=gravity_score,
                details={
                    "commits_analyzed": activity_analysis.commits_analyzed,
                    "prs_analyzed": activity_analysis.prs_analyzed,
                    "analysis": activity_analysis.analysis.model_dump(mode="json"),
                },
            )
        )

        _ = self.store.update_repository(
            repository_id,
            gravity_score=gravity_score,
            last_analyzed_at=utc_now(),
            total_commits=activity_analysis.commits_analyzed,
            total_prs=activity_analysis.prs_analyzed,
        )

        self.logger.info(f"Analyzed {repository.full_name}: gravity score {gravity_score}")

        return analysis_result

    async def get_activity_events(self, repository_id: REPOSITORY_ID, limit: LIMIT = None) -> list[ActivityEvent]:
        """Get the commits and pull requests collected by the last analysis of an attached repository."""

        return self.store.get_activity_events(repository_id, limit=limit)

    async def get_analysis_results(self, repository_id: REPOSITORY_ID, limit: LIMIT = None) -> list[AnalysisResult]:
        """Get the analyses of an attached repository."""

        return self.store.get_analysis_results(repository_id, limit=limit)
