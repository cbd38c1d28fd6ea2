from logging import Logger
from typing import Any

from fastmcp.server.server import FastMCP
from fastmcp.tools import Tool
from fastmcp.utilities.logging import get_logger

from agent_gravity.clients.github import GitHubGravityClient
from agent_gravity.models.roles import ScanResult
from agent_gravity.scanning.scanner import AgentRoleScanner
from agent_gravity.servers.shared.annotations import BRANCH, OWNER, REPO


class ScanServer:
    """Exposes agent role discovery for any repository, without attaching it to the dashboard."""

    scanner: AgentRoleScanner
    logger: Logger

    def __init__(self, scanner: AgentRoleScanner | None = None, logger: Logger | None = None):
        self.logger = logger or get_logger(name=__name__)
        self.scanner = scanner or AgentRoleScanner(provider=GitHubGravityClient(logger=self.logger), logger=self.logger)

    def register_tools(self, fastmcp: FastMCP[Any]) -> FastMCP[Any]:
        _ = fastmcp.add_tool(tool=Tool.from_function(fn=self.scan_agent_roles))

        return fastmcp

    async def scan_agent_roles(self, owner: OWNER, repo: REPO, branch: BRANCH = None) -> ScanResult:
        """Find the agent roles of a repository from its prompt, status, progress and plan files.

        Each role lists its files, a short description, its category and the boundaries it works within. Paths whose
        content or last commit date could not be fetched are listed separately."""

        return await self.scanner.scan_with_report(owner=owner, repo=repo, branch=branch)
