import os
from logging import Logger
from typing import Literal

import click
from fastmcp import FastMCP
from fastmcp.server.middleware.logging import LoggingMiddleware
from fastmcp.utilities.logging import configure_logging, get_logger

from agent_gravity.clients.github import GitHubGravityClient
from agent_gravity.sampling.handler import get_sampling_handler
from agent_gravity.scanning.scanner import AgentRoleScanner
from agent_gravity.servers.analysis import AnalysisServer
from agent_gravity.servers.dashboard import DashboardServer
from agent_gravity.servers.scan import ScanServer
from agent_gravity.stores.memory import InMemoryDashboardStore

configure_logging()

logger: Logger = get_logger(name=__name__)

enable_analysis: bool = not bool(os.getenv("DISABLE_ANALYSIS"))

mcp: FastMCP[None] = FastMCP[None](
    name="Agent Gravity MCP",
    sampling_handler=get_sampling_handler() if enable_analysis else None,
)

mcp.add_middleware(middleware=LoggingMiddleware(include_payloads=True, logger=logger))

github_client: GitHubGravityClient = GitHubGravityClient(logger=logger)

scan_server: ScanServer = ScanServer(scanner=AgentRoleScanner(provider=github_client, logger=logger), logger=logger)
_ = scan_server.register_tools(fastmcp=mcp)

dashboard_server: DashboardServer = DashboardServer(
    store=InMemoryDashboardStore(logger=logger),
    client=github_client,
    analysis_server=AnalysisServer(client=github_client, logger=logger) if enable_analysis else None,
    logger=logger,
)
_ = dashboard_server.register_tools(fastmcp=mcp)


@click.command()
@click.option(
    "--mcp-transport",
    type=click.Choice(["stdio", "streamable-http"]),
    default="stdio",
    help="The transport to run the MCP server on",
)
def run_mcp(mcp_transport: Literal["stdio", "streamable-http"]):
    mcp.run(transport=mcp_transport)


if __name__ == "__main__":
    run_mcp()
