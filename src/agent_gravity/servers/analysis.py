import asyncio
from collections.abc import Sequence
from logging import Logger

from fastmcp.utilities.logging import get_logger
from mcp.types import SamplingMessage

from agent_gravity.clients.github import DEFAULT_COMMITS_LIMIT, DEFAULT_PULL_REQUESTS_LIMIT, GitHubGravityClient
from agent_gravity.clients.models.github import CommitSummary, PullRequestSummary
from agent_gravity.models.analysis import ActivityAnalysis, HighFidelityAnalysis
from agent_gravity.models.dashboard import ActivityEvent
from agent_gravity.models.roles import AgentRoleSpec
from agent_gravity.sampling.utility import new_user_sampling_message, sampling_is_supported, structured_sample
from agent_gravity.servers.prompts.analyze_activity import ANALYZE_ACTIVITY_SYSTEM_PROMPT
from agent_gravity.servers.shared.annotations import OWNER, REPO
from agent_gravity.servers.shared.errors import SamplingSupportRequiredError
from agent_gravity.servers.shared.utility import dump_model_as_yaml

ANALYSIS_MAX_TOKENS = 4000


def activity_events_from(commits: Sequence[CommitSummary], pull_requests: Sequence[PullRequestSummary]) -> list[ActivityEvent]:
    return [
        *[ActivityEvent.from_commit(commit) for commit in commits],
        *[ActivityEvent.from_pull_request(pull_request) for pull_request in pull_requests],
    ]


def analysis_user_prompt(
    full_name: str,
    commits: Sequence[CommitSummary],
    pull_requests: Sequence[PullRequestSummary],
    roles: Sequence[AgentRoleSpec] | None = None,
) -> str:
    user_prompt: str = f"""# Repository Activity
The following is the recent activity of the repository {full_name}.

## Recent Commits
The last {len(commits)} commits, newest first:
{dump_model_as_yaml(commits)}

## Recent Pull Requests
The last {len(pull_requests)} pull requests, most recently updated first:
{dump_model_as_yaml(pull_requests)}
"""

    if roles:
        user_prompt += f"""
## Agent Roles
The following agent roles were found in the repository, with their descriptions and boundaries:
{dump_model_as_yaml([role.model_copy(update={"files": []}) for role in roles])}
"""

    return user_prompt


class AnalysisServer:
    """Analyzes a repository's recent activity by sampling the client's LLM."""

    def __init__(self, client: GitHubGravityClient, logger: Logger | None = None):
        self.logger: Logger = logger or get_logger(name=__name__)
        self.client: GitHubGravityClient = client

    def require_sampling_support(self) -> None:
        """Raise a SamplingSupportRequiredError if the client does not support sampling."""

        if not sampling_is_supported():
            self.logger.warning("A connected client does not support sampling. Sampling support is required to analyze activity.")

            raise SamplingSupportRequiredError

    async def analyze_repository(self, owner: OWNER, repo: REPO, roles: list[AgentRoleSpec] | None = None) -> ActivityAnalysis:
        """Analyze the recent commits and pull requests of a repository, reporting its gravity score, progress, friction and
        the state of each agent role."""

        self.require_sampling_support()

        commits, pull_requests = await asyncio.gather(
            self.client.list_commits(owner=owner, repo=repo, limit=DEFAULT_COMMITS_LIMIT),
            self.client.list_pull_requests(owner=owner, repo=repo, limit=DEFAULT_PULL_REQUESTS_LIMIT),
        )

        self.logger.info(f"Analyzing {len(commits)} commits and {len(pull_requests)} pull requests for {owner}/{repo}")

        messages: list[SamplingMessage] = [
            new_user_sampling_message(
                content=analysis_user_prompt(full_name=f"{owner}/{repo}", commits=commits, pull_requests=pull_requests, roles=roles)
            )
        ]

        analysis: HighFidelityAnalysis = await structured_sample(
            system_prompt=ANALYZE_ACTIVITY_SYSTEM_PROMPT,
            messages=messages,
            response_model=HighFidelityAnalysis,
            max_tokens=ANALYSIS_MAX_TOKENS,
        )

        return ActivityAnalysis(
            analysis=analysis,
            activity_events=activity_events_from(commits=commits, pull_requests=pull_requests),
            commits_analyzed=len(commits),
            prs_analyzed=len(pull_requests),
        )
