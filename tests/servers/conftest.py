from collections.abc import Sequence
from datetime import datetime

import pytest

from agent_gravity.clients.errors.github import ResourceNotFoundError
from agent_gravity.clients.models.github import CommitSummary, PullRequestSummary, Repository
from agent_gravity.models.analysis import HighFidelityAnalysis
from tests.conftest import FakeContentProvider, utc

GRAVITY_ANALYSIS = HighFidelityAnalysis.model_validate(
    {
        "gravity_score": 72,
        "executive_summary": "The player agent landed async seeking while the audio agent is idle.",
        "metrics": {"total_commits": 2, "total_prs": 1, "active_agents": 1, "focus_area": "src/player"},
        "agent_states": [
            {"agent_name": "PLAYER", "current_status": "active", "recent_task": "Async seek"},
            {"agent_name": "AUDIO", "current_status": "idle", "recent_task": "Mixer cleanup"},
        ],
    }
)


class FakeGravityClient(FakeContentProvider):
    """A fake GitHub client that serves one repository along with its recent activity."""

    def __init__(
        self,
        paths: Sequence[str],
        contents: dict[str, str] | None = None,
        dates: dict[str, datetime] | None = None,
        commits: Sequence[CommitSummary] = (),
        pull_requests: Sequence[PullRequestSummary] = (),
    ):
        super().__init__(paths=paths, contents=contents, dates=dates)
        self.commits: list[CommitSummary] = list(commits)
        self.pull_requests: list[PullRequestSummary] = list(pull_requests)

    async def get_repository(self, owner: str, repo: str, error_on_not_found: bool = True) -> Repository:
        if repo != "player":
            raise ResourceNotFoundError(action="Get repository", resource=f"{owner}/{repo}")

        return Repository(
            owner=owner,
            name=repo,
            full_name=f"{owner}/{repo}",
            description="A media player built by agents.",
            url=f"https://api.github.com/repos/{owner}/{repo}",
            default_branch=self.default_branch,
            archived=False,
            pushed_at=utc(2026, 10, 29),
        )

    async def list_commits(self, owner: str, repo: str, limit: int = 100) -> list[CommitSummary]:
        return self.commits[:limit]

    async def list_pull_requests(self, owner: str, repo: str, limit: int = 50) -> list[PullRequestSummary]:
        return self.pull_requests[:limit]


@pytest.fixture
def gravity_client() -> FakeGravityClient:
    return FakeGravityClient(
        paths=["AGENTS.md", "docs/prompts/planning-player.md", "docs/prompts/audio.md", ".sys/plans/player/01-seek.md"],
        contents={
            "AGENTS.md": "# Agents",
            "docs/prompts/planning-player.md": "# Player\n## Boundaries\n- no UI\n",
            "docs/prompts/audio.md": "# Audio",
        },
        dates={".sys/plans/player/01-seek.md": utc(2026, 10, 20)},
        commits=[
            CommitSummary(sha="abc", message="Async seek\n\nUses async reads.", author="Ada", authored_at=utc(2026, 10, 29)),
            CommitSummary(sha="def", message="Fix mixer", author="bob", authored_at=utc(2026, 10, 28), additions=3, deletions=1),
        ],
        pull_requests=[
            PullRequestSummary(
                number=7,
                title="Async seek",
                state="closed",
                author="ada",
                created_at=utc(2026, 10, 20),
                updated_at=utc(2026, 10, 29),
                merged_at=utc(2026, 10, 29),
            )
        ],
    )
