from agent_gravity.models.roles import AgentFile, AgentRoleSpec, FileKind
from agent_gravity.servers.analysis import activity_events_from, analysis_user_prompt
from tests.servers.conftest import FakeGravityClient


def test_activity_events_from(gravity_client: FakeGravityClient):
    events = activity_events_from(commits=gravity_client.commits, pull_requests=gravity_client.pull_requests)

    assert [(event.type, event.title, event.author) for event in events] == [
        ("commit", "Async seek", "Ada"),
        ("commit", "Fix mixer", "bob"),
        ("pull_request", "Async seek", "ada"),
    ]
    assert events[0].description == "Async seek\n\nUses async reads."
    assert events[0].files_changed == 0
    assert events[1].additions == 3
    assert events[2].pr_number == 7
    assert events[2].created_at == gravity_client.pull_requests[0].updated_at


def test_analysis_user_prompt(gravity_client: FakeGravityClient):
    role = AgentRoleSpec(
        name="PLAYER",
        description="# Player",
        files=[AgentFile(path="docs/prompts/planning-player.md", type=FileKind.PLANNING_PROMPT)],
        category="domain",
        boundaries=["no UI"],
    )

    user_prompt = analysis_user_prompt(
        full_name="octo/player", commits=gravity_client.commits, pull_requests=gravity_client.pull_requests, roles=[role]
    )

    assert "The following is the recent activity of the repository octo/player." in user_prompt
    assert "The last 2 commits, newest first:" in user_prompt
    assert "sha: abc" in user_prompt
    assert "The last 1 pull requests, most recently updated first:" in user_prompt
    assert "## Agent Roles" in user_prompt
    assert "- no UI" in user_prompt
    assert "docs/prompts/planning-player.md" not in user_prompt


def test_analysis_user_prompt_without_roles(gravity_client: FakeGravityClient):
    user_prompt = analysis_user_prompt(full_name="octo/player", commits=gravity_client.commits, pull_requests=[])

    assert "## Agent Roles" not in user_prompt
    assert "The last 0 pull requests" in user_prompt
