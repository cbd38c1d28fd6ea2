import logging

import pytest
from inline_snapshot import snapshot

from agent_gravity.clients.errors.github import RequestError, ScanError
from agent_gravity.scanning.scanner import AgentRoleScanner, classify_paths
from tests.conftest import FakeContentProvider, dump_list_for_snapshot, utc


async def test_scan(scanner: AgentRoleScanner):
    roles = await scanner.scan(owner="octo", repo="player")

    assert dump_list_for_snapshot(roles) == snapshot(
        [
            {
                "name": "SHARED",
                "description": "# Agents\nEvery agent reads this first.",
                "files": [{"path": "AGENTS.md", "type": "governance"}],
                "category": "shared",
                "status": "active",
            },
            {
                "name": "PLAYER",
                "description": "# Player status\nSeeking is async.",
                "files": [
                    {"path": "docs/prompts/planning-player.md", "type": "planning-prompt"},
                    {"path": "docs/prompts/execution-player.md", "type": "execution-prompt"},
                    {"path": "docs/status/PLAYER.md", "type": "status", "date": "2026-10-28T00:00:00Z"},
                    {"path": ".sys/plans/player/01-seek.md", "type": "plan", "date": "2026-10-20T00:00:00Z"},
                    {"path": ".sys/plans/2026-10-29-PLAYER-Async-Seek.md", "type": "plan", "date": "2026-10-29T00:00:00Z"},
                ],
                "category": "domain",
                "boundaries": ["must not touch UI", "must not touch audio"],
                "status": "active",
            },
            {
                "name": "AUDIO",
                "description": "# Audio\nKeeps the mixer healthy.\n\n## Boundaries\n- only touch src/audio",
                "files": [
                    {"path": "docs/prompts/audio.md", "type": "prompt"},
                    {"path": "docs/progress-audio.md", "type": "progress", "date": "2026-10-27T00:00:00Z"},
                ],
                "category": "daily",
                "boundaries": ["only touch src/audio"],
                "status": "active",
            },
        ]
    )


async def test_scan_uses_default_branch(player_repository: FakeContentProvider, scanner: AgentRoleScanner):
    scan_result = await scanner.scan_with_report(owner="octo", repo="player")

    assert scan_result.branch == "main"
    assert player_repository.list_files_branches == ["main"]

    scan_result = await scanner.scan_with_report(owner="octo", repo="player", branch="develop")

    assert scan_result.branch == "develop"
    assert player_repository.list_files_branches == ["main", "develop"]


async def test_scan_fetches_each_path_once(player_repository: FakeContentProvider, scanner: AgentRoleScanner):
    _ = await scanner.scan(owner="octo", repo="player")

    # audio.md is both the description and the boundaries source of AUDIO.
    assert player_repository.read_file_calls == {
        "AGENTS.md": 1,
        "docs/status/PLAYER.md": 1,
        "docs/prompts/planning-player.md": 1,
        "docs/prompts/audio.md": 1,
    }
    assert player_repository.last_commit_date_calls == {
        "docs/status/PLAYER.md": 1,
        "docs/progress-audio.md": 1,
        ".sys/plans/player/01-seek.md": 1,
        ".sys/plans/2026-10-29-PLAYER-Async-Seek.md": 1,
    }


async def test_scan_is_idempotent(scanner: AgentRoleScanner):
    first = await scanner.scan(owner="octo", repo="player")
    second = await scanner.scan(owner="octo", repo="player")

    assert first == second


async def test_scan_survives_fetch_failures(player_repository: FakeContentProvider):
    player_repository.failing_paths = {"docs/status/PLAYER.md", "docs/prompts/planning-player.md"}

    scan_result = await AgentRoleScanner(provider=player_repository).scan_with_report(owner="octo", repo="player")

    [player] = [role for role in scan_result.roles if role.name == "PLAYER"]

    assert [role.name for role in scan_result.roles] == ["SHARED", "PLAYER", "AUDIO"]
    assert player.description is None
    assert player.boundaries is None
    assert [file.date for file in player.files if file.path == "docs/status/PLAYER.md"] == [None]
    assert scan_result.unresolved_paths == ["docs/status/PLAYER.md", "docs/prompts/planning-player.md"]


async def test_scan_with_missing_files():
    provider = FakeContentProvider(paths=["docs/prompts/renderer.md", "docs/status/renderer.md"])

    scan_result = await AgentRoleScanner(provider=provider).scan_with_report(owner="octo", repo="renderer")

    [renderer] = scan_result.roles

    assert renderer.name == "RENDERER"
    assert renderer.category == "daily"
    assert renderer.description is None
    assert renderer.boundaries is None
    assert scan_result.unresolved_paths == ["docs/status/renderer.md", "docs/prompts/renderer.md"]


async def test_scan_empty_tree():
    provider = FakeContentProvider(paths=["README.md", "src/main.py"])

    assert await AgentRoleScanner(provider=provider).scan(owner="octo", repo="empty") == []
    assert not provider.read_file_calls
    assert not provider.last_commit_date_calls


async def test_scan_shared_role_regardless_of_other_files():
    provider = FakeContentProvider(
        paths=["claude.md", "docs/prompts/planning-player.md", ".github/agents/reviewer.yml"],
        contents={"claude.md": "Be kind.\n"},
        dates={},
    )

    roles = await AgentRoleScanner(provider=provider).scan(owner="octo", repo="player")

    assert [(role.name, role.category, [file.path for file in role.files]) for role in roles] == [
        ("SHARED", "shared", ["claude.md", ".github/agents/reviewer.yml"]),
        ("PLAYER", "domain", ["docs/prompts/planning-player.md"]),
    ]
    assert roles[0].description == "Be kind."


async def test_scan_tree_failure():
    provider = FakeContentProvider(paths=[], list_files_error=RequestError(action="Get tree", message="boom"))

    with pytest.raises(ScanError) as exc_info:
        _ = await AgentRoleScanner(provider=provider).scan(owner="octo", repo="player", branch="main")

    assert str(exc_info.value) == snapshot(
        "Failed to fetch repository tree. (repository: octo/player, branch: main, cause: A request to GitHub failed. (action: Get tree, message: boom))"
    )
    assert isinstance(exc_info.value.__cause__, RequestError)


def test_classify_paths_appends_loose_plans():
    classified_files = classify_paths(
        [
            ".sys/plans/2026-10-29-PLAYER-Async-Seek.md",
            "docs/prompts/planning-player.md",
        ]
    )

    assert [(file.path, file.agent_name) for file in classified_files] == [
        ("docs/prompts/planning-player.md", "PLAYER"),
        (".sys/plans/2026-10-29-PLAYER-Async-Seek.md", "PLAYER"),
    ]


async def test_plan_dates_roll_up(scanner: AgentRoleScanner):
    roles = await scanner.scan(owner="octo", repo="player")

    [player] = [role for role in roles if role.name == "PLAYER"]

    assert player.count_plans() == 2
    assert player.latest_file_date() == utc(2026, 10, 29)


class RecordingHandler(logging.Handler):
    def __init__(self):
        super().__init__(level=logging.DEBUG)
        self.records: list[logging.LogRecord] = []

    def emit(self, record: logging.LogRecord) -> None:
        self.records.append(record)


async def test_scan_logs_fetch_failures_to_scanner_logger(player_repository: FakeContentProvider):
    player_repository.failing_paths = {"docs/status/PLAYER.md"}

    handler = RecordingHandler()
    logger = logging.getLogger("tests.scanning.scanner")
    logger.setLevel(logging.DEBUG)
    logger.addHandler(handler)

    try:
        _ = await AgentRoleScanner(provider=player_repository, logger=logger).scan(owner="octo", repo="player")
    finally:
        logger.removeHandler(handler)

    warnings = [record.getMessage() for record in handler.records if record.levelno == logging.WARNING]

    assert any("fetching docs/status/PLAYER.md failed" in message for message in warnings)
