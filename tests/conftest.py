import os
from collections import Counter
from collections.abc import Sequence
from datetime import UTC, datetime
from typing import Any, overload

import pytest
from pydantic import BaseModel

from agent_gravity.clients.errors.github import RequestError, ResourceNotFoundError
from agent_gravity.models.repository.tree import RepositoryTree
from agent_gravity.scanning.scanner import AgentRoleScanner

# The entrypoint builds a GitHub client on import, which only needs a token to be present.
_ = os.environ.setdefault("GITHUB_TOKEN", "test-token")


def utc(year: int, month: int, day: int) -> datetime:
    return datetime(year, month, day, tzinfo=UTC)


class FakeContentProvider:
    """An in-memory repository that records how often each path is fetched."""

    def __init__(
        self,
        paths: Sequence[str],
        contents: dict[str, str] | None = None,
        dates: dict[str, datetime] | None = None,
        failing_paths: Sequence[str] = (),
        default_branch: str = "main",
        list_files_error: Exception | None = None,
    ):
        self.paths: list[str] = list(paths)
        self.contents: dict[str, str] = contents or {}
        self.dates: dict[str, datetime] = dates or {}
        self.failing_paths: set[str] = set(failing_paths)
        self.default_branch: str = default_branch
        self.list_files_error: Exception | None = list_files_error

        self.read_file_calls: Counter[str] = Counter()
        self.last_commit_date_calls: Counter[str] = Counter()
        self.list_files_branches: list[str | None] = []

    async def get_default_branch(self, owner: str, repo: str) -> str:
        return self.default_branch

    async def list_files(self, owner: str, repo: str, branch: str | None = None) -> RepositoryTree:
        self.list_files_branches.append(branch)

        if self.list_files_error is not None:
            raise self.list_files_error

        return RepositoryTree.from_paths(self.paths)

    async def read_file(self, owner: str, repo: str, path: str, ref: str | None = None) -> str:
        self.read_file_calls[path] += 1

        if path in self.failing_paths:
            raise RequestError(action="Get file", message="boom", extra_info={"path": path})

        if path not in self.contents:
            raise ResourceNotFoundError(action="Get file", resource=path)

        return self.contents[path]

    async def last_commit_date(self, owner: str, repo: str, path: str) -> datetime:
        self.last_commit_date_calls[path] += 1

        if path in self.failing_paths:
            raise RequestError(action="Get last commit for path", message="boom", extra_info={"path": path})

        if path not in self.dates:
            raise ResourceNotFoundError(action="Get last commit for path", resource=path)

        return self.dates[path]


@pytest.fixture
def player_repository() -> FakeContentProvider:
    """A repository with a paired-prompt agent, a single-prompt agent, governance files and plans."""

    return FakeContentProvider(
        paths=[
            "AGENTS.md",
            "README.md",
            "docs/prompts/planning-player.md",
            "docs/prompts/execution-player.md",
            "docs/prompts/audio.md",
            "docs/prompts/README.md",
            "docs/status/PLAYER.md",
            "docs/progress-audio.md",
            ".sys/plans/player/01-seek.md",
            ".sys/plans/2026-10-29-PLAYER-Async-Seek.md",
            ".sys/plans/2026-10-30-Unowned.md",
            "src/player.py",
        ],
        contents={
            "AGENTS.md": "# Agents\nEvery agent reads this first.",
            "docs/prompts/planning-player.md": "# Player planner\n\n## Boundaries\n- must not touch UI\n- must not touch audio\n## Other\n",
            "docs/prompts/audio.md": "# Audio\nKeeps the mixer healthy.\n\n## Boundaries\n- only touch src/audio\n",
            "docs/status/PLAYER.md": "# Player status\nSeeking is async.\n",
        },
        dates={
            "docs/status/PLAYER.md": utc(2026, 10, 28),
            "docs/progress-audio.md": utc(2026, 10, 27),
            ".sys/plans/player/01-seek.md": utc(2026, 10, 20),
            ".sys/plans/2026-10-29-PLAYER-Async-Seek.md": utc(2026, 10, 29),
        },
    )


@pytest.fixture
def scanner(player_repository: FakeContentProvider) -> AgentRoleScanner:
    return AgentRoleScanner(provider=player_repository)


def handle_exclude_keys(dictionary: dict[str, Any], exclude_keys: list[str] | None = None) -> dict[str, Any]:
    if exclude_keys is None:
        return dictionary
    return {key: value for key, value in dictionary.items() if key not in exclude_keys}


@overload
def dump_for_snapshot(
    basemodel: None,
    /,
    exclude_keys: list[str] | None = None,
    exclude_none: bool = True,
    **dump_kwargs: Any,
) -> None: ...


@overload
def dump_for_snapshot(
    basemodel: BaseModel,
    /,
    exclude_keys: list[str] | None = None,
    exclude_none: bool = True,
    **dump_kwargs: Any,
) -> dict[str, Any]: ...


def dump_for_snapshot(
    basemodel: None | BaseModel,
    /,
    exclude_keys: list[str] | None = None,
    exclude_none: bool = True,
    **dump_kwargs: Any,
) -> dict[str, Any] | None:
    if basemodel is None:
        return None

    return handle_exclude_keys(basemodel.model_dump(mode="json", exclude_none=exclude_none, **dump_kwargs), exclude_keys)


def dump_list_for_snapshot(
    basemodel: None | Sequence[BaseModel],
    /,
    exclude_keys: list[str] | None = None,
    exclude_none: bool = True,
    **dump_kwargs: Any,
) -> list[dict[str, Any]]:
    if basemodel is None:
        return []

    return [dump_for_snapshot(item, exclude_keys, exclude_none, **dump_kwargs) for item in basemodel]
