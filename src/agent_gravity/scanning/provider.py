from datetime import datetime
from typing import Protocol

from agent_gravity.models.repository.tree import RepositoryTree


class RepositoryContentProvider(Protocol):
    """The repository reads the agent role scanner depends on.

    `read_file` and `last_commit_date` raise `ResourceNotFoundError` when the path has no content or history."""

    async def get_default_branch(self, owner: str, repo: str) -> str: ...

    async def list_files(self, owner: str, repo: str, branch: str | None = None) -> RepositoryTree: ...

    async def read_file(self, owner: str, repo: str, path: str, ref: str | None = None) -> str: ...

    async def last_commit_date(self, owner: str, repo: str, path: str) -> datetime: ...
