from collections.abc import Sequence
from logging import Logger
from typing import Any

from fastmcp.utilities.logging import get_logger

from agent_gravity.models.dashboard import ActivityEvent, AgentRole, AnalysisResult, Repository
from agent_gravity.models.roles import AgentRoleSpec
from agent_gravity.servers.shared.errors import RepositoryNotFoundError


def newest_first[T: Repository | AgentRole | ActivityEvent | AnalysisResult](records: Sequence[T], limit: int | None = None) -> list[T]:
    ordered: list[T] = sorted(records, key=lambda record: record.created_at, reverse=True)

    return ordered[:limit] if limit is not None else ordered


class InMemoryDashboardStore:
    """Key-value storage for repositories and the roles, activity and analyses that belong to them.

    Roles and activity events are replaced wholesale, never merged. Deleting a repository deletes everything it owns."""

    def __init__(self, logger: Logger | None = None):
        self.logger: Logger = logger or get_logger(name=__name__)
        self.repositories: dict[str, Repository] = {}
        self.agent_roles: dict[str, list[AgentRole]] = {}
        self.activity_events: dict[str, list[ActivityEvent]] = {}
        self.analysis_results: dict[str, list[AnalysisResult]] = {}

    def require_repository(self, repository_id: str) -> Repository:
        if (repository := self.repositories.get(repository_id)) is None:
            raise RepositoryNotFoundError(repository_id=repository_id)

        return repository

    # Repositories

    def create_repository(self, repository: Repository) -> Repository:
        self.repositories[repository.id] = repository

        self.logger.info(f"Attached repository {repository.full_name} as {repository.id}")

        return repository

    def get_repository(self, repository_id: str) -> Repository | None:
        return self.repositories.get(repository_id)

    def find_repository(self, owner: str, name: str) -> Repository | None:
        full_name: str = f"{owner}/{name}".lower()

        return next((repository for repository in self.repositories.values() if repository.full_name.lower() == full_name), None)

    def list_repositories(self) -> list[Repository]:
        return newest_first(list(self.repositories.values()))

    def update_repository(self, repository_id: str, **changes: Any) -> Repository:  # pyright: ignore[reportAny]
        repository: Repository = self.require_repository(repository_id)

        updated: Repository = repository.model_copy(update=changes)

        self.repositories[repository_id] = updated

        return updated

    def delete_repository(self, repository_id: str) -> None:
        repository: Repository = self.require_repository(repository_id)

        del self.repositories[repository_id]
        _ = self.agent_roles.pop(repository_id, None)
        _ = self.activity_events.pop(repository_id, None)
        _ = self.analysis_results.pop(repository_id, None)

        self.logger.info(f"Deleted repository {repository.full_name} ({repository_id}) and everything it owns")

    # Agent roles

    def replace_agent_roles(self, repository_id: str, specs: Sequence[AgentRoleSpec]) -> list[AgentRole]:
        _ = self.require_repository(repository_id)

        roles: list[AgentRole] = [AgentRole.from_spec(repository_id=repository_id, spec=spec) for spec in specs]

        self.agent_roles[repository_id] = roles

        return roles

    def get_agent_roles(self, repository_id: str) -> list[AgentRole]:
        return list(self.agent_roles.get(repository_id, []))

    # Activity events

    def replace_activity_events(self, repository_id: str, events: Sequence[ActivityEvent]) -> list[ActivityEvent]:
        _ = self.require_repository(repository_id)

        stored: list[ActivityEvent] = [event.model_copy(update={"repository_id": repository_id}) for event in events]

        self.activity_events[repository_id] = stored

        return stored

    def get_activity_events(self, repository_id: str, limit: int | None = None) -> list[ActivityEvent]:
        return newest_first(self.activity_events.get(repository_id, []), limit=limit)

    # Analysis results

    def create_analysis_result(self, analysis_result: AnalysisResult) -> AnalysisResult:
        _ = self.require_repository(analysis_result.repository_id)

        self.analysis_results.setdefault(analysis_result.repository_id, []).append(analysis_result)

        return analysis_result

    def get_analysis_results(self, repository_id: str, limit: int | None = None) -> list[AnalysisResult]:
        return newest_first(self.analysis_results.get(repository_id, []), limit=limit)
