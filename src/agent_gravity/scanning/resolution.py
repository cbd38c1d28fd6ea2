import asyncio
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum
from logging import Logger

from fastmcp.utilities.logging import get_logger

from agent_gravity.clients.errors.github import ResourceNotFoundError
from agent_gravity.scanning.provider import RepositoryContentProvider


class FetchStatus(StrEnum):
    FOUND = "found"
    NOT_FOUND = "not_found"
    ERROR = "error"


@dataclass(frozen=True)
class FetchOutcome[T]:
    """The result of fetching one path. `value` is only set when the status is FOUND."""

    path: str
    status: FetchStatus
    value: T | None = None
    error: str | None = None

    @property
    def found(self) -> bool:
        return self.status == FetchStatus.FOUND


class MemoizedPathFetcher[T]:
    """Fetches values by path in concurrent batches, at most once per path.

    A failing path never fails the batch: missing resources become NOT_FOUND and any other exception becomes ERROR."""

    def __init__(self, action: str, fetch: Callable[[str], Awaitable[T]], logger: Logger | None = None):
        self.action: str = action
        self.fetch: Callable[[str], Awaitable[T]] = fetch
        self.logger: Logger = logger or get_logger(name=__name__)
        self.outcomes: dict[str, FetchOutcome[T]] = {}

    async def _fetch_outcome(self, path: str) -> FetchOutcome[T]:
        try:
            value: T = await self.fetch(path)
        except ResourceNotFoundError:
            self.logger.debug(f"{self.action}: {path} was not found.")
            return FetchOutcome(path=path, status=FetchStatus.NOT_FOUND)
        except Exception as e:  # noqa: BLE001
            self.logger.warning(f"{self.action}: fetching {path} failed, continuing without it: {e}")
            return FetchOutcome(path=path, status=FetchStatus.ERROR, error=str(e))

        return FetchOutcome(path=path, status=FetchStatus.FOUND, value=value)

    async def resolve(self, paths: Iterable[str]) -> dict[str, FetchOutcome[T]]:
        """Fetch every path not fetched before, concurrently, and wait for all of them to settle."""

        pending: list[str] = [path for path in dict.fromkeys(paths) if path not in self.outcomes]

        if pending:
            self.logger.info(f"{self.action}: fetching {len(pending)} paths.")

            outcomes: list[FetchOutcome[T]] = await asyncio.gather(*[self._fetch_outcome(path) for path in pending])

            self.outcomes.update({outcome.path: outcome for outcome in outcomes})

        return self.outcomes

    def value(self, path: str | None) -> T | None:
        if path is None or (outcome := self.outcomes.get(path)) is None:
            return None

        return outcome.value

    def is_found(self, path: str | None) -> bool:
        return path is not None and (outcome := self.outcomes.get(path)) is not None and outcome.found

    @property
    def failed_paths(self) -> list[str]:
        return [path for path, outcome in self.outcomes.items() if not outcome.found]


def content_fetcher(
    provider: RepositoryContentProvider, owner: str, repo: str, ref: str, logger: Logger | None = None
) -> MemoizedPathFetcher[str]:
    async def read_file(path: str) -> str:
        return await provider.read_file(owner=owner, repo=repo, path=path, ref=ref)

    return MemoizedPathFetcher[str](action=f"Read files of {owner}/{repo}@{ref}", fetch=read_file, logger=logger)


def date_fetcher(
    provider: RepositoryContentProvider, owner: str, repo: str, logger: Logger | None = None
) -> MemoizedPathFetcher[datetime]:
    async def last_commit_date(path: str) -> datetime:
        return await provider.last_commit_date(owner=owner, repo=repo, path=path)

    return MemoizedPathFetcher[datetime](action=f"Resolve last commit dates of {owner}/{repo}", fetch=last_commit_date, logger=logger)
