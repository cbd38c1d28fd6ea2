from collections.abc import Iterable, Sequence
from typing import Self

from pydantic import BaseModel, ConfigDict

from agent_gravity.models.roles import (
    PAIRED_PROMPT_KINDS,
    SHARED_AGENT_NAME,
    ClassifiedFile,
    FileKind,
    RoleCategory,
)

DESCRIPTION_SOURCE_PRIORITY: tuple[FileKind, ...] = (FileKind.STATUS, FileKind.PLANNING_PROMPT, FileKind.PROMPT)
BOUNDARY_SOURCE_PRIORITY: tuple[FileKind, ...] = (FileKind.PLANNING_PROMPT, FileKind.EXECUTION_PROMPT, FileKind.PROMPT)


def first_of_kind(files: Sequence[ClassifiedFile], priority: Sequence[FileKind]) -> ClassifiedFile | None:
    """Return the first file of the highest priority kind present."""

    for file_kind in priority:
        for file in files:
            if file.file_kind == file_kind:
                return file

    return None


def categorize(agent_name: str, files: Sequence[ClassifiedFile]) -> RoleCategory:
    if agent_name == SHARED_AGENT_NAME:
        return "shared"

    if any(file.file_kind in PAIRED_PROMPT_KINDS for file in files):
        return "domain"

    return "daily"


class AgentGroup(BaseModel):
    """The classified files of one agent, with the files chosen to describe it."""

    model_config = ConfigDict(frozen=True)

    agent_name: str
    files: tuple[ClassifiedFile, ...]
    category: RoleCategory
    desc_path: str | None
    boundary_path: str | None

    @classmethod
    def from_files(cls, agent_name: str, files: Sequence[ClassifiedFile]) -> Self:
        desc_file: ClassifiedFile | None = first_of_kind(files, DESCRIPTION_SOURCE_PRIORITY)
        if desc_file is None and files:
            desc_file = files[0]

        boundary_file: ClassifiedFile | None = first_of_kind(files, BOUNDARY_SOURCE_PRIORITY)

        return cls(
            agent_name=agent_name,
            files=tuple(files),
            category=categorize(agent_name, files),
            desc_path=desc_file.path if desc_file else None,
            boundary_path=boundary_file.path if boundary_file else None,
        )

    @property
    def content_paths(self) -> list[str]:
        return [path for path in (self.desc_path, self.boundary_path) if path is not None]


def group_by_agent(classified_files: Iterable[ClassifiedFile]) -> dict[str, list[ClassifiedFile]]:
    """Group files by agent name, keeping the order in which each agent was first seen."""

    groups: dict[str, list[ClassifiedFile]] = {}

    for classified_file in classified_files:
        groups.setdefault(classified_file.agent_name, []).append(classified_file)

    return groups


def aggregate_roles(classified_files: Iterable[ClassifiedFile]) -> list[AgentGroup]:
    """Build one group per agent, in discovery order."""

    return [AgentGroup.from_files(agent_name=agent_name, files=files) for agent_name, files in group_by_agent(classified_files).items()]


def content_paths_for(groups: Iterable[AgentGroup]) -> list[str]:
    """The description and boundary paths of all groups, deduplicated, in first-use order."""

    return list(dict.fromkeys(path for group in groups for path in group.content_paths))


def date_paths_for(classified_files: Iterable[ClassifiedFile], dated_kinds: Iterable[FileKind]) -> list[str]:
    """The paths of every file whose kind needs a last-commit date, deduplicated, in classification order."""

    kinds: frozenset[FileKind] = frozenset(dated_kinds)

    return list(dict.fromkeys(file.path for file in classified_files if file.file_kind in kinds))
