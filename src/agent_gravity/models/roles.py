from datetime import datetime
from enum import StrEnum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

SHARED_AGENT_NAME = "_SHARED"
SHARED_DISPLAY_NAME = "SHARED"

ACTIVE_STATUS = "active"


class FileKind(StrEnum):
    """The role a file plays for the agent it is attributed to."""

    PLANNING_PROMPT = "planning-prompt"
    EXECUTION_PROMPT = "execution-prompt"
    PROMPT = "prompt"
    STATUS = "status"
    PROGRESS = "progress"
    PLAN = "plan"
    GOVERNANCE = "governance"
    OTHER = "other"


# Only these kinds get a last-commit date, each one costs a request.
DATED_FILE_KINDS: frozenset[FileKind] = frozenset({FileKind.PLAN, FileKind.STATUS, FileKind.PROGRESS})

PAIRED_PROMPT_KINDS: frozenset[FileKind] = frozenset({FileKind.PLANNING_PROMPT, FileKind.EXECUTION_PROMPT})

RoleCategory = Literal["domain", "daily", "shared"]


class ClassifiedFile(BaseModel):
    """A repository path attributed to an agent."""

    model_config = ConfigDict(frozen=True)

    path: str
    file_kind: FileKind
    agent_name: str

    @property
    def is_shared(self) -> bool:
        return self.agent_name == SHARED_AGENT_NAME


class AgentFile(BaseModel):
    """A file attributed to an agent role."""

    path: str = Field(description="The repository-relative path of the file.")
    type: FileKind = Field(description="The kind of agent file.")
    date: datetime | None = Field(
        default=None,
        description="The author date of the most recent commit touching the file. Only resolved for plan, status and progress files.",
    )


class AgentRoleSpec(BaseModel):
    """An agent role discovered by a scan, before it is stored against a repository."""

    name: str = Field(description="The name of the agent, or SHARED for governance and cross-cutting files.")
    description: str | None = Field(description="The opening lines of the agent's status or prompt file.")
    files: list[AgentFile] = Field(description="The files attributed to the agent, in discovery order.")
    category: RoleCategory = Field(description="domain for paired planning/execution prompts, daily otherwise, shared for SHARED.")
    boundaries: list[str] | None = Field(description="The bullet points of the agent's `## Boundaries` section, if any.")
    status: str | None = Field(default=ACTIVE_STATUS, description="The status of the agent at scan time.")

    def count_plans(self) -> int:
        return sum(1 for file in self.files if file.type == FileKind.PLAN)

    def latest_file_date(self) -> datetime | None:
        dates: list[datetime] = [file.date for file in self.files if file.date is not None]

        return max(dates) if dates else None


class ScanResult(BaseModel):
    """The roles found by a scan along with the paths that could not be fetched."""

    owner: str
    repo: str
    branch: str
    roles: list[AgentRoleSpec] = Field(description="The agent roles, in discovery order.")
    unresolved_paths: list[str] = Field(
        default_factory=list,
        description="Paths whose content or last commit date could not be fetched. Their fields are null in the roles.",
    )
