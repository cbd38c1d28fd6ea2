import re
from collections.abc import Iterable
from datetime import datetime

from agent_gravity.models.roles import (
    ACTIVE_STATUS,
    SHARED_AGENT_NAME,
    SHARED_DISPLAY_NAME,
    AgentFile,
    AgentRoleSpec,
)
from agent_gravity.scanning.aggregation import AgentGroup
from agent_gravity.scanning.resolution import MemoizedPathFetcher

DESCRIPTION_LINES = 5

# The section runs from the header line to the next line starting with `##` or the end of the text.
BOUNDARIES_SECTION_PATTERN: re.Pattern[str] = re.compile(r"## Boundaries[ \t]*\n(.*?)(?=^##|\Z)", re.IGNORECASE | re.DOTALL | re.MULTILINE)


def display_name(agent_name: str) -> str:
    return SHARED_DISPLAY_NAME if agent_name == SHARED_AGENT_NAME else agent_name


def extract_description(content: str, name: str) -> str:
    """The first lines of the content, or a generic description when those lines are blank."""

    lines: list[str] = content.replace("\r\n", "\n").split("\n")

    description: str = "\n".join(lines[:DESCRIPTION_LINES]).strip()

    return description or f"Agent: {name}"


def extract_boundaries(content: str) -> list[str] | None:
    """The bullet points of the first `## Boundaries` section, or None if there is no such section or it has no bullets."""

    normalized: str = content.replace("\r\n", "\n")

    if (section := BOUNDARIES_SECTION_PATTERN.search(normalized)) is None:
        return None

    boundaries: list[str] = []

    for line in section.group(1).split("\n"):
        stripped: str = line.strip()

        if not stripped.startswith("-"):
            continue

        if boundary := stripped[1:].strip():
            boundaries.append(boundary)

    return boundaries or None


def build_role(group: AgentGroup, contents: MemoizedPathFetcher[str], dates: MemoizedPathFetcher[datetime]) -> AgentRoleSpec:
    name: str = display_name(group.agent_name)

    description: str | None = None
    if group.desc_path is not None and contents.is_found(group.desc_path):
        description = extract_description(contents.value(group.desc_path) or "", name=name)

    boundaries: list[str] | None = None
    if (boundary_content := contents.value(group.boundary_path)) is not None:
        boundaries = extract_boundaries(boundary_content)

    files: list[AgentFile] = [AgentFile(path=file.path, type=file.file_kind, date=dates.value(file.path)) for file in group.files]

    return AgentRoleSpec(
        name=name,
        description=description,
        files=files,
        category=group.category,
        boundaries=boundaries,
        status=ACTIVE_STATUS,
    )


def build_roles(
    groups: Iterable[AgentGroup], contents: MemoizedPathFetcher[str], dates: MemoizedPathFetcher[datetime]
) -> list[AgentRoleSpec]:
    """Assemble the roles in group order from the fetched contents and dates."""

    return [build_role(group=group, contents=contents, dates=dates) for group in groups]
