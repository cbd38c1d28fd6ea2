"""Attribution of plan files that sit directly in `.sys/plans/`.

Dated plans such as `.sys/plans/2026-10-29-PLAYER-Async-Seek.md` carry the agent name in the filename instead of a
directory. They are attributed to the known agent whose name the filename contains."""

import re
from collections.abc import Iterable, Sequence

from agent_gravity.models.repository.tree import get_dir_and_file_from_path
from agent_gravity.models.roles import ClassifiedFile, FileKind

LOOSE_PLAN_PATTERN: re.Pattern[str] = re.compile(r"^\.sys/plans/[^/]+\.md$", re.IGNORECASE)


def known_agent_names(classified_files: Iterable[ClassifiedFile]) -> list[str]:
    """The distinct non-shared agent names, in the order they were discovered."""

    return list(dict.fromkeys(classified_file.agent_name for classified_file in classified_files if not classified_file.is_shared))


def match_agent_name(file_name: str, agent_names: Sequence[str]) -> str | None:
    """Find the agent whose name the file name contains.

    The longest contained name wins so that `PLAYER` beats `PLAY`; among names of equal length the earliest
    discovered agent wins."""

    upper_file_name: str = file_name.upper()

    best_match: str | None = None

    for agent_name in agent_names:
        if agent_name not in upper_file_name:
            continue

        if best_match is None or len(agent_name) > len(best_match):
            best_match = agent_name

    return best_match


def loose_plan_pass(paths: Iterable[str], primary: Sequence[ClassifiedFile]) -> list[ClassifiedFile]:
    """Attribute unclassified `.sys/plans/*.md` files to agents found by the primary pass.

    Returns only the newly attributed files, in input order. Candidates that match no agent are dropped."""

    agent_names: list[str] = known_agent_names(primary)

    if not agent_names:
        return []

    classified_paths: set[str] = {classified_file.path for classified_file in primary}

    attributed: list[ClassifiedFile] = []

    for path in paths:
        if path in classified_paths or not LOOSE_PLAN_PATTERN.match(path):
            continue

        _, file_name = get_dir_and_file_from_path(path)

        if agent_name := match_agent_name(file_name, agent_names):
            attributed.append(ClassifiedFile(path=path, file_kind=FileKind.PLAN, agent_name=agent_name))

    return attributed
