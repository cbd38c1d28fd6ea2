"""The pattern table that maps repository paths to agent files.

Rules are tried in order and the first match wins, so the order of `PATTERN_TABLE` is the precedence of the rules."""

import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from agent_gravity.models.roles import SHARED_AGENT_NAME, ClassifiedFile, FileKind

AGENT_GROUP = "agent"


@dataclass(frozen=True)
class ClassificationRule:
    """One entry of the pattern table.

    Rules with an `agent` capture group take the agent name from the path, upper-cased. Rules without one attribute
    every match to `fixed_agent_name`."""

    name: str
    pattern: re.Pattern[str]
    file_kind: FileKind
    fixed_agent_name: str | None = None

    def classify(self, path: str) -> ClassifiedFile | None:
        match: re.Match[str] | None = self.pattern.match(path)

        if match is None:
            return None

        agent_name: str = self.fixed_agent_name or match.group(AGENT_GROUP).upper()

        return ClassifiedFile(path=path, file_kind=self.file_kind, agent_name=agent_name)


def _rule(name: str, pattern: str, file_kind: FileKind, fixed_agent_name: str | None = None) -> ClassificationRule:
    return ClassificationRule(
        name=name,
        pattern=re.compile(pattern, re.IGNORECASE),
        file_kind=file_kind,
        fixed_agent_name=fixed_agent_name,
    )


PATTERN_TABLE: tuple[ClassificationRule, ...] = (
    _rule("planning-prompt", r"^docs/prompts/planning-(?P<agent>[^/]+)\.md$", FileKind.PLANNING_PROMPT),
    _rule("execution-prompt", r"^docs/prompts/execution-(?P<agent>[^/]+)\.md$", FileKind.EXECUTION_PROMPT),
    _rule("prompt", r"^docs/prompts/(?!planning-|execution-|readme\.md$)(?P<agent>[^/]+)\.md$", FileKind.PROMPT),
    _rule("status", r"^docs/status/(?P<agent>[^/]+)\.md$", FileKind.STATUS),
    _rule("progress", r"^docs/progress-(?P<agent>[^/]+)\.md$", FileKind.PROGRESS),
    _rule("plan", r"^\.sys/plans/(?P<agent>[^/]+)/.+$", FileKind.PLAN),
    _rule("governance", r"^(?:agents|claude)\.md$", FileKind.GOVERNANCE, fixed_agent_name=SHARED_AGENT_NAME),
    _rule("github-agents", r"^\.github/agents/.+$", FileKind.OTHER, fixed_agent_name=SHARED_AGENT_NAME),
)


def classify_path(path: str, rules: Sequence[ClassificationRule] = PATTERN_TABLE) -> ClassifiedFile | None:
    """Classify a single path against the rules. Returns None when no rule matches."""

    for rule in rules:
        if classified_file := rule.classify(path):
            return classified_file

    return None


def primary_pass(paths: Iterable[str], rules: Sequence[ClassificationRule] = PATTERN_TABLE) -> list[ClassifiedFile]:
    """Classify every path, keeping the input order and dropping paths that match no rule."""

    return [classified_file for path in paths if (classified_file := classify_path(path, rules=rules))]
