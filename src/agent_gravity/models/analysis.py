from typing import Literal

from pydantic import BaseModel, Field

from agent_gravity.models.dashboard import ActivityEvent

AgentStatus = Literal["active", "idle", "stuck", "divergent", "saturated", "drifting", "unknown"]


class ActivityMetrics(BaseModel):
    total_commits: int = Field(description="The number of commits analyzed.")
    total_prs: int = Field(description="The number of pull requests analyzed.")
    active_agents: int = Field(description="The number of agents with recent activity.")
    focus_area: str = Field(description="The part of the codebase receiving the most attention.")


class SignificantProgress(BaseModel):
    description: str = Field(description="What was accomplished.")
    actor: Literal["planner", "executor", "human"] = Field(description="Who drove the progress.")
    link: str | None = Field(default=None, description="A link to the commit or pull request, if any.")


class Friction(BaseModel):
    component: str = Field(description="The component where work is thrashing.")
    issue: str = Field(description="What keeps going wrong.")
    severity: Literal["low", "medium", "critical"] = Field(description="How much the friction hurts progress.")
    suspected_cause: str = Field(description="The most likely cause of the friction.")


class BoundaryViolation(BaseModel):
    agent_or_role: str = Field(description="The agent or role that overstepped its boundaries.")
    violation: str = Field(description="The boundary that was crossed.")
    evidence: str = Field(description="The commit or pull request showing the violation.")


class OrchestratorAction(BaseModel):
    action: str = Field(description="What the orchestrator should do.")
    reason: str = Field(description="Why the action is needed.")
    urgency: Literal["do-now", "monitor", "ignore"] = Field(description="How soon the action is needed.")


class AgentState(BaseModel):
    agent_name: str = Field(description="The name of the agent, as found by the scan.")
    current_status: AgentStatus = Field(description="The current status of the agent.")
    recent_task: str = Field(description="The most recent task the agent worked on.")


class HighFidelityAnalysis(BaseModel):
    """An assessment of a repository's recent development activity."""

    gravity_score: int = Field(ge=0, le=100, description="0-100, where 100 means very strong development momentum.")
    executive_summary: str = Field(description="A single paragraph summarizing recent activity.")
    metrics: ActivityMetrics
    significant_progress: list[SignificantProgress] = Field(default_factory=list)
    friction_and_thrashing: list[Friction] = Field(default_factory=list)
    boundary_violations: list[BoundaryViolation] = Field(default_factory=list)
    orchestrator_actions: list[OrchestratorAction] = Field(default_factory=list)
    agent_states: list[AgentState] = Field(default_factory=list)


class ActivityAnalysis(BaseModel):
    """An analysis together with the activity it was produced from."""

    analysis: HighFidelityAnalysis
    activity_events: list[ActivityEvent]
    commits_analyzed: int
    prs_analyzed: int
