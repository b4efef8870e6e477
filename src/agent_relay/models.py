"""
Run Models - Pydantic schemas for agents, plans and the shared run context.

The SharedContext is the single mutable artifact of a run. It is owned by
the orchestrator and passed explicitly to every phase; history only grows.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, field_validator, model_validator


class RunStatus(str, Enum):
	"""Status of a run's shared context."""
	IN_PROGRESS = "in-progress"
	AWAITING_REVIEW = "awaiting-review"
	COMPLETE = "complete"
	ERROR = "error"


class AgentPlan(BaseModel):
	"""One agent proposed by the planner."""
	name: str = Field(description="Short descriptive name (e.g., 'Data Analyst')")
	role: str = Field(description="The agent's expertise and function")
	task: str = Field(description="The single task this agent performs")


class PlanResult(BaseModel):
	"""Outcome of the planning phase."""
	model_config = ConfigDict(populate_by_name=True)

	plan: list[AgentPlan] = Field(default_factory=list)
	clarified_objective: str = Field(alias="clarifiedObjective")


class AgentSpec(BaseModel):
	"""A configured agent bound to one target surface. Immutable once a run starts."""
	model_config = ConfigDict(frozen=True, populate_by_name=True)

	id: int = Field(description="Unique within a run")
	name: str
	role: str
	task: str
	surface: str = Field(alias="selectedChatbot", description="Target-surface identifier")


class ExecutionAgent(BaseModel):
	"""An AgentSpec together with its generated system prompt."""
	model_config = ConfigDict(frozen=True)

	spec: AgentSpec
	system_prompt: str


class HistoryEntry(BaseModel):
	"""One completed agent step."""
	model_config = ConfigDict(frozen=True)

	agent: str
	task: str
	result: str


class ReviewResult(BaseModel):
	"""Verdict of the reviewer for a single step."""
	approved: bool
	feedback: str


def seed_output(objective: str) -> str:
	"""The text handed to the first agent before anything has run."""
	return f'The initial high-level objective is: "{objective}"'


class SharedContext(BaseModel):
	"""
	The run-scoped mutable artifact.

	last_output always holds the most recent normalized result, or the seed
	objective text before any agent has run. History is append-only and is
	only extended through record().
	"""
	objective: str
	last_output: str = ""
	feedback: Optional[str] = None
	status: RunStatus = RunStatus.IN_PROGRESS

	_history: list[HistoryEntry] = PrivateAttr(default_factory=list)

	@model_validator(mode="after")
	def _seed_last_output(self) -> "SharedContext":
		if not self.last_output:
			self.last_output = seed_output(self.objective)
		return self

	@property
	def history(self) -> tuple[HistoryEntry, ...]:
		"""Recorded steps in insertion order."""
		return tuple(self._history)

	def record(self, agent: str, task: str, result: str) -> HistoryEntry:
		"""Append a step to history and make its result the last output."""
		entry = HistoryEntry(agent=agent, task=task, result=result)
		self._history.append(entry)
		self.last_output = result
		return entry

	def history_text(self) -> str:
		"""Serialize history for the reviewer."""
		return "\n---\n".join(
			f"Agent: {h.agent}, Task: {h.task}, Result: {h.result}"
			for h in self._history
		)

	def to_summary(self) -> dict:
		"""Get a JSON-friendly summary of the context."""
		return {
			"objective": self.objective,
			"status": self.status.value,
			"steps": len(self._history),
			"feedback": self.feedback,
			"last_output": self.last_output,
			"history": [h.model_dump() for h in self._history],
		}


class ExecutePlanRequest(BaseModel):
	"""Payload accepted by the execute-plan operation."""
	model_config = ConfigDict(populate_by_name=True)

	objective: str = Field(min_length=1)
	agents: list[AgentSpec] = Field(min_length=1)
	max_iterations: int = Field(default=1, ge=1, alias="maxIterations")

	@field_validator("agents")
	@classmethod
	def _unique_ids(cls, agents: list[AgentSpec]) -> list[AgentSpec]:
		ids = [a.id for a in agents]
		if len(ids) != len(set(ids)):
			raise ValueError("agent ids must be unique within a run")
		return agents
