"""
Language-model collaborators.

Each collaborator is a thin request/response wrapper around ChatClient with a
fixed prompt and a parser for the expected shape. A reply that cannot be
parsed raises ModelResponseError; only the Reviewer recovers from it.
"""

import logging
from typing import Optional, Protocol

from pydantic import TypeAdapter, ValidationError

from ..config import ModelSettings
from ..errors import ModelResponseError
from ..formatting import strip_think
from ..models import AgentPlan, AgentSpec, ReviewResult, SharedContext
from .client import build_messages, parse_json
from .prompts import (
	CLARIFIER_PROMPT,
	FINALIZER_PROMPT,
	PLANNER_PROMPT,
	PROMPTER_PROMPT,
	REVIEWER_PROMPT,
)

logger = logging.getLogger(__name__)

REVIEW_FALLBACK_FEEDBACK = (
	"An error occurred during the review process, so the step was auto-approved."
)

_PLAN_ADAPTER = TypeAdapter(list[AgentPlan])


class CompletionClient(Protocol):
	async def complete(
		self,
		messages: list[dict[str, str]],
		model: str,
		temperature: float = 0.0,
	) -> str:
		...


class Clarifier:
	"""Turns a raw user objective into one actionable objective."""

	def __init__(self, client: CompletionClient, model: str = ModelSettings.clarify):
		self.client = client
		self.model = model

	async def clarify(self, initial_prompt: str) -> str:
		logger.info(f"Clarifying objective: {initial_prompt[:100]}")
		reply = await self.client.complete(
			build_messages(CLARIFIER_PROMPT, initial_prompt), self.model, temperature=0,
		)
		data = parse_json(reply)
		objective = data.get("objective") if isinstance(data, dict) else None
		if not isinstance(objective, str) or not objective.strip():
			raise ModelResponseError(
				"Failed to clarify the objective: reply is missing the 'objective' key"
			)
		return objective.strip()


class Planner:
	"""Breaks an objective into a sequential team of agents."""

	def __init__(self, client: CompletionClient, model: str = ModelSettings.plan):
		self.client = client
		self.model = model

	async def generate_plan(self, clarified_objective: str) -> list[AgentPlan]:
		reply = await self.client.complete(
			build_messages(PLANNER_PROMPT.format(objective=clarified_objective)),
			self.model,
			temperature=0,
		)
		data = parse_json(reply)
		try:
			plan = _PLAN_ADAPTER.validate_python(data)
		except ValidationError as e:
			raise ModelResponseError(f"Failed to generate a valid agent plan: {e}") from e
		if not plan:
			raise ModelResponseError("Failed to generate a valid agent plan: plan is empty")
		if not 2 <= len(plan) <= 6:
			logger.warning(f"Planner proposed {len(plan)} agents, outside the requested 2-6")
		return plan


class Prompter:
	"""Writes the system prompt an agent is driven with."""

	def __init__(self, client: CompletionClient, model: str = ModelSettings.prompt):
		self.client = client
		self.model = model

	async def generate_prompt(self, clarified_objective: str, agent: AgentSpec) -> str:
		logger.info(f'Generating system prompt for role: "{agent.role}"')
		reply = await self.client.complete(
			build_messages(PROMPTER_PROMPT.format(
				objective=clarified_objective,
				role=agent.role,
				task=agent.task,
			)),
			self.model,
			temperature=0.1,
		)
		prompt = strip_think(reply)
		if not prompt:
			raise ModelResponseError(f"Failed to generate system prompt for agent {agent.name}.")
		return prompt


class Reviewer:
	"""Advisory quality check over the shared context."""

	def __init__(self, client: CompletionClient, model: str = ModelSettings.review):
		self.client = client
		self.model = model

	async def review(self, context: SharedContext) -> ReviewResult:
		"""
		Review the latest output.

		Never raises ModelResponseError: an unusable reply auto-approves the
		step with a fixed diagnostic so the run keeps going.
		"""
		try:
			reply = await self.client.complete(
				build_messages(REVIEWER_PROMPT.format(
					objective=context.objective,
					last_output=context.last_output,
					history=context.history_text(),
				)),
				self.model,
				temperature=0,
			)
			data = parse_json(reply)
			try:
				return ReviewResult.model_validate(data)
			except ValidationError as e:
				raise ModelResponseError(f"Review reply has the wrong shape: {e}") from e
		except ModelResponseError as e:
			logger.warning(f"Error during review, auto-approving: {e}")
			return ReviewResult(approved=True, feedback=REVIEW_FALLBACK_FEEDBACK)


class Finalizer:
	"""Polishes the last output into a final summary."""

	def __init__(self, client: CompletionClient, model: str = ModelSettings.finalize):
		self.client = client
		self.model = model

	async def finalize(self, final_output: str) -> str:
		logger.info("Generating final polished summary.")
		reply = await self.client.complete(
			build_messages(FINALIZER_PROMPT.format(final_output=final_output)),
			self.model,
			temperature=0.2,
		)
		summary = strip_think(reply)
		if not summary:
			raise ModelResponseError("Failed to generate the final polished summary.")
		return summary
