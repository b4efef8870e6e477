"""
Plan orchestrator - owns the lifecycle of a run.

A run threads one SharedContext through every agent, in plan order, for a
fixed number of iterations:

	prompts -> sessions -> (agent step -> review) x N x M -> finalize -> teardown

Review is advisory. Its feedback is folded into the next agent's input but
never stops the loop. Any other failure ends the run with status "error";
the browser context is closed exactly once on every path.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Optional, Sequence

from .automation.runner import TaskRunner
from .automation.sessions import SessionPool, persistent_launcher
from .config import Config
from .errors import SessionError
from .events import Event, EventSink, EventType, error_event, log_event, status_event
from .formatting import clean_links
from .llm.agents import Clarifier, Finalizer, Planner, Prompter, Reviewer
from .llm.client import ChatClient
from .models import AgentSpec, ExecutionAgent, PlanResult, RunStatus, SharedContext
from .surfaces import SurfaceRegistry

logger = logging.getLogger(__name__)

PoolFactory = Callable[[], SessionPool]


@dataclass
class Collaborators:
	"""The external calls a run depends on."""
	clarifier: Clarifier
	planner: Planner
	prompter: Prompter
	reviewer: Reviewer
	finalizer: Finalizer
	formatter: Callable[[str], str] = field(default=clean_links)

	@classmethod
	def from_config(cls, config: Config) -> "Collaborators":
		client = ChatClient(
			api_key=config.api_key,
			base_url=config.llm_base_url,
			timeout=config.models.request_timeout,
		)
		models = config.models
		return cls(
			clarifier=Clarifier(client, models.clarify),
			planner=Planner(client, models.plan),
			prompter=Prompter(client, models.prompt),
			reviewer=Reviewer(client, models.review),
			finalizer=Finalizer(client, models.finalize),
		)


def compose_task_input(context: SharedContext) -> str:
	"""Input for the next agent: the last output, prefixed by feedback when there is any."""
	if context.feedback:
		return (
			f'Based on the previous step\'s feedback: "{context.feedback}", '
			f'and the last output: "{context.last_output}", please proceed.'
		)
	return context.last_output


class PlanOrchestrator:
	"""
	Runs plans end to end.

	One instance may serve many runs; every execute_plan() call builds its
	own SharedContext and its own SessionPool.
	"""

	def __init__(
		self,
		sink: EventSink,
		collaborators: Collaborators,
		pool_factory: PoolFactory,
		runner: Optional[TaskRunner] = None,
	):
		self.sink = sink
		self.collaborators = collaborators
		self.pool_factory = pool_factory
		self.runner = runner or TaskRunner()

	def _log(self, source: str, message: str) -> None:
		self.sink.emit(log_event(source, message))

	async def create_plan(self, objective: str) -> PlanResult:
		"""Clarify an objective and propose a team of agents for it."""
		self._log("Manager", f'Creating plan for objective: "{objective}"')

		clarified = await self.collaborators.clarifier.clarify(objective)
		self._log("ClarifierAgent", f"Objective clarified: {clarified}")

		plan = await self.collaborators.planner.generate_plan(clarified)
		self._log("PlannerAgent", f"Plan generated with {len(plan)} agents.")

		return PlanResult(plan=plan, clarified_objective=clarified)

	async def execute_plan(
		self,
		clarified_objective: str,
		agents: Sequence[AgentSpec],
		max_iterations: int = 1,
	) -> SharedContext:
		"""
		Execute a plan and report progress through the event sink.

		Failures are reported, not raised: the returned context carries
		status COMPLETE or ERROR.
		"""
		context = SharedContext(objective=clarified_objective)
		self._log("Manager", f"Starting plan execution with {max_iterations} iteration(s).")

		pool: Optional[SessionPool] = None
		try:
			if max_iterations < 1:
				raise ValueError(f"max_iterations must be at least 1, got {max_iterations}")

			execution_agents = await self._generate_prompts(context, agents)

			pool = self.pool_factory()
			await self._open_sessions(pool, execution_agents)

			for iteration in range(max_iterations):
				self._log(
					"Manager",
					f"--- Starting Iteration {iteration + 1} of {max_iterations} ---",
				)
				for agent in execution_agents:
					await self._run_step(context, pool, agent)

			await self._finalize(context)

		except Exception as e:
			logger.exception("Error during plan execution")
			self._fail(context, str(e) or type(e).__name__)
		finally:
			if pool is not None:
				await self._teardown(context, pool)

		return context

	async def _generate_prompts(
		self,
		context: SharedContext,
		agents: Sequence[AgentSpec],
	) -> list[ExecutionAgent]:
		execution_agents = []
		for spec in agents:
			system_prompt = await self.collaborators.prompter.generate_prompt(context.objective, spec)
			execution_agents.append(ExecutionAgent(spec=spec, system_prompt=system_prompt))
			self._log("PrompterAgent", f"Generated system prompt for agent: {spec.name}.")
		return execution_agents

	async def _open_sessions(self, pool: SessionPool, agents: list[ExecutionAgent]) -> None:
		await pool.start()
		self._log("SessionPool", "Persistent browser started.")
		for agent in agents:
			await pool.open_session(agent.spec)
			self._log(
				"Manager",
				f"Prepared browser tab for {agent.spec.name} at {agent.spec.surface}.",
			)

	async def _run_step(
		self,
		context: SharedContext,
		pool: SessionPool,
		agent: ExecutionAgent,
	) -> None:
		spec = agent.spec
		session = pool.get(spec.id)

		raw = await self.runner.run(session, agent.system_prompt, compose_task_input(context))
		result = self.collaborators.formatter(raw)
		context.record(spec.name, spec.task, result)

		context.status = RunStatus.AWAITING_REVIEW
		review = await self.collaborators.reviewer.review(context)
		context.feedback = review.feedback
		context.status = RunStatus.IN_PROGRESS

		self.sink.emit(Event(
			type=EventType.REVIEW,
			source="ReviewerAgent",
			feedback=review.feedback,
			approved=review.approved,
		))
		if not review.approved:
			self._log("Manager", "Reviewer provided feedback. Forwarding it to the next step.")

		self.sink.emit(Event(type=EventType.RESULT, source=spec.name, output=result))

	async def _finalize(self, context: SharedContext) -> None:
		self._log("Manager", "All iterations complete. Engaging FinalizerAgent...")
		summary = await self.collaborators.finalizer.finalize(context.last_output)
		self.sink.emit(Event(
			type=EventType.RESULT,
			source="FinalizerAgent",
			message="Final polished summary generated.",
			output=summary,
		))
		context.status = RunStatus.COMPLETE
		self.sink.emit(status_event(RunStatus.COMPLETE.value))

	async def _teardown(self, context: SharedContext, pool: SessionPool) -> None:
		try:
			await pool.teardown()
		except SessionError as e:
			logger.error(f"Teardown failed: {e}")
			if context.status != RunStatus.ERROR:
				self._fail(context, str(e))
			return
		self._log("SessionPool", "Browser closed.")

	def _fail(self, context: SharedContext, message: str) -> None:
		context.status = RunStatus.ERROR
		self.sink.emit(error_event("Manager", message))
		self.sink.emit(status_event(RunStatus.ERROR.value))


def build_orchestrator(config: Config, sink: EventSink) -> PlanOrchestrator:
	"""Wire the production collaborators, browser launcher and runner."""
	surfaces = SurfaceRegistry(config.surfaces)

	def pool_factory() -> SessionPool:
		return SessionPool(
			surfaces,
			persistent_launcher(config.profile_dir, headless=config.headless),
			config.timeouts,
		)

	return PlanOrchestrator(
		sink=sink,
		collaborators=Collaborators.from_config(config),
		pool_factory=pool_factory,
		runner=TaskRunner(config.timeouts),
	)
