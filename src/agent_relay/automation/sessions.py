"""Browser sessions: one shared Playwright context per run, one page per agent."""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Awaitable, Callable, Optional

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import async_playwright

from ..config import RunnerTimeouts
from ..errors import AvailabilityError, ConfigurationError, SessionError
from ..models import AgentSpec
from ..surfaces import SurfaceConfig, SurfaceRegistry
from .polling import wait_for_control

logger = logging.getLogger(__name__)

ContextLauncher = Callable[[], Awaitable[tuple[Any, Optional[Any]]]]


@dataclass
class Session:
	"""A page bound to one agent for the lifetime of a run."""
	agent_id: int
	page: Any
	surface: SurfaceConfig


def persistent_launcher(profile_dir: Path, headless: bool = False) -> ContextLauncher:
	"""
	Build a launcher for a persistent Chromium profile.

	The profile keeps the cookies of logged-in chat surfaces between runs.
	Returns (context, playwright) so both can be released on teardown.
	"""
	async def _launch() -> tuple[Any, Optional[Any]]:
		playwright = await async_playwright().start()
		try:
			context = await playwright.chromium.launch_persistent_context(
				str(profile_dir),
				headless=headless,
			)
		except Exception:
			await playwright.stop()
			raise
		return context, playwright

	return _launch


class SessionPool:
	"""
	Owns the automation context of a single run.

	The context is opened lazily, once. Sessions are never closed on their
	own: teardown() closes the context and with it every page.
	"""

	def __init__(
		self,
		surfaces: SurfaceRegistry,
		launcher: ContextLauncher,
		timeouts: Optional[RunnerTimeouts] = None,
	):
		self.surfaces = surfaces
		self.timeouts = timeouts or RunnerTimeouts()
		self._launcher = launcher
		self._context: Any = None
		self._playwright: Any = None
		self._sessions: dict[int, Session] = {}

	@property
	def is_open(self) -> bool:
		return self._context is not None

	@property
	def sessions(self) -> dict[int, Session]:
		return dict(self._sessions)

	async def start(self) -> Any:
		"""Open the shared context if it is not open yet."""
		if self._context is not None:
			return self._context

		logger.info("Launching browser context")
		try:
			self._context, self._playwright = await self._launcher()
		except Exception as e:
			raise SessionError(f"Failed to start browser context: {e}") from e
		logger.info("Browser context started successfully.")
		return self._context

	async def open_session(self, agent: AgentSpec) -> Session:
		"""
		Open a dedicated page for an agent and wait for its input control.

		Raises:
			ConfigurationError: Unknown surface for this agent
			AvailabilityError: Input control did not appear in time
			SessionError: Page could not be opened or navigated
		"""
		try:
			surface = self.surfaces.get(agent.surface)
		except ConfigurationError as e:
			raise ConfigurationError(f"Agent {agent.name} (id {agent.id}): {e}") from e

		context = await self.start()

		try:
			page = await context.new_page()
			await page.goto(
				surface.url,
				timeout=self.timeouts.navigation,
				wait_until="domcontentloaded",
			)
		except PlaywrightError as e:
			raise SessionError(
				f"Could not open {surface.name} for agent {agent.name}: {e}"
			) from e

		outcome = await wait_for_control(
			page,
			surface.input_selector,
			timeout_ms=self.timeouts.input_ready,
		)
		if outcome.timed_out:
			raise AvailabilityError(
				f"Input control of {surface.name} did not appear for agent {agent.name} "
				f"within {self.timeouts.input_ready}ms"
			)

		session = Session(agent_id=agent.id, page=page, surface=surface)
		self._sessions[agent.id] = session
		logger.info(f"Prepared browser tab for {agent.name} at {surface.name}.")
		return session

	def get(self, agent_id: int) -> Session:
		"""Get the session of an agent."""
		session = self._sessions.get(agent_id)
		if session is None:
			raise SessionError(f"Could not find a browser page for agent {agent_id}")
		return session

	async def teardown(self) -> None:
		"""Close the context and every session. Safe to call more than once."""
		context, playwright = self._context, self._playwright
		self._context = None
		self._playwright = None
		self._sessions.clear()

		if context is None:
			return

		try:
			await context.close()
		except Exception as e:
			raise SessionError(f"Failed to close browser context: {e}") from e
		finally:
			# The driver is stopped even when closing the context failed
			if playwright is not None:
				await self._stop_driver(playwright)
		logger.info("Browser context closed.")

	async def _stop_driver(self, playwright: Any) -> None:
		try:
			await playwright.stop()
		except Exception as e:
			raise SessionError(f"Failed to stop the Playwright driver: {e}") from e

	async def __aenter__(self) -> "SessionPool":
		await self.start()
		return self

	async def __aexit__(self, exc_type, exc, tb) -> None:
		await self.teardown()
