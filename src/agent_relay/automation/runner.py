"""
Task runner - drives one chat surface through a single task.

The hosted UIs expose no "done" signal, so a task is:
submit -> wait for the working indicator to appear -> wait for it to go
away -> poll the output region until its text stops changing -> extract.
The algorithm is the same for every surface; only the SurfaceConfig row
differs.
"""

import logging
from typing import Any, Optional

from markdownify import markdownify as md

from ..config import RunnerTimeouts
from ..errors import AvailabilityError, EmptyExtractionError, StabilizationTimeout
from ..surfaces import ExtractionStrategy, SurfaceConfig
from .polling import wait_for_control, wait_for_stable_text
from .sessions import Session

logger = logging.getLogger(__name__)


def compose_message(system_prompt: str, task_input: str) -> str:
	"""The text typed into the surface's input control."""
	return f"--- SYSTEM PROMPT ---\n{system_prompt}\n\n--- OBJECTIVE ---\n{task_input}"


def html_to_markdown(html: str) -> str:
	return md(html, heading_style="ATX").strip()


class TaskRunner:
	"""Executes tasks on browser sessions."""

	def __init__(self, timeouts: Optional[RunnerTimeouts] = None):
		self.timeouts = timeouts or RunnerTimeouts()

	async def run(self, session: Session, system_prompt: str, task_input: str) -> str:
		"""
		Submit a task and return the agent's answer as Markdown.

		Raises:
			AvailabilityError: A control or indicator never reached its state
			StabilizationTimeout: The output text kept changing
			EmptyExtractionError: Nothing could be read from the output region
		"""
		page = session.page
		surface = session.surface
		logger.info(f"Performing task for agent {session.agent_id} on {surface.name}")

		await self._submit(page, surface, compose_message(system_prompt, task_input))
		await self._wait_for_generation(page, surface)
		await self._stabilize(page, surface)
		output = await self._extract(page, surface)

		logger.info(f"Scraped stable output from {surface.name} ({len(output)} chars)")
		return output

	async def _submit(self, page: Any, surface: SurfaceConfig, message: str) -> None:
		outcome = await wait_for_control(
			page, surface.input_selector, timeout_ms=self.timeouts.submit,
		)
		if outcome.timed_out:
			raise AvailabilityError(f"Input control of {surface.name} is not available")

		await page.locator(surface.input_selector).fill(message)

		outcome = await wait_for_control(
			page, surface.run_selector, timeout_ms=self.timeouts.submit,
		)
		if outcome.timed_out:
			raise AvailabilityError(f"Run control of {surface.name} never became enabled")

		await page.click(surface.run_selector)
		logger.debug("Run button clicked.")

	async def _wait_for_generation(self, page: Any, surface: SurfaceConfig) -> None:
		logger.debug("Waiting for generation to start...")
		outcome = await wait_for_control(
			page,
			surface.working_selector,
			state="visible",
			timeout_ms=self.timeouts.start,
		)
		if outcome.timed_out:
			raise AvailabilityError(
				f"{surface.name} did not accept the task: working indicator never appeared "
				f"within {self.timeouts.start}ms"
			)

		logger.debug("Generation in progress. Waiting for completion...")
		outcome = await wait_for_control(
			page,
			surface.working_selector,
			state="hidden",
			timeout_ms=self.timeouts.finish,
		)
		if outcome.timed_out:
			raise AvailabilityError(
				f"{surface.name} was still generating after {self.timeouts.finish}ms"
			)

	async def _stabilize(self, page: Any, surface: SurfaceConfig) -> str:
		selector = surface.response_selector

		async def sample() -> Optional[str]:
			locator = page.locator(selector).last
			if await locator.count() == 0:
				return None
			return await locator.text_content() or ""

		outcome = await wait_for_stable_text(
			sample,
			timeout_ms=self.timeouts.stabilize,
			interval_ms=self.timeouts.poll_interval,
			required_repeats=self.timeouts.stable_repeats,
		)
		if outcome.timed_out:
			raise StabilizationTimeout(selector, self.timeouts.stabilize)
		return outcome.value

	async def _extract(self, page: Any, surface: SurfaceConfig) -> str:
		locator = page.locator(surface.response_selector)

		if surface.extraction == ExtractionStrategy.ALL_AFTER_FIRST:
			elements = await locator.all()
			if len(elements) <= 1:
				raise EmptyExtractionError(
					f"{surface.name}: could not find response elements after the initial prompt"
				)
			parts = [html_to_markdown(await element.inner_html()) for element in elements[1:]]
			output = "\n\n".join(parts)
		else:
			html = await locator.last.inner_html()
			output = html_to_markdown(html) if html else ""

		output = output.strip()
		if not output:
			raise EmptyExtractionError(f"{surface.name}: scraped output was empty")
		return output
