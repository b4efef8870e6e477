"""
Bounded waits for browser automation.

Every wait here gets exactly one attempt and reports a PollOutcome instead of
raising, so callers decide which error a timeout turns into.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional

from playwright.async_api import TimeoutError as PlaywrightTimeoutError

logger = logging.getLogger(__name__)


@dataclass
class PollOutcome:
	"""Result of a bounded wait."""
	succeeded: bool
	value: str = ""
	elapsed_ms: int = 0
	polls: int = 0

	@property
	def timed_out(self) -> bool:
		return not self.succeeded


async def wait_for_control(
	page: Any,
	selector: str,
	*,
	state: str = "visible",
	timeout_ms: int,
) -> PollOutcome:
	"""Wait for a selector to reach a state ('attached', 'visible', 'hidden')."""
	loop = asyncio.get_running_loop()
	started = loop.time()
	try:
		await page.wait_for_selector(selector, state=state, timeout=timeout_ms)
	except PlaywrightTimeoutError:
		elapsed = int((loop.time() - started) * 1000)
		logger.debug(f'Timed out after {elapsed}ms waiting for "{selector}" to be {state}')
		return PollOutcome(succeeded=False, elapsed_ms=elapsed, polls=1)
	return PollOutcome(succeeded=True, elapsed_ms=int((loop.time() - started) * 1000), polls=1)


async def wait_for_stable_text(
	sample: Callable[[], Awaitable[Optional[str]]],
	*,
	timeout_ms: int,
	interval_ms: int = 500,
	required_repeats: int = 3,
) -> PollOutcome:
	"""
	Poll a text sample until it stops changing.

	sample() returns the current text, or None when the region does not
	exist yet (such polls are skipped). The text is stable once it has been
	seen unchanged and non-empty on required_repeats consecutive polls after
	the first sighting. A sample still pending at the deadline is cancelled,
	so the call never outlives timeout_ms by more than scheduling jitter.

	Returns:
		PollOutcome with the stable text, or succeeded=False on timeout
	"""
	loop = asyncio.get_running_loop()
	started = loop.time()
	deadline = started + timeout_ms / 1000
	interval = interval_ms / 1000

	def remaining() -> float:
		return max(0.0, deadline - loop.time())

	previous = ""
	repeats = 0
	polls = 0

	while loop.time() < deadline:
		try:
			current = await asyncio.wait_for(sample(), timeout=remaining())
		except asyncio.TimeoutError:
			logger.debug("Sampling the output region ran past the stabilization bound")
			break
		polls += 1

		if current is None:
			await asyncio.sleep(min(interval, remaining()))
			continue

		if current == previous and current:
			repeats += 1
		else:
			repeats = 0

		if repeats >= required_repeats:
			elapsed = int((loop.time() - started) * 1000)
			logger.info(f"Text stabilized after {elapsed}ms.")
			return PollOutcome(succeeded=True, value=current, elapsed_ms=elapsed, polls=polls)

		previous = current
		await asyncio.sleep(min(interval, remaining()))

	return PollOutcome(
		succeeded=False,
		value=previous,
		elapsed_ms=int((loop.time() - started) * 1000),
		polls=polls,
	)
