"""Shared fakes for agent-relay tests: Playwright pages, contexts and chat clients."""

from typing import Any, Callable, Iterable, Iterator, Optional, Union

from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from agent_relay.automation.sessions import Session, SessionPool
from agent_relay.config import RunnerTimeouts
from agent_relay.models import AgentSpec
from agent_relay.surfaces import ExtractionStrategy, SurfaceConfig, SurfaceRegistry

FAST_TIMEOUTS = RunnerTimeouts(
	navigation=1000,
	input_ready=1000,
	submit=1000,
	start=1000,
	finish=1000,
	stabilize=300,
	poll_interval=1,
	stable_repeats=3,
)

LAST_SURFACE = SurfaceConfig(
	name="fakeLast",
	url="https://chat.example/last",
	input_selector="textarea",
	run_selector="button.run",
	working_selector="button.stop",
	response_selector="div.answer",
)

LISTING_SURFACE = SurfaceConfig(
	name="fakeListing",
	url="https://chat.example/listing",
	input_selector="div.input",
	run_selector="button.send",
	working_selector="button.halt",
	response_selector="div.turn",
	extraction=ExtractionStrategy.ALL_AFTER_FIRST,
)


def fake_registry() -> SurfaceRegistry:
	"""Registry holding the built-in rows plus the two fake surfaces."""
	return SurfaceRegistry({
		surface.name: surface.to_dict()
		for surface in (LAST_SURFACE, LISTING_SURFACE)
	})


def make_agents(count: int = 2, surface: str = "fakeLast") -> list[AgentSpec]:
	"""Create agents with ids 1..count on one surface."""
	return [
		AgentSpec(
			id=i,
			name=f"Agent {i}",
			role=f"Role {i}",
			task=f"Task {i}",
			surface=surface,
		)
		for i in range(1, count + 1)
	]


class FakeLocator:
	"""The subset of playwright's Locator used by the runner."""

	def __init__(self, page: "FakePage", selector: str, index: Optional[int] = None):
		self.page = page
		self.selector = selector
		self.index = index

	@property
	def last(self) -> "FakeLocator":
		return FakeLocator(self.page, self.selector, -1)

	async def fill(self, text: str) -> None:
		self.page.filled.append((self.selector, text))

	async def count(self) -> int:
		return len(self.page.elements(self.selector))

	async def all(self) -> list["FakeLocator"]:
		return [
			FakeLocator(self.page, self.selector, i)
			for i in range(len(self.page.elements(self.selector)))
		]

	async def inner_html(self) -> str:
		elements = self.page.elements(self.selector)
		return elements[self.index if self.index is not None else 0]

	async def text_content(self) -> Optional[str]:
		return self.page.sample_text(self.selector)


class FakePage:
	"""
	A scripted chat page.

	responses: HTML of the elements matching the surface's output region.
	samples: texts returned by successive stabilization polls; when exhausted
	the last one repeats. Defaults to the last response.
	never: selectors, or (selector, state) pairs, whose waits time out.
	"""

	def __init__(
		self,
		responses: Optional[list[str]] = None,
		samples: Optional[Iterable[str]] = None,
		never: Iterable[Union[str, tuple[str, str]]] = (),
		response_selector: str = "div.answer",
		goto_error: Optional[Exception] = None,
	):
		self.responses = list(responses if responses is not None else ["<p>Answer</p>"])
		self.response_selector = response_selector
		self._samples: Optional[Iterator[str]] = iter(samples) if samples is not None else None
		self._last_sample: Optional[str] = None
		self.never = set(never)
		self.goto_error = goto_error
		self.url = "about:blank"
		self.filled: list[tuple[str, str]] = []
		self.clicks: list[str] = []
		self.waits: list[tuple[str, str]] = []
		self.polls = 0

	def elements(self, selector: str) -> list[str]:
		if selector == self.response_selector:
			return self.responses
		return ["<div></div>"]

	def sample_text(self, selector: str) -> Optional[str]:
		if selector != self.response_selector:
			return ""
		self.polls += 1
		if self._samples is None:
			return self.responses[-1]
		try:
			self._last_sample = next(self._samples)
		except StopIteration:
			pass
		return self._last_sample

	def locator(self, selector: str) -> FakeLocator:
		return FakeLocator(self, selector)

	async def goto(self, url: str, timeout: int = 0, wait_until: str = "load") -> None:
		if self.goto_error is not None:
			raise self.goto_error
		self.url = url

	async def wait_for_selector(self, selector: str, state: str = "visible", timeout: int = 0) -> None:
		self.waits.append((selector, state))
		if selector in self.never or (selector, state) in self.never:
			raise PlaywrightTimeoutError(f"Timeout {timeout}ms exceeded.")

	async def click(self, selector: str) -> None:
		self.clicks.append(selector)


class FakeContext:
	"""A browser context handing out FakePages."""

	def __init__(self, page_factory: Optional[Callable[[], FakePage]] = None):
		self.page_factory = page_factory or FakePage
		self.pages: list[FakePage] = []
		self.close_count = 0

	async def new_page(self) -> FakePage:
		page = self.page_factory()
		self.pages.append(page)
		return page

	async def close(self) -> None:
		self.close_count += 1


class FakeLauncher:
	"""Launcher returning one FakeContext per launch."""

	def __init__(
		self,
		page_factory: Optional[Callable[[], FakePage]] = None,
		error: Optional[Exception] = None,
	):
		self.page_factory = page_factory
		self.error = error
		self.contexts: list[FakeContext] = []

	async def __call__(self) -> tuple[FakeContext, None]:
		if self.error is not None:
			raise self.error
		context = FakeContext(self.page_factory)
		self.contexts.append(context)
		return context, None

	@property
	def total_closes(self) -> int:
		return sum(c.close_count for c in self.contexts)


def make_pool(launcher: Optional[FakeLauncher] = None) -> SessionPool:
	return SessionPool(fake_registry(), launcher or FakeLauncher(), FAST_TIMEOUTS)


def make_session(page: FakePage, surface: SurfaceConfig = LAST_SURFACE, agent_id: int = 1) -> Session:
	return Session(agent_id=agent_id, page=page, surface=surface)


Reply = Union[str, Exception, Callable[[list[dict[str, str]]], str]]


class FakeChatClient:
	"""
	Chat client answering by model name.

	Each reply may be a string, an exception to raise, or a callable taking
	the messages. Calls are recorded as (model, messages) pairs.
	"""

	def __init__(self, replies: dict[str, Reply]):
		self.replies = replies
		self.calls: list[tuple[str, list[dict[str, str]]]] = []

	async def complete(
		self,
		messages: list[dict[str, str]],
		model: str,
		temperature: float = 0.0,
	) -> str:
		self.calls.append((model, messages))
		reply = self.replies[model]
		if isinstance(reply, Exception):
			raise reply
		if callable(reply):
			return reply(messages)
		return reply

	def calls_to(self, model: str) -> list[list[dict[str, str]]]:
		return [messages for m, messages in self.calls if m == model]


class FakeRunner:
	"""Stands in for TaskRunner, answering with a numbered output per call."""

	def __init__(self, fail_on_call: Optional[int] = None, error: Optional[Exception] = None):
		self.calls: list[tuple[int, str, str]] = []
		self.fail_on_call = fail_on_call
		self.error = error

	async def run(self, session: Any, system_prompt: str, task_input: str) -> str:
		self.calls.append((session.agent_id, system_prompt, task_input))
		if self.fail_on_call is not None and len(self.calls) == self.fail_on_call:
			raise self.error or RuntimeError("runner failed")
		return f"output {len(self.calls)} from agent {session.agent_id} [src](http://x)"
