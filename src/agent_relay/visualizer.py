"""Rich views for plans, surfaces and live run events."""

from typing import Optional

from rich.console import Console
from rich.markdown import Markdown
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from .events import Event, EventType
from .models import PlanResult, SharedContext
from .surfaces import SurfaceConfig

EVENT_STYLES = {
	EventType.LOG: "dim",
	EventType.REVIEW: "cyan",
	EventType.RESULT: "green",
	EventType.STATUS: "bold",
	EventType.ERROR: "bold red",
}


def truncate(text: str, max_len: int = 80) -> str:
	"""Shorten text for table display."""
	text = " ".join(text.split())
	if len(text) <= max_len:
		return text
	return text[:max_len - 3] + "..."


def render_plan(result: PlanResult, console: Optional[Console] = None) -> None:
	"""Render a proposed plan as a table."""
	console = console or Console()
	console.print(Panel(result.clarified_objective, title="Clarified objective", border_style="cyan"))

	table = Table(title="Plan")
	table.add_column("#", justify="right", style="dim")
	table.add_column("Agent", style="bold")
	table.add_column("Role")
	table.add_column("Task")
	for i, agent in enumerate(result.plan, start=1):
		table.add_row(str(i), agent.name, agent.role, agent.task)
	console.print(table)


def render_surfaces(surfaces: list[SurfaceConfig], console: Optional[Console] = None) -> None:
	"""Render the surface table."""
	console = console or Console()
	table = Table(title="Target surfaces")
	table.add_column("Surface", style="bold")
	table.add_column("URL")
	table.add_column("Extraction")
	for surface in surfaces:
		table.add_row(surface.name, surface.url, surface.extraction.value)
	console.print(table)


def render_run_summary(context: SharedContext, console: Optional[Console] = None) -> None:
	"""Render the history of a finished run."""
	console = console or Console()
	table = Table(title=f"Run history ({context.status.value})")
	table.add_column("#", justify="right", style="dim")
	table.add_column("Agent", style="bold")
	table.add_column("Task")
	table.add_column("Result")
	for i, entry in enumerate(context.history, start=1):
		table.add_row(str(i), entry.agent, truncate(entry.task, 40), truncate(entry.result))
	console.print(table)


class ConsoleSink:
	"""Event sink that prints each event as it arrives."""

	def __init__(self, console: Optional[Console] = None, show_logs: bool = True):
		self.console = console or Console()
		self.show_logs = show_logs

	def emit(self, event: Event) -> None:
		style = EVENT_STYLES.get(event.type, "")
		source = event.source or event.type.value

		if event.type == EventType.LOG:
			if self.show_logs:
				self.console.print(f"[{style}]{escape(source)}: {escape(event.message or '')}[/{style}]")
		elif event.type == EventType.REVIEW:
			verdict = "approved" if event.approved else "changes requested"
			self.console.print(f"[{style}]Review ({verdict}):[/{style}] {escape(event.feedback or '')}")
		elif event.type == EventType.RESULT:
			self.console.print(Panel(
				Markdown(event.output or ""),
				title=source,
				border_style=style,
			))
		elif event.type == EventType.STATUS:
			self.console.print(f"[{style}]Status: {event.status}[/{style}]")
		else:
			self.console.print(f"[{style}]Error from {escape(source)}: {escape(event.message or '')}[/{style}]")
