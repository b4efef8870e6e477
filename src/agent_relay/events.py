"""
Progress events - the one-way channel from a run to its observers.

Emitting never blocks and never fails because nobody is listening: each
subscriber gets its own bounded queue and a full queue simply drops the event.
"""

import asyncio
import json
import logging
from datetime import datetime
from enum import Enum
from typing import Any, Optional, Protocol

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)


class EventType(str, Enum):
	"""Kinds of progress events."""
	LOG = "log"
	REVIEW = "review"
	RESULT = "result"
	STATUS = "status"
	ERROR = "error"


class Event(BaseModel):
	"""A single progress event."""
	type: EventType
	source: Optional[str] = None
	message: Optional[str] = None
	output: Optional[str] = None
	feedback: Optional[str] = None
	approved: Optional[bool] = None
	status: Optional[str] = None
	timestamp: str = Field(default_factory=lambda: datetime.now().isoformat())

	def to_message(self) -> dict[str, Any]:
		"""Wire form: only the fields that are set."""
		return self.model_dump(mode="json", exclude_none=True)

	def to_json(self) -> str:
		return json.dumps(self.to_message())


class EventSink(Protocol):
	"""Anything that accepts progress events."""

	def emit(self, event: Event) -> None:
		...


def log_event(source: str, message: str) -> Event:
	return Event(type=EventType.LOG, source=source, message=message)


def status_event(status: str) -> Event:
	return Event(type=EventType.STATUS, status=status)


def error_event(source: str, message: str) -> Event:
	return Event(type=EventType.ERROR, source=source, message=message)


class EventBroadcaster:
	"""Fan-out of events to any number of async subscribers."""

	def __init__(self, queue_size: int = 1000):
		self.queue_size = queue_size
		self._subscribers: set[asyncio.Queue[Event]] = set()

	@property
	def subscriber_count(self) -> int:
		return len(self._subscribers)

	def subscribe(self) -> asyncio.Queue[Event]:
		"""Register a new subscriber queue."""
		queue: asyncio.Queue[Event] = asyncio.Queue(maxsize=self.queue_size)
		self._subscribers.add(queue)
		return queue

	def unsubscribe(self, queue: asyncio.Queue[Event]) -> None:
		self._subscribers.discard(queue)

	def emit(self, event: Event) -> None:
		"""Deliver an event to every subscriber without waiting."""
		logger.info(f"[{event.type.value}] {event.source or '-'}: {_describe(event)}")
		if not self._subscribers:
			logger.debug("Event emitted, but no subscribers are connected.")
			return

		for queue in list(self._subscribers):
			try:
				queue.put_nowait(event)
			except asyncio.QueueFull:
				logger.warning("Subscriber queue full, dropping event")


class RecordingSink:
	"""Keeps every event in memory. Used by the CLI and tests."""

	def __init__(self):
		self.events: list[Event] = []

	def emit(self, event: Event) -> None:
		self.events.append(event)

	def of_type(self, event_type: EventType) -> list[Event]:
		return [e for e in self.events if e.type == event_type]


def _describe(event: Event) -> str:
	"""Short human-readable summary for log lines."""
	if event.type == EventType.REVIEW:
		return f"approved={event.approved} feedback={event.feedback!r}"
	if event.type == EventType.STATUS:
		return event.status or ""
	text = event.message or event.output or ""
	return text if len(text) <= 200 else text[:197] + "..."
