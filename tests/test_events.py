"""Tests for the progress event channel."""

import json

import pytest

from agent_relay.events import (
	Event,
	EventBroadcaster,
	EventType,
	RecordingSink,
	error_event,
	log_event,
	status_event,
)
from agent_relay.web.api import _sse_generator


def test_wire_form_omits_unset_fields():
	message = log_event("Manager", "hello").to_message()
	assert message["type"] == "log"
	assert message["source"] == "Manager"
	assert message["message"] == "hello"
	assert "output" not in message
	assert "timestamp" in message


def test_review_event_keeps_false_approval():
	event = Event(type=EventType.REVIEW, source="ReviewerAgent", approved=False, feedback="fix")
	data = json.loads(event.to_json())
	assert data["approved"] is False
	assert data["feedback"] == "fix"


def test_helpers():
	assert status_event("complete").status == "complete"
	assert error_event("Manager", "boom").type == EventType.ERROR


class TestBroadcaster:
	@pytest.mark.asyncio
	async def test_fan_out(self):
		broadcaster = EventBroadcaster()
		a = broadcaster.subscribe()
		b = broadcaster.subscribe()

		broadcaster.emit(log_event("Manager", "hi"))

		assert a.get_nowait().message == "hi"
		assert b.get_nowait().message == "hi"

	def test_emit_without_subscribers(self):
		EventBroadcaster().emit(status_event("complete"))

	@pytest.mark.asyncio
	async def test_full_queue_drops_events(self):
		broadcaster = EventBroadcaster(queue_size=1)
		queue = broadcaster.subscribe()

		broadcaster.emit(log_event("Manager", "first"))
		broadcaster.emit(log_event("Manager", "second"))

		assert queue.qsize() == 1
		assert queue.get_nowait().message == "first"

	@pytest.mark.asyncio
	async def test_unsubscribe(self):
		broadcaster = EventBroadcaster()
		queue = broadcaster.subscribe()
		broadcaster.unsubscribe(queue)
		broadcaster.emit(log_event("Manager", "hi"))
		assert queue.empty()
		assert broadcaster.subscriber_count == 0


@pytest.mark.asyncio
async def test_sse_stream_frames():
	broadcaster = EventBroadcaster()
	stream = _sse_generator(broadcaster)

	welcome = await stream.__anext__()
	assert welcome.startswith("event: connected\ndata: ")
	assert broadcaster.subscriber_count == 1

	broadcaster.emit(status_event("complete"))
	frame = await stream.__anext__()
	assert frame.startswith("event: status\n")
	assert json.loads(frame.split("data: ", 1)[1])["status"] == "complete"

	await stream.aclose()
	assert broadcaster.subscriber_count == 0


def test_recording_sink_filters_by_type():
	sink = RecordingSink()
	sink.emit(log_event("A", "x"))
	sink.emit(status_event("complete"))
	assert [e.status for e in sink.of_type(EventType.STATUS)] == ["complete"]
