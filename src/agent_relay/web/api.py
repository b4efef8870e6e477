"""JSON API endpoints and SSE stream for the relay server."""

from __future__ import annotations

import asyncio
import json
import logging
from typing import AsyncGenerator

from pydantic import ValidationError
from starlette.requests import Request
from starlette.responses import JSONResponse, StreamingResponse

from ..events import EventBroadcaster, error_event, log_event
from ..models import ExecutePlanRequest
from ..orchestrator import PlanOrchestrator
from ..surfaces import SurfaceRegistry

logger = logging.getLogger(__name__)


def get_orchestrator(request: Request) -> PlanOrchestrator:
	"""Get the PlanOrchestrator from app state."""
	return request.app.state.orchestrator


def get_broadcaster(request: Request) -> EventBroadcaster:
	"""Get the EventBroadcaster from app state."""
	return request.app.state.broadcaster


async def _read_json(request: Request) -> dict | None:
	try:
		body = await request.json()
	except json.JSONDecodeError:
		return None
	return body if isinstance(body, dict) else None


async def api_status(request: Request) -> JSONResponse:
	"""Liveness plus the number of runs still executing."""
	runs: set[asyncio.Task] = request.app.state.runs
	return JSONResponse({
		"status": "ok",
		"active_runs": sum(1 for t in runs if not t.done()),
		"subscribers": get_broadcaster(request).subscriber_count,
	})


async def api_surfaces(request: Request) -> JSONResponse:
	"""Configured target surfaces."""
	surfaces: SurfaceRegistry = request.app.state.surfaces
	return JSONResponse([s.to_dict() for s in surfaces.all()])


async def api_create_plan(request: Request) -> JSONResponse:
	"""Clarify an objective and return a proposed plan."""
	body = await _read_json(request)
	prompt = (body or {}).get("prompt")
	if not isinstance(prompt, str) or not prompt.strip():
		return JSONResponse({"error": "A prompt is required to create a plan."}, status_code=400)

	try:
		result = await get_orchestrator(request).create_plan(prompt)
	except Exception as e:
		logger.exception("Error in /api/create-plan")
		get_broadcaster(request).emit(error_event("Manager", f"Failed to create plan: {e}"))
		return JSONResponse(
			{"error": "Internal server error while creating plan"}, status_code=500,
		)

	return JSONResponse(result.model_dump(mode="json", by_alias=True))


async def api_execute_plan(request: Request) -> JSONResponse:
	"""Start a run in the background. Progress is only reported via the stream."""
	body = await _read_json(request)
	if body is None:
		return JSONResponse({"error": "Request body must be a JSON object."}, status_code=400)

	try:
		payload = ExecutePlanRequest.model_validate(body)
	except ValidationError as e:
		return JSONResponse(
			{
				"error": "A clarified objective and a valid agents configuration are required.",
				"details": e.errors(include_url=False, include_context=False),
			},
			status_code=400,
		)

	orchestrator = get_orchestrator(request)
	runs: set[asyncio.Task] = request.app.state.runs
	task = asyncio.create_task(
		orchestrator.execute_plan(payload.objective, payload.agents, payload.max_iterations)
	)
	runs.add(task)
	task.add_done_callback(runs.discard)

	return JSONResponse(
		{"message": "Execution started. See live log for updates."}, status_code=202,
	)


async def _sse_generator(broadcaster: EventBroadcaster) -> AsyncGenerator[str, None]:
	"""Yield sink events as SSE messages, with a heartbeat when idle."""
	queue = broadcaster.subscribe()
	try:
		welcome = log_event("Server", "Connection established. Ready to receive live updates.")
		yield f"event: connected\ndata: {welcome.to_json()}\n\n"

		while True:
			try:
				event = await asyncio.wait_for(queue.get(), timeout=15)
			except asyncio.TimeoutError:
				# Heartbeat to keep connection alive
				yield ": heartbeat\n\n"
				continue
			yield f"event: {event.type.value}\ndata: {event.to_json()}\n\n"
	finally:
		broadcaster.unsubscribe(queue)


async def api_stream(request: Request) -> StreamingResponse:
	"""SSE endpoint - streams run events as they are emitted."""
	return StreamingResponse(
		_sse_generator(get_broadcaster(request)),
		media_type="text/event-stream",
		headers={
			"Cache-Control": "no-cache",
			"Connection": "keep-alive",
			"X-Accel-Buffering": "no",
		},
	)
