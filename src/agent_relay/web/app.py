"""Starlette app with route assembly."""

from __future__ import annotations

import logging
from typing import Optional

from starlette.applications import Starlette
from starlette.routing import Route

from ..config import Config
from ..events import EventBroadcaster
from ..orchestrator import PlanOrchestrator, build_orchestrator
from ..surfaces import SurfaceRegistry
from .api import (
	api_create_plan,
	api_execute_plan,
	api_status,
	api_stream,
	api_surfaces,
)

logger = logging.getLogger(__name__)


def build_app(
	config: Config,
	orchestrator: Optional[PlanOrchestrator] = None,
	broadcaster: Optional[EventBroadcaster] = None,
) -> Starlette:
	"""Build and return the Starlette ASGI app."""
	routes = [
		Route("/api/status", api_status),
		Route("/api/surfaces", api_surfaces),
		Route("/api/create-plan", api_create_plan, methods=["POST"]),
		Route("/api/execute-plan", api_execute_plan, methods=["POST"]),
		Route("/api/stream", api_stream),
	]

	broadcaster = broadcaster or EventBroadcaster()

	app = Starlette(routes=routes)
	app.state.config = config
	app.state.broadcaster = broadcaster
	app.state.surfaces = SurfaceRegistry(config.surfaces)
	app.state.orchestrator = orchestrator or build_orchestrator(config, broadcaster)
	app.state.runs = set()
	logger.debug(f"Relay app built with {len(app.state.surfaces.names())} surfaces")
	return app
