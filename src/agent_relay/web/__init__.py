"""HTTP server exposing create-plan, execute-plan and the live event stream."""

from __future__ import annotations

from ..config import Config


def create_app(config: Config) -> object:
	"""Create the Starlette ASGI application."""
	from .app import build_app

	return build_app(config)


def run_server(config: Config, host: str | None = None, port: int | None = None) -> None:
	"""Run the relay server with uvicorn."""
	import uvicorn

	host = host or config.host
	port = port or config.port
	app = create_app(config)

	print(f"Relay server running at http://{host}:{port}")
	print("Press Ctrl+C to stop.")
	uvicorn.run(app, host=host, port=port, log_level="warning")
