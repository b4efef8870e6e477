"""CLI for agent-relay: serve, plan, run, surfaces and doctor commands."""

import argparse
import asyncio
import json
import os
import platform
import sys
import tomllib
from importlib.metadata import version as pkg_version
from pathlib import Path

from dotenv import load_dotenv
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape

from .config import Config, _apply_env_overrides, load_config
from .errors import ConfigurationError, RelayError
from .logging_config import setup_logging
from .models import AgentSpec, ExecutePlanRequest, RunStatus
from .orchestrator import build_orchestrator
from .surfaces import SurfaceRegistry
from .visualizer import ConsoleSink, render_plan, render_run_summary, render_surfaces

CORE_DEPS = [
	"playwright",
	"markdownify",
	"aiohttp",
	"pydantic",
	"platformdirs",
	"python-dotenv",
	"rich",
	"starlette",
	"uvicorn",
]


def cmd_serve(args: argparse.Namespace) -> None:
	"""Run the HTTP relay server."""
	from .web import run_server

	config = load_config()
	run_server(config, host=args.host, port=args.port)


def build_execute_payload(
	clarified_objective: str,
	plan: list,
	surface: str,
	max_iterations: int = 1,
) -> dict:
	"""Turn a proposed plan into an execute-plan payload, every agent on one surface."""
	agents = [
		AgentSpec(id=i, name=a.name, role=a.role, task=a.task, surface=surface)
		for i, a in enumerate(plan, start=1)
	]
	request = ExecutePlanRequest(
		objective=clarified_objective,
		agents=agents,
		max_iterations=max_iterations,
	)
	return request.model_dump(mode="json", by_alias=True)


def cmd_plan(args: argparse.Namespace) -> None:
	"""Clarify an objective, propose a plan and write it as an execute-plan payload."""
	config = load_config()
	console = Console()

	surfaces = SurfaceRegistry(config.surfaces)
	if args.surface not in surfaces:
		console.print(f"[red]Unknown surface: {args.surface}[/red] (see 'agent-relay surfaces')")
		sys.exit(2)

	orchestrator = build_orchestrator(config, ConsoleSink(console, show_logs=args.verbose))
	try:
		result = asyncio.run(orchestrator.create_plan(args.objective))
	except RelayError as e:
		console.print(f"[red]Failed to create plan:[/red] {escape(str(e))}")
		sys.exit(1)
	render_plan(result, console)

	payload = build_execute_payload(
		result.clarified_objective, result.plan, args.surface, args.iterations,
	)
	output = Path(args.output)
	output.write_text(json.dumps(payload, indent=2))
	console.print(f"Plan written to {output}. Edit surfaces per agent, then: agent-relay run {output}")


def load_execute_payload(path: Path, iterations: int | None = None) -> ExecutePlanRequest:
	"""Read and validate an execute-plan payload file."""
	data = json.loads(path.read_text())
	if iterations is not None:
		data["maxIterations"] = iterations
	return ExecutePlanRequest.model_validate(data)


def cmd_run(args: argparse.Namespace) -> None:
	"""Execute a plan file in the foreground, printing events as they arrive."""
	config = load_config()
	console = Console()

	try:
		request = load_execute_payload(Path(args.plan_file), args.iterations)
	except (OSError, json.JSONDecodeError, ValidationError) as e:
		console.print(f"[red]Invalid plan file {args.plan_file}:[/red] {e}")
		sys.exit(2)

	orchestrator = build_orchestrator(config, ConsoleSink(console))
	context = asyncio.run(orchestrator.execute_plan(
		request.objective, request.agents, request.max_iterations,
	))
	render_run_summary(context, console)

	if context.status != RunStatus.COMPLETE:
		sys.exit(1)


def cmd_surfaces(args: argparse.Namespace) -> None:
	"""List configured target surfaces."""
	config = load_config()
	render_surfaces(SurfaceRegistry(config.surfaces).all())


def _check_config_toml(config_dir: Path) -> tuple[str, str | None]:
	"""Validate config.toml. Returns (status, issue_or_none)."""
	toml_path = config_dir / "config.toml"
	if not toml_path.exists():
		return "not found (optional)", None
	try:
		with open(toml_path, "rb") as f:
			tomllib.load(f)
		return "valid", None
	except tomllib.TOMLDecodeError as e:
		msg = f"config.toml parse error: {e}"
		return f"INVALID ({e})", msg


def _check_surfaces(config: Config) -> tuple[str, str | None]:
	"""Validate extra surface rows. Returns (status, issue_or_none)."""
	try:
		registry = SurfaceRegistry(config.surfaces)
	except ConfigurationError as e:
		return f"INVALID ({e})", str(e)
	return f"{len(registry.names())} surfaces", None


def cmd_doctor(args: argparse.Namespace) -> None:
	"""Health check - verify installation and configuration."""
	print("agent-relay doctor")
	print(f"{'=' * 40}")

	issues: list[str] = []

	py_ver = f"{sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}"
	print(f"  Python:       {py_ver}")
	print(f"  Platform:     {platform.system()} {platform.machine()}")
	print()

	print("  Core deps:")
	for dep in CORE_DEPS:
		try:
			dep_ver = pkg_version(dep)
			print(f"    {dep:22s} {dep_ver}")
		except Exception:
			print(f"    {dep:22s} NOT INSTALLED")
			issues.append(f"{dep} package not installed")
	print()

	config_dir = _apply_env_overrides(Config()).config_dir
	toml_status, toml_issue = _check_config_toml(config_dir)
	print("  Config:")
	print(f"    config.toml:         {toml_status}")
	if toml_issue:
		issues.append(toml_issue)
	else:
		config = load_config()
		print(f"    data dir:            {config.data_dir}")
		print(f"    browser profile:     {config.profile_dir}")
		print(f"    model endpoint:      {config.llm_base_url}")
		print(f"    api key:             {'set' if config.api_key else 'MISSING'}")
		if not config.api_key:
			issues.append("No API key: set AGENT_RELAY_API_KEY or GROQ_API_KEY")

		surfaces_status, surfaces_issue = _check_surfaces(config)
		print(f"    surfaces:            {surfaces_status}")
		if surfaces_issue:
			issues.append(surfaces_issue)
	print()

	if issues:
		print(f"  {len(issues)} issue(s) found:")
		for issue in issues:
			print(f"    - {issue}")
		sys.exit(1)
	else:
		print("  All checks passed.")


def main() -> None:
	"""CLI entry point."""
	parser = argparse.ArgumentParser(
		prog="agent-relay",
		description="Relay a work artifact through browser-driven chatbot agents",
	)
	parser.add_argument("--log-level", default=None, help="DEBUG, INFO, WARNING or ERROR")
	subparsers = parser.add_subparsers(dest="command")

	# serve
	serve_parser = subparsers.add_parser("serve", help="Run the HTTP relay server")
	serve_parser.add_argument("--host", type=str, default=None, help="Bind address")
	serve_parser.add_argument("--port", type=int, default=None, help="Server port")
	serve_parser.set_defaults(func=cmd_serve)

	# plan
	plan_parser = subparsers.add_parser("plan", help="Clarify an objective and propose agents")
	plan_parser.add_argument("objective", type=str, help="What the team should achieve")
	plan_parser.add_argument("--output", "-o", default="plan.json", help="Where to write the plan")
	plan_parser.add_argument(
		"--surface", default="googleAIStudio", help="Surface assigned to every agent",
	)
	plan_parser.add_argument("--iterations", type=int, default=1, help="Refinement iterations")
	plan_parser.add_argument("--verbose", "-v", action="store_true", help="Show log events")
	plan_parser.set_defaults(func=cmd_plan)

	# run
	run_parser = subparsers.add_parser("run", help="Execute a plan file")
	run_parser.add_argument("plan_file", type=str, help="Plan JSON written by 'plan'")
	run_parser.add_argument("--iterations", type=int, default=None, help="Override iterations")
	run_parser.set_defaults(func=cmd_run)

	# surfaces
	surfaces_parser = subparsers.add_parser("surfaces", help="List target surfaces")
	surfaces_parser.set_defaults(func=cmd_surfaces)

	# doctor
	doctor_parser = subparsers.add_parser("doctor", help="Health check")
	doctor_parser.set_defaults(func=cmd_doctor)

	args = parser.parse_args()

	if not args.command:
		parser.print_help()
		sys.exit(1)

	load_dotenv()
	# Rich output goes to the console; keep log lines quiet unless asked for
	setup_logging(
		level=args.log_level or os.getenv("LOG_LEVEL", "WARNING"),
		log_dir=_apply_env_overrides(Config()).log_dir,
	)

	args.func(args)
