"""Configuration system using platformdirs for cross-platform paths."""

import os
import tomllib
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

import platformdirs

APP_NAME = "agent-relay"
APP_AUTHOR = "agent-relay"

DEFAULT_LLM_BASE_URL = "https://api.groq.com/openai/v1"


@dataclass
class RunnerTimeouts:
	"""Per-stage bounds for the browser automation protocol, in milliseconds."""

	navigation: int = 60000
	input_ready: int = 30000
	submit: int = 10000
	start: int = 20000
	finish: int = 120000
	stabilize: int = 15000
	poll_interval: int = 500
	stable_repeats: int = 3


@dataclass
class ModelSettings:
	"""Model used by each collaborator, plus the completion request timeout in seconds."""

	clarify: str = "llama3-70b-8192"
	plan: str = "moonshotai/kimi-k2-instruct"
	prompt: str = "deepseek-r1-distill-llama-70b"
	review: str = "llama3-70b-8192"
	finalize: str = "llama3-70b-8192"
	request_timeout: int = 120


@dataclass
class Config:
	"""Central configuration with XDG/platform conventions."""

	config_dir: Path = field(default_factory=lambda: Path(platformdirs.user_config_dir(APP_NAME)))
	data_dir: Path = field(default_factory=lambda: Path(platformdirs.user_data_dir(APP_NAME)))

	# Derived paths
	log_dir: Path = field(init=False)
	profile_dir: Path = field(init=False)

	# User-configurable
	headless: bool = False
	host: str = "127.0.0.1"
	port: int = 8000
	llm_base_url: str = DEFAULT_LLM_BASE_URL
	api_key: str = field(
		default_factory=lambda: os.getenv("AGENT_RELAY_API_KEY") or os.getenv("GROQ_API_KEY", "")
	)
	timeouts: RunnerTimeouts = field(default_factory=RunnerTimeouts)
	models: ModelSettings = field(default_factory=ModelSettings)
	surfaces: dict[str, dict[str, Any]] = field(default_factory=dict)

	def __post_init__(self) -> None:
		self.log_dir = self.data_dir / "logs"
		self.profile_dir = self.data_dir / "browser_profile"

	def ensure_dirs(self) -> None:
		"""Create all required directories."""
		self.config_dir.mkdir(parents=True, exist_ok=True)
		self.data_dir.mkdir(parents=True, exist_ok=True)
		self.log_dir.mkdir(parents=True, exist_ok=True)
		self.profile_dir.mkdir(parents=True, exist_ok=True)


def _parse_bool(value: str) -> bool:
	return value.strip().lower() in ("1", "true", "yes", "on")


def _apply_env_overrides(config: Config) -> Config:
	"""Apply AGENT_RELAY_* environment variable overrides."""
	path_map = {
		"AGENT_RELAY_CONFIG_DIR": "config_dir",
		"AGENT_RELAY_DATA_DIR": "data_dir",
	}
	for env_key, attr in path_map.items():
		val = os.getenv(env_key)
		if val:
			setattr(config, attr, Path(val))

	if os.getenv("AGENT_RELAY_HEADLESS"):
		config.headless = _parse_bool(os.environ["AGENT_RELAY_HEADLESS"])
	if os.getenv("AGENT_RELAY_HOST"):
		config.host = os.environ["AGENT_RELAY_HOST"]
	if os.getenv("AGENT_RELAY_PORT"):
		config.port = int(os.environ["AGENT_RELAY_PORT"])
	if os.getenv("AGENT_RELAY_LLM_BASE_URL"):
		config.llm_base_url = os.environ["AGENT_RELAY_LLM_BASE_URL"]
	api_key = os.getenv("AGENT_RELAY_API_KEY") or os.getenv("GROQ_API_KEY")
	if api_key:
		config.api_key = api_key

	# Recompute derived paths after overrides
	config.__post_init__()
	return config


def _update_section(target: object, values: dict[str, Any]) -> None:
	"""Copy known keys of a toml table onto a settings dataclass."""
	known = {f.name for f in fields(target)}
	for key, val in values.items():
		if key in known:
			setattr(target, key, val)


def _apply_toml(config: Config) -> Config:
	"""Apply config.toml overrides if file exists."""
	toml_path = config.config_dir / "config.toml"
	if not toml_path.exists():
		return config

	with open(toml_path, "rb") as f:
		data = tomllib.load(f)

	path_fields = {"config_dir", "data_dir"}
	for key, val in data.items():
		if key == "timeouts":
			_update_section(config.timeouts, val)
		elif key == "models":
			_update_section(config.models, val)
		elif key == "surfaces":
			config.surfaces.update(val)
		elif hasattr(config, key):
			if key in path_fields:
				setattr(config, key, Path(os.path.expanduser(val)))
			else:
				setattr(config, key, val)

	# Recompute derived paths after toml overrides
	config.__post_init__()
	return config


def load_config() -> Config:
	"""Load config with precedence: env vars > config.toml > defaults."""
	config = Config()
	# Env first so AGENT_RELAY_CONFIG_DIR decides which config.toml is read
	config = _apply_env_overrides(config)
	config = _apply_toml(config)
	config = _apply_env_overrides(config)
	config.ensure_dirs()
	return config

