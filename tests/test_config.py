"""Tests for the configuration system."""

import os
from pathlib import Path
from unittest.mock import patch

from agent_relay.config import (
	Config,
	ModelSettings,
	RunnerTimeouts,
	_apply_env_overrides,
	load_config,
)


def test_config_defaults(tmp_path: Path):
	"""Derived paths hang off the data dir."""
	config = Config(config_dir=tmp_path / "config", data_dir=tmp_path / "data")
	assert config.log_dir == tmp_path / "data" / "logs"
	assert config.profile_dir == tmp_path / "data" / "browser_profile"
	assert config.headless is False
	assert config.port == 8000
	assert config.timeouts == RunnerTimeouts()
	assert config.models == ModelSettings()


def test_default_dirs_are_absolute():
	config = Config()
	assert config.config_dir.is_absolute()
	assert config.data_dir.is_absolute()


def test_runner_timeout_defaults():
	"""Stage bounds match the documented protocol."""
	t = RunnerTimeouts()
	assert t.submit == 10000
	assert t.start == 20000
	assert t.finish == 120000
	assert t.stabilize == 15000
	assert t.poll_interval == 500
	assert t.stable_repeats == 3


def test_config_env_overrides():
	"""Environment variables should override defaults."""
	config = Config()
	with patch.dict(os.environ, {
		"AGENT_RELAY_DATA_DIR": "/tmp/relay-data",
		"AGENT_RELAY_CONFIG_DIR": "/tmp/relay-config",
		"AGENT_RELAY_HEADLESS": "true",
		"AGENT_RELAY_PORT": "9100",
		"AGENT_RELAY_API_KEY": "sk-test",
		"AGENT_RELAY_LLM_BASE_URL": "http://localhost:11434/v1",
	}):
		config = _apply_env_overrides(config)
		assert config.data_dir == Path("/tmp/relay-data")
		assert config.config_dir == Path("/tmp/relay-config")
		assert config.headless is True
		assert config.port == 9100
		assert config.api_key == "sk-test"
		assert config.llm_base_url == "http://localhost:11434/v1"
		# Derived paths should be recomputed
		assert config.log_dir == Path("/tmp/relay-data/logs")


def test_config_ensure_dirs(tmp_path: Path):
	"""ensure_dirs should create all required directories."""
	config = Config(config_dir=tmp_path / "config", data_dir=tmp_path / "data")
	assert not config.data_dir.exists()

	config.ensure_dirs()

	assert config.config_dir.exists()
	assert config.log_dir.exists()
	assert config.profile_dir.exists()


def test_load_config_reads_toml_sections(tmp_path: Path):
	"""config.toml tables override timeouts, models and add surfaces."""
	config_dir = tmp_path / "config"
	config_dir.mkdir()
	(config_dir / "config.toml").write_text(
		'headless = true\n'
		'\n'
		'[timeouts]\n'
		'stabilize = 5000\n'
		'poll_interval = 250\n'
		'\n'
		'[models]\n'
		'review = "review-model"\n'
		'\n'
		'[surfaces.localChat]\n'
		'url = "http://localhost:3000"\n'
		'input_selector = "textarea"\n'
		'run_selector = "button.send"\n'
		'working_selector = "button.stop"\n'
		'response_selector = "div.msg"\n'
		'extraction = "all_after_first"\n'
	)
	with patch.dict(os.environ, {
		"AGENT_RELAY_CONFIG_DIR": str(config_dir),
		"AGENT_RELAY_DATA_DIR": str(tmp_path / "data"),
	}):
		config = load_config()

	assert config.headless is True
	assert config.timeouts.stabilize == 5000
	assert config.timeouts.poll_interval == 250
	assert config.timeouts.finish == 120000
	assert config.models.review == "review-model"
	assert config.models.plan == ModelSettings().plan
	assert config.surfaces["localChat"]["url"] == "http://localhost:3000"


def test_load_config_creates_dirs(tmp_path: Path):
	"""load_config should create directories."""
	with patch.dict(os.environ, {
		"AGENT_RELAY_DATA_DIR": str(tmp_path / "data"),
		"AGENT_RELAY_CONFIG_DIR": str(tmp_path / "config"),
	}):
		config = load_config()
		assert config.data_dir.exists()
		assert config.config_dir.exists()
		assert config.profile_dir.exists()
