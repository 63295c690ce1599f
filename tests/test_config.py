"""Tests for the configuration system."""

import os
from pathlib import Path
from unittest.mock import patch

import pytest

from iterative_research.config import Config, _apply_env_overrides, load_config


def test_config_defaults():
	"""Config should have sensible defaults."""
	config = Config()
	assert config.config_dir.is_absolute()
	assert config.data_dir.is_absolute()
	assert config.config_file == config.config_dir / "config.toml"
	assert config.log_dir == config.data_dir / "logs"
	assert config.max_iterations == 5
	assert config.quality_threshold == 5
	assert config.refinement_findings_limit == 2000
	assert config.content_loss_ratio == 0.5
	assert config.content_loss_min_bytes == 1000
	assert config.claude_command == "claude"
	assert config.finder_model is None


def test_config_env_overrides():
	"""Environment variables should override defaults."""
	config = Config()
	with patch.dict(os.environ, {
		"ITERATIVE_RESEARCH_DATA_DIR": "/tmp/test-data",
		"ITERATIVE_RESEARCH_CONFIG_DIR": "/tmp/test-config",
		"ITERATIVE_RESEARCH_MAX_ITERATIONS": "3",
		"ITERATIVE_RESEARCH_CONTENT_LOSS_RATIO": "0.25",
		"ITERATIVE_RESEARCH_CRITIC_MODEL": "opus",
	}):
		config = _apply_env_overrides(config)
		assert config.data_dir == Path("/tmp/test-data")
		assert config.config_dir == Path("/tmp/test-config")
		assert config.max_iterations == 3
		assert config.content_loss_ratio == 0.25
		assert config.critic_model == "opus"
		# Derived paths should be recomputed
		assert config.log_dir == Path("/tmp/test-data/logs")
		assert config.config_file == Path("/tmp/test-config/config.toml")


def test_config_invalid_env_value():
	"""A non-numeric value for an int field names the variable."""
	with patch.dict(os.environ, {"ITERATIVE_RESEARCH_QUALITY_THRESHOLD": "high"}):
		with pytest.raises(ValueError, match="ITERATIVE_RESEARCH_QUALITY_THRESHOLD"):
			_apply_env_overrides(Config())


def test_config_ensure_dirs(tmp_path: Path):
	"""ensure_dirs should create all required directories."""
	config = Config(
		config_dir=tmp_path / "config",
		data_dir=tmp_path / "data",
	)
	assert not config.config_dir.exists()
	assert not config.data_dir.exists()

	config.ensure_dirs()

	assert config.config_dir.exists()
	assert config.data_dir.exists()
	assert config.log_dir.exists()


def test_load_config_creates_dirs(tmp_path: Path):
	"""load_config should create directories."""
	with patch.dict(os.environ, {
		"ITERATIVE_RESEARCH_DATA_DIR": str(tmp_path / "data"),
		"ITERATIVE_RESEARCH_CONFIG_DIR": str(tmp_path / "config"),
	}):
		config = load_config()
		assert config.data_dir.exists()
		assert config.config_dir.exists()


def test_load_config_reads_toml(tmp_path: Path):
	"""config.toml values apply, and env vars win over them."""
	config_dir = tmp_path / "config"
	config_dir.mkdir()
	(config_dir / "config.toml").write_text(
		'max_iterations = 2\n'
		'quality_threshold = 8\n'
		'finder_model = "sonnet"\n'
	)

	with patch.dict(os.environ, {
		"ITERATIVE_RESEARCH_CONFIG_DIR": str(config_dir),
		"ITERATIVE_RESEARCH_DATA_DIR": str(tmp_path / "data"),
		"ITERATIVE_RESEARCH_QUALITY_THRESHOLD": "6",
	}):
		config = load_config()

	assert config.max_iterations == 2
	assert config.quality_threshold == 6
	assert config.finder_model == "sonnet"


def test_as_dict_lists_every_field():
	config = Config()
	data = config.as_dict()
	assert data["max_iterations"] == 5
	assert "log_dir" in data
	assert "config_file" in data
