"""Configuration system using platformdirs for cross-platform paths."""

import os
import tomllib
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Optional

import platformdirs

APP_NAME = "iterative-research"
APP_AUTHOR = "iterative-research"
ENV_PREFIX = "ITERATIVE_RESEARCH_"


@dataclass
class Config:
	"""Central configuration with XDG/platform conventions."""

	config_dir: Path = field(default_factory=lambda: Path(platformdirs.user_config_dir(APP_NAME)))
	data_dir: Path = field(default_factory=lambda: Path(platformdirs.user_data_dir(APP_NAME)))

	# Derived paths
	config_file: Path = field(init=False)
	log_dir: Path = field(init=False)

	# Research loop
	max_iterations: int = 5
	quality_threshold: int = 5
	refinement_findings_limit: int = 2000
	content_loss_ratio: float = 0.5
	content_loss_min_bytes: int = 1000

	# Role backends
	claude_command: str = "claude"
	finder_model: Optional[str] = None
	critic_model: Optional[str] = None
	call_timeout: int = 600

	log_level: str = "INFO"

	def __post_init__(self) -> None:
		self.config_file = self.config_dir / "config.toml"
		self.log_dir = self.data_dir / "logs"

	def ensure_dirs(self) -> None:
		"""Create all required directories."""
		self.config_dir.mkdir(parents=True, exist_ok=True)
		self.data_dir.mkdir(parents=True, exist_ok=True)
		self.log_dir.mkdir(parents=True, exist_ok=True)

	def as_dict(self) -> dict:
		return {f.name: getattr(self, f.name) for f in fields(self)}


PATH_FIELDS = {"config_dir", "data_dir"}
INT_FIELDS = {
	"max_iterations",
	"quality_threshold",
	"refinement_findings_limit",
	"content_loss_min_bytes",
	"call_timeout",
}
FLOAT_FIELDS = {"content_loss_ratio"}
DERIVED_FIELDS = {"config_file", "log_dir"}


def _coerce(key: str, val, source: str):
	"""Convert a raw value to the type of the named field."""
	try:
		if key in PATH_FIELDS:
			return Path(os.path.expanduser(str(val)))
		if key in INT_FIELDS:
			return int(val)
		if key in FLOAT_FIELDS:
			return float(val)
	except (TypeError, ValueError) as e:
		raise ValueError(f"Invalid value for {source}: {val!r}") from e
	return val


def _apply_env_overrides(config: Config) -> Config:
	"""Apply ITERATIVE_RESEARCH_* environment variable overrides."""
	for f in fields(config):
		if f.name in DERIVED_FIELDS:
			continue
		env_key = ENV_PREFIX + f.name.upper()
		val = os.getenv(env_key)
		if val:
			setattr(config, f.name, _coerce(f.name, val, env_key))
	# Recompute derived paths after overrides
	config.__post_init__()
	return config


def _apply_toml(config: Config) -> Config:
	"""Apply config.toml overrides if file exists."""
	toml_path = config.config_dir / "config.toml"
	if not toml_path.exists():
		return config

	with open(toml_path, "rb") as f:
		data = tomllib.load(f)

	for key, val in data.items():
		if hasattr(config, key) and key not in DERIVED_FIELDS:
			setattr(config, key, _coerce(key, val, f"{toml_path}:{key}"))

	# Recompute derived paths after toml overrides
	config.__post_init__()
	return config


def load_config() -> Config:
	"""Load config with precedence: env vars > config.toml > defaults."""
	config = Config()
	config_dir = os.getenv(ENV_PREFIX + "CONFIG_DIR")
	if config_dir:
		# config.toml lives in the config dir, so locate it before reading
		config.config_dir = Path(os.path.expanduser(config_dir))
		config.__post_init__()
	config = _apply_toml(config)
	config = _apply_env_overrides(config)
	config.ensure_dirs()
	return config
