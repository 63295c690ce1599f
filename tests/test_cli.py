"""Tests for the CLI module."""

import argparse
import json
from pathlib import Path
from unittest.mock import patch

import pytest

from iterative_research.cli import build_researcher, cmd_config, cmd_run, main
from iterative_research.config import Config
from iterative_research.orchestrator.engine import IterativeResearcher
from iterative_research.research.models import ResearchState
from iterative_research.roles import ClaudeCLIRole, RoleUnavailableError

from tests.helpers import ScriptedRole


def _run_args(**overrides) -> argparse.Namespace:
	args = {
		"query": "What is 2+2?",
		"max_iterations": None,
		"threshold": None,
		"json": False,
		"show_plan": False,
		"log_level": None,
	}
	args.update(overrides)
	return argparse.Namespace(**args)


@pytest.fixture
def config(tmp_path: Path) -> Config:
	return Config(config_dir=tmp_path / "config", data_dir=tmp_path / "data")


def _direct_researcher(finder) -> IterativeResearcher:
	# No subtasks in the Critic reply, so research falls back to one Finder call
	return IterativeResearcher(finder, ScriptedRole(["no plan"]))


def test_main_without_command_exits():
	with patch("sys.argv", ["iterative-research"]):
		with pytest.raises(SystemExit) as exc_info:
			main()
	assert exc_info.value.code == 1


def test_main_run_help():
	with patch("sys.argv", ["iterative-research", "run", "--help"]):
		with pytest.raises(SystemExit) as exc_info:
			main()
	assert exc_info.value.code == 0


def test_build_researcher_wires_config(config: Config):
	config.claude_command = "/usr/local/bin/claude"
	config.critic_model = "opus"
	config.max_iterations = 3

	researcher = build_researcher(config, console=None, quiet=True)

	assert isinstance(researcher.finder, ClaudeCLIRole)
	assert researcher.finder.command == "/usr/local/bin/claude"
	assert researcher.finder.allowed_tools == ["WebSearch", "WebFetch"]
	assert researcher.critic.model == "opus"
	assert researcher.critic.allowed_tools == []
	assert researcher.runner.max_iterations == 3
	assert researcher.observers == []


def test_cmd_config_prints_json(config: Config, capsys):
	with patch("iterative_research.cli.load_config", return_value=config):
		cmd_config(argparse.Namespace())

	data = json.loads(capsys.readouterr().out)
	assert data["max_iterations"] == "5"
	assert data["finder_model"] is None
	assert data["log_dir"] == str(config.log_dir)


class TestCmdRun:
	"""Tests for the run command."""

	def test_json_output(self, config: Config, capsys):
		researcher = _direct_researcher(ScriptedRole(["four"]))
		with patch("iterative_research.cli.load_config", return_value=config), \
				patch("iterative_research.cli.setup_logging"), \
				patch("iterative_research.cli.build_researcher", return_value=researcher):
			cmd_run(_run_args(json=True))

		data = json.loads(capsys.readouterr().out)
		assert data["original_query"] == "What is 2+2?"
		assert data["final_synthesis"] == "four"
		assert data["is_complete"] is True

	def test_report_output(self, config: Config, capsys):
		researcher = _direct_researcher(ScriptedRole(["The answer is four."]))
		with patch("iterative_research.cli.load_config", return_value=config), \
				patch("iterative_research.cli.setup_logging"), \
				patch("iterative_research.cli.build_researcher", return_value=researcher):
			cmd_run(_run_args(show_plan=True))

		out = capsys.readouterr().out
		assert "The answer is four." in out
		assert "Iterations" in out

	def test_overrides_applied(self, config: Config):
		seen = {}

		def capture(cfg, console, quiet=False):
			seen["max_iterations"] = cfg.max_iterations
			seen["threshold"] = cfg.quality_threshold
			return _direct_researcher(ScriptedRole(["x"]))

		with patch("iterative_research.cli.load_config", return_value=config), \
				patch("iterative_research.cli.setup_logging"), \
				patch("iterative_research.cli.build_researcher", side_effect=capture):
			cmd_run(_run_args(max_iterations=2, threshold=9, json=True))

		assert seen == {"max_iterations": 2, "threshold": 9}

	def test_role_error_exits_1(self, config: Config):
		researcher = _direct_researcher(ScriptedRole([RoleUnavailableError("Claude CLI not found: claude")]))
		with patch("iterative_research.cli.load_config", return_value=config), \
				patch("iterative_research.cli.setup_logging"), \
				patch("iterative_research.cli.build_researcher", return_value=researcher):
			with pytest.raises(SystemExit) as exc_info:
				cmd_run(_run_args())

		assert exc_info.value.code == 1

	def test_cancelled_exits_130(self, config: Config, capsys):
		async def cancelled_run(researcher, query):
			return ResearchState(original_query=query, cancelled=True)

		with patch("iterative_research.cli.load_config", return_value=config), \
				patch("iterative_research.cli.setup_logging"), \
				patch("iterative_research.cli._run_research", cancelled_run):
			with pytest.raises(SystemExit) as exc_info:
				cmd_run(_run_args())

		assert exc_info.value.code == 130
		assert "cancelled" in capsys.readouterr().out
