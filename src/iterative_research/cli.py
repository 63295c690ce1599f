"""CLI for iterative-research: run a research session or show the effective config."""

import argparse
import asyncio
import json
import signal
import sys

from dotenv import load_dotenv
from rich.console import Console

from .config import Config, load_config
from .context import CancelToken, ProgressEvent
from .logging_config import setup_logging
from .orchestrator.engine import IterativeResearcher
from .research.models import ResearchState
from .roles import ClaudeCLIRole, RoleError, RoleKind
from .visualizer import render_iteration_log, render_plan_tree, render_report


def build_researcher(config: Config, console: Console, quiet: bool = False) -> IterativeResearcher:
	"""Wire Claude CLI roles into a researcher (the composition root)."""
	finder = ClaudeCLIRole(
		RoleKind.FINDER,
		command=config.claude_command,
		model=config.finder_model,
		timeout=config.call_timeout,
	)
	critic = ClaudeCLIRole(
		RoleKind.CRITIC,
		command=config.claude_command,
		model=config.critic_model,
		timeout=config.call_timeout,
	)

	observers = []
	if not quiet:
		def print_progress(event: ProgressEvent) -> None:
			console.print(f"[dim]{event.message}[/dim]", highlight=False)
		observers.append(print_progress)

	return IterativeResearcher.from_config(finder, critic, config, observers=observers)


async def _run_research(researcher: IterativeResearcher, query: str) -> ResearchState:
	"""Run one session; SIGINT cancels at the next checkpoint."""
	token = CancelToken()
	loop = asyncio.get_running_loop()
	try:
		loop.add_signal_handler(signal.SIGINT, token.cancel)
	except (NotImplementedError, RuntimeError):
		pass  # Windows: Ctrl-C falls through to KeyboardInterrupt

	try:
		return await researcher.research(query, cancel_token=token)
	finally:
		try:
			loop.remove_signal_handler(signal.SIGINT)
		except (NotImplementedError, RuntimeError):
			pass


def cmd_run(args: argparse.Namespace) -> None:
	"""Research a question and print the report."""
	config = load_config()
	if args.max_iterations is not None:
		config.max_iterations = args.max_iterations
	if args.threshold is not None:
		config.quality_threshold = args.threshold

	setup_logging(level=args.log_level or config.log_level, log_dir=config.log_dir)

	console = Console(stderr=args.json)
	researcher = build_researcher(config, console, quiet=args.json)

	try:
		state = asyncio.run(_run_research(researcher, args.query))
	except RoleError as e:
		console.print(f"[red]Research failed:[/red] {e}")
		sys.exit(1)

	if args.json:
		print(state.model_dump_json(indent=2))
		return

	console.print()
	if args.show_plan:
		if state.plan is not None:
			render_plan_tree(state.plan, console)
		render_iteration_log(state, console)
		console.print()
	render_report(state, console)

	if state.cancelled:
		sys.exit(130)


def cmd_config(args: argparse.Namespace) -> None:
	"""Print the effective configuration."""
	config = load_config()
	data = {key: str(val) if val is not None else None for key, val in config.as_dict().items()}
	print(json.dumps(data, indent=2))


def main() -> None:
	"""CLI entry point."""
	load_dotenv()

	parser = argparse.ArgumentParser(
		prog="iterative-research",
		description="Plan, refine, and synthesize research with a Finder and a Critic",
	)
	subparsers = parser.add_subparsers(dest="command")

	# run
	run_parser = subparsers.add_parser("run", help="Research a question")
	run_parser.add_argument("query", help="The research question")
	run_parser.add_argument("--max-iterations", type=int, default=None, help="Refinement budget per subtask")
	run_parser.add_argument("--threshold", type=int, default=None, help="Minimum quality score (1-10)")
	run_parser.add_argument("--json", action="store_true", help="Print the full session state as JSON")
	run_parser.add_argument("--show-plan", action="store_true", help="Show the plan and iteration log")
	run_parser.add_argument("--log-level", type=str, default=None, help="DEBUG, INFO, WARNING, ERROR")
	run_parser.set_defaults(func=cmd_run)

	# config
	config_parser = subparsers.add_parser("config", help="Show effective configuration")
	config_parser.set_defaults(func=cmd_config)

	args = parser.parse_args()

	if not args.command:
		parser.print_help()
		sys.exit(1)

	args.func(args)
