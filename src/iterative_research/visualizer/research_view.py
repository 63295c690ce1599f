"""Rich views for research plans, iteration logs, and final reports."""

from typing import Optional

from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel
from rich.table import Table
from rich.tree import Tree

from ..research.models import ResearchPlan, ResearchState

COMPLETE_ICON = "[green][x][/green]"
PENDING_ICON = "[dim][ ][/dim]"


def score_style(score: Optional[int], threshold: int = 5) -> str:
	"""Return a Rich style string for a 1-10 quality score."""
	if score is None:
		return "dim"
	if score >= threshold + 2:
		return "green"
	if score >= threshold:
		return "yellow"
	return "red"


def truncate_text(text: str, max_len: int = 60) -> str:
	"""Shorten text to one line for table display."""
	flat = " ".join(text.split())
	if len(flat) <= max_len:
		return flat
	return flat[:max_len - 3] + "..."


def render_plan_tree(plan: ResearchPlan, console: Optional[Console] = None) -> None:
	"""Render a plan as a Rich Tree of subtasks with dependencies and scores."""
	console = console or Console()

	progress = plan.get_progress()
	tree = Tree(
		f"[bold]{plan.original_query}[/bold]  "
		f"[dim]({progress['completed_subtasks']}/{progress['total_subtasks']} subtasks, "
		f"{progress['percent_complete']:.0f}%)[/dim]"
	)

	for subtask in plan.subtasks:
		icon = COMPLETE_ICON if subtask.is_complete else PENDING_ICON
		label = f"{icon} [bold]{subtask.id}.[/bold] {subtask.query}"
		if subtask.depends_on:
			deps = ", ".join(str(d) for d in sorted(subtask.depends_on))
			label += f" [dim](after {deps})[/dim]"
		if subtask.quality_score is not None:
			style = score_style(subtask.quality_score)
			label += f" [{style}]{subtask.quality_score}/10[/{style}]"
		tree.add(label)

	console.print(tree)


def render_iteration_log(state: ResearchState, console: Optional[Console] = None) -> None:
	"""Render the session's iteration log as a table."""
	console = console or Console()

	if not state.iterations:
		console.print("[dim]No iterations recorded.[/dim]")
		return

	table = Table(title="Iterations")
	table.add_column("#", justify="right")
	table.add_column("Subtask", justify="right")
	table.add_column("Query", style="cyan")
	table.add_column("Score", justify="right")
	table.add_column("OK")
	table.add_column("Reasoning")

	for record in state.iterations:
		verdict = record.evaluation
		style = score_style(verdict.quality_score)
		table.add_row(
			str(record.iteration_number),
			str(record.subtask_id) if record.subtask_id is not None else "-",
			truncate_text(record.query, 50),
			f"[{style}]{verdict.quality_score}/10[/{style}]",
			"[green]yes[/green]" if verdict.is_satisfactory else "[red]no[/red]",
			truncate_text(verdict.reasoning, 60),
		)

	console.print(table)


def render_report(state: ResearchState, console: Optional[Console] = None) -> None:
	"""Render the final synthesis as Markdown inside a panel."""
	console = console or Console()

	if state.cancelled:
		console.print(Panel("[yellow]Research was cancelled before synthesis.[/yellow]", border_style="yellow"))
		return

	body = Markdown(state.final_synthesis or "_No synthesis produced._")
	console.print(Panel(body, title=f"Research: {truncate_text(state.original_query, 70)}", border_style="cyan"))
