"""
Scheduler - Drives the subtask runner over a plan, one subtask at a time.

Subtasks run strictly sequentially in readiness order so the iteration log
stays totally ordered and the number of external calls stays predictable.
"""

import logging

from ..context import ResearchContext
from ..research.models import ResearchPlan, ResearchState
from .runner import SubtaskRunner

logger = logging.getLogger(__name__)


class Scheduler:
	"""Picks the next ready subtask until the plan is done or stalls."""

	def __init__(self, runner: SubtaskRunner):
		self.runner = runner

	async def run_plan(
		self,
		plan: ResearchPlan,
		state: ResearchState,
		context: ResearchContext,
	) -> None:
		"""
		Run every reachable subtask in the plan.

		Stops early, leaving the plan partially complete, when the session
		is cancelled or no remaining subtask has its dependencies met.
		"""
		total = len(plan.subtasks)

		while not plan.all_complete:
			if context.cancelled:
				logger.info(f"[{context.task_id}] Cancelled with {plan.completed_count}/{total} subtasks complete")
				context.report("Research cancelled.")
				return

			subtask = plan.next_ready
			if subtask is None:
				# Only reachable with a dependency cycle
				remaining = sorted(st.id for st in plan.subtasks if not st.is_complete)
				logger.warning(
					f"[{context.task_id}] No ready subtask; {len(remaining)} incomplete: {remaining}"
				)
				context.report(f"No runnable subtasks remain; {len(remaining)} left incomplete.")
				return

			context.report(f"Subtask {subtask.id} ({plan.completed_count + 1}/{total}): {subtask.query}")
			await self.runner.run_subtask(plan.original_query, subtask, state, context)

			if not subtask.is_complete:
				return

		context.report(f"All {total} subtasks complete.")
