"""
Planner - Decomposes a research question into a dependency-ordered plan.

The Critic, acting as planner, proposes the subtasks. When it proposes
none (or its reply cannot be parsed) decompose() returns None and the
caller falls back to a single direct Finder call.
"""

import logging
from typing import Optional

from ..context import ResearchContext
from ..parsing import parse_verdict
from ..prompts import build_decomposition_prompt
from ..research.models import ResearchPlan, Subtask, SubtaskSpec
from ..roles import Critic
from .calls import call_critic

logger = logging.getLogger(__name__)


class ResearchPlanner:
	"""Asks the Critic for a plan and turns its reply into a ResearchPlan."""

	MIN_SUBTASKS = 2
	MAX_SUBTASKS = 6

	def __init__(self, critic: Critic):
		self.critic = critic

	async def decompose(self, query: str, context: ResearchContext) -> Optional[ResearchPlan]:
		"""
		Decompose a research question into subtasks.

		Args:
			query: The original research question
			context: Session context for progress and call accounting

		Returns:
			ResearchPlan, or None when the Critic proposed no subtasks
		"""
		context.report("Planning: decomposing query into subtasks...")

		prompt = build_decomposition_prompt(query, self.MIN_SUBTASKS, self.MAX_SUBTASKS)
		response = await call_critic(self.critic, prompt, context)
		verdict = parse_verdict(response)

		if not verdict.subtasks:
			logger.warning(f"[{context.task_id}] Decomposition produced no subtasks")
			context.report("Planning produced no subtasks; falling back to direct research.")
			return None

		plan = self._build_plan(query, verdict.subtasks, verdict.reasoning)
		if not plan.subtasks:
			logger.warning(f"[{context.task_id}] All proposed subtasks were unusable")
			context.report("Planning produced no usable subtasks; falling back to direct research.")
			return None

		logger.info(f"[{context.task_id}] Created plan with {len(plan.subtasks)} subtasks")
		context.report(f"Created research plan with {len(plan.subtasks)} subtasks.")
		return plan

	def _build_plan(self, query: str, specs: list[SubtaskSpec], rationale: str) -> ResearchPlan:
		"""Keep usable specs and drop references to ids outside the plan."""
		kept: list[SubtaskSpec] = []
		seen: set[int] = set()
		for spec in specs:
			if not spec.query.strip():
				logger.warning(f"Dropping subtask {spec.id}: empty query")
				continue
			if spec.id in seen:
				logger.warning(f"Dropping subtask {spec.id}: duplicate id")
				continue
			seen.add(spec.id)
			kept.append(spec)

		subtasks = []
		for spec in kept:
			subtask = Subtask.from_spec(spec)
			unknown = {dep for dep in subtask.depends_on if dep not in seen or dep == subtask.id}
			if unknown:
				logger.warning(f"Subtask {subtask.id}: ignoring unknown dependencies {sorted(unknown)}")
				subtask.depends_on = subtask.depends_on - unknown
			subtasks.append(subtask)

		return ResearchPlan(original_query=query, subtasks=subtasks, rationale=rationale)
