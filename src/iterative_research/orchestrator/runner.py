"""
Subtask Runner - The refine-until-satisfactory loop for one subtask.

Each iteration sends a query to the Finder, has the Critic judge the
findings, and logs the round. A subtask always ends complete: accepted on
a good verdict, accepted as-is when the Critic offers no way to refine,
or force-accepted with the last findings once the budget runs out.
"""

import logging

from ..context import ResearchContext
from ..parsing import parse_verdict
from ..prompts import DEFAULT_FINDINGS_LIMIT, build_evaluation_prompt, build_refinement_prompt
from ..research.models import ResearchState, Subtask, Verdict
from ..roles import Critic, Finder
from .calls import call_critic, call_finder

logger = logging.getLogger(__name__)


class SubtaskRunner:
	"""Runs one subtask to completion against the Finder and Critic."""

	DEFAULT_MAX_ITERATIONS = 5
	DEFAULT_QUALITY_THRESHOLD = 5

	def __init__(
		self,
		finder: Finder,
		critic: Critic,
		max_iterations: int = DEFAULT_MAX_ITERATIONS,
		quality_threshold: int = DEFAULT_QUALITY_THRESHOLD,
		findings_limit: int = DEFAULT_FINDINGS_LIMIT,
	):
		if max_iterations < 1:
			raise ValueError(f"max_iterations must be at least 1, got {max_iterations}")
		self.finder = finder
		self.critic = critic
		self.max_iterations = max_iterations
		self.quality_threshold = quality_threshold
		self.findings_limit = findings_limit

	def is_acceptable(self, verdict: Verdict) -> bool:
		return verdict.is_satisfactory and verdict.quality_score >= self.quality_threshold

	async def evaluate(
		self,
		original_query: str,
		subtask: Subtask,
		findings: str,
		context: ResearchContext,
	) -> Verdict:
		prompt = build_evaluation_prompt(
			original_query,
			subtask.query,
			subtask.expected_outcome,
			findings,
		)
		response = await call_critic(self.critic, prompt, context)
		return parse_verdict(response)

	async def run_subtask(
		self,
		original_query: str,
		subtask: Subtask,
		state: ResearchState,
		context: ResearchContext,
	) -> None:
		"""
		Iterate on a subtask until it is accepted.

		Mutates subtask in place and appends every round to state. If the
		session is cancelled before a refinement round, the subtask is left
		incomplete.
		"""
		query = subtask.query
		findings = ""
		verdict = None

		for iteration in range(1, self.max_iterations + 1):
			if iteration > 1 and context.cancelled:
				logger.info(f"[{context.task_id}] Subtask {subtask.id} cancelled before iteration {iteration}")
				context.report(f"Subtask {subtask.id}: cancelled.")
				return

			context.report(f"Subtask {subtask.id}, iteration {iteration}: researching...")
			findings = await call_finder(self.finder, query, context)

			context.report(f"Subtask {subtask.id}, iteration {iteration}: evaluating findings...")
			verdict = await self.evaluate(original_query, subtask, findings, context)

			state.add_iteration(query, findings, verdict, subtask_id=subtask.id)
			logger.info(
				f"[{context.task_id}] Subtask {subtask.id} iteration {iteration}: "
				f"score {verdict.quality_score}/10, satisfactory={verdict.is_satisfactory}"
			)
			context.report(
				f"Subtask {subtask.id}, iteration {iteration}: "
				f"score {verdict.quality_score}/10, satisfactory: {verdict.is_satisfactory}"
			)

			if self.is_acceptable(verdict):
				subtask.complete(findings, verdict.quality_score)
				context.report(f"Subtask {subtask.id}: accepted with score {verdict.quality_score}/10.")
				return

			next_query = verdict.next_query()
			if next_query is None:
				subtask.complete(findings, verdict.quality_score)
				context.report(f"Subtask {subtask.id}: no refinement suggested, accepting current findings.")
				return

			if iteration < self.max_iterations:
				context.report(f"Subtask {subtask.id}: refining with \"{next_query}\"")
				query = build_refinement_prompt(
					next_query,
					findings,
					verdict.quality_score,
					verdict.reasoning,
					verdict.gaps,
					self.findings_limit,
				)

		logger.info(
			f"[{context.task_id}] Subtask {subtask.id} hit the {self.max_iterations}-iteration budget, "
			f"accepting last findings"
		)
		subtask.complete(findings, verdict.quality_score)
		context.report(
			f"Subtask {subtask.id}: iteration budget exhausted, "
			f"accepting last findings (score {verdict.quality_score}/10)."
		)
