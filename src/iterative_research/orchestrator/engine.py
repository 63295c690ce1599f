"""
Iterative Researcher - The single entry point of the research core.

Control flow: plan -> run subtasks in readiness order -> synthesize. When
planning yields nothing the session degrades to one direct Finder call.
"""

import logging
from typing import Optional

from ..config import Config
from ..context import CancelToken, ProgressObserver, ResearchContext
from ..prompts import DEFAULT_FINDINGS_LIMIT
from ..research.models import ResearchState, default_verdict
from ..roles import Critic, Finder
from .calls import call_finder
from .planner import ResearchPlanner
from .runner import SubtaskRunner
from .scheduler import Scheduler
from .synthesizer import Synthesizer

logger = logging.getLogger(__name__)


class IterativeResearcher:
	"""
	Coordinates a Finder and a Critic to answer a research question.

	The researcher holds no per-session state; every research() call builds
	its own ResearchState and ResearchContext, so one instance can serve
	concurrent sessions.
	"""

	def __init__(
		self,
		finder: Finder,
		critic: Critic,
		max_iterations: int = SubtaskRunner.DEFAULT_MAX_ITERATIONS,
		quality_threshold: int = SubtaskRunner.DEFAULT_QUALITY_THRESHOLD,
		findings_limit: int = DEFAULT_FINDINGS_LIMIT,
		content_loss_ratio: float = 0.5,
		content_loss_min_bytes: int = 1000,
		observers: Optional[list[ProgressObserver]] = None,
	):
		"""
		Initialize the researcher.

		Args:
			finder: Async text-in/text-out research capability
			critic: Async text-in/text-out judging capability
			max_iterations: Refinement budget per subtask
			quality_threshold: Minimum score (1-10) to accept a subtask
			findings_limit: Characters of previous findings quoted in refinement prompts
			content_loss_ratio: Synthesis size ratio below which a warning is logged
			content_loss_min_bytes: Raw synthesis size above which the ratio is checked
			observers: Progress observers attached to every session
		"""
		self.finder = finder
		self.critic = critic
		self.observers = list(observers or [])

		self.planner = ResearchPlanner(critic)
		self.runner = SubtaskRunner(
			finder,
			critic,
			max_iterations=max_iterations,
			quality_threshold=quality_threshold,
			findings_limit=findings_limit,
		)
		self.scheduler = Scheduler(self.runner)
		self.synthesizer = Synthesizer(
			critic,
			content_loss_ratio=content_loss_ratio,
			content_loss_min_bytes=content_loss_min_bytes,
		)

	@classmethod
	def from_config(
		cls,
		finder: Finder,
		critic: Critic,
		config: Config,
		observers: Optional[list[ProgressObserver]] = None,
	) -> "IterativeResearcher":
		return cls(
			finder,
			critic,
			max_iterations=config.max_iterations,
			quality_threshold=config.quality_threshold,
			findings_limit=config.refinement_findings_limit,
			content_loss_ratio=config.content_loss_ratio,
			content_loss_min_bytes=config.content_loss_min_bytes,
			observers=observers,
		)

	def new_context(
		self,
		cancel_token: Optional[CancelToken] = None,
		task_id: Optional[str] = None,
	) -> ResearchContext:
		context = ResearchContext(observers=list(self.observers))
		if cancel_token is not None:
			context.cancel_token = cancel_token
		if task_id:
			context.task_id = task_id
		return context

	async def research(
		self,
		query: str,
		cancel_token: Optional[CancelToken] = None,
		context: Optional[ResearchContext] = None,
	) -> ResearchState:
		"""
		Research a question end to end.

		Args:
			query: The research question
			cancel_token: Cooperative cancellation flag (ignored when context is given)
			context: Pre-built session context, e.g. carrying a worker task id

		Returns:
			ResearchState with the plan, the iteration log, and the final synthesis

		Raises:
			ValueError: If query is empty
		"""
		if not query or not query.strip():
			raise ValueError("Research query must not be empty")

		context = context or self.new_context(cancel_token)
		state = ResearchState(original_query=query)
		logger.info(f"[{context.task_id}] Starting research: {query[:100]}")
		context.report(f"Starting iterative research: \"{query}\"")

		if context.cancelled:
			return self._mark_cancelled(state, context)

		plan = await self.planner.decompose(query, context)

		if context.cancelled:
			state.plan = plan
			return self._mark_cancelled(state, context)

		if plan is None:
			await self._research_directly(query, state, context)
			return state

		state.plan = plan
		await self.scheduler.run_plan(plan, state, context)

		if context.cancelled:
			return self._mark_cancelled(state, context)

		result = await self.synthesizer.synthesize_detailed(plan, context)
		state.final_synthesis = result.text
		state.synthesis_verdict = result.verdict
		state.is_complete = True

		logger.info(
			f"[{context.task_id}] Research complete: {plan.completed_count}/{len(plan.subtasks)} subtasks, "
			f"{state.current_iteration} iterations"
		)
		context.report(f"Research complete after {state.current_iteration} iteration(s).")
		return state

	async def _research_directly(self, query: str, state: ResearchState, context: ResearchContext) -> None:
		"""Single-shot fallback: one Finder call, accepted as-is."""
		logger.warning(f"[{context.task_id}] Falling back to single-shot research")
		context.report(f"Researching directly: \"{query}\"")

		findings = await call_finder(self.finder, query, context)
		state.add_iteration(query, findings, default_verdict())
		state.final_synthesis = findings
		state.is_complete = True

		context.report("Research complete after 1 iteration(s).")

	def _mark_cancelled(self, state: ResearchState, context: ResearchContext) -> ResearchState:
		logger.info(f"[{context.task_id}] Research cancelled after {state.current_iteration} iterations")
		state.cancelled = True
		state.is_complete = False
		context.report("Research cancelled.")
		return state
