"""Thin wrappers that route every Finder/Critic call through the session context."""

import logging

from ..context import ResearchContext
from ..research.models import NO_FINDINGS
from ..roles import Critic, Finder, RoleKind

logger = logging.getLogger(__name__)


async def call_finder(finder: Finder, query: str, context: ResearchContext) -> str:
	"""Run the Finder; errors propagate to the caller unmodified."""
	context.record_call(RoleKind.FINDER.value)
	findings = await finder(query)
	if not findings or not findings.strip():
		logger.info(f"[{context.task_id}] Finder returned nothing for query")
		return NO_FINDINGS
	return findings


async def call_critic(critic: Critic, prompt: str, context: ResearchContext) -> str:
	"""Run the Critic; errors propagate to the caller unmodified."""
	context.record_call(RoleKind.CRITIC.value)
	response = await critic(prompt)
	return response or ""
