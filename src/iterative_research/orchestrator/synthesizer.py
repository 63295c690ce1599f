"""
Synthesizer - Combines completed subtask findings into one deliverable.

Zero or one completed subtask never reaches the Critic. For two or more,
the Critic writes a report after a JSON assessment preamble; the preamble
is stripped and a size-ratio check flags suspiciously aggressive stripping.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from ..context import ResearchContext
from ..parsing import extract_trailing_prose, parse_preamble_verdict
from ..prompts import build_synthesis_prompt
from ..research.models import ResearchPlan, Verdict
from ..roles import Critic
from .calls import call_critic

logger = logging.getLogger(__name__)

NOTHING_COMPLETED = "No research subtasks were completed, so there is nothing to synthesize."


@dataclass
class SynthesisResult:
	"""Outcome of a synthesis pass."""
	text: str
	verdict: Optional[Verdict] = None
	content_loss: bool = False
	raw_bytes: int = 0
	extracted_bytes: int = 0


def detect_content_loss(raw: str, extracted: str, ratio: float = 0.5, min_bytes: int = 1000) -> bool:
	"""True when extraction kept less than ratio of a raw response over min_bytes."""
	raw_bytes = len(raw.encode("utf-8"))
	extracted_bytes = len(extracted.encode("utf-8"))
	return raw_bytes > min_bytes and extracted_bytes < raw_bytes * ratio


class Synthesizer:
	"""Produces the final report for a plan."""

	def __init__(
		self,
		critic: Critic,
		content_loss_ratio: float = 0.5,
		content_loss_min_bytes: int = 1000,
	):
		self.critic = critic
		self.content_loss_ratio = content_loss_ratio
		self.content_loss_min_bytes = content_loss_min_bytes

	async def synthesize(self, plan: ResearchPlan, context: ResearchContext) -> str:
		result = await self.synthesize_detailed(plan, context)
		return result.text

	async def synthesize_detailed(self, plan: ResearchPlan, context: ResearchContext) -> SynthesisResult:
		"""
		Synthesize completed findings.

		Args:
			plan: Plan whose completed subtasks are combined
			context: Session context for progress and call accounting

		Returns:
			SynthesisResult with the report text and the Critic's assessment, if any
		"""
		completed = plan.completed

		if not completed:
			context.report("Synthesis skipped: no completed subtasks.")
			return SynthesisResult(text=NOTHING_COMPLETED)

		if len(completed) == 1:
			context.report("Single completed subtask; returning its findings directly.")
			findings = completed[0].findings or ""
			return SynthesisResult(text=findings)

		context.report(f"Synthesizing findings from {len(completed)} subtasks...")
		aggregate = plan.all_findings
		prompt = build_synthesis_prompt(plan.original_query, aggregate, len(completed))
		raw = await call_critic(self.critic, prompt, context)

		text = extract_trailing_prose(raw, fallback=aggregate)
		verdict = parse_preamble_verdict(raw)

		raw_bytes = len(raw.encode("utf-8"))
		extracted_bytes = len(text.encode("utf-8"))
		content_loss = detect_content_loss(
			raw,
			text,
			self.content_loss_ratio,
			self.content_loss_min_bytes,
		)
		if content_loss:
			logger.warning(
				f"[{context.task_id}] Possible content loss in synthesis: kept {extracted_bytes} "
				f"of {raw_bytes} bytes after stripping the JSON preamble"
			)

		context.report("Synthesis complete.")
		return SynthesisResult(
			text=text,
			verdict=verdict,
			content_loss=content_loss,
			raw_bytes=raw_bytes,
			extracted_bytes=extracted_bytes,
		)
