"""Iterative research: plan, refine, and synthesize with a Finder and a Critic."""

from .context import CancelToken, ProgressEvent, ResearchContext
from .orchestrator import IterativeResearcher
from .parsing import extract_trailing_prose, parse_verdict
from .research import ResearchPlan, ResearchState, Subtask, Verdict

__all__ = [
	"IterativeResearcher",
	"CancelToken",
	"ProgressEvent",
	"ResearchContext",
	"ResearchPlan",
	"ResearchState",
	"Subtask",
	"Verdict",
	"parse_verdict",
	"extract_trailing_prose",
]
