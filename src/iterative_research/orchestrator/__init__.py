"""Orchestrator module - Planning, subtask refinement, scheduling, and synthesis."""

from .engine import IterativeResearcher
from .planner import ResearchPlanner
from .runner import SubtaskRunner
from .scheduler import Scheduler
from .synthesizer import NOTHING_COMPLETED, SynthesisResult, Synthesizer

__all__ = [
	"IterativeResearcher",
	"ResearchPlanner",
	"SubtaskRunner",
	"Scheduler",
	"Synthesizer",
	"SynthesisResult",
	"NOTHING_COMPLETED",
]
