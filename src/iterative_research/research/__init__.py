"""Research module - Verdicts, plans, and the session iteration log."""

from .models import (
	IterationRecord,
	ResearchPlan,
	ResearchState,
	Subtask,
	SubtaskSpec,
	Verdict,
	default_verdict,
)

__all__ = [
	"Verdict",
	"SubtaskSpec",
	"Subtask",
	"ResearchPlan",
	"IterationRecord",
	"ResearchState",
	"default_verdict",
]
