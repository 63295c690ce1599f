"""
Research Models - Pydantic schemas for verdicts, plans, and the iteration log.

A research session owns one plan (when decomposition succeeds) and an
append-only log of every Finder/Critic round across all subtasks.
"""

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

PARSE_FAILURE_REASONING = "Evaluation parsing failed, accepting research as satisfactory."
NO_FINDINGS = "No findings returned."


def _utcnow() -> datetime:
	return datetime.now(timezone.utc)


class SubtaskSpec(BaseModel):
	"""A subtask as proposed by the Critic when acting as planner."""
	model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

	id: int = Field(description="Unique within a plan")
	query: str = Field(default="", description="Searchable query for this subtask")
	rationale: str = Field(default="")
	depends_on: list[int] = Field(default_factory=list, alias="dependsOn")
	expected_outcome: str = Field(default="", alias="expectedOutcome")


class Verdict(BaseModel):
	"""Parsed judgment from the Critic."""
	model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

	is_satisfactory: bool = Field(default=False, alias="isSatisfactory")
	quality_score: int = Field(default=0, alias="qualityScore")
	gaps: list[str] = Field(default_factory=list)
	follow_up_questions: list[str] = Field(default_factory=list, alias="followUpQuestions")
	refined_query: Optional[str] = Field(default=None, alias="refinedQuery")
	reasoning: str = Field(default="")
	subtasks: Optional[list[SubtaskSpec]] = Field(default=None, alias="subTasks")

	@field_validator("gaps", "follow_up_questions", mode="before")
	@classmethod
	def _none_as_empty(cls, value):
		return [] if value is None else value

	def next_query(self) -> Optional[str]:
		"""Refined query if present, else the first follow-up question."""
		if self.refined_query and self.refined_query.strip():
			return self.refined_query.strip()
		for question in self.follow_up_questions:
			if question and question.strip():
				return question.strip()
		return None


def default_verdict() -> Verdict:
	"""The optimistic verdict substituted when Critic output cannot be parsed."""
	return Verdict(
		is_satisfactory=True,
		quality_score=7,
		reasoning=PARSE_FAILURE_REASONING,
	)


class Subtask(BaseModel):
	"""One node of the decomposition graph."""
	model_config = ConfigDict(validate_assignment=True)

	id: int
	query: str
	rationale: str = ""
	depends_on: frozenset[int] = Field(default_factory=frozenset)
	expected_outcome: str = ""

	# Set exactly once by the subtask runner
	findings: Optional[str] = None
	quality_score: Optional[int] = None
	is_complete: bool = False

	@classmethod
	def from_spec(cls, spec: SubtaskSpec) -> "Subtask":
		return cls(
			id=spec.id,
			query=spec.query,
			rationale=spec.rationale,
			depends_on=frozenset(spec.depends_on),
			expected_outcome=spec.expected_outcome,
		)

	def complete(self, findings: str, quality_score: int) -> None:
		"""Move the subtask to its terminal state."""
		self.findings = findings
		self.quality_score = quality_score
		self.is_complete = True


class ResearchPlan(BaseModel):
	"""
	The full subtask graph for one research query.

	The plan owns its subtasks exclusively; the scheduler mutates them in
	place as they complete.
	"""
	original_query: str
	subtasks: list[Subtask] = Field(default_factory=list)
	rationale: str = ""

	@property
	def all_complete(self) -> bool:
		return all(st.is_complete for st in self.subtasks)

	@property
	def completed_count(self) -> int:
		return sum(1 for st in self.subtasks if st.is_complete)

	@property
	def completed(self) -> list[Subtask]:
		return [st for st in self.subtasks if st.is_complete]

	@property
	def next_ready(self) -> Optional[Subtask]:
		"""First incomplete subtask whose dependencies are all complete."""
		done = {st.id for st in self.subtasks if st.is_complete}
		for subtask in self.subtasks:
			if subtask.is_complete:
				continue
			if subtask.depends_on <= done:
				return subtask
		return None

	def get_subtask(self, subtask_id: int) -> Optional[Subtask]:
		for subtask in self.subtasks:
			if subtask.id == subtask_id:
				return subtask
		return None

	@property
	def all_findings(self) -> str:
		"""Completed findings under one heading per subtask, separated by rules."""
		sections = []
		for st in self.subtasks:
			if not st.is_complete or not (st.findings and st.findings.strip()):
				continue
			sections.append(f"## Subtask {st.id}: {st.query}\n\n{st.findings.strip()}\n")
		return "\n---\n\n".join(sections)

	def get_progress(self) -> dict:
		"""Calculate overall progress."""
		total = len(self.subtasks)
		completed = self.completed_count
		return {
			"total_subtasks": total,
			"completed_subtasks": completed,
			"percent_complete": round(completed / total * 100, 1) if total > 0 else 0,
		}


class IterationRecord(BaseModel):
	"""One Finder+Critic round, logged regardless of outcome."""
	model_config = ConfigDict(frozen=True)

	iteration_number: int
	query: str
	findings: str
	evaluation: Verdict
	subtask_id: Optional[int] = None
	timestamp: datetime = Field(default_factory=_utcnow)


class ResearchState(BaseModel):
	"""State of one research session, from request to final synthesis."""
	original_query: str
	iterations: list[IterationRecord] = Field(default_factory=list)
	plan: Optional[ResearchPlan] = None
	is_complete: bool = False
	cancelled: bool = False
	final_synthesis: Optional[str] = None
	synthesis_verdict: Optional[Verdict] = None
	started_at: datetime = Field(default_factory=_utcnow)

	@property
	def current_iteration(self) -> int:
		return len(self.iterations)

	@property
	def latest_verdict(self) -> Optional[Verdict]:
		return self.iterations[-1].evaluation if self.iterations else None

	@property
	def all_findings(self) -> str:
		return "\n\n---\n\n".join(
			f"## Iteration {it.iteration_number}: {it.query}\n\n{it.findings}"
			for it in self.iterations
		)

	def add_iteration(
		self,
		query: str,
		findings: str,
		evaluation: Verdict,
		subtask_id: Optional[int] = None,
	) -> IterationRecord:
		"""Append a record; numbering is global across all subtasks."""
		record = IterationRecord(
			iteration_number=len(self.iterations) + 1,
			query=query,
			findings=findings,
			evaluation=evaluation,
			subtask_id=subtask_id,
		)
		self.iterations.append(record)
		return record
