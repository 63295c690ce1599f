"""Tests for research plan, subtask, and session models."""

from iterative_research.research.models import (
	PARSE_FAILURE_REASONING,
	ResearchPlan,
	ResearchState,
	Subtask,
	SubtaskSpec,
	Verdict,
	default_verdict,
)

from tests.helpers import make_plan


class TestNextReady:
	"""Tests for dependency-aware subtask selection."""

	def test_dependent_waits_for_all_dependencies(self):
		"""Subtask 3 is not ready until both 1 and 2 are complete."""
		plan = make_plan([(1, []), (2, []), (3, [1, 2])])

		assert plan.next_ready.id == 1
		plan.get_subtask(1).complete("a", 8)
		assert plan.next_ready.id == 2
		plan.get_subtask(2).complete("b", 8)
		assert plan.next_ready.id == 3

	def test_dependent_not_ready_with_one_dependency_done(self):
		"""Completing only subtask 2 does not release subtask 3."""
		plan = make_plan([(1, []), (2, []), (3, [1, 2])])
		plan.get_subtask(2).complete("b", 8)

		assert plan.next_ready.id == 1

	def test_independent_subtasks_in_either_order(self):
		"""With 1 complete first or 2 complete first, 3 waits for the other."""
		plan = make_plan([(3, [1, 2]), (2, []), (1, [])])

		assert plan.next_ready.id == 2
		plan.get_subtask(2).complete("b", 8)
		assert plan.next_ready.id == 1

	def test_cycle_has_no_ready_subtask(self):
		"""A dependency cycle leaves nothing runnable."""
		plan = make_plan([(1, [2]), (2, [1])])
		assert plan.next_ready is None
		assert not plan.all_complete

	def test_complete_plan_has_no_ready_subtask(self):
		plan = make_plan([(1, [])])
		plan.subtasks[0].complete("a", 7)
		assert plan.next_ready is None


class TestPlanProgress:
	"""Tests for plan completion accounting."""

	def test_marking_all_complete(self):
		"""Completing every subtask makes the plan complete."""
		plan = make_plan([(1, []), (2, [1]), (3, [1, 2])])
		assert plan.completed_count == 0
		assert not plan.all_complete

		for subtask in plan.subtasks:
			subtask.complete(f"findings {subtask.id}", 6)

		assert plan.all_complete
		assert plan.completed_count == len(plan.subtasks)
		assert plan.get_progress() == {
			"total_subtasks": 3,
			"completed_subtasks": 3,
			"percent_complete": 100.0,
		}

	def test_empty_plan_progress(self):
		plan = ResearchPlan(original_query="q")
		assert plan.all_complete
		assert plan.get_progress()["percent_complete"] == 0

	def test_all_findings_has_headings_and_rules(self):
		"""Completed findings are joined under per-subtask headings."""
		plan = make_plan([(1, []), (2, []), (3, [])])
		plan.get_subtask(1).complete("alpha", 7)
		plan.get_subtask(3).complete("gamma", 7)

		text = plan.all_findings
		assert "## Subtask 1: query 1" in text
		assert "## Subtask 3: query 3" in text
		assert "Subtask 2" not in text
		assert "\n---\n" in text
		assert text.index("alpha") < text.index("gamma")


class TestSubtask:
	"""Tests for subtask construction and completion."""

	def test_from_spec(self):
		spec = SubtaskSpec.model_validate({
			"id": 2,
			"query": "q",
			"rationale": "r",
			"dependsOn": [1],
			"expectedOutcome": "e",
		})
		subtask = Subtask.from_spec(spec)
		assert subtask.id == 2
		assert subtask.depends_on == frozenset({1})
		assert subtask.expected_outcome == "e"
		assert subtask.is_complete is False
		assert subtask.findings is None

	def test_complete_sets_terminal_state(self):
		subtask = Subtask(id=1, query="q")
		subtask.complete("found", 6)
		assert subtask.is_complete
		assert subtask.findings == "found"
		assert subtask.quality_score == 6


class TestVerdict:
	"""Tests for verdict helpers."""

	def test_default_verdict_is_optimistic(self):
		verdict = default_verdict()
		assert verdict.is_satisfactory is True
		assert verdict.quality_score == 7
		assert verdict.gaps == []
		assert verdict.follow_up_questions == []
		assert verdict.refined_query is None
		assert verdict.reasoning == PARSE_FAILURE_REASONING

	def test_next_query_prefers_refined_query(self):
		verdict = Verdict(refined_query="refined", follow_up_questions=["follow"])
		assert verdict.next_query() == "refined"

	def test_next_query_uses_first_follow_up(self):
		verdict = Verdict(refined_query="   ", follow_up_questions=["first", "second"])
		assert verdict.next_query() == "first"

	def test_next_query_none_when_nothing_offered(self):
		assert Verdict().next_query() is None

	def test_accepts_field_names_and_aliases(self):
		by_alias = Verdict.model_validate({"isSatisfactory": True, "qualityScore": 9})
		by_name = Verdict.model_validate({"is_satisfactory": True, "quality_score": 9})
		assert by_alias == by_name


class TestResearchState:
	"""Tests for the session iteration log."""

	def test_iteration_numbers_are_global_and_monotonic(self):
		state = ResearchState(original_query="q")
		state.add_iteration("a", "fa", default_verdict(), subtask_id=1)
		state.add_iteration("b", "fb", default_verdict(), subtask_id=2)
		state.add_iteration("c", "fc", default_verdict(), subtask_id=1)

		assert [it.iteration_number for it in state.iterations] == [1, 2, 3]
		assert [it.subtask_id for it in state.iterations] == [1, 2, 1]
		assert state.current_iteration == 3

	def test_latest_verdict(self):
		state = ResearchState(original_query="q")
		assert state.latest_verdict is None
		verdict = Verdict(quality_score=4)
		state.add_iteration("a", "fa", verdict)
		assert state.latest_verdict == verdict

	def test_all_findings(self):
		state = ResearchState(original_query="q")
		state.add_iteration("first query", "first findings", default_verdict())
		state.add_iteration("second query", "second findings", default_verdict())

		text = state.all_findings
		assert "## Iteration 1: first query" in text
		assert "## Iteration 2: second query" in text
		assert "\n\n---\n\n" in text

	def test_serializes_to_json(self):
		state = ResearchState(original_query="q", plan=make_plan([(1, []), (2, [1])]))
		state.add_iteration("a", "fa", default_verdict(), subtask_id=1)

		data = state.model_dump(mode="json")
		assert data["original_query"] == "q"
		assert data["plan"]["subtasks"][1]["depends_on"] == [1]
		assert data["iterations"][0]["evaluation"]["quality_score"] == 7
