"""Shared fakes and builders for iterative-research tests."""

import json
from typing import Callable, Optional, Union

from iterative_research.research.models import ResearchPlan, Subtask


class ScriptedRole:
	"""Async role that replays canned responses and records every prompt.

	Exceptions in the script are raised instead of returned. Once the script
	runs out, ``default`` is returned.
	"""

	def __init__(self, responses: Optional[list[Union[str, Exception]]] = None, default: str = ""):
		self.responses = list(responses or [])
		self.default = default
		self.prompts: list[str] = []

	@property
	def call_count(self) -> int:
		return len(self.prompts)

	async def __call__(self, prompt: str) -> str:
		self.prompts.append(prompt)
		if self.responses:
			item = self.responses.pop(0)
			if isinstance(item, Exception):
				raise item
			return item
		return self.default


class RoutingRole:
	"""Async role whose response is computed from the prompt."""

	def __init__(self, route: Callable[[str], str]):
		self.route = route
		self.prompts: list[str] = []

	@property
	def call_count(self) -> int:
		return len(self.prompts)

	async def __call__(self, prompt: str) -> str:
		self.prompts.append(prompt)
		return self.route(prompt)


def verdict_json(
	is_satisfactory: bool = False,
	quality_score: int = 5,
	gaps: Optional[list[str]] = None,
	follow_ups: Optional[list[str]] = None,
	refined_query: Optional[str] = None,
	reasoning: str = "",
	subtasks: Optional[list[dict]] = None,
	fenced: bool = True,
) -> str:
	"""Render a Critic response the way models usually send it."""
	data = {
		"isSatisfactory": is_satisfactory,
		"qualityScore": quality_score,
		"gaps": gaps or [],
		"followUpQuestions": follow_ups or [],
		"refinedQuery": refined_query,
		"reasoning": reasoning,
	}
	if subtasks is not None:
		data["subTasks"] = subtasks
	body = json.dumps(data, indent=2)
	if fenced:
		return f"Here is my assessment.\n\n```json\n{body}\n```\n"
	return body


def subtask_dict(
	subtask_id: int,
	query: str,
	depends_on: Optional[list[int]] = None,
	expected_outcome: str = "",
) -> dict:
	return {
		"id": subtask_id,
		"query": query,
		"rationale": f"needed for {query}",
		"dependsOn": depends_on or [],
		"expectedOutcome": expected_outcome or f"facts about {query}",
	}


def make_plan(
	edges: list[tuple[int, list[int]]],
	query: str = "Compare A and B",
) -> ResearchPlan:
	"""Build a plan from (id, depends_on) pairs."""
	return ResearchPlan(
		original_query=query,
		subtasks=[
			Subtask(id=sid, query=f"query {sid}", depends_on=frozenset(deps))
			for sid, deps in edges
		],
		rationale="test plan",
	)
