"""
Research Worker - Turns queued task requests into task results.

The queue and pub/sub transport live outside this package; a host hands
each TaskRequest to ResearchWorker.process() and publishes the returned
TaskResult. Agent types form a closed enum: an unknown type produces an
UNSUPPORTED result rather than an exception.
"""

import logging
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, Field

from .context import CancelToken, ProgressObserver, ResearchContext
from .orchestrator.engine import IterativeResearcher
from .roles import RoleError

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
	return datetime.now(timezone.utc)


class AgentType(str, Enum):
	"""Agent types a worker knows how to run."""
	RESEARCH = "research"
	ITERATIVE_RESEARCH = "iterative-research"
	UNSUPPORTED = "unsupported"

	@property
	def is_research(self) -> bool:
		return self in (AgentType.RESEARCH, AgentType.ITERATIVE_RESEARCH)

	@classmethod
	def parse(cls, raw: str) -> "AgentType":
		"""Map a raw type string to a member; unknown strings map to UNSUPPORTED."""
		value = (raw or "").strip().lower()
		for member in cls:
			if member is not cls.UNSUPPORTED and member.value == value:
				return member
		return cls.UNSUPPORTED


class TaskStatus(str, Enum):
	"""Lifecycle status of a queued task."""
	PENDING = "pending"
	RUNNING = "running"
	COMPLETED = "completed"
	FAILED = "failed"
	CANCELLED = "cancelled"
	UNSUPPORTED = "unsupported"


class TaskRequest(BaseModel):
	"""A unit of work delivered by the task queue."""
	task_id: str
	agent_type: str
	prompt: str
	submitted_at: datetime = Field(default_factory=_utcnow)
	output_path: Optional[str] = Field(default=None, description="File the final report is written to on completion")


class TaskResult(BaseModel):
	"""The outcome published back to the requester."""
	task_id: str
	status: TaskStatus
	data: Optional[dict[str, Any]] = None
	error: Optional[str] = None
	completed_at: datetime = Field(default_factory=_utcnow)


class ResearchWorker:
	"""
	Executes task requests against an IterativeResearcher.

	Role failures become FAILED results so the host can always publish
	something; the researcher itself never swallows them.
	"""

	def __init__(
		self,
		researcher: IterativeResearcher,
		on_progress: Optional[ProgressObserver] = None,
	):
		self.researcher = researcher
		self.on_progress = on_progress

	async def process(
		self,
		request: TaskRequest,
		cancel_token: Optional[CancelToken] = None,
	) -> TaskResult:
		"""
		Run one task request to a result.

		Args:
			request: The queued request
			cancel_token: Cooperative cancellation for this task

		Returns:
			TaskResult with status COMPLETED, FAILED, CANCELLED, or UNSUPPORTED
		"""
		agent_type = AgentType.parse(request.agent_type)
		logger.info(f"Processing task {request.task_id} of type {request.agent_type}")

		if not agent_type.is_research:
			logger.warning(f"Task {request.task_id}: unsupported agent type {request.agent_type!r}")
			return TaskResult(
				task_id=request.task_id,
				status=TaskStatus.UNSUPPORTED,
				error=f"Unsupported agent type: {request.agent_type}",
			)

		context = self.researcher.new_context(cancel_token, task_id=request.task_id)
		if self.on_progress is not None:
			context.add_observer(self.on_progress)

		try:
			data = await self._run_research(request, agent_type, context)
		except (RoleError, ValueError) as e:
			logger.error(f"Task {request.task_id} failed with error: {e}")
			return TaskResult(task_id=request.task_id, status=TaskStatus.FAILED, error=str(e))

		if data is None:
			logger.warning(f"Task {request.task_id} was cancelled")
			return TaskResult(
				task_id=request.task_id,
				status=TaskStatus.CANCELLED,
				error="Task was cancelled.",
			)

		if request.output_path:
			try:
				self._write_output(request.output_path, data["text"])
			except OSError as e:
				logger.error(f"Task {request.task_id}: could not write {request.output_path}: {e}")
				return TaskResult(
					task_id=request.task_id,
					status=TaskStatus.FAILED,
					error=f"Could not write output to {request.output_path}: {e}",
				)
			data["outputPath"] = request.output_path

		logger.info(f"Task {request.task_id} completed successfully")
		return TaskResult(task_id=request.task_id, status=TaskStatus.COMPLETED, data=data)

	async def _run_research(
		self,
		request: TaskRequest,
		agent_type: AgentType,
		context: ResearchContext,
	) -> Optional[dict[str, Any]]:
		state = await self.researcher.research(request.prompt, context=context)
		if state.cancelled:
			return None
		return {
			"text": state.final_synthesis or "",
			"agentType": agent_type.value,
			"timestamp": _utcnow().isoformat(),
			"callCounts": dict(context.call_counts),
			"state": state.model_dump(mode="json"),
		}

	@staticmethod
	def _write_output(output_path: str, text: str) -> None:
		"""Write the final report to the requested file, creating parent dirs."""
		path = Path(output_path).expanduser()
		path.parent.mkdir(parents=True, exist_ok=True)
		path.write_text(text, encoding="utf-8")
