"""
Research Context - Explicit per-session correlation, progress, and cancellation.

A ResearchContext is created once per research request and passed down
through every call in the chain. Nothing here is global: two sessions
running side by side each own their own context.
"""

import asyncio
import inspect
import logging
import threading
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)


class CancelToken:
	"""
	Cooperative cancellation flag.

	Checked at scheduling checkpoints only; a Finder or Critic call that is
	already in flight runs to completion. Safe to cancel from another thread
	or a signal handler.
	"""

	def __init__(self) -> None:
		self._event = threading.Event()

	def cancel(self) -> None:
		self._event.set()

	@property
	def cancelled(self) -> bool:
		return self._event.is_set()


@dataclass
class ProgressEvent:
	"""A progress message emitted at a phase boundary."""
	task_id: str
	message: str
	timestamp: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
	role: Optional[str] = None


ProgressObserver = Callable[[ProgressEvent], Any]


@dataclass
class ResearchContext:
	"""
	Flow-scoped state for one research session.

	Observers are fire-and-forget: a sync observer is called inline, an
	async one is scheduled and never awaited. Observer failures are logged
	and otherwise ignored.
	"""
	task_id: str = field(default_factory=lambda: uuid.uuid4().hex[:12])
	observers: list[ProgressObserver] = field(default_factory=list)
	cancel_token: CancelToken = field(default_factory=CancelToken)
	current_role: Optional[str] = None
	call_counts: dict[str, int] = field(default_factory=dict)
	_pending: set = field(default_factory=set, repr=False)

	@property
	def cancelled(self) -> bool:
		return self.cancel_token.cancelled

	def add_observer(self, observer: ProgressObserver) -> None:
		self.observers.append(observer)

	def record_call(self, role: str) -> None:
		"""Count an outgoing Finder/Critic call and remember the active role."""
		self.current_role = role
		self.call_counts[role] = self.call_counts.get(role, 0) + 1

	def report(self, message: str) -> None:
		"""Publish a progress message to every observer."""
		logger.debug(f"[{self.task_id}] {message}")
		if not self.observers:
			return

		event = ProgressEvent(task_id=self.task_id, message=message, role=self.current_role)
		for observer in list(self.observers):
			try:
				result = observer(event)
				if inspect.isawaitable(result):
					self._schedule(result)
			except Exception as e:
				logger.error(f"Progress observer failed: {e}")

	def _schedule(self, awaitable) -> None:
		try:
			loop = asyncio.get_running_loop()
			task = asyncio.ensure_future(awaitable, loop=loop)
		except RuntimeError as e:
			logger.error(f"Cannot schedule async progress observer: {e}")
			if inspect.iscoroutine(awaitable):
				awaitable.close()
			return
		self._pending.add(task)
		task.add_done_callback(self._observer_done)

	def _observer_done(self, task: asyncio.Future) -> None:
		self._pending.discard(task)
		if not task.cancelled() and task.exception() is not None:
			logger.error(f"Progress observer failed: {task.exception()}")
