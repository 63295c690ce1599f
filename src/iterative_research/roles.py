"""
Roles - The Finder and Critic capabilities consumed by the research core.

Both roles are stateless text-in/text-out async callables. The core never
constructs them: they are built at the composition root (the CLI or a
worker) and passed in. ClaudeCLIRole is one concrete backend, running
`claude --print` as a subprocess.
"""

import asyncio
import inspect
import logging
from enum import Enum
from typing import Awaitable, Callable, Optional, Union

logger = logging.getLogger(__name__)

Finder = Callable[[str], Awaitable[str]]
Critic = Callable[[str], Awaitable[str]]

FINDER_TOOLS = ["WebSearch", "WebFetch"]


class RoleKind(str, Enum):
	"""The two external roles the research core talks to."""
	FINDER = "finder"
	CRITIC = "critic"


class RoleError(Exception):
	"""Base exception for role call failures."""
	pass


class RoleUnavailableError(RoleError):
	"""Raised when the role backend cannot be started."""
	pass


class RoleTimeoutError(RoleError):
	"""Raised when a role call exceeds its timeout."""
	pass


class RoleCallError(RoleError):
	"""Raised when the role backend exits with an error."""

	def __init__(self, message: str, returncode: Optional[int] = None):
		super().__init__(message)
		self.returncode = returncode


class ClaudeCLIRole:
	"""
	A role backed by the Claude CLI in print mode.

	The prompt goes in on stdin and the plain-text response comes back on
	stdout.
	"""

	def __init__(
		self,
		kind: RoleKind,
		command: str = "claude",
		model: Optional[str] = None,
		timeout: int = 600,
		allowed_tools: Optional[list[str]] = None,
	):
		"""
		Initialize the role.

		Args:
			kind: Which role this backend plays
			command: CLI executable name or path
			model: Optional model override passed as --model
			timeout: Seconds to wait for a single call
			allowed_tools: Tools the CLI may use (defaults to web tools for the finder)
		"""
		self.kind = kind
		self.command = command
		self.model = model
		self.timeout = timeout
		if allowed_tools is None:
			allowed_tools = list(FINDER_TOOLS) if kind == RoleKind.FINDER else []
		self.allowed_tools = allowed_tools

	def build_command(self) -> list[str]:
		cmd = [self.command, "--print", "--output-format", "text"]
		if self.model:
			cmd.extend(["--model", self.model])
		if self.allowed_tools:
			cmd.extend(["--allowedTools", ",".join(self.allowed_tools)])
		return cmd

	async def __call__(self, prompt: str) -> str:
		cmd = self.build_command()
		logger.debug(f"{self.kind.value}: running {' '.join(cmd)} ({len(prompt)} chars)")

		try:
			process = await asyncio.create_subprocess_exec(
				*cmd,
				stdin=asyncio.subprocess.PIPE,
				stdout=asyncio.subprocess.PIPE,
				stderr=asyncio.subprocess.PIPE,
			)
		except FileNotFoundError as e:
			raise RoleUnavailableError(f"Claude CLI not found: {self.command}") from e

		try:
			stdout, stderr = await asyncio.wait_for(
				process.communicate(input=prompt.encode()),
				timeout=self.timeout,
			)
		except asyncio.TimeoutError as e:
			process.kill()
			await process.wait()
			raise RoleTimeoutError(f"{self.kind.value} call timed out after {self.timeout}s") from e

		if process.returncode != 0:
			message = stderr.decode(errors="replace").strip()
			raise RoleCallError(
				f"{self.kind.value} call failed (exit {process.returncode}): {message}",
				returncode=process.returncode,
			)

		return stdout.decode(errors="replace")


class CallableRole:
	"""Adapts a plain sync or async function to the role interface."""

	def __init__(self, kind: RoleKind, fn: Callable[[str], Union[str, Awaitable[str]]]):
		self.kind = kind
		self._fn = fn

	async def __call__(self, prompt: str) -> str:
		result = self._fn(prompt)
		if inspect.isawaitable(result):
			result = await result
		return result
