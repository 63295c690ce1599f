"""
Defensive extraction of structured verdicts from free-form Critic output.

Models wrap their JSON in prose, markdown fences, or both. Every function
here tolerates that and none of them raise: a response that cannot be read
yields the optimistic default verdict so one malformed reply never stalls
a research session.
"""

import json
import logging
import re
from typing import Any, Iterator, Optional

from pydantic import ValidationError

from .research.models import Verdict, default_verdict

logger = logging.getLogger(__name__)

_FENCED_BLOCK = re.compile(r"```(?:json)?\s*(.*?)\s*```", re.DOTALL | re.IGNORECASE)

EXCERPT_LENGTH = 200
MAX_SCAN_ATTEMPTS = 32


def find_json_object(text: str, start: int = 0) -> Optional[tuple[int, int]]:
	"""
	Find the first top-level JSON object in text.

	Braces inside string literals (including escaped quotes) do not count
	toward nesting depth.

	Returns:
		(begin, end) slice bounds of the object, or None if no object closes
	"""
	depth = 0
	begin = -1
	in_string = False
	escaped = False

	for i in range(start, len(text)):
		ch = text[i]
		if depth == 0:
			if ch == "{":
				begin = i
				depth = 1
			continue

		if in_string:
			if escaped:
				escaped = False
			elif ch == "\\":
				escaped = True
			elif ch == '"':
				in_string = False
			continue

		if ch == '"':
			in_string = True
		elif ch == "{":
			depth += 1
		elif ch == "}":
			depth -= 1
			if depth == 0:
				return begin, i + 1

	return None


def _load_object(candidate: str) -> Optional[dict[str, Any]]:
	try:
		data = json.loads(candidate)
	except (json.JSONDecodeError, ValueError):
		return None
	return data if isinstance(data, dict) else None


def _iter_json_candidates(text: str) -> Iterator[tuple[dict[str, Any], int, int]]:
	"""Yield (object, begin, end) for each extraction strategy, in order."""
	# 1. fenced block
	for match in _FENCED_BLOCK.finditer(text):
		data = _load_object(match.group(1))
		if data is not None:
			yield data, match.start(), match.end()
			break

	# 2. brace-depth scan, moving past opening braces that start no valid object
	start = text.find("{")
	attempts = 0
	while start != -1 and attempts < MAX_SCAN_ATTEMPTS:
		attempts += 1
		span = find_json_object(text, start)
		if span is not None:
			begin, end = span
			data = _load_object(text[begin:end])
			if data is not None:
				yield data, begin, end
				break
		start = text.find("{", start + 1)

	# 3. the whole trimmed text
	stripped = text.strip()
	if stripped.startswith("{") and stripped.endswith("}"):
		data = _load_object(stripped)
		if data is not None:
			yield data, text.find("{"), len(text)


def _leading_candidate(text: str) -> Optional[tuple[dict[str, Any], int, int]]:
	"""The candidate that starts earliest in text; ties go to strategy order."""
	best = None
	for candidate in _iter_json_candidates(text):
		if best is None or candidate[1] < best[1]:
			best = candidate
	return best


def _validate(data: dict[str, Any]) -> Optional[Verdict]:
	try:
		return Verdict.model_validate(data)
	except ValidationError as e:
		logger.debug(f"Verdict candidate rejected: {e.error_count()} validation errors")
		return None


def try_parse_verdict(text: str) -> Optional[Verdict]:
	"""Return the first extraction candidate that validates as a Verdict, or None."""
	if not text:
		return None
	for data, _, _ in _iter_json_candidates(text):
		verdict = _validate(data)
		if verdict is not None:
			return verdict
	return None


def parse_verdict(text: str) -> Verdict:
	"""
	Parse a Critic response into a Verdict.

	Never raises. Falls back to the optimistic default verdict when no
	strategy produces a valid object.
	"""
	verdict = try_parse_verdict(text)
	if verdict is not None:
		return verdict

	excerpt = (text or "")[:EXCERPT_LENGTH].replace("\n", " ")
	logger.warning(f"Could not parse verdict, using default. Response began: {excerpt!r}")
	return default_verdict()


def parse_preamble_verdict(text: str) -> Optional[Verdict]:
	"""
	Parse the JSON block that opens a response, or None.

	Unlike parse_verdict this ignores JSON appearing later in the text, such
	as examples quoted inside a report.
	"""
	if not text or not text.strip():
		return None
	candidate = _leading_candidate(text)
	if candidate is None:
		return None
	return _validate(candidate[0])


def extract_trailing_prose(text: str, fallback: str) -> str:
	"""
	Return the text that follows the opening JSON block in a response.

	Used to recover a report written after a JSON preamble. The earliest
	JSON object in the text is taken as the preamble, so fenced examples
	inside the report are kept. If no JSON object is found the text is
	returned unchanged; if nothing follows the preamble, fallback is
	returned instead of an empty string.
	"""
	if not text or not text.strip():
		return fallback

	candidate = _leading_candidate(text)
	if candidate is None:
		return text

	trailing = text[candidate[2]:].strip()
	return trailing if trailing else fallback
