"""
Structured-payload extraction from free-text model replies.

Models are asked to answer with bare JSON but routinely wrap it in prose or
markdown fences, add commentary afterwards, or put braces inside string
values. A regex such as ``\\{[\\s\\S]*\\}`` grabs from the first opener to the
last closer in the whole reply and breaks on all of those. Instead we scan:
starting at a candidate opening bracket, track nesting depth over both
bracket kinds while skipping anything inside double-quoted strings, and stop
at the bracket that closes the opener. The first such outermost span that
parses as JSON wins.

A walk that hits a wrong closer rules out every opener still open at that
point, so the scan resumes after it and only the spans it saw balance are
offered from the skipped region. A walk that runs off the end of the text is
a truncated reply and ends the search. Every character is walked once.

Parsed data is then validated against the record schemas before anything is
handed back to a caller.
"""
from __future__ import annotations

import json
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple

from pydantic import ValidationError

from .errors import ExtractionError
from .schemas import QuestionRecord, TestQuestionRecord

OBJECT = "object"
ARRAY = "array"

_OPENER = {OBJECT: "{", ARRAY: "["}
_CLOSER_FOR = {"{": "}", "[": "]"}
_CLOSERS = frozenset(_CLOSER_FOR.values())


def _walk(text: str, start: int) -> Tuple[Optional[int], int, Dict[int, int]]:
	"""Walk from the opener at ``text[start]``.

	Returns ``(end, stop, closed)``. ``end`` is the index just past the matching
	closer, or None. ``stop`` is where the walk ended: ``end``, the index of a
	wrong closer, or ``len(text)``. ``closed`` maps the start of every nested
	span that balanced on the way to its end.
	"""
	expected: List[Tuple[str, int]] = []
	closed: Dict[int, int] = {}
	in_string = False
	escaped = False
	for i in range(start, len(text)):
		ch = text[i]
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
		elif ch in _CLOSER_FOR:
			expected.append((_CLOSER_FOR[ch], i))
		elif ch in _CLOSERS:
			if not expected:
				return None, i, closed
			closer, opened_at = expected.pop()
			if closer != ch:
				return None, i, closed
			if not expected:
				return i + 1, i + 1, closed
			closed[opened_at] = i + 1
	return None, len(text), closed


def match_closing_bracket(text: str, start: int) -> Optional[int]:
	"""Return the index just past the bracket that closes ``text[start]``.

	Returns None when the span is never closed or is closed by the wrong kind
	of bracket.
	"""
	return _walk(text, start)[0]


def iter_balanced_spans(text: str, opener: str) -> Iterator[Tuple[int, Optional[int]]]:
	"""Yield ``(start, end)`` for each candidate opener, left to right.

	``end`` is None for an opener that never balances. After a balanced span
	the scan resumes past its end, so nested openers are not offered as
	separate candidates. An opener that runs to the end of the text is the
	last candidate.
	"""
	pos = text.find(opener)
	while pos != -1:
		end, stop, closed = _walk(text, pos)
		yield pos, end
		if end is not None:
			pos = text.find(opener, end)
			continue
		if stop == len(text):
			return
		resume = pos + 1
		for start in sorted(closed):
			if start >= resume and text[start] == opener:
				yield start, closed[start]
				resume = closed[start]
		pos = text.find(opener, stop + 1)


def iter_payloads(raw_text: str, shape: str) -> Iterator[Any]:
	"""Yield every candidate span of ``shape`` that parses, left to right.

	Raises ExtractionError when there is no opener at all, or when no span
	parses.
	"""
	if shape not in _OPENER:
		raise ValueError(f"unknown payload shape: {shape!r}")
	opener = _OPENER[shape]
	text = raw_text or ""
	if opener not in text:
		raise ExtractionError(ExtractionError.NO_BRACKET_FOUND, f"No JSON {shape} found in model response")
	first_problem: Optional[str] = None
	parsed_any = False
	for start, end in iter_balanced_spans(text, opener):
		if end is None:
			first_problem = first_problem or f"Unterminated JSON {shape} at offset {start}"
			continue
		try:
			# strict=False tolerates raw newlines inside strings, which models emit often
			data = json.loads(text[start:end], strict=False)
		except json.JSONDecodeError as err:
			first_problem = first_problem or f"Invalid JSON {shape}: {err.msg} (line {err.lineno} column {err.colno})"
			continue
		parsed_any = True
		yield data
	if not parsed_any:
		raise ExtractionError(ExtractionError.MALFORMED_PAYLOAD, first_problem or f"Invalid JSON {shape}")


def extract_payload(raw_text: str, shape: str) -> Any:
	return next(iter_payloads(raw_text, shape))


def _describe(err: ValidationError, prefix: str = "") -> str:
	parts = []
	for e in err.errors()[:3]:
		loc = ".".join(str(p) for p in e.get("loc", ()))
		parts.append(f"{prefix}{loc}: {e.get('msg')}" if loc else f"{prefix}{e.get('msg')}")
	return "; ".join(parts)


def validate_question_record(data: Any) -> QuestionRecord:
	try:
		return QuestionRecord.model_validate(data)
	except ValidationError as err:
		raise ExtractionError(ExtractionError.SCHEMA_VIOLATION, f"Invalid question format: {_describe(err)}")


def validate_test_questions(data: Any) -> List[TestQuestionRecord]:
	if not isinstance(data, list) or not data:
		raise ExtractionError(ExtractionError.SCHEMA_VIOLATION, "Test must be a non-empty array of questions")
	questions: List[TestQuestionRecord] = []
	seen_ids = set()
	for i, item in enumerate(data):
		try:
			q = TestQuestionRecord.model_validate(item)
		except ValidationError as err:
			raise ExtractionError(
				ExtractionError.SCHEMA_VIOLATION,
				f"Invalid format for question {i + 1}: {_describe(err)}",
			)
		if q.id in seen_ids:
			raise ExtractionError(ExtractionError.SCHEMA_VIOLATION, f"Duplicate question id {q.id}")
		seen_ids.add(q.id)
		questions.append(q)
	return questions


def _first_valid(raw_text: str, shape: str, validate: Callable[[Any], Any]) -> Any:
	# Prose such as "use the {} format" can parse too; keep going until a span validates
	violation: Optional[ExtractionError] = None
	for data in iter_payloads(raw_text, shape):
		try:
			return validate(data)
		except ExtractionError as err:
			violation = violation or err
	raise violation


def parse_question_record(raw_text: str) -> QuestionRecord:
	return _first_valid(raw_text, OBJECT, validate_question_record)


def parse_test_questions(raw_text: str) -> List[TestQuestionRecord]:
	return _first_valid(raw_text, ARRAY, validate_test_questions)
