"""
Generation pipelines: prompt -> upstream -> extraction -> result.

Each pipeline returns a Success or a Failure and never raises for expected
problems. Nothing is retried; a failed upstream call or an unusable reply is
reported once. Only question generation attaches a fallback question, and
only on failure.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Protocol, Union

from .errors import BadRequestError, ExamPrepError
from .extraction import parse_question_record, parse_test_questions
from .fallback import sample_question
from .llm_client import DecodingParams
from .prompts import build_prompt, decoding_params_for, resolve_test_task
from .schemas import ConceptRequest, DoubtRequest, GeneratedTest, MockTestRequest, QuestionRequest

logger = logging.getLogger(__name__)

MINUTES_PER_QUESTION = 1.5
INTERNAL_ERROR = "internal_error"


class CompletionClient(Protocol):
	async def complete(self, prompt: str, params: DecodingParams) -> str: ...


@dataclass
class Success:
	payload: Dict[str, Any]
	generated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass
class Failure:
	kind: str
	error: str
	message: str
	fallback: Optional[Dict[str, Any]] = None

	@property
	def status_code(self) -> int:
		return 400 if self.kind == BadRequestError.kind else 500


PipelineResult = Union[Success, Failure]


def _failure(error: str, exc: Exception) -> Failure:
	if isinstance(exc, ExamPrepError):
		logger.error("%s: %s", error, exc.message)
		return Failure(kind=exc.kind, error=error, message=exc.message)
	logger.exception("%s: unexpected error", error)
	return Failure(kind=INTERNAL_ERROR, error=error, message="Unexpected server error")


def _bad_request(error: str, message: str) -> Failure:
	return Failure(kind=BadRequestError.kind, error=error, message=message)


async def generate_question(task: QuestionRequest, client: CompletionClient) -> PipelineResult:
	try:
		raw = await client.complete(build_prompt(task), decoding_params_for(task))
		record = parse_question_record(raw)
	except Exception as exc:
		failure = _failure("Failed to generate question", exc)
		failure.fallback = sample_question().model_dump(by_alias=True)
		return failure
	return Success(payload=record.model_dump(by_alias=True))


async def solve_doubt(task: DoubtRequest, client: CompletionClient) -> PipelineResult:
	question = (task.question or "").strip()
	if not question:
		return _bad_request("Question is required", "The 'question' field must be a non-empty string")
	try:
		solution = await client.complete(build_prompt(task), decoding_params_for(task))
	except Exception as exc:
		return _failure("Failed to solve doubt", exc)
	return Success(payload={"question": question, "solution": solution.strip()})


async def generate_test(task: MockTestRequest, client: CompletionClient) -> PipelineResult:
	resolved = resolve_test_task(task)
	try:
		raw = await client.complete(build_prompt(task), decoding_params_for(task))
		questions = parse_test_questions(raw)
	except Exception as exc:
		return _failure("Failed to generate test", exc)
	# Derived fields are always recomputed; whatever the model claims is ignored
	test = GeneratedTest(
		exam_type=resolved["exam_type"],
		subject=resolved["subject"],
		total_questions=len(questions),
		total_marks=sum(q.marks for q in questions),
		duration=len(questions) * MINUTES_PER_QUESTION,
		questions=questions,
	)
	return Success(payload=test.model_dump(by_alias=True))


async def explain_concept(task: ConceptRequest, client: CompletionClient) -> PipelineResult:
	concept = (task.concept or "").strip()
	if not concept:
		return _bad_request("Concept is required", "The 'concept' field must be a non-empty string")
	try:
		explanation = await client.complete(build_prompt(task), decoding_params_for(task))
	except Exception as exc:
		return _failure("Failed to explain concept", exc)
	return Success(payload={"concept": concept, "explanation": explanation.strip()})
