"""
Pydantic schemas for the exam prep API.

Request bodies double as the generation tasks handed to the prompt builder.
Record models are the contract that untrusted model output must satisfy
before it is returned to a caller. Wire names are camelCase.
"""
from __future__ import annotations

from typing import Any, List, Literal, Optional, Union

from pydantic import (
	BaseModel,
	ConfigDict,
	Field,
	NonNegativeFloat,
	NonNegativeInt,
	PositiveFloat,
	PositiveInt,
	ValidationInfo,
	field_validator,
)
from pydantic.alias_generators import to_camel


MAX_TEST_QUESTIONS = 20

AnswerLetter = Literal["A", "B", "C", "D"]


class CamelModel(BaseModel):
	model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# Generation tasks (request bodies)

class QuestionRequest(CamelModel):
	exam_type: Optional[str] = None
	subject: Optional[str] = None
	difficulty: Optional[str] = None
	topic: Optional[str] = None


class DoubtRequest(CamelModel):
	question: Optional[str] = None
	subject: Optional[str] = None
	student_grade: Optional[str] = None


class MockTestRequest(CamelModel):
	exam_type: Optional[str] = None
	subject: Optional[str] = None
	count: Optional[int] = None

	@field_validator("count")
	@classmethod
	def clamp_count(cls, value: Optional[int]) -> Optional[int]:
		if value is None:
			return None
		return max(1, min(value, MAX_TEST_QUESTIONS))


class ConceptRequest(CamelModel):
	concept: Optional[str] = None
	subject: Optional[str] = None
	level: Optional[str] = None


GenerationTask = Union[QuestionRequest, DoubtRequest, MockTestRequest, ConceptRequest]


# Records

def _normalize_options(value: Any) -> Any:
	# Models sometimes emit bare numbers as options; anything else is left for the type check
	if isinstance(value, list):
		return [str(o).strip() if isinstance(o, (str, int, float)) and not isinstance(o, bool) else o for o in value]
	return value


def _normalize_letter(value: Any) -> Any:
	if isinstance(value, str):
		return value.strip().upper()
	return value


class QuestionRecord(CamelModel):
	question: str = Field(min_length=1)
	options: List[str] = Field(min_length=4, max_length=4)
	correct_answer: AnswerLetter
	explanation: str
	topic: str
	difficulty: str
	subject: str
	exam_type: str

	@field_validator("options", mode="before")
	@classmethod
	def coerce_options(cls, value: Any) -> Any:
		return _normalize_options(value)

	@field_validator("correct_answer", mode="before")
	@classmethod
	def coerce_letter(cls, value: Any) -> Any:
		return _normalize_letter(value)

	@field_validator("options")
	@classmethod
	def options_not_blank(cls, value: List[str]) -> List[str]:
		if any(not o for o in value):
			raise ValueError("options must be non-empty strings")
		return value


class TestQuestionRecord(CamelModel):
	__test__ = False  # not a pytest class

	id: int = Field(gt=0)
	question: str = Field(min_length=1)
	options: List[str] = Field(min_length=4, max_length=4)
	correct: AnswerLetter
	marks: Union[PositiveInt, PositiveFloat] = 4
	negative_marks: Union[NonNegativeInt, NonNegativeFloat] = 1
	explanation: str

	@field_validator("options", mode="before")
	@classmethod
	def coerce_options(cls, value: Any) -> Any:
		return _normalize_options(value)

	@field_validator("correct", mode="before")
	@classmethod
	def coerce_letter(cls, value: Any) -> Any:
		return _normalize_letter(value)

	@field_validator("options")
	@classmethod
	def options_not_blank(cls, value: List[str]) -> List[str]:
		if any(not o for o in value):
			raise ValueError("options must be non-empty strings")
		return value

	@field_validator("marks", "negative_marks", mode="before")
	@classmethod
	def null_means_default(cls, value: Any, info: ValidationInfo) -> Any:
		if value is None:
			return 4 if info.field_name == "marks" else 1
		return value


class GeneratedTest(CamelModel):
	exam_type: str
	subject: str
	total_questions: int
	total_marks: Union[int, float]
	duration: float
	questions: List[TestQuestionRecord]
