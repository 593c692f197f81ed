from __future__ import annotations

import random
from typing import Any, Dict, List, Optional, Sequence

from .schemas import QuestionRecord


# Pre-authored questions served when generation fails and by the sample endpoint.
# Validated at import so a bad literal stops the app from starting.
_FALLBACK_QUESTIONS: List[Dict[str, Any]] = [
	{
		"question": "What is the value of ∫(x²)dx from 0 to 1?",
		"options": ["1/3", "1/2", "2/3", "1"],
		"correctAnswer": "A",
		"explanation": "The integral of x² is (x³/3). Evaluating from 0 to 1 gives (1³/3) - (0³/3) = 1/3.",
		"topic": "Calculus",
		"difficulty": "medium",
		"subject": "Mathematics",
		"examType": "JEE",
	},
	{
		"question": "Ohm's Law states that:",
		"options": ["V = IR", "I = VR", "R = VI", "V = I/R"],
		"correctAnswer": "A",
		"explanation": "Ohm's Law states that voltage (V) is equal to current (I) multiplied by resistance (R).",
		"topic": "Electricity",
		"difficulty": "easy",
		"subject": "Physics",
		"examType": "NEET",
	},
]

_GENERAL_KNOWLEDGE_SAMPLE: Dict[str, Any] = {
	"question": "Who is known as the Father of Indian Constitution?",
	"options": ["Mahatma Gandhi", "Jawaharlal Nehru", "B.R. Ambedkar", "Sardar Patel"],
	"correctAnswer": "C",
	"explanation": "Dr. B.R. Ambedkar was the chairman of the drafting committee of the Indian Constitution.",
	"topic": "Indian Polity",
	"difficulty": "easy",
	"subject": "General Knowledge",
	"examType": "UPSC",
}


def _validated(records: Sequence[Dict[str, Any]]) -> tuple:
	pool = tuple(QuestionRecord.model_validate(r) for r in records)
	if not pool:
		raise ValueError("fallback pool must not be empty")
	return pool


FALLBACK_POOL = _validated(_FALLBACK_QUESTIONS)
GENERAL_KNOWLEDGE_SAMPLE = QuestionRecord.model_validate(_GENERAL_KNOWLEDGE_SAMPLE)


def sample_question(rng: Optional[random.Random] = None) -> QuestionRecord:
	"""Pick one fallback question uniformly at random."""
	return (rng or random).choice(FALLBACK_POOL).model_copy(deep=True)


def sample_questions(rng: Optional[random.Random] = None) -> List[QuestionRecord]:
	return [sample_question(rng), GENERAL_KNOWLEDGE_SAMPLE.model_copy(deep=True)]
