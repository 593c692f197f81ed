from __future__ import annotations

from .llm_client import DecodingParams
from .schemas import ConceptRequest, DoubtRequest, GenerationTask, MockTestRequest, QuestionRequest


QUESTION_DEFAULTS = {"exam_type": "JEE", "subject": "Mathematics", "difficulty": "medium", "topic": "Algebra"}
DOUBT_DEFAULTS = {"subject": "General", "student_grade": "12th"}
TEST_DEFAULTS = {"exam_type": "JEE Mains", "subject": "Physics", "count": 5}
CONCEPT_DEFAULTS = {"subject": "Science", "level": "Intermediate"}

# Lower temperature for the structurally strict outputs (tests) to reduce formatting drift
DECODING_PARAMS = {
	QuestionRequest: DecodingParams(temperature=0.7, max_tokens=500),
	DoubtRequest: DecodingParams(temperature=0.5, max_tokens=800),
	MockTestRequest: DecodingParams(temperature=0.3, max_tokens=2000),
	ConceptRequest: DecodingParams(temperature=0.6, max_tokens=1000),
}


def _value(task: GenerationTask, name: str, defaults: dict):
	value = getattr(task, name, None)
	if isinstance(value, str):
		value = value.strip()
	return value if value else defaults[name]


def resolve_question_task(task: QuestionRequest) -> dict:
	return {name: _value(task, name, QUESTION_DEFAULTS) for name in QUESTION_DEFAULTS}


def resolve_test_task(task: MockTestRequest) -> dict:
	return {name: _value(task, name, TEST_DEFAULTS) for name in TEST_DEFAULTS}


def _build_question_prompt(task: QuestionRequest) -> str:
	p = resolve_question_task(task)
	return (
		f"Generate a {p['difficulty']} difficulty multiple choice question for {p['exam_type']} {p['subject']} on topic: {p['topic']}.\n"
		"Return ONLY valid JSON in this exact format, with no markdown and no commentary:\n"
		"{\n"
		'  "question": "The actual question text here?",\n'
		'  "options": ["Option A", "Option B", "Option C", "Option D"],\n'
		'  "correctAnswer": "A",\n'
		'  "explanation": "Detailed step-by-step explanation here",\n'
		f'  "topic": "{p["topic"]}",\n'
		f'  "difficulty": "{p["difficulty"]}",\n'
		f'  "subject": "{p["subject"]}",\n'
		f'  "examType": "{p["exam_type"]}"\n'
		"}\n"
		"Produce EXACTLY 4 options. correctAnswer must be one of A, B, C, D."
	)


def _build_doubt_prompt(task: DoubtRequest) -> str:
	subject = _value(task, "subject", DOUBT_DEFAULTS)
	grade = _value(task, "student_grade", DOUBT_DEFAULTS)
	question = (task.question or "").strip()
	return (
		f"You are an expert tutor for an Indian {grade} student preparing for competitive exams.\n"
		f"Question: {question}\n"
		f"Subject: {subject}\n\n"
		"Provide a helpful, detailed solution with:\n"
		"1. Step-by-step explanation\n"
		"2. Key concepts used\n"
		"3. Formula if applicable\n"
		"4. Final answer clearly stated\n"
		"5. One similar practice question\n\n"
		"Format your response in clear paragraphs."
	)


def _build_test_prompt(task: MockTestRequest) -> str:
	p = resolve_test_task(task)
	return (
		f"Generate a mock test of {p['count']} questions for {p['exam_type']} {p['subject']}.\n"
		"Return ONLY a valid JSON array in this exact format, with no markdown and no commentary:\n"
		"[\n"
		"  {\n"
		'    "id": 1,\n'
		'    "question": "Question text?",\n'
		'    "options": ["A", "B", "C", "D"],\n'
		'    "correct": "A",\n'
		'    "marks": 4,\n'
		'    "negativeMarks": 1,\n'
		'    "explanation": "Detailed explanation"\n'
		"  }\n"
		"]\n"
		f"Generate exactly {p['count']} questions with ids 1 to {p['count']}. Each question has EXACTLY 4 options."
	)


def _build_concept_prompt(task: ConceptRequest) -> str:
	subject = _value(task, "subject", CONCEPT_DEFAULTS)
	level = _value(task, "level", CONCEPT_DEFAULTS)
	concept = (task.concept or "").strip()
	return (
		f'Explain the concept "{concept}" for {subject} at {level} level suitable for Indian competitive exam preparation.\n'
		"Include:\n"
		"1. Simple definition\n"
		"2. Key points\n"
		"3. Formula/Diagrams if applicable\n"
		"4. Real-life examples\n"
		"5. Common exam questions on this topic\n"
		"6. Memory tricks\n\n"
		"Make it engaging and easy to understand."
	)


_BUILDERS = {
	QuestionRequest: _build_question_prompt,
	DoubtRequest: _build_doubt_prompt,
	MockTestRequest: _build_test_prompt,
	ConceptRequest: _build_concept_prompt,
}


def build_prompt(task: GenerationTask) -> str:
	return _BUILDERS[type(task)](task)


def decoding_params_for(task: GenerationTask) -> DecodingParams:
	return DECODING_PARAMS[type(task)]
