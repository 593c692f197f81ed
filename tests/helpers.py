import json


class FakeLLM:
    """Stand-in for LLMClient that records every call."""

    def __init__(self, responses=None, error=None, probe_ok=True, configured=True):
        self.responses = list(responses or [])
        self.error = error
        self.probe_ok = probe_ok
        self.configured = configured
        self.calls = []
        self.closed = False

    async def complete(self, prompt, params, *, timeout=None):
        self.calls.append((prompt, params))
        if self.error is not None:
            raise self.error
        return self.responses.pop(0)

    async def probe(self):
        return self.probe_ok

    async def aclose(self):
        self.closed = True


def question_payload(**overrides):
    data = {
        "question": "What is 2 + 2?",
        "options": ["3", "4", "5", "6"],
        "correctAnswer": "B",
        "explanation": "Adding 2 and 2 gives 4.",
        "topic": "Arithmetic",
        "difficulty": "easy",
        "subject": "Mathematics",
        "examType": "JEE",
    }
    data.update(overrides)
    return data


def mock_test_item(qid, **overrides):
    data = {
        "id": qid,
        "question": f"Question {qid}?",
        "options": ["A1", "B1", "C1", "D1"],
        "correct": "A",
        "marks": 4,
        "negativeMarks": 1,
        "explanation": f"Because {qid}.",
    }
    data.update(overrides)
    return data


def as_reply(payload, before="Here you go:\n", after="\nGood luck!"):
    return f"{before}{json.dumps(payload)}{after}"
