from __future__ import annotations
from typing import Optional

from fastapi import APIRouter, Depends

from .. import pipelines
from ..fallback import sample_questions
from ..rate_limit import enforce_rate_limit
from ..schemas import MockTestRequest, QuestionRequest
from .common import get_llm_client, render_result

router = APIRouter(prefix="/api", tags=["questions"], dependencies=[Depends(enforce_rate_limit)])


@router.get("/sample-questions")
def get_sample_questions():
	# Works with zero configuration: no upstream call
	return [q.model_dump(by_alias=True) for q in sample_questions()]


@router.post("/generate-question")
async def generate_question(req: Optional[QuestionRequest] = None, client=Depends(get_llm_client)):
	result = await pipelines.generate_question(req or QuestionRequest(), client)
	return render_result(result, "generatedAt", fallback_field="fallbackQuestion")


@router.post("/generate-test")
async def generate_test(req: Optional[MockTestRequest] = None, client=Depends(get_llm_client)):
	result = await pipelines.generate_test(req or MockTestRequest(), client)
	return render_result(result, "generatedAt")
