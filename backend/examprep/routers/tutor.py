from __future__ import annotations
from typing import Optional

from fastapi import APIRouter, Depends

from .. import pipelines
from ..rate_limit import enforce_rate_limit
from ..schemas import ConceptRequest, DoubtRequest
from .common import get_llm_client, render_result

router = APIRouter(prefix="/api", tags=["tutor"], dependencies=[Depends(enforce_rate_limit)])


@router.post("/solve-doubt")
async def solve_doubt(req: Optional[DoubtRequest] = None, client=Depends(get_llm_client)):
	result = await pipelines.solve_doubt(req or DoubtRequest(), client)
	return render_result(result, "solvedAt")


@router.post("/explain-concept")
async def explain_concept(req: Optional[ConceptRequest] = None, client=Depends(get_llm_client)):
	result = await pipelines.explain_concept(req or ConceptRequest(), client)
	return render_result(result, "explainedAt")
