from __future__ import annotations
from typing import Any, Dict, Optional, Union

from fastapi import Request
from fastapi.responses import JSONResponse

from ..pipelines import PipelineResult, Success


def get_llm_client(request: Request):
	return request.app.state.llm_client


def render_result(
	result: PipelineResult,
	timestamp_field: str,
	*,
	fallback_field: Optional[str] = None,
) -> Union[Dict[str, Any], JSONResponse]:
	if isinstance(result, Success):
		return {"success": True, **result.payload, timestamp_field: result.generated_at.isoformat()}
	body: Dict[str, Any] = {
		"success": False,
		"error": result.error,
		"message": result.message,
		"errorKind": result.kind,
	}
	if fallback_field and result.fallback is not None:
		body[fallback_field] = result.fallback
	return JSONResponse(status_code=result.status_code, content=body)
