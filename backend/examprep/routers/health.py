from __future__ import annotations
from datetime import datetime, timezone

from fastapi import APIRouter, Request
from starlette.concurrency import run_in_threadpool

from ..db import ping_store

router = APIRouter(tags=["health"])


@router.get("/health")
async def health(request: Request):
	# Live probe on every call; diagnostics only, never gates the pipelines
	connected = await request.app.state.llm_client.probe()
	store_connected = await run_in_threadpool(ping_store, request.app.state.store)
	return {
		"status": "ok",
		"timestamp": datetime.now(timezone.utc).isoformat(),
		"upstreamConnected": connected,
		"upstream": "connected" if connected else "disconnected",
		"storeConnected": store_connected,
		"message": "Exam Prep Platform API is running",
	}


@router.get("/info")
def info(request: Request):
	return {
		"status": "ok",
		"upstreamConfigured": bool(request.app.state.llm_client.configured),
		"storeConfigured": bool(request.app.state.settings.database_url),
	}
