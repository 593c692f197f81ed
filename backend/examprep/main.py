from __future__ import annotations
import logging
import math
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from .db import connect_store, dispose_store
from .errors import RateLimitExceeded
from .llm_client import LLMClient
from .rate_limit import AdmissionGate
from .settings import Settings, settings as default_settings
from .routers import health
from .routers import questions
from .routers import tutor

logger = logging.getLogger(__name__)

ENDPOINTS = (
	"GET  /health                    - Check server status",
	"GET  /api/sample-questions      - Get sample questions",
	"POST /api/generate-question     - Generate AI question",
	"POST /api/solve-doubt           - Solve student doubt",
	"POST /api/generate-test         - Generate mock test",
	"POST /api/explain-concept       - Explain any concept",
)


def configure_logging(level: str) -> None:
	logging.basicConfig(
		level=getattr(logging, level.upper(), logging.INFO),
		format="%(asctime)s %(levelname)s %(name)s: %(message)s",
	)
	logging.getLogger("httpx").setLevel(logging.WARNING)


@asynccontextmanager
async def lifespan(app: FastAPI):
	config: Settings = app.state.settings
	app.state.store = await run_in_threadpool(connect_store, config.database_url)
	upstream_ok: Optional[bool] = None
	if config.probe_on_startup:
		upstream_ok = await app.state.llm_client.probe()
	logger.info("Exam prep platform server started on port %s", config.port)
	logger.info("LLM API key: %s", "configured" if config.llm_api_key else "NOT configured (set LLM_API_KEY)")
	logger.info("Upstream: %s", {True: "connected", False: "disconnected", None: "not probed"}[upstream_ok])
	logger.info("Database: %s", "connected" if app.state.store is not None else "not connected")
	for line in ENDPOINTS:
		logger.debug("  %s", line)
	try:
		yield
	finally:
		logger.info("Server shutting down...")
		await app.state.llm_client.aclose()
		dispose_store(app.state.store)
		app.state.store = None


async def rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
	return JSONResponse(
		status_code=429,
		content={"error": "Rate limit exceeded", "message": exc.message},
		headers={"Retry-After": str(max(1, math.ceil(exc.retry_after)))},
	)


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
	first = exc.errors()[0] if exc.errors() else {}
	loc = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
	detail = first.get("msg", "Malformed request body")
	return JSONResponse(
		status_code=400,
		content={
			"success": False,
			"error": "Invalid request",
			"message": f"{loc}: {detail}" if loc else detail,
			"errorKind": "bad_request",
		},
	)


def create_app(
	config: Optional[Settings] = None,
	*,
	llm_client=None,
	admission_gate: Optional[AdmissionGate] = None,
) -> FastAPI:
	config = config or default_settings
	configure_logging(config.log_level)

	app = FastAPI(title="Exam Prep Platform API", lifespan=lifespan)
	app.state.settings = config
	app.state.llm_client = llm_client or LLMClient(config=config)
	app.state.admission_gate = admission_gate or AdmissionGate(
		quota=config.rate_limit_quota,
		window_seconds=config.rate_limit_window_seconds,
	)
	app.state.store = None

	origins = config.cors_origin_list
	app.add_middleware(
		CORSMiddleware,
		allow_origins=origins,
		allow_credentials="*" not in origins,
		allow_methods=["*"],
		allow_headers=["*"],
	)
	app.add_exception_handler(RateLimitExceeded, rate_limit_handler)
	app.add_exception_handler(RequestValidationError, validation_error_handler)

	app.include_router(health.router)
	app.include_router(questions.router)
	app.include_router(tutor.router)
	return app


app = create_app()


def run() -> None:
	import uvicorn

	uvicorn.run("examprep.main:app", host=default_settings.host, port=default_settings.port)
