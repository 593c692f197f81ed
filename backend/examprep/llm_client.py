from __future__ import annotations
import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import httpx

from .errors import UpstreamError
from .settings import Settings, settings as default_settings

logger = logging.getLogger(__name__)

PROBE_PROMPT = "Hello"


@dataclass(frozen=True)
class DecodingParams:
	temperature: float
	max_tokens: int


class LLMClient:
	"""Chat-completions client for the upstream generation service.

	Every failure leaves as an UpstreamError; callers never see httpx exceptions.
	"""

	def __init__(
		self,
		api_key: Optional[str] = None,
		*,
		base_url: Optional[str] = None,
		model: Optional[str] = None,
		timeout: Optional[float] = None,
		probe_timeout: Optional[float] = None,
		transport: Optional[httpx.AsyncBaseTransport] = None,
		config: Optional[Settings] = None,
	) -> None:
		config = config or default_settings
		self.api_key = api_key or config.llm_api_key
		self.base_url = base_url or config.llm_base_url
		self.model = model or config.llm_model
		self.timeout = timeout or config.llm_timeout_seconds
		self.probe_timeout = probe_timeout or config.llm_probe_timeout_seconds
		self._client = httpx.AsyncClient(timeout=self.timeout, transport=transport)

	@property
	def configured(self) -> bool:
		return bool(self.api_key)

	async def complete(self, prompt: str, params: DecodingParams, *, timeout: Optional[float] = None) -> str:
		payload: Dict[str, Any] = {
			"model": self.model,
			"messages": [{"role": "user", "content": prompt}],
			"temperature": params.temperature,
			"max_tokens": params.max_tokens,
		}
		return await self._post_payload(payload, timeout=timeout or self.timeout)

	async def probe(self) -> bool:
		"""Minimal live call used by the health check; never raises."""
		payload: Dict[str, Any] = {
			"model": self.model,
			"messages": [{"role": "user", "content": PROBE_PROMPT}],
			"max_tokens": 10,
		}
		try:
			await self._post_payload(payload, timeout=self.probe_timeout)
		except UpstreamError as err:
			logger.warning("Upstream connection test failed: %s", err.message)
			return False
		return True

	async def _post_payload(self, payload: Dict[str, Any], *, timeout: float) -> str:
		if not self.api_key:
			raise UpstreamError(UpstreamError.AUTH_FAILURE, "LLM API key is not configured")
		headers = {
			"Authorization": f"Bearer {self.api_key}",
			"Content-Type": "application/json",
		}
		try:
			# wait_for bounds the whole exchange; httpx timeouts are per phase
			r = await asyncio.wait_for(
				self._client.post(self.base_url, headers=headers, json=payload, timeout=timeout),
				timeout,
			)
		except (asyncio.TimeoutError, httpx.TimeoutException):
			raise UpstreamError(UpstreamError.TIMEOUT, f"Upstream call timed out after {timeout:g}s")
		except httpx.RequestError as net_err:
			raise UpstreamError(UpstreamError.TRANSPORT_FAILURE, f"Upstream transport failure: {net_err}")
		if r.status_code >= 400:
			raise _status_error(r)
		try:
			data = r.json()
			content = data["choices"][0]["message"]["content"]
		except Exception:
			raise UpstreamError(
				UpstreamError.UNEXPECTED_STATUS,
				f"Unexpected upstream response: {r.text[:200]}",
				status_code=r.status_code,
			)
		if not isinstance(content, str) or not content.strip():
			raise UpstreamError(UpstreamError.UNEXPECTED_STATUS, "Upstream returned an empty completion", status_code=r.status_code)
		return content

	async def aclose(self) -> None:
		await self._client.aclose()


def _status_error(r: httpx.Response) -> UpstreamError:
	code = r.status_code
	if code in (401, 403):
		kind = UpstreamError.AUTH_FAILURE
		message = f"Upstream rejected credentials (HTTP {code})"
	elif code == 429:
		kind = UpstreamError.RATE_LIMITED
		message = "Upstream rate limit reached (HTTP 429)"
	else:
		kind = UpstreamError.UNEXPECTED_STATUS
		message = f"Upstream returned HTTP {code}"
	logger.warning("%s: %s", message, r.text[:200])
	return UpstreamError(kind, message, status_code=code)
