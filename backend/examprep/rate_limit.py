"""
Fixed-window admission gate keyed by client address.

Each identity owns a list of request timestamps (milliseconds). Every check
prunes the list to the trailing window, then either denies (list is full) or
records the request. Bursts at window edges are not smoothed: a client may
spend the full quota at t=0 and again once those entries age out.

Windows are created lazily and never evicted, so memory grows with the
number of distinct identities seen over the life of the process.
"""
from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Dict, List, Optional

from fastapi import Request

from .errors import RateLimitExceeded

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AdmissionDecision:
	allowed: bool
	# Seconds until a slot frees up; 0 when allowed
	retry_after: float = 0.0


class AdmissionGate:
	def __init__(self, quota: int = 100, window_seconds: float = 60.0) -> None:
		if quota < 1:
			raise ValueError("quota must be >= 1")
		if window_seconds <= 0:
			raise ValueError("window_seconds must be > 0")
		self.quota = quota
		self.window_ms = window_seconds * 1000.0
		self._windows: Dict[str, List[float]] = {}
		# One lock over the whole map; prune-then-append must be atomic per identity
		self._lock = asyncio.Lock()

	async def admit(self, identity: str, now: Optional[float] = None) -> AdmissionDecision:
		if now is None:
			now = time.time() * 1000.0
		async with self._lock:
			window = self._windows.get(identity)
			if window is None:
				window = self._windows[identity] = []
			window[:] = [ts for ts in window if now - ts < self.window_ms]
			if len(window) >= self.quota:
				retry_after = max(0.0, (window[0] + self.window_ms - now) / 1000.0)
				return AdmissionDecision(allowed=False, retry_after=retry_after)
			window.append(now)
			return AdmissionDecision(allowed=True)


def client_identity(request: Request, *, trust_forwarded_for: bool = False) -> str:
	if trust_forwarded_for:
		forwarded = request.headers.get("x-forwarded-for", "")
		first_hop = forwarded.split(",")[0].strip()
		if first_hop:
			return first_hop
	if request.client and request.client.host:
		return request.client.host
	return "unknown"


async def enforce_rate_limit(request: Request) -> None:
	"""FastAPI dependency: runs the admission gate before the endpoint body."""
	gate: AdmissionGate = request.app.state.admission_gate
	identity = client_identity(request, trust_forwarded_for=request.app.state.settings.trust_forwarded_for)
	decision = await gate.admit(identity)
	if not decision.allowed:
		logger.info("Rate limit exceeded for %s (retry in %.1fs)", identity, decision.retry_after)
		raise RateLimitExceeded(
			"Please wait a minute before making more requests",
			retry_after=decision.retry_after,
		)
