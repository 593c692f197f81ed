"""Exception hierarchy for the exam prep API.

Everything raised on purpose inside the service derives from ExamPrepError.
Pipelines convert these into Failure results; only RateLimitExceeded reaches
the HTTP layer as an exception, where an app-level handler renders the 429.
"""
from __future__ import annotations

from typing import Optional


class ExamPrepError(Exception):
	"""Base class for all errors raised by the service."""

	kind: str = "error"

	def __init__(self, message: str) -> None:
		super().__init__(message)
		self.message = message


class BadRequestError(ExamPrepError):
	"""Caller input failed validation; no upstream call was made."""

	kind = "bad_request"


class RateLimitExceeded(ExamPrepError):
	"""The admission gate denied the request.

	Attributes:
		retry_after: Seconds until the oldest retained request leaves the window.
	"""

	kind = "rate_limited"

	def __init__(self, message: str, retry_after: float) -> None:
		super().__init__(message)
		self.retry_after = retry_after


class UpstreamError(ExamPrepError):
	"""The generation service call failed.

	``kind`` is one of the UPSTREAM_* constants below. ``status_code`` is the
	HTTP status returned by the upstream, when there was one.
	"""

	TIMEOUT = "timeout"
	TRANSPORT_FAILURE = "transport_failure"
	AUTH_FAILURE = "auth_failure"
	RATE_LIMITED = "upstream_rate_limited"
	UNEXPECTED_STATUS = "unexpected_status"

	def __init__(self, kind: str, message: str, status_code: Optional[int] = None) -> None:
		super().__init__(message)
		self.kind = kind
		self.status_code = status_code


class ExtractionError(ExamPrepError):
	"""The upstream reply did not contain a usable structured payload."""

	NO_BRACKET_FOUND = "no_bracket_found"
	MALFORMED_PAYLOAD = "malformed_payload"
	SCHEMA_VIOLATION = "schema_violation"

	def __init__(self, kind: str, message: str) -> None:
		super().__init__(message)
		self.kind = kind
