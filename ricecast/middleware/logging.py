"""structlog setup and the per-request access log.

Each request gets an ``x-request-id`` and a caller hint bound into the
structlog context, so the forecast, analysis and growth-tracking loggers all
carry them.  Code below the route layer records request-level facts (where
the forecast came from, how many baselines were read) with ``note_request``;
they are folded into the single ``http_request`` line written when the
response leaves.
"""

from __future__ import annotations

import logging
import time
import uuid
from contextvars import ContextVar
from typing import Any

import structlog
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from ricecast.auth.dependencies import extract_identity_hint
from ricecast.config import LogFormat, get_settings

_configured = False

_request_facts: ContextVar[dict[str, Any] | None] = ContextVar("ricecast_request_facts", default=None)


def note_request(**facts: Any) -> None:
	"""Add facts to the current request's access log line; no-op outside a request."""
	current = _request_facts.get()
	if current is not None:
		current.update(facts)


def configure_structured_logging() -> None:
	"""Configure stdlib logging and structlog once per process."""
	global _configured
	if _configured:
		return

	settings = get_settings()
	log_level = getattr(logging, settings.log_level.upper(), logging.INFO)

	if settings.log_format == LogFormat.json:
		renderer: Any = structlog.processors.JSONRenderer()
		logging.basicConfig(level=log_level, format="%(message)s")
	else:
		renderer = structlog.dev.ConsoleRenderer()
		logging.basicConfig(level=log_level)
	# one line per Open-Meteo call is already written as forecast_fetch
	logging.getLogger("httpx").setLevel(max(log_level, logging.WARNING))

	structlog.configure(
		processors=[
			structlog.contextvars.merge_contextvars,
			structlog.processors.add_log_level,
			structlog.processors.TimeStamper(fmt="iso", utc=True),
			structlog.processors.format_exc_info,
			renderer,
		],
		wrapper_class=structlog.make_filtering_bound_logger(log_level),
		logger_factory=structlog.PrintLoggerFactory(),
		cache_logger_on_first_use=True,
	)
	_configured = True


class RequestLoggingMiddleware(BaseHTTPMiddleware):
	"""Bind request id and caller, then write one access line per request."""

	async def dispatch(self, request: Request, call_next):  # type: ignore[override]
		request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
		caller = extract_identity_hint(request)
		request.state.request_id = request_id

		structlog.contextvars.clear_contextvars()
		structlog.contextvars.bind_contextvars(request_id=request_id, caller=caller)
		facts: dict[str, Any] = {}
		token = _request_facts.set(facts)

		logger = structlog.get_logger("ricecast.request")
		start = time.perf_counter()
		try:
			response = await call_next(request)
		except Exception as exc:
			logger.exception(
				"http_request_failed",
				method=request.method,
				path=request.url.path,
				caller=caller,
				duration_ms=round((time.perf_counter() - start) * 1000.0, 2),
				error=str(exc),
				**facts,
			)
			raise
		finally:
			_request_facts.reset(token)

		response.headers["x-request-id"] = request_id
		logger.info(
			"http_request",
			method=request.method,
			path=request.url.path,
			status_code=response.status_code,
			caller=caller,
			duration_ms=round((time.perf_counter() - start) * 1000.0, 2),
			**facts,
		)
		return response
