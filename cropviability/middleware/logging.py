"""Structured JSON logging with request ID propagation."""

from __future__ import annotations

import logging
import time
import uuid
from typing import Any

import structlog
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from cropviability.config import LogFormat, get_settings

_configured = False

# Query parameters copied onto every log line of a viability request.
_CONTEXT_PARAMS = ("city", "year", "date", "crop")


def configure_structured_logging() -> None:
	"""Configure stdlib + structlog once for the API process.

	Service modules log through ``logging.getLogger("cropviability.*")`` with
	``extra=`` fields; those records are routed through the same processor
	chain as structlog events so both share request IDs and rendering.
	"""
	global _configured
	if _configured:
		return

	settings = get_settings()
	log_level = getattr(logging, settings.log_level.upper(), logging.INFO)

	timestamper = structlog.processors.TimeStamper(fmt="iso", utc=True)
	shared_processors: list[Any] = [
		structlog.contextvars.merge_contextvars,
		structlog.processors.add_log_level,
		timestamper,
	]

	if settings.log_format == LogFormat.json:
		renderer: Any = structlog.processors.JSONRenderer()
	else:
		renderer = structlog.dev.ConsoleRenderer()

	formatter = structlog.stdlib.ProcessorFormatter(
		foreign_pre_chain=[
			*shared_processors,
			structlog.stdlib.add_logger_name,
			structlog.stdlib.ExtraAdder(),
		],
		processors=[
			structlog.stdlib.ProcessorFormatter.remove_processors_meta,
			structlog.processors.format_exc_info,
			renderer,
		],
	)
	handler = logging.StreamHandler()
	handler.setFormatter(formatter)

	app_logger = logging.getLogger("cropviability")
	app_logger.handlers = [handler]
	app_logger.setLevel(log_level)
	app_logger.propagate = False

	structlog.configure(
		processors=[
			*shared_processors,
			structlog.processors.format_exc_info,
			renderer,
		],
		wrapper_class=structlog.make_filtering_bound_logger(log_level),
		logger_factory=structlog.PrintLoggerFactory(),
		cache_logger_on_first_use=True,
	)
	_configured = True


class RequestLoggingMiddleware(BaseHTTPMiddleware):
	"""Attach request IDs and emit structured per-request timing logs."""

	async def dispatch(self, request: Request, call_next):  # type: ignore[override]
		request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
		request.state.request_id = request_id

		structlog.contextvars.clear_contextvars()
		structlog.contextvars.bind_contextvars(request_id=request_id)
		if request.url.path.endswith("/viability"):
			structlog.contextvars.bind_contextvars(
				**{
					f"query_{name}": request.query_params[name]
					for name in _CONTEXT_PARAMS
					if name in request.query_params
				}
			)

		logger = structlog.get_logger("cropviability.request")
		start = time.perf_counter()

		try:
			response = await call_next(request)
		except Exception as exc:
			duration_ms = (time.perf_counter() - start) * 1000.0
			logger.exception(
				"http_request_failed",
				method=request.method,
				path=request.url.path,
				duration_ms=round(duration_ms, 2),
				error=str(exc),
			)
			raise

		duration_ms = (time.perf_counter() - start) * 1000.0
		response.headers["x-request-id"] = request_id
		logger.info(
			"http_request",
			method=request.method,
			path=request.url.path,
			status_code=response.status_code,
			duration_ms=round(duration_ms, 2),
		)
		return response
