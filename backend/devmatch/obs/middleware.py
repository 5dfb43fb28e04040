"""Per-request instrumentation: request id, bound log context, metrics, access log."""

from __future__ import annotations

import time
from uuid import uuid4

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from devmatch.obs import logging as obs_logging
from devmatch.obs import metrics
from devmatch.settings import settings

REQUEST_ID_HEADER = "X-Request-Id"


def _route_template(request: Request) -> str:
	# Set by the router once matched; unmatched paths fall back to the raw path.
	route = request.scope.get("route")
	return getattr(route, "path", None) or request.url.path


class ObservabilityMiddleware(BaseHTTPMiddleware):
	def __init__(self, app, *, enabled: bool = True) -> None:
		super().__init__(app)
		self._enabled = enabled
		self._logger = obs_logging.get_logger("devmatch.http")

	async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
		if not (settings.obs_enabled and self._enabled):
			return await call_next(request)

		request_id = request.headers.get(REQUEST_ID_HEADER) or uuid4().hex
		request.state.request_id = request_id
		with obs_logging.bound(
			request_id=request_id,
			route=request.url.path,
			actor_id=request.headers.get("X-User-Id"),
		):
			start = time.perf_counter()
			try:
				response = await call_next(request)
			except Exception:
				self._record(request, 500, start)
				self._logger.exception("http_request_error", extra={"method": request.method})
				raise
			self._record(request, response.status_code, start)
		response.headers.setdefault(REQUEST_ID_HEADER, request_id)
		return response

	def _record(self, request: Request, status_code: int, start: float) -> None:
		elapsed = time.perf_counter() - start
		metrics.observe_request(_route_template(request), request.method, status_code, elapsed)
		self._logger.info(
			"http_request",
			extra={"status": status_code, "method": request.method, "latency_ms": round(elapsed * 1000, 3)},
		)


def install(app, *, enabled: bool = True) -> None:
	app.add_middleware(ObservabilityMiddleware, enabled=enabled)
