"""FastAPI middleware for request tracing and metrics"""

import uuid
import time
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from lunch_ledger.infrastructure.observability.logging import log_request
from lunch_ledger.infrastructure.observability.metrics import request_duration_histogram


def _route_template(request: Request) -> str:
    """Matched route path, e.g. /v1/snapshot, falling back to the raw path for 404s"""
    route = request.scope.get("route")
    return getattr(route, "path", request.url.path)


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Tag each request with an ID and the engine's active user.

    The caller's X-Request-ID is reused when present. Every request ends with
    one structured log line carrying both tags.
    """

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = request_id
        start_time = time.time()

        response = await call_next(request)

        response.headers["X-Request-ID"] = request_id
        log_request(
            request_id=request_id,
            user_id=request.app.state.engine.store.user_id,
            method=request.method,
            endpoint=_route_template(request),
            status=response.status_code,
            duration_ms=(time.time() - start_time) * 1000,
        )
        return response


class MetricsMiddleware(BaseHTTPMiddleware):
    """Record HTTP request metrics, labelled by route template"""

    async def dispatch(self, request: Request, call_next):
        start_time = time.time()

        response = await call_next(request)

        request_duration_histogram.labels(
            method=request.method,
            endpoint=_route_template(request),
            status=response.status_code,
        ).observe(time.time() - start_time)

        return response
