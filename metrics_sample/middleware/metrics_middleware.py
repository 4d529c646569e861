"""FastAPI middleware for measuring request latency.

Every HTTP request is recorded into the http_server_requests_seconds timer,
labeled by method, status and matched route template.
"""

import time
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from metrics_sample.core.logging_config import get_logger

logger = get_logger(__name__)

REQUESTS_METRIC = "http_server_requests_seconds"


def _route_template(request: Request, status_code: int) -> str:
    """Matched route path (e.g. '/health'), keeping label cardinality bounded."""
    route = request.scope.get("route")
    path = getattr(route, "path", None)
    if path:
        return path
    if status_code == 404:
        return "NOT_FOUND"
    return "UNKNOWN"


def _record(request: Request, status_code: int, duration: float) -> None:
    registry = request.app.state.registry
    if registry.closed:
        logger.debug(f"Registry closed, not recording {request.method} {request.url.path}")
        return

    registry.register_timer(
        REQUESTS_METRIC,
        {
            "method": request.method,
            "status": str(status_code),
            "uri": _route_template(request, status_code),
        },
    ).record(duration)


class MetricsMiddleware(BaseHTTPMiddleware):
    """Middleware that times every HTTP request on the app's registry."""

    async def dispatch(self, request: Request, call_next) -> Response:
        """Process request and record its latency.

        Args:
            request: Incoming HTTP request
            call_next: Next middleware/handler in the chain

        Returns:
            HTTP response from downstream handlers
        """
        t0 = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            # Unhandled handler errors become a 500 further up the stack
            _record(request, 500, time.perf_counter() - t0)
            raise

        _record(request, response.status_code, time.perf_counter() - t0)
        return response
