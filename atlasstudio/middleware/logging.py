"""
Logging middleware for request/response logging.

Logs all HTTP requests with timing and context.
"""
import time
import structlog
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from atlasstudio.metrics import endpoint_label, track_request

logger = structlog.get_logger()


class LoggingMiddleware(BaseHTTPMiddleware):
    """
    Middleware to log all HTTP requests with timing and context.

    Adds: principal, identity_kind, route, duration_ms, status to every log.
    """

    async def dispatch(self, request: Request, call_next):
        start_time = time.time()

        request_logger = logger.bind(
            route=request.url.path,
            method=request.method,
        )

        try:
            response = await call_next(request)
        except Exception as e:
            duration_ms = (time.time() - start_time) * 1000
            request_logger.error(
                "request_failed",
                status_code=500,
                duration_ms=round(duration_ms, 2),
                error=str(e)
            )
            track_request(request.method, endpoint_label(request.scope), 500, duration_ms / 1000)
            raise

        duration_ms = (time.time() - start_time) * 1000

        # Set by the identity dependency, if the route used one
        principal = getattr(request.state, "principal", None)
        identity_kind = getattr(request.state, "identity_kind", None)

        request_logger.info(
            "request_completed",
            principal=principal,
            identity_kind=identity_kind,
            status_code=response.status_code,
            duration_ms=round(duration_ms, 2)
        )
        # The router records the matched route in the shared scope
        track_request(request.method, endpoint_label(request.scope), response.status_code, duration_ms / 1000)

        return response
