"""
Request tracing and HTTP metrics middleware.
"""
import time
import uuid
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
import structlog

CORRELATION_HEADER = "x-correlation-id"
UNMATCHED_ROUTE = "unmatched"


def route_label(request: Request) -> str:
    """
    Path template of the route that served the request.

    Raw URLs are never used as labels; anything the router did not match
    shares the single "unmatched" label.
    """
    route = request.scope.get("route")
    return getattr(route, "path", UNMATCHED_ROUTE)


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    """Binds a per-request correlation ID to the log context and echoes it back."""

    async def dispatch(self, request: Request, call_next):
        correlation_id = request.headers.get(CORRELATION_HEADER) or str(uuid.uuid4())
        request.state.correlation_id = correlation_id

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            correlation_id=correlation_id,
            http_method=request.method,
        )

        response = await call_next(request)
        response.headers[CORRELATION_HEADER] = correlation_id
        return response


class MetricsMiddleware(BaseHTTPMiddleware):
    """Records every request against its route template and writes an access log line."""

    def __init__(self, app, metrics, exclude_prefix: str = "/metrics"):
        super().__init__(app)
        self.metrics = metrics
        self.exclude_prefix = exclude_prefix

    async def dispatch(self, request: Request, call_next):
        if request.url.path.startswith(self.exclude_prefix):
            return await call_next(request)

        logger = structlog.get_logger()
        started = time.perf_counter()
        status = 500

        with self.metrics.track_active():
            try:
                response = await call_next(request)
                status = response.status_code
                return response
            except Exception as e:
                logger.error("http_request_error", error=str(e), error_type=type(e).__name__)
                raise
            finally:
                duration = time.perf_counter() - started
                route = route_label(request)
                self.metrics.record_request(request.method, route, status, duration)
                logger.info(
                    "http_request",
                    http_route=route,
                    http_status=status,
                    duration_ms=round(duration * 1000, 2),
                )
