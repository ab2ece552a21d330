"""
Middleware for collecting HTTP request metrics
"""
import time

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from app.core.logging_config import LoggingConfig
from app.core.metrics import (http_errors_total,
                              http_request_duration_seconds,
                              http_requests_total)

logger = LoggingConfig.get_logger(__name__)

# Skip high-cardinality asset paths
_UNTRACKED_PREFIXES = ("/metrics", "/build/", "/favicon")


def _endpoint_label(request: Request) -> str:
    """Use the matched route template, not the raw path"""
    route = request.scope.get("route")
    path_format = getattr(route, "path_format", None) or getattr(route, "path", None)
    if path_format:
        return path_format
    return "unmatched"


class MetricsMiddleware(BaseHTTPMiddleware):
    """
    Middleware to collect HTTP request metrics for Prometheus
    """

    async def dispatch(self, request: Request, call_next):
        if request.url.path.startswith(_UNTRACKED_PREFIXES):
            return await call_next(request)

        start_time = time.time()
        status_code = 500
        error_type = None

        try:
            response = await call_next(request)
            status_code = response.status_code
        except Exception as e:
            error_type = type(e).__name__
            raise
        finally:
            duration = time.time() - start_time
            endpoint = _endpoint_label(request)
            method = request.method
            status_code_str = str(status_code)

            http_requests_total.labels(
                method=method,
                endpoint=endpoint,
                status_code=status_code_str
            ).inc()

            http_request_duration_seconds.labels(
                method=method,
                endpoint=endpoint,
                status_code=status_code_str
            ).observe(duration)

            if status_code >= 400:
                http_errors_total.labels(
                    method=method,
                    endpoint=endpoint,
                    status_code=status_code_str,
                    error_type=error_type or f"http_{status_code}"
                ).inc()

        return response
