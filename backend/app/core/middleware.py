"""
FastAPI middleware for request context, logging and scheme handling
"""
import time
import uuid
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp, Receive, Scope, Send

from app.core.config import get_settings
from app.core.logging_config import LoggingConfig

logger = LoggingConfig.get_logger(__name__)


class LoggingContextMiddleware(BaseHTTPMiddleware):
    """Middleware to add request context to logs"""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """Add request context and log request/response"""
        request_id = request.headers.get("x-request-id") or str(uuid.uuid4())

        LoggingConfig.set_context(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
            client_host=request.client.host if request.client else None,
            inertia=request.headers.get("x-inertia") == "true",
        )

        start_time = time.time()
        logger.debug(
            "Request started",
            extra={"query_params": str(request.query_params)}
        )

        try:
            response = await call_next(request)

            duration_ms = int((time.time() - start_time) * 1000)
            logger.info(
                "Request completed",
                extra={
                    "status_code": response.status_code,
                    "duration_ms": duration_ms,
                }
            )

            response.headers["X-Request-ID"] = request_id
            return response

        except Exception as e:
            duration_ms = int((time.time() - start_time) * 1000)
            logger.error(
                "Request failed",
                exc_info=True,
                extra={
                    "error": str(e),
                    "error_type": type(e).__name__,
                    "duration_ms": duration_ms,
                }
            )
            raise

        finally:
            LoggingConfig.clear_context()


class HttpsSchemeMiddleware:
    """Rewrite the request scheme to https when the deployment terminates TLS upstream"""

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] in ("http", "websocket") and get_settings().https_forced:
            scope = dict(scope)
            scope["scheme"] = "https" if scope["type"] == "http" else "wss"
        await self.app(scope, receive, send)
