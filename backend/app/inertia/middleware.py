"""
Protocol middleware: asset version checks and redirect status fixes
"""
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from app.core.logging_config import LoggingConfig
from app.core.metrics import inertia_version_conflicts_total
from app.inertia import headers as h
from app.inertia.response import get_version, is_inertia_request, location

logger = LoggingConfig.get_logger(__name__)


def _add_vary(response: Response):
    vary = response.headers.get("Vary")
    if not vary:
        response.headers["Vary"] = h.INERTIA
    elif h.INERTIA.lower() not in [v.strip().lower() for v in vary.split(",")]:
        response.headers["Vary"] = f"{vary}, {h.INERTIA}"


class InertiaMiddleware(BaseHTTPMiddleware):
    """
    Handles the protocol rules that sit outside individual pages

    - stale asset version on a GET visit -> 409 with the URL to reload
    - 302 after PUT/PATCH/DELETE -> 303 so the client follows with GET
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if not is_inertia_request(request):
            response = await call_next(request)
            _add_vary(response)
            return response

        if request.method == "GET":
            client_version = request.headers.get(h.VERSION, "")
            current_version = get_version() or ""
            if client_version != current_version:
                inertia_version_conflicts_total.inc()
                logger.info(
                    "Asset version changed, forcing full reload",
                    extra={"client_version": client_version, "current_version": current_version}
                )
                return location(request, str(request.url))

        response = await call_next(request)

        if response.status_code == 302 and request.method in ("PUT", "PATCH", "DELETE"):
            response.status_code = 303

        _add_vary(response)
        return response
