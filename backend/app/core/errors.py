"""
Error pages for HTTP errors and unhandled exceptions
"""
from typing import Dict, Optional

from fastapi import FastAPI, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.config import get_settings
from app.core.logging_config import LoggingConfig
from app.core.vite import ViteError
from app.inertia import is_inertia_request, render

logger = LoggingConfig.get_logger(__name__)

ERROR_COMPONENT = "Error"


class ErrorPage(BaseModel):
    status: int
    title: str
    description: str
    icon: str


ERROR_PAGES: Dict[int, ErrorPage] = {
    403: ErrorPage(
        status=403,
        title="Forbidden",
        description="Sorry, you are forbidden from accessing this page.",
        icon="lock",
    ),
    404: ErrorPage(
        status=404,
        title="Page Not Found",
        description="Sorry, the page you are looking for could not be found.",
        icon="search",
    ),
    500: ErrorPage(
        status=500,
        title="Server Error",
        description="Whoops, something went wrong on our servers.",
        icon="server",
    ),
    503: ErrorPage(
        status=503,
        title="Service Unavailable",
        description="Sorry, we are doing some maintenance. Please check back soon.",
        icon="wrench",
    ),
}


def error_page(status: int) -> Optional[ErrorPage]:
    return ERROR_PAGES.get(status)


def wants_json(request: Request) -> bool:
    """API clients asking for JSON get JSON errors, page visits get the error page"""
    if is_inertia_request(request):
        return False
    return "application/json" in request.headers.get("accept", "")


def _json_error(page: ErrorPage, headers=None) -> JSONResponse:
    return JSONResponse(
        {"detail": page.title, "status": page.status},
        status_code=page.status,
        headers=headers,
    )


async def render_error(request: Request, page: ErrorPage, extra: Optional[dict] = None, headers=None):
    if wants_json(request):
        return _json_error(page, headers)
    props = page.model_dump()
    if extra:
        props.update(extra)
    try:
        response = await render(request, ERROR_COMPONENT, props, status_code=page.status)
    except ViteError as e:
        # the error page itself needs built assets; keep the status either way
        logger.warning(
            "Error page assets unavailable, answering without the page",
            extra={"status_code": page.status, "error": str(e)}
        )
        return _json_error(page, headers)
    if headers:
        response.headers.update(headers)
    return response


async def http_error_handler(request: Request, exc: StarletteHTTPException):
    page = error_page(exc.status_code)
    if page is None:
        return await http_exception_handler(request, exc)
    logger.info(
        "Rendering error page",
        extra={"status_code": exc.status_code, "path": request.url.path}
    )
    return await render_error(request, page, headers=getattr(exc, "headers", None))


async def unhandled_error_handler(request: Request, exc: Exception):
    """Log unhandled errors and render the 500 page"""
    logger.error(
        "Unhandled exception",
        exc_info=exc,
        extra={
            "error": str(exc),
            "error_type": type(exc).__name__,
            "path": request.url.path,
            "method": request.method,
        }
    )
    extra = None
    if get_settings().app_debug:
        extra = {"exception": {"type": type(exc).__name__, "message": str(exc)}}
    return await render_error(request, ERROR_PAGES[500], extra=extra)


def register_exception_handlers(app: FastAPI):
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
