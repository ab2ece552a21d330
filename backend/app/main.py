"""
Main FastAPI application
"""
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from app.api.routes import health, metrics, pages
from app.core.config import get_settings
from app.core.errors import register_exception_handlers
from app.core.logging_config import LoggingConfig
from app.core.metrics import APP_VERSION
from app.core.middleware import HttpsSchemeMiddleware, LoggingContextMiddleware
from app.core.middleware_metrics import MetricsMiddleware
from app.core.page_props import default_shared_props
from app.inertia import InertiaMiddleware, share_from_request

logger = LoggingConfig.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan events for FastAPI app"""
    settings = get_settings()
    logger.info(f"Starting {settings.app_name} in {settings.app_env} mode...")
    if settings.is_local and settings.app_debug:
        logger.debug("Debug mode: exception details are included in error pages")
    yield
    logger.info(f"Shutting down {settings.app_name}...")


def create_app() -> FastAPI:
    settings = get_settings()
    app = FastAPI(
        title=settings.app_name,
        description="Server-rendered pages hydrated by a client-side Vue app",
        version=APP_VERSION,
        lifespan=lifespan,
    )

    # Last added runs first: CORS -> https scheme -> logging -> metrics -> page protocol
    app.add_middleware(InertiaMiddleware)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(LoggingContextMiddleware)
    app.add_middleware(HttpsSchemeMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)
    share_from_request(default_shared_props)

    app.include_router(pages.router)
    app.include_router(health.router)
    app.include_router(metrics.router)

    app.mount(
        settings.vite_build_url,
        StaticFiles(directory=str(settings.resolve_path(settings.vite_build_dir)), check_dir=False),
        name="build",
    )

    return app


app = create_app()
