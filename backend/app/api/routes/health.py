"""
Health check endpoints
"""
from datetime import datetime, timezone
from typing import Any, Dict

import httpx
from fastapi import APIRouter
from fastapi.responses import JSONResponse

from app.core.config import get_settings
from app.core.logging_config import LoggingConfig
from app.core.metrics import APP_VERSION
from app.core.vite import Vite

logger = LoggingConfig.get_logger(__name__)
router = APIRouter(tags=["health"])


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


@router.get("/health", name="health")
async def health_check():
    """
    Basic health check endpoint

    Returns:
        dict: Health status
    """
    return {
        "status": "healthy",
        "timestamp": _now(),
        "service": get_settings().app_name,
    }


def _assets_status() -> Dict[str, Any]:
    vite = Vite()
    hot_url = vite.hot_url()
    if hot_url:
        return {"status": "healthy", "mode": "dev", "dev_server": hot_url}
    version = vite.manifest_hash()
    if version is None:
        return {
            "status": "unhealthy",
            "mode": "build",
            "message": f"Vite manifest not found at {vite.manifest_path}",
        }
    return {"status": "healthy", "mode": "build", "version": version}


async def _ssr_status() -> Dict[str, Any]:
    settings = get_settings()
    if not settings.inertia_ssr_enabled:
        return {"status": "disabled"}
    url = f"{settings.inertia_ssr_url.rstrip('/')}/health"
    try:
        async with httpx.AsyncClient(timeout=settings.inertia_ssr_timeout) as client:
            response = await client.get(url)
        reachable = response.status_code == 200
    except httpx.HTTPError as e:
        logger.warning("SSR server unreachable", extra={"url": url, "error": str(e)})
        return {"status": "unhealthy", "url": url, "error": type(e).__name__}
    return {"status": "healthy" if reachable else "unhealthy", "url": url}


@router.get("/health/detailed", name="health.detailed")
async def detailed_health_check():
    """
    Detailed health check with component status

    Returns:
        dict: Status of asset build and SSR server; 503 when any is unhealthy
    """
    settings = get_settings()
    components = {
        "assets": _assets_status(),
        "ssr": await _ssr_status(),
    }
    overall_healthy = all(c["status"] != "unhealthy" for c in components.values())
    body = {
        "status": "healthy" if overall_healthy else "unhealthy",
        "timestamp": _now(),
        "service": settings.app_name,
        "version": APP_VERSION,
        "environment": settings.app_env,
        "components": components,
        "log_counts": LoggingConfig.get_metrics(),
    }
    return JSONResponse(body, status_code=200 if overall_healthy else 503)
