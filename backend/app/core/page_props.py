"""
Props shared with every page
"""
from typing import Any, Dict

from fastapi import Request

from app.core.config import get_settings
from app.core.routing import client_routes


def error_tracking_config() -> Dict[str, Any]:
    """Client error-tracking SDK options"""
    settings = get_settings()
    return {
        "dsn": settings.sentry_dsn,
        "tracesSampleRate": settings.sentry_traces_sample_rate,
        "environment": settings.error_tracking_environment,
    }


def default_shared_props(request: Request) -> Dict[str, Any]:
    settings = get_settings()
    return {
        "appName": settings.app_name,
        "appEnv": settings.app_env,
        "ziggy": lambda: client_routes(request),
        "sentry": error_tracking_config,
    }
