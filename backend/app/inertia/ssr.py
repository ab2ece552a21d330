"""
Server-side rendering gateway

The page object is POSTed to the Node SSR server; any failure falls back
to client-side rendering.
"""
from typing import Any, Dict, List, Optional

import httpx
from pydantic import BaseModel, ValidationError

from app.core.config import Settings, get_settings
from app.core.logging_config import LoggingConfig
from app.core.metrics import inertia_ssr_requests_total

logger = LoggingConfig.get_logger(__name__)


class SsrResponse(BaseModel):
    """Rendered head tags and body markup"""
    head: List[str] = []
    body: str

    @property
    def head_html(self) -> str:
        return "\n".join(self.head)


class SsrGateway:
    """HTTP client for the SSR server"""

    def __init__(self, settings: Optional[Settings] = None, transport: Optional[httpx.AsyncBaseTransport] = None):
        self._settings = settings
        self._transport = transport

    @property
    def settings(self) -> Settings:
        return self._settings or get_settings()

    @property
    def render_url(self) -> str:
        return f"{self.settings.inertia_ssr_url.rstrip('/')}/render"

    def enabled(self) -> bool:
        settings = self.settings
        if not settings.inertia_ssr_enabled:
            return False
        if settings.inertia_ssr_bundle:
            bundle = settings.resolve_path(settings.inertia_ssr_bundle)
            if not bundle.is_file():
                logger.debug("SSR bundle missing, rendering on the client", extra={"bundle": str(bundle)})
                return False
        return True

    async def dispatch(self, page: Dict[str, Any]) -> Optional[SsrResponse]:
        """
        Render the page on the SSR server

        Returns:
            SsrResponse, or None when SSR is disabled or the server failed
        """
        if not self.enabled():
            inertia_ssr_requests_total.labels(status="skipped").inc()
            return None

        try:
            async with httpx.AsyncClient(
                timeout=self.settings.inertia_ssr_timeout,
                transport=self._transport,
            ) as client:
                response = await client.post(self.render_url, json=page)
                response.raise_for_status()
                result = SsrResponse.model_validate(response.json())
        except (httpx.HTTPError, ValueError, ValidationError) as e:
            inertia_ssr_requests_total.labels(status="failed").inc()
            logger.warning(
                "SSR failed, falling back to client-side rendering",
                extra={
                    "component": page.get("component"),
                    "error": str(e),
                    "error_type": type(e).__name__,
                }
            )
            return None

        inertia_ssr_requests_total.labels(status="success").inc()
        return result
