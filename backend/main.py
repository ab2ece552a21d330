"""
Development server entry point
"""
import uvicorn

from app.core.config import get_settings
from app.main import app  # noqa: F401

if __name__ == "__main__":
    settings = get_settings()
    uvicorn.run(
        "app.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.is_local,
    )
