"""
Configuration management using Pydantic Settings
"""
from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# config.py is at: backend/app/core/config.py
_current_file = Path(__file__).resolve()
_backend_dir = _current_file.parent.parent.parent
PROJECT_ROOT = _backend_dir.parent
ENV_FILE = PROJECT_ROOT / ".env"
# Fallback: try in backend/ directory if not found in project root
if not ENV_FILE.exists():
    ENV_FILE = _backend_dir / ".env"
if ENV_FILE.exists():
    load_dotenv(ENV_FILE)


class Settings(BaseSettings):
    """Application settings"""

    # Application
    app_name: str = Field(default="Vilt starter kit | Devuni", description="Application name")
    app_env: str = Field(default="local", description="Application environment")
    app_debug: bool = Field(default=False, description="Expose exception details on error pages")
    app_url: str = Field(default="http://localhost:8000", description="Public base URL")
    api_host: str = Field(default="0.0.0.0", description="API host")
    api_port: int = Field(default=8000, ge=1, le=65535, description="API port")
    allowed_origins: str = Field(
        default="http://localhost:8000,http://localhost:5173",
        description="Allowed CORS origins (comma-separated)"
    )
    force_https: Optional[bool] = Field(
        default=None,
        description="Treat every request as https (defaults to on in production)"
    )

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    log_uvicorn_access: bool = Field(default=False, description="Enable Uvicorn access logging")
    log_module_levels: Optional[str] = Field(
        default=None,
        description='Module-specific log levels (JSON string, e.g., {"app.inertia": "DEBUG"})'
    )
    log_format: str = Field(
        default="json",
        description="Log format: 'json' for structured logging, 'text' for plain text"
    )
    log_file_enabled: bool = Field(default=False, description="Enable file logging")
    log_file_path: str = Field(
        default="logs/app.log",
        description="Path to log file (relative to project root)"
    )
    log_file_retention: int = Field(default=14, ge=1, description="Number of days to keep log files")
    log_sensitive_data: bool = Field(
        default=False,
        description="Enable logging of sensitive data (DSNs, tokens) - NOT RECOMMENDED"
    )

    # Client error tracking
    sentry_dsn: Optional[str] = Field(default=None, description="Error-tracking DSN for the client SDK")
    sentry_traces_sample_rate: float = Field(
        default=1.0,
        ge=0.0,
        le=1.0,
        description="Fraction of client transactions sent to error tracking"
    )
    sentry_environment: Optional[str] = Field(
        default=None,
        description="Error-tracking environment (defaults to app_env)"
    )

    # Page protocol
    inertia_root_view: str = Field(default="app.html", description="Root template")
    inertia_version: Optional[str] = Field(default=None, description="Explicit asset version")
    inertia_encrypt_history: bool = Field(default=False, description="Encrypt browser history state")
    inertia_ssr_enabled: bool = Field(default=False, description="Enable server-side rendering")
    inertia_ssr_url: str = Field(default="http://127.0.0.1:13714", description="SSR server URL")
    inertia_ssr_bundle: Optional[str] = Field(
        default=None,
        description="SSR bundle path; when set, SSR is skipped unless the file exists"
    )
    inertia_ssr_timeout: float = Field(default=5.0, gt=0, description="SSR request timeout (seconds)")

    # Vite
    vite_dev_server_url: Optional[str] = Field(default=None, description="Vite dev server URL")
    vite_hot_file: str = Field(default="public/hot", description="Hot file written by the Vite plugin")
    vite_build_dir: str = Field(default="public/build", description="Vite build output directory")
    vite_manifest: str = Field(default="manifest.json", description="Manifest file inside build dir")
    vite_build_url: str = Field(default="/build", description="Public URL prefix for built assets")
    vite_prefetch_concurrency: int = Field(
        default=3,
        ge=0,
        description="Parallel chunk prefetches after page load (0 disables)"
    )

    # Route manifest
    routes_only: str = Field(default="", description="Route name globs to expose (comma-separated)")
    routes_except: str = Field(default="", description="Route name globs to hide (comma-separated)")

    @field_validator("app_env", mode="before")
    @classmethod
    def normalize_env(cls, v):
        """Lower-case environment names"""
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @field_validator("sentry_dsn", "inertia_version", "vite_dev_server_url", mode="before")
    @classmethod
    def empty_to_none(cls, v):
        """Blank strings mean unset"""
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @property
    def is_production(self) -> bool:
        return self.app_env == "production"

    @property
    def is_local(self) -> bool:
        return self.app_env == "local"

    @property
    def https_forced(self) -> bool:
        """Production forces https unless explicitly disabled"""
        if self.force_https is not None:
            return self.force_https
        return self.is_production

    @property
    def error_tracking_environment(self) -> str:
        return self.sentry_environment or self.app_env

    @property
    def allowed_origins_list(self) -> List[str]:
        """Parse CORS origins from comma-separated string"""
        return [origin.strip() for origin in self.allowed_origins.split(",") if origin.strip()]

    @property
    def routes_only_list(self) -> List[str]:
        return [p.strip() for p in self.routes_only.split(",") if p.strip()]

    @property
    def routes_except_list(self) -> List[str]:
        return [p.strip() for p in self.routes_except.split(",") if p.strip()]

    def resolve_path(self, value: str) -> Path:
        """Resolve a configured path relative to the project root"""
        path = Path(value)
        if not path.is_absolute():
            path = PROJECT_ROOT / path
        return path

    model_config = SettingsConfigDict(
        env_file=str(ENV_FILE) if ENV_FILE.exists() else None,
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        env_ignore_empty=True
    )


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()
