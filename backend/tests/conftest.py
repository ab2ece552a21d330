"""
Pytest configuration and fixtures
"""
import hashlib
import json
import os

import pytest

# Keep test runs off the developer's log files and .env toggles
os.environ["APP_ENV"] = "testing"
os.environ["LOG_FORMAT"] = "text"
os.environ["LOG_FILE_ENABLED"] = "false"
os.environ.setdefault("INERTIA_SSR_ENABLED", "false")

from fastapi.testclient import TestClient

from app.core.config import get_settings
from app.core.vite import clear_manifest_cache

MANIFEST = {
    "frontend/js/app.js": {
        "file": "assets/app-1a2b3c.js",
        "src": "frontend/js/app.js",
        "isEntry": True,
        "imports": ["_vendor-9f8e7d.js"],
        "css": ["assets/app-4d5e6f.css"],
        "dynamicImports": ["frontend/js/pages/Welcome.vue", "frontend/js/pages/Error.vue"],
    },
    "_vendor-9f8e7d.js": {
        "file": "assets/vendor-9f8e7d.js",
    },
    "frontend/js/pages/Welcome.vue": {
        "file": "assets/Welcome-aa11bb.js",
        "src": "frontend/js/pages/Welcome.vue",
        "isDynamicEntry": True,
        "imports": ["_vendor-9f8e7d.js"],
    },
    "frontend/js/pages/Error.vue": {
        "file": "assets/Error-cc22dd.js",
        "src": "frontend/js/pages/Error.vue",
        "isDynamicEntry": True,
        "imports": ["_vendor-9f8e7d.js"],
    },
    "frontend/js/pages/Props.vue": {
        "file": "assets/Props-ee33ff.js",
        "src": "frontend/js/pages/Props.vue",
        "isDynamicEntry": True,
    },
    "_chart-123456.js": {
        "file": "assets/chart-123456.js",
        "css": ["assets/chart-123456.css"],
    },
}


@pytest.fixture(autouse=True)
def fresh_settings():
    """Settings and manifest caches never leak between tests"""
    get_settings.cache_clear()
    clear_manifest_cache()
    yield
    get_settings.cache_clear()
    clear_manifest_cache()


@pytest.fixture
def build_dir(tmp_path, monkeypatch):
    """A Vite build with a manifest; no hot file"""
    build = tmp_path / "build"
    build.mkdir()
    (build / "manifest.json").write_text(json.dumps(MANIFEST), encoding="utf-8")
    monkeypatch.setenv("VITE_BUILD_DIR", str(build))
    monkeypatch.setenv("VITE_HOT_FILE", str(tmp_path / "hot"))
    monkeypatch.delenv("VITE_DEV_SERVER_URL", raising=False)
    monkeypatch.delenv("INERTIA_VERSION", raising=False)
    get_settings.cache_clear()
    return build


@pytest.fixture
def asset_version(build_dir) -> str:
    return hashlib.md5((build_dir / "manifest.json").read_bytes()).hexdigest()


@pytest.fixture
def inertia_headers(asset_version):
    """Headers the client router sends on a visit"""
    return {"X-Inertia": "true", "X-Inertia-Version": asset_version}


@pytest.fixture
def app(build_dir):
    """A fresh application instance"""
    from app.main import create_app

    return create_app()


@pytest.fixture
def client(app):
    """Create test client"""
    return TestClient(app)
