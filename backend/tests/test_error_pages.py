"""
Tests for error pages
"""
import html
import json
import re

import pytest
from fastapi import HTTPException
from fastapi.testclient import TestClient

from app.core.config import get_settings
from app.core.errors import ERROR_PAGES, error_page


@pytest.fixture
def failing_app(app):
    @app.get("/admin", name="admin")
    async def admin():
        raise HTTPException(status_code=403)

    @app.get("/down", name="down")
    async def down():
        raise HTTPException(status_code=503, headers={"Retry-After": "60"})

    @app.get("/teapot", name="teapot")
    async def teapot():
        raise HTTPException(status_code=418, detail="I'm a teapot")

    @app.get("/boom", name="boom")
    async def boom():
        raise RuntimeError("database exploded")

    return app


@pytest.fixture
def failing_client(failing_app):
    return TestClient(failing_app, raise_server_exceptions=False)


@pytest.mark.parametrize("status,title,icon", [
    (403, "Forbidden", "lock"),
    (404, "Page Not Found", "search"),
    (500, "Server Error", "server"),
    (503, "Service Unavailable", "wrench"),
])
def test_error_page_table(status, title, icon):
    page = error_page(status)
    assert page.status == status
    assert page.title == title
    assert page.icon == icon
    assert page.description


def test_only_four_statuses_have_error_pages():
    assert sorted(ERROR_PAGES) == [403, 404, 500, 503]
    assert error_page(418) is None


def test_not_found_renders_error_component(client, inertia_headers):
    response = client.get("/devuni-are-not-owners", headers=inertia_headers)

    assert response.status_code == 404
    page = response.json()
    assert page["component"] == "Error"
    assert page["props"]["status"] == 404
    assert page["props"]["title"] == "Page Not Found"
    assert page["props"]["description"] == "Sorry, the page you are looking for could not be found."
    assert page["props"]["icon"] == "search"


def test_not_found_full_load_renders_root_view(client):
    response = client.get("/devuni-are-not-owners")

    assert response.status_code == 404
    match = re.search(r'data-page="([^"]*)"', response.text)
    page = json.loads(html.unescape(match.group(1)))
    assert page["component"] == "Error"
    assert '<script type="module" src="/build/assets/Error-cc22dd.js"></script>' in response.text


def test_forbidden_renders_error_component(failing_client, inertia_headers):
    response = failing_client.get("/admin", headers=inertia_headers)

    assert response.status_code == 403
    assert response.json()["props"]["title"] == "Forbidden"


def test_service_unavailable_keeps_exception_headers(failing_client, inertia_headers):
    response = failing_client.get("/down", headers=inertia_headers)

    assert response.status_code == 503
    assert response.headers["Retry-After"] == "60"
    assert response.json()["props"]["icon"] == "wrench"


def test_unhandled_exception_renders_server_error(failing_client, inertia_headers):
    response = failing_client.get("/boom", headers=inertia_headers)

    assert response.status_code == 500
    props = response.json()["props"]
    assert props["status"] == 500
    assert props["title"] == "Server Error"
    assert "exception" not in props


def test_debug_mode_exposes_exception(failing_client, inertia_headers, monkeypatch):
    monkeypatch.setenv("APP_DEBUG", "true")
    get_settings.cache_clear()

    response = failing_client.get("/boom", headers=inertia_headers)

    assert response.json()["props"]["exception"] == {
        "type": "RuntimeError",
        "message": "database exploded",
    }


def test_json_clients_get_json_errors(client):
    response = client.get("/missing", headers={"Accept": "application/json"})

    assert response.status_code == 404
    assert response.json() == {"detail": "Page Not Found", "status": 404}


def test_untabled_status_uses_default_handler(failing_client):
    response = failing_client.get("/teapot")

    assert response.status_code == 418
    assert response.json() == {"detail": "I'm a teapot"}


def test_method_not_allowed_uses_default_handler(client):
    response = client.post("/")

    assert response.status_code == 405
    assert response.json() == {"detail": "Method Not Allowed"}


def test_missing_build_keeps_not_found_status(client, build_dir):
    (build_dir / "manifest.json").unlink()

    response = client.get("/devuni-are-not-owners")

    assert response.status_code == 404
    assert response.json() == {"detail": "Page Not Found", "status": 404}


def test_missing_build_keeps_service_unavailable_headers(failing_client, build_dir):
    (build_dir / "manifest.json").unlink()

    response = failing_client.get("/down")

    assert response.status_code == 503
    assert response.headers["Retry-After"] == "60"


def test_missing_build_keeps_server_error_status(failing_client, build_dir):
    (build_dir / "manifest.json").unlink()

    response = failing_client.get("/boom")

    assert response.status_code == 500
    assert response.json() == {"detail": "Server Error", "status": 500}
