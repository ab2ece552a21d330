"""
Tests for named routes and the client route manifest
"""
import pytest
from fastapi import APIRouter, Request

from app.core.config import get_settings
from app.core.routing import (MissingRouteParameterError, RouteNotFoundError,
                              route, route_manifest)


@pytest.fixture
def routed_app(app):
    @app.get("/cars/{car_id}", name="cars.show")
    async def show_car(car_id: int):
        return {"id": car_id}

    @app.post("/cars", name="cars.store")
    async def store_car():
        return {}

    @app.get("/link", name="link")
    async def link(request: Request):
        return {"url": route(request, "cars.show", {"car_id": 7})}

    return app


def test_route_with_path_and_query_params(routed_app):
    url = route(routed_app, "cars.show", {"car_id": 5, "tab": "specs"}, absolute=False)

    assert url == "/cars/5?tab=specs"


def test_absolute_route_uses_app_url(routed_app, monkeypatch):
    monkeypatch.setenv("APP_URL", "https://shop.example.com/")
    get_settings.cache_clear()

    assert route(routed_app, "welcome") == "https://shop.example.com/"


def test_route_from_request_uses_request_host(routed_app, client):
    response = client.get("/link")

    assert response.json() == {"url": "http://testserver/cars/7"}


def test_missing_parameter_raises(routed_app):
    with pytest.raises(MissingRouteParameterError, match="car_id"):
        route(routed_app, "cars.show")


def test_unknown_route_raises(routed_app):
    with pytest.raises(RouteNotFoundError, match="nope"):
        route(routed_app, "nope")


def test_manifest_lists_named_routes(routed_app):
    manifest = route_manifest(routed_app, "http://localhost:8000")

    assert manifest["url"] == "http://localhost:8000"
    assert manifest["port"] == 8000
    assert manifest["defaults"] == {}
    assert manifest["routes"]["welcome"] == {"uri": "/", "methods": ["GET", "HEAD"], "parameters": []}
    assert manifest["routes"]["cars.show"] == {
        "uri": "cars/{car_id}",
        "methods": ["GET", "HEAD"],
        "parameters": ["car_id"],
    }
    assert manifest["routes"]["cars.store"]["methods"] == ["POST"]


def test_manifest_skips_framework_routes(routed_app):
    routes = route_manifest(routed_app)["routes"]

    assert "openapi" not in routes
    assert "swagger_ui_html" not in routes
    assert "build" not in routes


def test_manifest_except_filter(routed_app, monkeypatch):
    monkeypatch.setenv("ROUTES_EXCEPT", "health*,metrics")
    get_settings.cache_clear()

    routes = route_manifest(routed_app)["routes"]

    assert "health" not in routes
    assert "health.detailed" not in routes
    assert "metrics" not in routes
    assert "welcome" in routes


def test_manifest_only_filter_wins(routed_app, monkeypatch):
    monkeypatch.setenv("ROUTES_ONLY", "cars.*")
    monkeypatch.setenv("ROUTES_EXCEPT", "cars.store")
    get_settings.cache_clear()

    routes = route_manifest(routed_app)["routes"]

    assert sorted(routes) == ["cars.show", "cars.store"]


def test_manifest_includes_router_routes():
    from app.main import create_app

    routes = route_manifest(create_app())["routes"]

    assert routes["welcome"]["uri"] == "/"
    assert routes["health"]["methods"] == ["GET", "HEAD"]
    assert "health.detailed" in routes
    assert "metrics" in routes


def test_nested_router_prefixes(app):
    cars = APIRouter(prefix="/cars")

    @cars.get("/{car_id}", name="shop.cars.show")
    async def show_car(car_id: int):
        return {"id": car_id}

    shop = APIRouter()
    shop.include_router(cars)
    app.include_router(shop, prefix="/shop")

    assert route(app, "shop.cars.show", {"car_id": 5}, absolute=False) == "/shop/cars/5"
    assert route_manifest(app)["routes"]["shop.cars.show"] == {
        "uri": "shop/cars/{car_id}",
        "methods": ["GET", "HEAD"],
        "parameters": ["car_id"],
    }
