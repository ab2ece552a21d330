"""
Named route helpers and the client-side route manifest
"""
from fnmatch import fnmatch
from typing import Any, Dict, Iterator, List, Mapping, Optional, Union
from urllib.parse import urlencode, urlsplit

from fastapi import FastAPI, Request
from starlette.routing import BaseRoute, Mount, NoMatchFound, Route

from app.core.config import get_settings

_METHOD_ORDER = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


class RouteNotFoundError(LookupError):
    """No route is registered under the given name"""


class MissingRouteParameterError(ValueError):
    """A required path parameter was not supplied"""


def _iter_named_routes(routes: List[BaseRoute], prefix: str = "") -> Iterator[tuple]:
    for route in routes:
        if isinstance(route, Mount):
            yield from _iter_named_routes(route.routes or [], prefix + route.path)
            continue
        # Newer FastAPI keeps included routers as wrappers around the original router
        included = getattr(route, "original_router", None)
        if included is not None:
            context = route.include_context
            if getattr(context, "include_in_schema", True):
                yield from _iter_named_routes(included.routes, prefix + (context.prefix or ""))
            continue
        if not isinstance(route, Route) or not route.name:
            continue
        if not getattr(route, "include_in_schema", True):
            continue
        yield route, prefix + route.path_format


def _sorted_methods(methods) -> List[str]:
    methods = set(methods or [])
    if "GET" in methods:
        methods.add("HEAD")
    return sorted(methods, key=lambda m: (_METHOD_ORDER.index(m) if m in _METHOD_ORDER else 99, m))


def _find(app: FastAPI, name: str):
    for route, path_format in _iter_named_routes(app.routes):
        if route.name == name:
            return route, path_format
    raise RouteNotFoundError(f"Route [{name}] not defined.")


def _visible(name: str) -> bool:
    settings = get_settings()
    only = settings.routes_only_list
    if only:
        return any(fnmatch(name, pattern) for pattern in only)
    return not any(fnmatch(name, pattern) for pattern in settings.routes_except_list)


def route(
    target: Union[Request, FastAPI],
    name: str,
    params: Optional[Mapping[str, Any]] = None,
    absolute: bool = True,
) -> str:
    """
    Build the URL of a named route

    Path parameters are taken from ``params``; anything left over becomes
    the query string. Absolute URLs use the request base URL when a request
    is given, else the configured app URL.
    """
    app = target.app if isinstance(target, Request) else target
    route_obj, path_format = _find(app, name)

    params = dict(params or {})
    path_params = {}
    for key in route_obj.param_convertors:
        if key not in params:
            raise MissingRouteParameterError(
                f"Missing required parameter for [Route: {name}] [URI: {path_format}] [Missing parameter: {key}]."
            )
        path_params[key] = params.pop(key)

    try:
        path = str(app.url_path_for(name, **path_params))
    except NoMatchFound:
        raise RouteNotFoundError(f"Route [{name}] not defined.")

    if params:
        path = f"{path}?{urlencode(params, doseq=True)}"

    if not absolute:
        return path

    if isinstance(target, Request):
        base = str(target.base_url).rstrip("/")
    else:
        base = get_settings().app_url.rstrip("/")
    return base + path


def route_manifest(app: FastAPI, base_url: Optional[str] = None) -> Dict[str, Any]:
    """Route manifest in the shape the client route() helper expects"""
    base_url = (base_url or get_settings().app_url).rstrip("/")
    routes: Dict[str, Dict[str, Any]] = {}

    for route_obj, path_format in _iter_named_routes(app.routes):
        if not _visible(route_obj.name):
            continue
        uri = path_format.lstrip("/") or "/"
        routes[route_obj.name] = {
            "uri": uri,
            "methods": _sorted_methods(route_obj.methods),
            "parameters": list(route_obj.param_convertors),
        }

    return {
        "url": base_url,
        "port": urlsplit(base_url).port,
        "defaults": {},
        "routes": routes,
    }


def client_routes(request: Request) -> Dict[str, Any]:
    """Route manifest plus the current location, shared with every page"""
    manifest = route_manifest(request.app, str(request.base_url))
    manifest["location"] = str(request.url)
    return manifest
