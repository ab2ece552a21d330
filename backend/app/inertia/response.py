"""
Page responses: JSON page objects for client visits, the root view for full loads
"""
import inspect
import json
from typing import Any, Dict, List, Mapping, Optional

from fastapi import Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse, RedirectResponse, Response
from pydantic import BaseModel, ConfigDict, Field

from app.core.config import get_settings
from app.core.logging_config import LoggingConfig
from app.core.metrics import inertia_renders_total
from app.core.templates import render_template
from app.core.vite import Vite
from app.inertia import headers as h
from app.inertia.props import (AlwaysProp, DeferProp, PageProp,
                               is_ignored_on_first_load, is_mergeable)
from app.inertia.shared import shared_props
from app.inertia.ssr import SsrGateway

logger = LoggingConfig.get_logger(__name__)


class Page(BaseModel):
    """The page object exchanged with the client"""
    model_config = ConfigDict(populate_by_name=True)

    component: str
    props: Dict[str, Any]
    url: str
    version: Optional[str] = None
    encrypt_history: bool = Field(default=False, alias="encryptHistory")
    clear_history: bool = Field(default=False, alias="clearHistory")
    merge_props: Optional[List[str]] = Field(default=None, alias="mergeProps")
    deferred_props: Optional[Dict[str, List[str]]] = Field(default=None, alias="deferredProps")

    def to_json(self) -> Dict[str, Any]:
        data = self.model_dump(by_alias=True)
        for key in ("mergeProps", "deferredProps"):
            if data[key] is None:
                del data[key]
        return jsonable_encoder(data)


def is_inertia_request(request: Request) -> bool:
    return request.headers.get(h.INERTIA) == "true"


def get_version() -> Optional[str]:
    """Current asset version; an explicit setting wins over the manifest hash"""
    settings = get_settings()
    if settings.inertia_version:
        return settings.inertia_version
    return Vite(settings).manifest_hash()


def _header_list(request: Request, name: str) -> List[str]:
    raw = request.headers.get(name, "")
    return [item.strip() for item in raw.split(",") if item.strip()]


def _request_uri(request: Request) -> str:
    query = request.url.query
    return f"{request.url.path}?{query}" if query else request.url.path


async def resolve_value(value: Any) -> Any:
    """Unwrap prop wrappers, call callables, await awaitables, recurse into containers"""
    if isinstance(value, PageProp):
        value = value.value
    if callable(value):
        value = value()
    if inspect.isawaitable(value):
        value = await value
    if isinstance(value, BaseModel):
        value = value.model_dump(mode="json", by_alias=True)
    if isinstance(value, Mapping):
        return {key: await resolve_value(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [await resolve_value(item) for item in value]
    return value


def _is_partial(request: Request, component: str) -> bool:
    return request.headers.get(h.PARTIAL_COMPONENT) == component


def _filter_props(request: Request, component: str, props: Dict[str, Any]) -> Dict[str, Any]:
    if not _is_partial(request, component):
        return {key: value for key, value in props.items() if not is_ignored_on_first_load(value)}

    # optional and deferred props are only sent when asked for by name
    only = _header_list(request, h.PARTIAL_ONLY)
    props = {
        key: value for key, value in props.items()
        if key in only or not is_ignored_on_first_load(value)
    }
    if only:
        props = {
            key: value for key, value in props.items()
            if key in only or isinstance(value, AlwaysProp)
        }

    excluded = _header_list(request, h.PARTIAL_EXCEPT)
    if excluded:
        props = {
            key: value for key, value in props.items()
            if key not in excluded or isinstance(value, AlwaysProp)
        }

    return props


def _deferred_groups(request: Request, component: str, props: Dict[str, Any]) -> Optional[Dict[str, List[str]]]:
    if _is_partial(request, component):
        return None
    groups: Dict[str, List[str]] = {}
    for key, value in props.items():
        if isinstance(value, DeferProp):
            groups.setdefault(value.group, []).append(key)
    return groups or None


def _merge_keys(request: Request, props: Dict[str, Any]) -> Optional[List[str]]:
    reset = set(_header_list(request, h.RESET))
    keys = [key for key, value in props.items() if is_mergeable(value) and key not in reset]
    return keys or None


async def build_page(
    request: Request,
    component: str,
    props: Optional[Mapping[str, Any]] = None,
    *,
    encrypt_history: Optional[bool] = None,
    clear_history: bool = False,
) -> Page:
    """Assemble the page object for a request"""
    all_props = {**shared_props(request), **(props or {})}

    deferred = _deferred_groups(request, component, all_props)
    filtered = _filter_props(request, component, all_props)
    merge_props = _merge_keys(request, filtered)

    resolved = {key: await resolve_value(value) for key, value in filtered.items()}

    if encrypt_history is None:
        encrypt_history = get_settings().inertia_encrypt_history

    return Page(
        component=component,
        props=resolved,
        url=_request_uri(request),
        version=get_version(),
        encrypt_history=encrypt_history,
        clear_history=clear_history,
        merge_props=merge_props,
        deferred_props=deferred,
    )


def _ssr_gateway(request: Request) -> SsrGateway:
    gateway = getattr(request.app.state, "ssr_gateway", None)
    return gateway or SsrGateway()


async def render(
    request: Request,
    component: str,
    props: Optional[Mapping[str, Any]] = None,
    *,
    status_code: int = 200,
    encrypt_history: Optional[bool] = None,
    clear_history: bool = False,
) -> Response:
    """
    Render a page component

    Client visits (``X-Inertia: true``) get the page object as JSON; full
    page loads get the root view with the page embedded in ``data-page``.
    """
    page = await build_page(
        request,
        component,
        props,
        encrypt_history=encrypt_history,
        clear_history=clear_history,
    )
    page_data = page.to_json()

    if is_inertia_request(request):
        inertia_renders_total.labels(component=component, mode="json").inc()
        return JSONResponse(
            page_data,
            status_code=status_code,
            headers={h.INERTIA: "true", "Vary": h.INERTIA},
        )

    ssr = await _ssr_gateway(request).dispatch(page_data)
    inertia_renders_total.labels(component=component, mode="ssr" if ssr else "html").inc()

    settings = get_settings()
    return render_template(
        request,
        settings.inertia_root_view,
        {
            "page": page_data,
            "page_json": json.dumps(page_data, separators=(",", ":")),
            "ssr": ssr,
            "app_name": settings.app_name,
            "routes": page_data["props"].get("ziggy"),
        },
        status_code=status_code,
        headers={"Vary": h.INERTIA},
    )


def location(request: Request, url: str) -> Response:
    """
    Redirect to a URL outside the client router

    Client visits get 409 + ``X-Inertia-Location`` so the browser performs a
    full visit; everything else gets a plain redirect.
    """
    if is_inertia_request(request):
        return Response(status_code=409, headers={h.LOCATION: url})
    status_code = 303 if request.method in ("PUT", "PATCH", "DELETE") else 302
    return RedirectResponse(url, status_code=status_code)
