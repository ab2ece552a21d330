"""
Server side of the page protocol

Pages are rendered server-side into the root view on full loads and sent
as JSON page objects on client visits.
"""
from app.inertia.middleware import InertiaMiddleware
from app.inertia.props import always, defer, lazy, merge, optional
from app.inertia.response import (Page, build_page, get_version,
                                  is_inertia_request, location, render)
from app.inertia.shared import (flush_shared, share, share_from_request,
                                share_many, shared_props)
from app.inertia.ssr import SsrGateway, SsrResponse

__all__ = [
    "InertiaMiddleware",
    "Page",
    "SsrGateway",
    "SsrResponse",
    "always",
    "build_page",
    "defer",
    "flush_shared",
    "get_version",
    "is_inertia_request",
    "lazy",
    "location",
    "merge",
    "optional",
    "render",
    "share",
    "share_from_request",
    "share_many",
    "shared_props",
]
