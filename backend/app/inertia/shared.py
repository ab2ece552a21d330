"""
Process-wide shared props merged into every page
"""
from typing import Any, Callable, Dict, List, Mapping

from fastapi import Request

SharedResolver = Callable[[Request], Mapping[str, Any]]

_shared: Dict[str, Any] = {}
_resolvers: List[SharedResolver] = []


def share(key: str, value: Any):
    """Share one prop; callables are evaluated per request"""
    _shared[key] = value


def share_many(values: Mapping[str, Any]):
    _shared.update(values)


def share_from_request(resolver: SharedResolver):
    """Register a function computing shared props from the current request"""
    if resolver not in _resolvers:
        _resolvers.append(resolver)
    return resolver


def flush_shared():
    _shared.clear()
    _resolvers.clear()


def shared_props(request: Request) -> Dict[str, Any]:
    """Static shared props first, then request resolvers in registration order"""
    props = dict(_shared)
    for resolver in _resolvers:
        props.update(resolver(request))
    return props
