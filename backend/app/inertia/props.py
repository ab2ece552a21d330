"""
Prop wrappers that control when a page prop is evaluated and sent
"""
from typing import Any, Callable


class PageProp:
    """Base wrapper; ``value`` may be a plain value or a zero-argument callable"""

    def __init__(self, value: Any):
        self.value = value

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.value!r})"


class OptionalProp(PageProp):
    """Skipped on first load, evaluated only when a partial reload asks for it"""

    def __init__(self, callback: Callable[[], Any]):
        if not callable(callback):
            raise TypeError("optional props take a callable")
        super().__init__(callback)


class AlwaysProp(PageProp):
    """Sent on every response, even when a partial reload filters it out"""


class MergeProp(PageProp):
    """Client merges the value into the existing prop instead of replacing it"""

    merge = True


class DeferProp(OptionalProp):
    """Skipped on first load; the client fetches it right after in ``group``"""

    def __init__(self, callback: Callable[[], Any], group: str = "default", merge: bool = False):
        super().__init__(callback)
        self.group = group
        self.merge = merge


def optional(callback: Callable[[], Any]) -> OptionalProp:
    return OptionalProp(callback)


# older name for the same behaviour
lazy = optional


def always(value: Any) -> AlwaysProp:
    return AlwaysProp(value)


def merge(value: Any) -> MergeProp:
    return MergeProp(value)


def defer(callback: Callable[[], Any], group: str = "default", merge: bool = False) -> DeferProp:
    return DeferProp(callback, group=group, merge=merge)


def is_ignored_on_first_load(value: Any) -> bool:
    return isinstance(value, OptionalProp)


def is_mergeable(value: Any) -> bool:
    return bool(getattr(value, "merge", False)) and isinstance(value, PageProp)
