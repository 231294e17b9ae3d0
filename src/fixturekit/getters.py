"""Resolution of dotted accessor paths against live objects."""

from __future__ import annotations

import functools
import inspect
import logging
from collections.abc import Callable
from typing import Any, TypeVar

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])

_GETTER_ATTR = "_fixturekit_getter_name"
_MISSING = object()


class NotAGetterError(LookupError):
    """A path segment does not name a zero-argument accessor."""

    def __init__(self, name: str, obj: Any, message: str) -> None:
        super().__init__(message)
        self.name = name
        self.obj = obj


def getter(name: str | None = None) -> Callable[[F], F]:
    """Expose a method as an accessor, optionally under a different name.

    Fixture files often use the naming of the protocol being tested
    (``PacketType``) rather than Python naming (``packet_type``)::

        class Packet:
            @getter("PacketType")
            def packet_type(self) -> int: ...
    """

    def decorate(func: F) -> F:
        setattr(func, _GETTER_ATTR, name or func.__name__)
        return func

    return decorate


def _registered(obj: Any, name: str) -> Callable[[], Any] | None:
    cls = type(obj)
    getters = getattr(cls, "__getters__", None)
    if getters and name in getters:
        return functools.partial(getters[name], obj)

    for klass in cls.__mro__:
        for attr in vars(klass).values():
            if getattr(attr, _GETTER_ATTR, None) == name:
                return attr.__get__(obj, cls)
    return None


def _is_niladic(member: Callable[..., Any]) -> bool:
    try:
        signature = inspect.signature(member)
    except (TypeError, ValueError):
        # Some builtins expose no signature; treat them as callable as-is.
        return True

    try:
        signature.bind()
    except TypeError:
        return False
    return signature.return_annotation not in (None, "None")


def _accessor(name: str, obj: Any) -> Callable[[], Any]:
    member = _registered(obj, name)
    if member is None:
        if isinstance(inspect.getattr_static(type(obj), name, None), property):
            return functools.partial(getattr, obj, name)
        member = getattr(obj, name, _MISSING)

    if member is _MISSING or not callable(member):
        raise NotAGetterError(name, obj, f"{name} is not a method on {obj!r}")
    if not _is_niladic(member):
        raise NotAGetterError(
            name, obj, f"{name} does not appear to be a getter method"
        )
    return member


def resolve_getter(path: str, root: Any) -> Callable[[], Any]:
    """Resolve a dotted accessor path such as ``"Header.Length"`` on *root*.

    Every segment but the last is invoked and its result becomes the object
    the next segment is looked up on. The accessor for the last segment is
    returned without being called. Raises NotAGetterError for a segment that
    is missing, not callable, takes arguments or is declared to return None.
    """
    *parents, last = path.split(".")
    current = root
    for name in parents:
        logger.debug(f"Following {name} on {type(current).__name__}")
        current = _accessor(name, current)()
    return _accessor(last, current)
