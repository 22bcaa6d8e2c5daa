"""Selectors: dotted paths into the invocation payload or the caller context.

Grammar::

    .                 the whole payload
    .a.b.c            payload["a"]["b"]["c"]
    $.                the whole context
    $.a.b             context["a"]["b"]

Path segments are ``[A-Za-z0-9_-]+``.  A segment of digits also indexes
into a list.  A path that cannot be followed yields :data:`UNDEFINED`
rather than raising.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any

from nuc.core.errors import InvalidSelector

SELECTOR_RE = re.compile(r"^(\$)?\.([a-zA-Z0-9_-]+(\.[a-zA-Z0-9_-]+)*)?$")


class _Undefined:
    """Result of selecting a path that does not exist."""

    _instance: _Undefined | None = None

    def __new__(cls) -> _Undefined:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNDEFINED"

    def __bool__(self) -> bool:
        return False


UNDEFINED = _Undefined()


@dataclass(frozen=True, slots=True)
class Selector:
    """A parsed selector; build with :func:`parse_selector`."""

    raw: str
    is_context: bool
    path: tuple[str, ...]

    def __str__(self) -> str:
        return self.raw


def parse_selector(text: Any) -> Selector:
    """Parse *text* into a :class:`Selector`.

    Raises
    ------
    InvalidSelector
        If *text* is not a string matching the selector grammar.
    """
    if not isinstance(text, str) or not SELECTOR_RE.match(text):
        raise InvalidSelector(details={"selector": text})
    is_context = text.startswith("$")
    remainder = text[2:] if is_context else text[1:]
    path = tuple(remainder.split(".")) if remainder else ()
    return Selector(raw=text, is_context=is_context, path=path)


def apply_selector(
    selector: Selector,
    payload: dict[str, Any],
    context: dict[str, Any],
) -> Any:
    """Return the value *selector* points at, or :data:`UNDEFINED`."""
    value: Any = context if selector.is_context else payload
    for segment in selector.path:
        if isinstance(value, dict):
            if segment not in value:
                return UNDEFINED
            value = value[segment]
        elif isinstance(value, list) and segment.isdigit():
            index = int(segment)
            if index >= len(value):
                return UNDEFINED
            value = value[index]
        else:
            return UNDEFINED
    return value
