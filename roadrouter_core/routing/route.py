"""Route - Route descriptors and the handler route marker.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, List, Optional, Tuple, Union

ROUTE_MARKER = "__roadrouter_routes__"


class RouteDefinitionError(ValueError):
    """Raised for a malformed route template when strict validation is on."""
    pass


class RequestMethod(Enum):
    """HTTP methods a route can be bound to."""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"
    OPTIONS = "OPTIONS"

    @classmethod
    def coerce(cls, value: Union["RequestMethod", str]) -> "RequestMethod":
        """Accept an enum member or a method name in any case."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().upper())
        except ValueError:
            raise ValueError(f"Unsupported request method: {value!r}") from None


@dataclass(frozen=True)
class RouteTemplate:
    """Route definition.

    A path pattern bound to an HTTP method and the handler serving it.
    Only the pattern, method and handler id take part in equality.
    """

    path_pattern: str
    method: RequestMethod
    handler_id: str = ""
    handler: Optional[Callable[..., Any]] = field(default=None, compare=False, repr=False)

    @property
    def normalized_pattern(self) -> str:
        """Pattern with a trailing slash, used for duplicate detection."""
        if self.path_pattern and not self.path_pattern.endswith("/"):
            return self.path_pattern + "/"
        return self.path_pattern

    def is_equivalent(self, other: "RouteTemplate") -> bool:
        """Check if both routes would claim the same requests."""
        return (
            self.method == other.method
            and self.normalized_pattern == other.normalized_pattern
        )

    def __str__(self) -> str:
        return f"{self.method.value} {self.path_pattern or '/'}"


def route(
    path: str,
    method: Union[RequestMethod, str] = RequestMethod.GET,
) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """Mark a handler method as serving ``path`` for ``method``.

    The marker can be stacked to bind one method to several routes.

    Usage:
        class Users:
            @route("users/{id}")
            def show(self, req, res):
                res.send_text(req.get_wildcard("id"))
    """
    marker = (path, RequestMethod.coerce(method))

    def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
        markers: List[Tuple[str, RequestMethod]] = list(getattr(func, ROUTE_MARKER, ()))
        # Decorators apply bottom-up; keep source order
        markers.insert(0, marker)
        setattr(func, ROUTE_MARKER, tuple(markers))
        return func

    return decorator


def get_route_markers(func: Any) -> Tuple[Tuple[str, RequestMethod], ...]:
    """Return the ``(path, method)`` markers attached to ``func``."""
    return getattr(func, ROUTE_MARKER, ())


__all__ = [
    "RequestMethod",
    "RouteTemplate",
    "RouteDefinitionError",
    "route",
    "get_route_markers",
]
