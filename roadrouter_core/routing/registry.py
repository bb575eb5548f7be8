"""Route Registry - Handler discovery and the route table.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.

Routes are collected in two phases:

    ┌──────────────────────┐  freeze()  ┌──────────────────────┐
    │  RouteTableBuilder   │ ─────────▶ │     RouteTable       │
    │  register / add      │            │  immutable, ordered  │
    │  (startup only)      │            │  (shared by workers) │
    └──────────────────────┘            └──────────────────────┘

The builder rejects duplicate routes; the first registration wins.
"""

from __future__ import annotations

import functools
import logging
from typing import Any, Callable, Iterator, List, Optional, Sequence, Tuple, Union

from roadrouter_core.routing.route import (
    RequestMethod,
    RouteDefinitionError,
    RouteTemplate,
    get_route_markers,
)
from roadrouter_core.routing.segments import SegmentKind, classify_segment, split_segments

logger = logging.getLogger(__name__)

Handler = Callable[..., Any]


def _invoke_on_new_instance(cls: type, func: Handler, request: Any, response: Any) -> Any:
    """Create a fresh handler instance per request and call ``func`` on it."""
    return func(cls(), request, response)


def discover_routes(source: Any) -> List[RouteTemplate]:
    """Discover marked handler methods on a class or instance.

    Walks the MRO from the most derived class up to (not including)
    ``object`` and collects every function carrying a ``route`` marker.
    A class source is instantiated per request with no arguments; an
    instance source is shared by every request.

    Args:
        source: Handler class or handler instance

    Returns:
        Route templates in discovery order, duplicates not yet removed
    """
    cls = source if isinstance(source, type) else type(source)
    routes: List[RouteTemplate] = []

    for klass in cls.__mro__:
        if klass is object:
            continue

        for name, attr in vars(klass).items():
            is_static = isinstance(attr, staticmethod)
            func = attr.__func__ if is_static else attr
            if not callable(func):
                continue

            markers = get_route_markers(func)
            if not markers:
                continue

            if is_static:
                handler = func
            elif isinstance(source, type):
                handler = functools.partial(_invoke_on_new_instance, cls, func)
            else:
                handler = functools.partial(func, source)

            handler_id = f"{klass.__module__}.{klass.__qualname__}#{name}"
            for path, method in markers:
                routes.append(RouteTemplate(path, method, handler_id, handler))

    return routes


def validate_template(path_pattern: str) -> None:
    """Raise RouteDefinitionError if any segment is malformed."""
    for segment in split_segments(path_pattern):
        if classify_segment(segment) is SegmentKind.MALFORMED:
            raise RouteDefinitionError(
                f"Malformed segment {segment!r} in route template {path_pattern!r}"
            )


class RouteTable(Sequence[RouteTemplate]):
    """Immutable, ordered route table.

    Produced by ``RouteTableBuilder.freeze()``; safe to share between
    worker threads without locking.
    """

    def __init__(self, routes: Sequence[RouteTemplate] = ()):
        self._routes: Tuple[RouteTemplate, ...] = tuple(routes)

    @property
    def routes(self) -> Tuple[RouteTemplate, ...]:
        return self._routes

    def __getitem__(self, index):
        return self._routes[index]

    def __iter__(self) -> Iterator[RouteTemplate]:
        return iter(self._routes)

    def __len__(self) -> int:
        return len(self._routes)

    def __repr__(self) -> str:
        return f"RouteTable({[str(r) for r in self._routes]!r})"


class RouteTableBuilder:
    """Collects routes during startup.

    Features:
    - Marker discovery on handler classes and instances
    - Explicit registration of plain callables
    - Duplicate detection (trailing-slash normalized path + method)
    - Optional strict template validation

    Usage:
        builder = RouteTableBuilder()
        builder.register(UserHandlers)
        builder.add("health", "GET", health_check)
        table = builder.freeze()
    """

    def __init__(self, strict: bool = False):
        self.strict = strict
        self._routes: List[RouteTemplate] = []
        self._frozen = False

    @property
    def frozen(self) -> bool:
        return self._frozen

    def register(self, source: Any) -> "RouteTableBuilder":
        """Register every marked handler method of a class or instance.

        Args:
            source: Handler class or handler instance
        """
        discovered = discover_routes(source)
        if not discovered:
            logger.warning(f"No routes found on {source!r}")

        for template in discovered:
            self.add_route(template)

        return self

    def add(
        self,
        path: str,
        method: Union[RequestMethod, str],
        handler: Handler,
        handler_id: Optional[str] = None,
    ) -> "RouteTableBuilder":
        """Register a plain ``handler(request, response)`` callable."""
        if handler_id is None:
            handler_id = getattr(handler, "__qualname__", repr(handler))
        template = RouteTemplate(path, RequestMethod.coerce(method), handler_id, handler)
        self.add_route(template)
        return self

    def add_route(self, template: RouteTemplate) -> bool:
        """Add a route template unless an equivalent one exists.

        Returns:
            True if the route was added, False if it was a duplicate
        """
        if self._frozen:
            raise RuntimeError("Route table is frozen; register routes before serving")

        if self.strict:
            validate_template(template.path_pattern)

        existing = self.find_equivalent(template)
        if existing is not None:
            logger.warning(
                f"Duplicate route {template.method.value} {template.normalized_pattern}: "
                f"ignoring {template.handler_id}, already registered by {existing.handler_id}"
            )
            return False

        self._routes.append(template)
        logger.debug(f"Registered route {template} -> {template.handler_id}")
        return True

    def find_equivalent(self, template: RouteTemplate) -> Optional[RouteTemplate]:
        """Find an already registered route equivalent to ``template``."""
        for existing in self._routes:
            if existing.is_equivalent(template):
                return existing
        return None

    def get_routes(self) -> List[RouteTemplate]:
        """Get all routes registered so far."""
        return self._routes.copy()

    def freeze(self) -> RouteTable:
        """End the registration phase and build the route table."""
        self._frozen = True
        return RouteTable(self._routes)

    def __len__(self) -> int:
        return len(self._routes)


__all__ = [
    "RouteTable",
    "RouteTableBuilder",
    "discover_routes",
    "validate_template",
]
