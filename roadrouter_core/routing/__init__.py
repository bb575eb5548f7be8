"""Routing module - Route matching, registration and dispatch."""

from roadrouter_core.routing.route import (
    RequestMethod,
    RouteTemplate,
    RouteDefinitionError,
    route,
)
from roadrouter_core.routing.matcher import RouteMatcher, matches
from roadrouter_core.routing.wildcards import WildcardBindings, extract_wildcards
from roadrouter_core.routing.registry import RouteTable, RouteTableBuilder, discover_routes
from roadrouter_core.routing.router import (
    Router,
    DispatchMode,
    NotFoundHandler,
    DefaultNotFoundHandler,
)

__all__ = [
    "RequestMethod",
    "RouteTemplate",
    "RouteDefinitionError",
    "route",
    "RouteMatcher",
    "matches",
    "WildcardBindings",
    "extract_wildcards",
    "RouteTable",
    "RouteTableBuilder",
    "discover_routes",
    "Router",
    "DispatchMode",
    "NotFoundHandler",
    "DefaultNotFoundHandler",
]
