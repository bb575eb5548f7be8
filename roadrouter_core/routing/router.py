"""Router - Request dispatch over the route table.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Callable, List, Optional, Sequence, Tuple, Union

from roadrouter_core.http.request import Request, RequestDescriptor
from roadrouter_core.http.response import Response, ResponseSink
from roadrouter_core.http.status import StatusCode
from roadrouter_core.routing.matcher import RouteMatcher
from roadrouter_core.routing.registry import RouteTable
from roadrouter_core.routing.route import RouteTemplate
from roadrouter_core.routing.wildcards import WildcardBindings
from roadrouter_core.serialization import JSONSerializer, Serializer

logger = logging.getLogger(__name__)


class DispatchMode(Enum):
    """How many matching routes serve one request."""

    FAN_OUT_ALL = "fan_out_all"              # Every matching route runs
    FIRST_MATCH_ONLY = "first_match_only"    # Stop after the first match

    @classmethod
    def coerce(cls, value: Union["DispatchMode", str]) -> "DispatchMode":
        if isinstance(value, cls):
            return value
        return cls(str(value).strip().lower())


class NotFoundHandler(ABC):
    """Fallback for requests no route matches.

    Implement this to create your own global 404 handler.
    """

    @abstractmethod
    def handle_not_found(self, request: Request, response: Response) -> None:
        """Called when no route matches the request."""
        pass


class DefaultNotFoundHandler(NotFoundHandler):
    """Sends ``404. Route not found.`` as plain text."""

    message = "404. Route not found."

    def handle_not_found(self, request: Request, response: Response) -> None:
        response.set_status_code(StatusCode.NOT_FOUND).send_text(self.message)


class Router:
    """Request Router.

    Scans the route table in order and invokes the handler of every
    matching route (or only the first one in FIRST_MATCH_ONLY mode).
    When several routes match in fan-out mode they all write to the same
    response; the first write reaches the client and later ones are
    dropped.

    Dispatch Flow:
    ┌────────────────────────────────────────────────────────────┐
    │  descriptor ──▶ for route in table:                        │
    │                    matches? ──▶ extract wildcards          │
    │                                   ──▶ handler(req, res)    │
    │                 no match at all ──▶ not-found handler      │
    │                 handler raised  ──▶ log + abort connection │
    └────────────────────────────────────────────────────────────┘

    Usage:
        router = Router(builder.freeze())
        router.dispatch(descriptor, sink)
    """

    def __init__(
        self,
        routes: Union[RouteTable, Sequence[RouteTemplate]],
        not_found_handler: Optional[NotFoundHandler] = None,
        mode: Union[DispatchMode, str] = DispatchMode.FAN_OUT_ALL,
        serializer: Optional[Serializer] = None,
    ):
        self._routes = routes if isinstance(routes, RouteTable) else RouteTable(routes)
        self._not_found_handler = not_found_handler or DefaultNotFoundHandler()
        self.mode = DispatchMode.coerce(mode)
        self.serializer = serializer or JSONSerializer()
        self._matcher = RouteMatcher()

    @property
    def routes(self) -> RouteTable:
        return self._routes

    @property
    def not_found_handler(self) -> NotFoundHandler:
        return self._not_found_handler

    def match(self, method: str, path: str) -> List[Tuple[RouteTemplate, WildcardBindings]]:
        """Find every route matching a request, in table order.

        Args:
            method: HTTP method
            path: Request path, query string allowed

        Returns:
            List of (route, wildcards) pairs
        """
        found = []
        for template in self._routes:
            bindings = self._matcher.match(method, path, template)
            if bindings is not None:
                found.append((template, bindings))
                if self.mode is DispatchMode.FIRST_MATCH_ONLY:
                    break
        return found

    def dispatch(self, descriptor: RequestDescriptor, sink: ResponseSink) -> int:
        """Dispatch a request to its matching handlers.

        Handler errors are logged and abort the connection; they never
        propagate to the caller.

        Returns:
            Number of route handlers invoked (0 means not-found was used)
        """
        invoked = 0

        for template, bindings in self.match(descriptor.method, descriptor.raw_path):
            request = Request(descriptor, bindings, self.serializer)
            response = Response(sink, self.serializer)
            self._invoke(template.handler, request, response, sink, template.handler_id)
            invoked += 1

        if not invoked:
            request = Request(descriptor, serializer=self.serializer)
            response = Response(sink, self.serializer)
            self._invoke(
                self._not_found_handler.handle_not_found,
                request,
                response,
                sink,
                type(self._not_found_handler).__name__,
            )

        return invoked

    def _invoke(
        self,
        handler: Callable[..., Any],
        request: Request,
        response: Response,
        sink: ResponseSink,
        handler_id: str,
    ) -> None:
        """Call a handler, converting failures into an aborted connection."""
        try:
            handler(request, response)
        except Exception:
            logger.exception(
                f"Handler {handler_id} failed for {request.method} {request.raw_path}"
            )
            sink.abort()


__all__ = [
    "Router",
    "DispatchMode",
    "NotFoundHandler",
    "DefaultNotFoundHandler",
]
