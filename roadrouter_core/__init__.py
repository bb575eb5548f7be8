"""RoadRouter - Annotation-driven HTTP dispatch.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.

RoadRouter maps HTTP requests onto methods of plain handler classes:
- Route markers on handler methods (@route("users/{id}", "GET"))
- Segment-wise matching with {name} wildcards
- Duplicate route detection at registration
- Fan-out dispatch to every matching route
- Pluggable 404 handler and body serializer
- Threaded HTTP server with a bounded worker pool

Architecture Overview:
┌─────────────────────────────────────────────────────────────────────────────┐
│                              RoadRouter                                      │
├─────────────────────────────────────────────────────────────────────────────┤
│                                                                              │
│  Startup:   handler classes ──▶ RouteTableBuilder ──▶ freeze() ──▶ RouteTable│
│                                                                              │
│  Serving:   Client ──▶ RouterServer ──▶ Router.dispatch ──▶ handler(s)       │
│                                            │                                 │
│                                            └──▶ NotFoundHandler (no match)   │
│                                                                              │
│  ┌─────────────────┐  ┌─────────────────┐  ┌─────────────────────────────┐  │
│  │    Routing      │  │      HTTP       │  │        Server               │  │
│  │                 │  │                 │  │                             │  │
│  │ - Route marker  │  │ - Request       │  │ - Worker pool               │  │
│  │ - Matcher       │  │ - Response      │  │ - Access log                │  │
│  │ - Wildcards     │  │ - Headers       │  │ - Config                    │  │
│  │ - Registry      │  │ - Status codes  │  │ - Logging                   │  │
│  └─────────────────┘  └─────────────────┘  └─────────────────────────────┘  │
│                                                                              │
└─────────────────────────────────────────────────────────────────────────────┘

Usage:
    from roadrouter_core import RouterServer, RouterConfig, route

    class Users:
        @route("users/{id}")
        def show(self, req, res):
            user_id = req.get_wildcard_as_integer("id")
            if user_id is None:
                res.set_status_code(400).send_text("Bad id")
                return
            res.send_json({"id": user_id})

    server = RouterServer(RouterConfig(port=8080))
    server.register(Users)
    server.start(block=True)
"""

__version__ = "0.1.0"
__author__ = "BlackRoad OS, Inc."

# Routing (imported before http, which depends on routing.wildcards)
from roadrouter_core.routing.route import RequestMethod, RouteTemplate, RouteDefinitionError, route
from roadrouter_core.routing.matcher import RouteMatcher, matches
from roadrouter_core.routing.wildcards import WildcardBindings
from roadrouter_core.routing.registry import RouteTable, RouteTableBuilder
from roadrouter_core.routing.router import (
    Router,
    DispatchMode,
    NotFoundHandler,
    DefaultNotFoundHandler,
)

# HTTP
from roadrouter_core.http.headers import Headers
from roadrouter_core.http.status import StatusCode
from roadrouter_core.http.request import Request, RequestDescriptor
from roadrouter_core.http.response import (
    Response,
    ResponseSink,
    BufferedResponseSink,
    ResponseCommittedError,
)

# Serialization
from roadrouter_core.serialization import Serializer, JSONSerializer

# Server
from roadrouter_core.server import RouterServer

# Utils
from roadrouter_core.utils.config import RouterConfig, load_config
from roadrouter_core.utils.logging import configure_logging

__all__ = [
    # Version
    "__version__",
    # Routing
    "RequestMethod",
    "RouteTemplate",
    "RouteDefinitionError",
    "route",
    "RouteMatcher",
    "matches",
    "WildcardBindings",
    "RouteTable",
    "RouteTableBuilder",
    "Router",
    "DispatchMode",
    "NotFoundHandler",
    "DefaultNotFoundHandler",
    # HTTP
    "Headers",
    "StatusCode",
    "Request",
    "RequestDescriptor",
    "Response",
    "ResponseSink",
    "BufferedResponseSink",
    "ResponseCommittedError",
    # Serialization
    "Serializer",
    "JSONSerializer",
    # Server
    "RouterServer",
    # Utils
    "RouterConfig",
    "load_config",
    "configure_logging",
]
