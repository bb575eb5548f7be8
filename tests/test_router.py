"""Dispatcher tests."""

import io
import logging

import pytest
from roadrouter_core.http.request import RequestDescriptor
from roadrouter_core.http.response import BufferedResponseSink
from roadrouter_core.routing.registry import RouteTableBuilder
from roadrouter_core.routing.route import route
from roadrouter_core.routing.router import (
    DefaultNotFoundHandler,
    DispatchMode,
    NotFoundHandler,
    Router,
)


def dispatch(router, method, path, body=b""):
    sink = BufferedResponseSink()
    count = router.dispatch(RequestDescriptor(method=method, raw_path=path, body=body), sink)
    return count, sink


class RecordingNotFound(NotFoundHandler):
    def __init__(self):
        self.requests = []

    def handle_not_found(self, request, response):
        self.requests.append(request)
        response.set_status_code(404).send_text("missing")


class UserHandlers:
    @route("users/{id}")
    def show(self, req, res):
        user_id = req.get_wildcard_as_integer("id")
        if user_id is None:
            res.set_status_code(400).send_text("bad id")
            return
        res.send_json({"id": user_id})


class TestDispatch:
    """Test request dispatch."""

    def test_dispatch_to_wildcard_route(self):
        """Test wildcard route serves request."""
        router = Router(RouteTableBuilder().register(UserHandlers).freeze())
        count, sink = dispatch(router, "GET", "/users/7")

        assert count == 1
        assert sink.status == 200
        assert sink.get_header("Content-Type") == "application/json"
        assert b'"id": 7' in sink.body

    def test_handler_sees_bad_wildcard_as_none(self):
        """Test coercion failure is surfaced as absence."""
        router = Router(RouteTableBuilder().register(UserHandlers).freeze())
        _, sink = dispatch(router, "GET", "/users/abc")

        assert sink.status == 400
        assert sink.body == b"bad id"

    def test_default_not_found(self):
        """Test default 404 handler."""
        router = Router(RouteTableBuilder().register(UserHandlers).freeze())
        count, sink = dispatch(router, "DELETE", "/unknown")

        assert count == 0
        assert sink.status == 404
        assert sink.body == b"404. Route not found."
        assert sink.get_header("Content-Type") == "text/plain"

    def test_custom_not_found_called_once(self):
        """Test not-found handler runs exactly once and no route runs."""
        calls = []
        builder = RouteTableBuilder()
        builder.add("users", "GET", lambda req, res: calls.append(req))
        not_found = RecordingNotFound()

        router = Router(builder.freeze(), not_found_handler=not_found)
        count, sink = dispatch(router, "POST", "/users")

        assert count == 0
        assert calls == []
        assert len(not_found.requests) == 1
        assert not_found.requests[0].path == "/users"
        assert sink.body == b"missing"

    def test_fan_out_invokes_all_matches_in_order(self):
        """Test literal and wildcard routes both run."""
        order = []
        builder = RouteTableBuilder()
        builder.add("health", "GET", lambda req, res: order.append("health"))
        builder.add("{page}", "GET", lambda req, res: order.append(req.get_wildcard("page")))

        count, _ = dispatch(Router(builder.freeze()), "GET", "/health")

        assert count == 2
        assert order == ["health", "health"]

    def test_first_writer_wins(self):
        """Test only the first response reaches the sink."""
        builder = RouteTableBuilder()
        builder.add("health", "GET", lambda req, res: res.send_text("literal"))
        builder.add("{page}", "GET", lambda req, res: res.set_status_code(201).send_text("wildcard"))

        _, sink = dispatch(Router(builder.freeze()), "GET", "/health")

        assert sink.status == 200
        assert sink.body == b"literal"

    def test_first_match_only_mode(self):
        """Test FIRST_MATCH_ONLY stops after one handler."""
        order = []
        builder = RouteTableBuilder()
        builder.add("health", "GET", lambda req, res: order.append("literal"))
        builder.add("{page}", "GET", lambda req, res: order.append("wildcard"))

        router = Router(builder.freeze(), mode="first_match_only")
        count, _ = dispatch(router, "GET", "/health")

        assert router.mode is DispatchMode.FIRST_MATCH_ONLY
        assert count == 1
        assert order == ["literal"]

    def test_each_route_gets_own_wildcards(self):
        """Test bindings come from the route being served."""
        seen = []
        builder = RouteTableBuilder()
        builder.add("{a}/x", "GET", lambda req, res: seen.append(dict(req.wildcards)))
        builder.add("y/{b}", "GET", lambda req, res: seen.append(dict(req.wildcards)))

        dispatch(Router(builder.freeze()), "GET", "/y/x")

        assert seen == [{"a": "y"}, {"b": "x"}]

    def test_handler_error_aborts_and_continues(self, caplog):
        """Test handler errors are contained at the dispatch boundary."""
        ran = []

        def broken(req, res):
            raise RuntimeError("boom")

        builder = RouteTableBuilder()
        builder.add("health", "GET", broken)
        builder.add("{page}", "GET", lambda req, res: ran.append(True))

        with caplog.at_level(logging.ERROR):
            count, sink = dispatch(Router(builder.freeze()), "GET", "/health")

        assert count == 2
        assert ran == [True]
        assert sink.aborted
        assert not sink.committed
        assert "boom" in caplog.text

    def test_not_found_error_is_contained(self):
        """Test a failing not-found handler doesn't propagate."""

        class Broken(NotFoundHandler):
            def handle_not_found(self, request, response):
                raise ValueError("nope")

        router = Router(RouteTableBuilder().freeze(), not_found_handler=Broken())
        count, sink = dispatch(router, "GET", "/")

        assert count == 0
        assert sink.aborted

    def test_fan_out_handlers_share_body(self):
        """Test every handler reads the same body."""
        bodies = []
        builder = RouteTableBuilder()
        builder.add("items", "POST", lambda req, res: bodies.append(req.body))
        builder.add("{any}", "POST", lambda req, res: bodies.append(req.body))

        sink = BufferedResponseSink()
        Router(builder.freeze()).dispatch(
            RequestDescriptor(method="POST", raw_path="/items", body=io.BytesIO(b"payload")),
            sink,
        )

        assert bodies == [b"payload", b"payload"]

    def test_root_route(self):
        """Test root route matches only the root."""
        builder = RouteTableBuilder()
        builder.add("", "GET", lambda req, res: res.send_text("home"))
        router = Router(builder.freeze())

        count, sink = dispatch(router, "GET", "/")
        assert count == 1
        assert sink.body == b"home"

        count, sink = dispatch(router, "GET", "/anything")
        assert count == 0
        assert sink.status == 404


class TestRouterMatch:
    """Test match listing."""

    def test_match_lists_routes_in_order(self):
        """Test every match is returned with its bindings."""
        builder = RouteTableBuilder()
        builder.add("health", "GET", lambda req, res: None)
        builder.add("{page}", "GET", lambda req, res: None)
        builder.add("{page}", "POST", lambda req, res: None)

        found = Router(builder.freeze()).match("GET", "/health")

        assert [t.path_pattern for t, _ in found] == ["health", "{page}"]
        assert found[1][1].get("page") == "health"

    def test_accepts_plain_sequence(self):
        """Test router wraps a sequence of templates."""
        builder = RouteTableBuilder()
        builder.add("a", "GET", lambda req, res: None)
        router = Router(builder.get_routes())
        assert len(router.routes) == 1

    def test_default_not_found_handler(self):
        assert isinstance(Router([]).not_found_handler, DefaultNotFoundHandler)

    def test_invalid_mode(self):
        with pytest.raises(ValueError):
            Router([], mode="sometimes")
