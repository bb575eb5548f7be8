"""End-to-end server tests."""

import json
import logging
import socket
import urllib.error
import urllib.request

import pytest
from roadrouter_core import RequestMethod, RouterConfig, RouterServer, route
from roadrouter_core.utils.logging import PACKAGE_LOGGER, JSONFormatter


class UserHandlers:
    @route("/users/{id}")
    def get_user(self, req, res):
        res.send_json({"id": req.get_wildcard_as_integer("id")})

    @route("/users", RequestMethod.POST)
    def create_user(self, req, res):
        res.set_status_code(201).send_json(req.get_body_as_json())

    @route("/users/{id}", RequestMethod.DELETE)
    def delete_user(self, req, res):
        res.send_success()

    @route("/boom")
    def boom(self, req, res):
        raise RuntimeError("handler failed")


@pytest.fixture(autouse=True)
def package_logger():
    """Undo the logging setup done by RouterServer.start()."""
    logger = logging.getLogger(PACKAGE_LOGGER)
    handlers = list(logger.handlers)
    yield logger
    for handler in list(logger.handlers):
        if handler not in handlers:
            logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def make_server():
    """Start servers on a free loopback port, stopping them afterwards."""
    started = []

    def factory(**overrides):
        options = {"host": "127.0.0.1", "port": 0, "workers": 4, "access_log": False}
        options.update(overrides)
        server = RouterServer(RouterConfig(**options))
        server.register(UserHandlers)
        server.add("/echo", "GET", lambda req, res: res.send_text(req.query_parameters.get("q", "")))
        server.start()
        started.append(server)
        return server

    yield factory
    for server in started:
        server.stop()


@pytest.fixture
def server(make_server):
    return make_server()


def fetch(server, path, method="GET", data=None):
    host, port = server.address
    request = urllib.request.Request(f"http://{host}:{port}{path}", data=data, method=method)
    try:
        with urllib.request.urlopen(request, timeout=5) as resp:
            return resp.status, resp.headers, resp.read()
    except urllib.error.HTTPError as e:
        return e.code, e.headers, e.read()


def open_connection(server, raw):
    """Send raw request bytes, leaving the socket open."""
    sock = socket.create_connection(server.address, timeout=5)
    sock.sendall(raw)
    return sock


def read_until_closed(sock):
    chunks = []
    while True:
        chunk = sock.recv(4096)
        if not chunk:
            return b"".join(chunks)
        chunks.append(chunk)


class TestRouterServer:
    """Test the HTTP transport."""

    def test_wildcard_route(self, server):
        """Test a GET with a wildcard."""
        status, headers, body = fetch(server, "/users/42")

        assert status == 200
        assert headers["Content-Type"] == "application/json"
        assert json.loads(body) == {"id": 42}

    def test_query_parameters(self, server):
        status, _, body = fetch(server, "/echo?q=hello+world")

        assert status == 200
        assert body == b"hello world"

    def test_post_body(self, server):
        """Test a JSON body reaches the handler."""
        status, _, body = fetch(server, "/users", "POST", b'{"name": "Ada"}')

        assert status == 201
        assert json.loads(body) == {"name": "Ada"}

    def test_no_content(self, server):
        status, _, body = fetch(server, "/users/42", "DELETE")

        assert status == 204
        assert body == b""

    def test_not_found(self, server):
        """Test unmatched requests get the default 404."""
        status, _, body = fetch(server, "/missing")

        assert status == 404
        assert body == b"404. Route not found."

    def test_method_mismatch_is_not_found(self, server):
        status, _, _ = fetch(server, "/users/42", "PUT", b"")
        assert status == 404

    def test_registration_closed(self, server):
        """Test routes can't be added after start."""
        assert server.running
        with pytest.raises(RuntimeError):
            server.register(UserHandlers)
        with pytest.raises(RuntimeError):
            server.start()

    def test_stop(self):
        server = RouterServer(RouterConfig(host="127.0.0.1", port=0))
        server.start()
        server.stop()

        assert not server.running
        assert server.address is None


class TestTransportErrors:
    """Test failures stay on their own connection."""

    def test_handler_error_closes_connection(self, server):
        """Test a raising handler gets no response but the server keeps serving."""
        sock = open_connection(server, b"GET /boom HTTP/1.1\r\nHost: localhost\r\n\r\n")
        try:
            assert read_until_closed(sock) == b""
        finally:
            sock.close()

        status, _, body = fetch(server, "/users/7")
        assert status == 200
        assert json.loads(body) == {"id": 7}

    def test_negative_content_length_rejected(self, make_server):
        """Test a negative length is refused instead of reading to EOF."""
        server = make_server(workers=1)
        sock = open_connection(
            server,
            b"POST /users HTTP/1.1\r\nHost: localhost\r\nContent-Length: -1\r\n\r\n",
        )
        try:
            assert read_until_closed(sock).startswith(b"HTTP/1.1 400")
        finally:
            sock.close()

        # The only worker is free again
        status, _, _ = fetch(server, "/users", "POST", b'{"name": "Ada"}')
        assert status == 201

    def test_invalid_content_length_rejected(self, server):
        sock = open_connection(
            server,
            b"POST /users HTTP/1.1\r\nHost: localhost\r\nContent-Length: abc\r\n\r\n",
        )
        try:
            assert read_until_closed(sock).startswith(b"HTTP/1.1 400")
        finally:
            sock.close()

    def test_aborted_request_is_access_logged(self, make_server, caplog):
        """Test aborted exchanges still get an access log line."""
        server = make_server(access_log=True)

        with caplog.at_level(logging.INFO, logger="roadrouter_core.access"):
            sock = open_connection(server, b"GET /boom HTTP/1.1\r\nHost: localhost\r\n\r\n")
            try:
                read_until_closed(sock)
            finally:
                sock.close()

        lines = [r.getMessage() for r in caplog.records if r.name == "roadrouter_core.access"]
        assert any('"GET /boom HTTP/1.1" - 0' in line for line in lines)


class TestServerLifecycle:
    """Test start-up behaviour."""

    def test_start_applies_logging_config(self, make_server, package_logger):
        """Test log level and format come from the config."""
        make_server(log_level="DEBUG", log_format="json")

        assert package_logger.level == logging.DEBUG
        assert any(isinstance(h.formatter, JSONFormatter) for h in package_logger.handlers)

    def test_start_retry_after_bind_failure(self):
        """Test a failed bind leaves registration open."""
        blocker = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        blocker.bind(("127.0.0.1", 0))
        blocker.listen(1)
        port = blocker.getsockname()[1]

        server = RouterServer(RouterConfig(host="127.0.0.1", port=port, access_log=False))
        server.register(UserHandlers)
        try:
            with pytest.raises(OSError):
                server.start()

            assert not server.running
            assert server.router is None
            server.add("/late", "GET", lambda req, res: res.send_text("late"))

            blocker.close()
            server.start()

            status, _, body = fetch(server, "/late")
            assert status == 200
            assert body == b"late"
        finally:
            blocker.close()
            server.stop()
