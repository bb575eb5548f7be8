"""Router Server - HTTP transport for the router.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.

Connections are accepted on one thread and handed to a fixed-size worker
pool. Each worker reads a request, dispatches it synchronously through the
Router and writes the buffered response back:

    accept ──▶ ThreadPoolExecutor(workers) ──▶ parse ──▶ Router.dispatch
                                                          │
    client ◀──────────── flush BufferedResponseSink ◀─────┘
"""

from __future__ import annotations

import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from http.server import BaseHTTPRequestHandler, HTTPServer
from typing import Any, Callable, Optional, Tuple, Union

from roadrouter_core.http.request import RequestDescriptor
from roadrouter_core.http.response import BufferedResponseSink
from roadrouter_core.http.status import status_message
from roadrouter_core.routing.registry import RouteTableBuilder
from roadrouter_core.routing.route import RequestMethod
from roadrouter_core.routing.router import DispatchMode, NotFoundHandler, Router
from roadrouter_core.serialization import JSONSerializer, Serializer
from roadrouter_core.utils.config import RouterConfig
from roadrouter_core.utils.logging import configure_logging

logger = logging.getLogger(__name__)
access_logger = logging.getLogger("roadrouter_core.access")

ACCESS_LOG_FORMAT = (
    '{remote_addr} - - [{time}] "{method} {path} {protocol}" '
    "{status} {body_bytes} {duration_ms:.2f}ms"
)


class _ExchangeHandler(BaseHTTPRequestHandler):
    """Bridges one HTTP exchange to Router.dispatch."""

    protocol_version = "HTTP/1.1"
    server: "_PooledHTTPServer"

    def _handle(self) -> None:
        start = time.time()

        length = self.headers.get("Content-Length")
        try:
            size = int(length) if length else 0
        except ValueError:
            size = -1
        if size < 0:
            self.send_error(400, "Invalid Content-Length")
            return
        body = self.rfile.read(size) if size else b""

        descriptor = RequestDescriptor(
            method=self.command,
            raw_path=self.path,
            headers=list(self.headers.items()),
            body=body,
            remote_addr=self.client_address[0],
            protocol=self.request_version,
        )
        sink = BufferedResponseSink()
        self.server.router.dispatch(descriptor, sink)

        if not sink.committed:
            # Aborted, or no handler wrote a response
            if not sink.aborted:
                logger.warning(f"No response written for {self.command} {self.path}")
            self.close_connection = True
            self._log_access(descriptor, "-", 0, start)
            return

        self._flush(sink)
        self._log_access(descriptor, sink.status, len(sink.body), start)

    def _log_access(
        self,
        descriptor: RequestDescriptor,
        status: Union[int, str],
        body_bytes: int,
        start: float,
    ) -> None:
        if not self.server.access_log:
            return
        access_logger.info(ACCESS_LOG_FORMAT.format(
            remote_addr=descriptor.remote_addr or "-",
            time=time.strftime("%d/%b/%Y:%H:%M:%S %z", time.localtime(descriptor.timestamp)),
            method=self.command,
            path=self.path,
            protocol=self.request_version,
            status=status,
            body_bytes=body_bytes,
            duration_ms=(time.time() - start) * 1000,
        ))

    def _flush(self, sink: BufferedResponseSink) -> None:
        """Write a committed sink to the client."""
        self.send_response(sink.status, status_message(sink.status))
        for name, value in sink.headers:
            self.send_header(name, value)
        if sink.status != 204:
            self.send_header("Content-Length", str(len(sink.body)))
        self.end_headers()
        if sink.status != 204 and sink.body:
            self.wfile.write(sink.body)

    do_GET = _handle
    do_POST = _handle
    do_PUT = _handle
    do_PATCH = _handle
    do_DELETE = _handle
    do_OPTIONS = _handle

    def log_message(self, format: str, *args: Any) -> None:
        logger.debug(f"{self.address_string()} {format % args}")


class _PooledHTTPServer(HTTPServer):
    """HTTP server that serves connections on a bounded worker pool."""

    def __init__(
        self,
        address: Tuple[str, int],
        workers: int,
        backlog: int,
        access_log: bool,
    ):
        self.request_queue_size = backlog
        self.router: Optional[Router] = None
        self.access_log = access_log
        self._pool = ThreadPoolExecutor(max_workers=workers, thread_name_prefix="router-worker")
        super().__init__(address, _ExchangeHandler)

    def process_request(self, request: Any, client_address: Tuple[str, int]) -> None:
        self._pool.submit(self._process_request_worker, request, client_address)

    def _process_request_worker(self, request: Any, client_address: Tuple[str, int]) -> None:
        try:
            self.finish_request(request, client_address)
        except Exception:
            self.handle_error(request, client_address)
        finally:
            self.shutdown_request(request)

    def handle_error(self, request: Any, client_address: Tuple[str, int]) -> None:
        logger.exception(f"Connection from {client_address[0]} failed")

    def server_close(self) -> None:
        super().server_close()
        self._pool.shutdown(wait=False)


class RouterServer:
    """HTTP server for annotated handler classes.

    Registration and serving are separate phases: routes are registered
    before ``start()``, which freezes the route table.

    Usage:
        server = RouterServer(RouterConfig(port=8080))
        server.register(UserHandlers)
        server.start(block=True)
    """

    def __init__(
        self,
        config: Optional[RouterConfig] = None,
        serializer: Optional[Serializer] = None,
    ):
        self.config = config or RouterConfig()
        self.serializer = serializer or JSONSerializer(indent=self.config.json_indent)
        self._builder = RouteTableBuilder(strict=self.config.strict_templates)
        self._not_found_handler: Optional[NotFoundHandler] = None
        self._router: Optional[Router] = None
        self._httpd: Optional[_PooledHTTPServer] = None
        self._thread: Optional[threading.Thread] = None

    @property
    def router(self) -> Optional[Router]:
        """The dispatcher, available once started."""
        return self._router

    @property
    def address(self) -> Optional[Tuple[str, int]]:
        """Bound (host, port), available once started."""
        if self._httpd is None:
            return None
        return self._httpd.server_address[:2]

    @property
    def running(self) -> bool:
        return self._httpd is not None

    def register(self, source: Any) -> "RouterServer":
        """Register a class or instance with ``route`` marked methods."""
        self._check_not_started()
        self._builder.register(source)
        return self

    def add(
        self,
        path: str,
        method: Union[RequestMethod, str],
        handler: Callable[..., Any],
    ) -> "RouterServer":
        """Register a plain ``handler(request, response)`` callable."""
        self._check_not_started()
        self._builder.add(path, method, handler)
        return self

    def set_not_found_handler(self, handler: NotFoundHandler) -> "RouterServer":
        """Replace the global 404 handler."""
        self._check_not_started()
        self._not_found_handler = handler
        return self

    def start(self, block: bool = False) -> None:
        """Bind the socket, freeze the route table and start serving.

        The route table stays open if binding fails, so ``start`` can be
        retried.

        Args:
            block: Serve on the calling thread until stopped
        """
        self._check_not_started()

        mode = DispatchMode.coerce(self.config.dispatch_mode)
        configure_logging(self.config.log_level, self.config.log_format)

        httpd = _PooledHTTPServer(
            (self.config.host, self.config.port),
            workers=self.config.workers,
            backlog=self.config.backlog,
            access_log=self.config.access_log,
        )

        self._router = Router(
            self._builder.freeze(),
            not_found_handler=self._not_found_handler,
            mode=mode,
            serializer=self.serializer,
        )
        httpd.router = self._router
        self._httpd = httpd

        host, port = self.address
        logger.info(
            f"Serving {len(self._router.routes)} routes on {host}:{port} "
            f"with {self.config.workers} workers"
        )

        if block:
            try:
                self._httpd.serve_forever()
            finally:
                self._httpd.server_close()
            return

        self._thread = threading.Thread(
            target=self._httpd.serve_forever,
            name="router-acceptor",
            daemon=True,
        )
        self._thread.start()

    def stop(self) -> None:
        """Stop serving and release the socket."""
        if self._httpd is None:
            return

        self._httpd.shutdown()
        self._httpd.server_close()
        if self._thread is not None:
            self._thread.join(timeout=5.0)
        self._httpd = None
        self._thread = None
        logger.info("Server stopped")

    def _check_not_started(self) -> None:
        if self._router is not None:
            raise RuntimeError("Server already started; registration is closed")


__all__ = [
    "RouterServer",
]
