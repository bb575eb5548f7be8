"""Response - Response sinks and the handler-facing response.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import logging
import mimetypes
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, List, Optional, Tuple, Union

from roadrouter_core.http.headers import Headers
from roadrouter_core.http.status import StatusCode, status_message
from roadrouter_core.serialization import JSONSerializer, Serializer

logger = logging.getLogger(__name__)


class ResponseCommittedError(RuntimeError):
    """Raised when a sink is written after the response was finalized."""
    pass


class ResponseSink(ABC):
    """Transport-side response writer.

    A sink accepts exactly one ``write``: it finalizes the response.
    ``abort`` tells the transport to drop the connection instead.
    """

    @abstractmethod
    def set_status(self, code: int) -> None:
        pass

    @abstractmethod
    def add_header(self, name: str, value: str) -> None:
        pass

    @abstractmethod
    def write(self, body: bytes) -> None:
        """Write the body and finalize the response.

        Raises:
            ResponseCommittedError: if the response was already written
        """
        pass

    @abstractmethod
    def abort(self) -> None:
        pass

    @property
    @abstractmethod
    def committed(self) -> bool:
        pass

    @property
    @abstractmethod
    def aborted(self) -> bool:
        pass


class BufferedResponseSink(ResponseSink):
    """In-memory sink, flushed by the transport after dispatch."""

    def __init__(self):
        self.status: int = StatusCode.OK.code
        self.headers: List[Tuple[str, str]] = []
        self.body: bytes = b""
        self._committed = False
        self._aborted = False
        self._lock = threading.Lock()

    def set_status(self, code: int) -> None:
        with self._lock:
            if self._committed:
                raise ResponseCommittedError("Status set after response was sent")
            self.status = code

    def add_header(self, name: str, value: str) -> None:
        with self._lock:
            if self._committed:
                raise ResponseCommittedError("Header added after response was sent")
            self.headers.append((name, value))

    def write(self, body: bytes) -> None:
        with self._lock:
            if self._committed:
                raise ResponseCommittedError("Response was already sent")
            self.body = body
            self._committed = True

    def abort(self) -> None:
        with self._lock:
            self._aborted = True

    @property
    def committed(self) -> bool:
        return self._committed

    @property
    def aborted(self) -> bool:
        return self._aborted

    def get_header(self, name: str) -> Optional[str]:
        """Get the first value of a header (case-insensitive)."""
        for key, value in self.headers:
            if key.lower() == name.lower():
                return value
        return None

    def to_bytes(self) -> bytes:
        """Convert to raw HTTP response."""
        lines = [f"HTTP/1.1 {self.status} {status_message(self.status)}"]

        headers = list(self.headers)
        if self.status != StatusCode.NO_CONTENT.code and self.get_header("Content-Length") is None:
            headers.append(("Content-Length", str(len(self.body))))

        for key, value in headers:
            lines.append(f"{key}: {value}")

        lines.append("")
        header_bytes = "\r\n".join(lines).encode("latin-1")

        return header_bytes + b"\r\n" + self.body


class Response:
    """Response passed to handlers.

    Collects status and headers, then sends everything through the sink
    in one ``send`` call. Only the first send reaches the client; later
    sends for the same request are logged and dropped.
    """

    def __init__(self, sink: ResponseSink, serializer: Optional[Serializer] = None):
        self._sink = sink
        self._serializer = serializer or JSONSerializer()
        self._status = StatusCode.OK
        self.headers = Headers()

    @property
    def status_code(self) -> StatusCode:
        return self._status

    @property
    def serializer(self) -> Serializer:
        return self._serializer

    @property
    def sent(self) -> bool:
        return self._sink.committed

    def set_status_code(self, status: Union[StatusCode, int]) -> "Response":
        """Set the status code. Defaults to 200 OK.

        Returns:
            The response, for chaining
        """
        if not isinstance(status, StatusCode):
            status = StatusCode.from_code(status)
        self._status = status
        return self

    def send_text(self, text: str) -> bool:
        """Send plain text."""
        return self.send("text/plain", text)

    def send_html(self, html: str) -> bool:
        """Send HTML."""
        return self.send("text/html", html)

    def send_json(self, value: Any) -> bool:
        """Send a value encoded by the serializer."""
        return self.send(self._serializer.content_type, self._serializer.encode(value))

    def send_success(self) -> bool:
        """Send 204 No Content."""
        self.set_status_code(StatusCode.NO_CONTENT)
        return self.send(None, b"")

    def send(self, content_type: Optional[str], body: Union[str, bytes]) -> bool:
        """Send the response.

        Args:
            content_type: Content-Type header, ignored for 204
            body: Text (encoded as UTF-8) or bytes

        Returns:
            True if this call wrote the response, False otherwise
        """
        if isinstance(body, str):
            body = body.encode("utf-8")

        try:
            self._sink.set_status(self._status.code)
            for name, value in self.headers.items():
                self._sink.add_header(name, value)

            if self._status is StatusCode.NO_CONTENT:
                self._sink.write(b"")
            else:
                if content_type:
                    self._sink.add_header("Content-Type", content_type)
                self._sink.write(body)
        except ResponseCommittedError as e:
            logger.warning(f"Dropping response with status {self._status.code}: {e}")
            return False

        return True

    def send_file(self, path: Union[str, Path], auto_download: bool = False) -> bool:
        """Send a file.

        Sends 404 if the file doesn't exist and 500 if it cannot be read.

        Args:
            path: File to send
            auto_download: Ask the browser to download instead of display
        """
        file_path = Path(path)
        if not file_path.is_file():
            return self.set_status_code(StatusCode.NOT_FOUND).send_text("File not found.")

        try:
            data = file_path.read_bytes()
        except OSError:
            logger.exception(f"Failed to read {file_path}")
            return self.set_status_code(StatusCode.INTERNAL_SERVER_ERROR).send_text(
                "An internal error occurred while processing this request."
            )

        mime, _ = mimetypes.guess_type(file_path.name)
        disposition = "attachment" if auto_download else "inline"
        self.headers.set("Accept-Ranges", "bytes")
        self.headers.set("Content-Disposition", f'{disposition}; filename="{file_path.name}"')
        return self.send(mime or "application/octet-stream", data)


__all__ = [
    "ResponseSink",
    "ResponseCommittedError",
    "BufferedResponseSink",
    "Response",
]
