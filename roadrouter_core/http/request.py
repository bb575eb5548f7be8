"""Request - Inbound request descriptor and the handler-facing request.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import io
import logging
import time
from dataclasses import dataclass, field
from typing import Any, BinaryIO, Dict, Optional, Union

from roadrouter_core.http.headers import HeaderSource, Headers
from roadrouter_core.routing.wildcards import WildcardBindings
from roadrouter_core.serialization import JSONSerializer, Serializer
from roadrouter_core.utils.helpers import join_lines, parse_parameters, split_query

logger = logging.getLogger(__name__)


@dataclass
class RequestDescriptor:
    """Request as delivered by the transport.

    The body is read at most once and cached, so every handler that
    serves the same request sees the same bytes.
    """

    method: str
    raw_path: str
    headers: Union[Headers, HeaderSource] = field(default_factory=Headers)
    body: Union[bytes, BinaryIO] = b""
    remote_addr: str = ""
    protocol: str = "HTTP/1.1"
    timestamp: float = field(default_factory=time.time)

    # Internal
    _body_bytes: Optional[bytes] = field(default=None, init=False, repr=False)

    def __post_init__(self):
        if not isinstance(self.headers, Headers):
            self.headers = Headers(self.headers)

    @property
    def path(self) -> str:
        """Path without the query string."""
        return split_query(self.raw_path)[0]

    @property
    def query_string(self) -> str:
        """Raw query string, empty if absent."""
        return split_query(self.raw_path)[1]

    def read_body(self) -> bytes:
        """Read the whole body (cached)."""
        if self._body_bytes is None:
            if isinstance(self.body, (bytes, bytearray)):
                self._body_bytes = bytes(self.body)
            else:
                self._body_bytes = self.body.read()
        return self._body_bytes

    @classmethod
    def from_raw(cls, data: bytes) -> "RequestDescriptor":
        """Parse a descriptor from raw HTTP data."""
        head, _, body = data.partition(b"\r\n\r\n")
        lines = head.split(b"\r\n")

        # Parse request line
        parts = lines[0].decode("latin-1").split(" ")
        method = parts[0]
        raw_path = parts[1] if len(parts) > 1 else "/"
        protocol = parts[2] if len(parts) > 2 else "HTTP/1.1"

        # Parse headers
        headers = Headers()
        for line in lines[1:]:
            if b":" in line:
                name, value = line.decode("latin-1").split(":", 1)
                headers.set(name.strip(), value.strip())

        return cls(
            method=method,
            raw_path=raw_path,
            headers=headers,
            body=io.BytesIO(body),
            protocol=protocol,
        )


class Request:
    """Request view passed to handlers.

    Wraps a RequestDescriptor together with the wildcard bindings of the
    route being served. Every accessor returns None (or an empty mapping)
    instead of raising when data is missing or malformed.
    """

    def __init__(
        self,
        descriptor: RequestDescriptor,
        wildcards: Optional[WildcardBindings] = None,
        serializer: Optional[Serializer] = None,
    ):
        self._descriptor = descriptor
        self._wildcards = wildcards if wildcards is not None else WildcardBindings()
        self._serializer = serializer or JSONSerializer()
        self._query_parameters: Optional[Dict[str, str]] = None
        self._headers: Optional[Headers] = None

    @property
    def descriptor(self) -> RequestDescriptor:
        return self._descriptor

    @property
    def method(self) -> str:
        return self._descriptor.method.upper()

    @property
    def path(self) -> str:
        return self._descriptor.path

    @property
    def raw_path(self) -> str:
        return self._descriptor.raw_path

    @property
    def query_string(self) -> str:
        return self._descriptor.query_string

    @property
    def remote_addr(self) -> str:
        return self._descriptor.remote_addr

    @property
    def headers(self) -> Headers:
        """Request headers. Changes made here are not sent anywhere."""
        if self._headers is None:
            self._headers = self._descriptor.headers.copy()
        return self._headers

    @property
    def serializer(self) -> Serializer:
        return self._serializer

    @property
    def wildcards(self) -> WildcardBindings:
        return self._wildcards

    @property
    def query_parameters(self) -> Dict[str, str]:
        """Parsed query parameters, empty if absent or malformed."""
        if self._query_parameters is None:
            params: Optional[Dict[str, str]] = None
            if self.query_string:
                params = parse_parameters(self.query_string)
                if params is None:
                    logger.debug(f"Ignoring malformed query string: {self.query_string!r}")
            self._query_parameters = params or {}
        return self._query_parameters

    def get_wildcard(self, name: str) -> Optional[str]:
        """Get a wildcard from the url, None if it doesn't exist."""
        return self._wildcards.get(name)

    def get_wildcard_as_integer(self, name: str) -> Optional[int]:
        """Get a wildcard as a 32-bit integer, None if it fails to parse."""
        return self._wildcards.get_as_integer(name)

    def get_wildcard_as_long(self, name: str) -> Optional[int]:
        """Get a wildcard as a 64-bit integer, None if it fails to parse."""
        return self._wildcards.get_as_long(name)

    @property
    def body(self) -> bytes:
        return self._descriptor.read_body()

    def get_body_as_text(self) -> str:
        """Body decoded as UTF-8, lines joined with ``\\n``."""
        return join_lines(self.body.decode("utf-8", errors="replace"))

    def get_body_as_form(self) -> Optional[Dict[str, str]]:
        """Parse an ``application/x-www-form-urlencoded`` body.

        Returns:
            Dict of form fields, None if the body is malformed
        """
        return parse_parameters(self.get_body_as_text())

    def get_body_as_json(self) -> Optional[Dict[str, Any]]:
        """Parse the body as a JSON object, None if it fails to parse."""
        return self._serializer.decode(self.body, dict)

    def __repr__(self) -> str:
        return f"Request({self.method} {self.raw_path})"


__all__ = [
    "RequestDescriptor",
    "Request",
]
