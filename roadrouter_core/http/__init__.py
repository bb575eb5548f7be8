"""HTTP module - Requests, responses and the transport boundary."""

from roadrouter_core.http.headers import Headers
from roadrouter_core.http.status import StatusCode
from roadrouter_core.http.request import Request, RequestDescriptor
from roadrouter_core.http.response import (
    Response,
    ResponseSink,
    BufferedResponseSink,
    ResponseCommittedError,
)

__all__ = [
    "Headers",
    "StatusCode",
    "Request",
    "RequestDescriptor",
    "Response",
    "ResponseSink",
    "BufferedResponseSink",
    "ResponseCommittedError",
]
