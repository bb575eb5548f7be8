"""Status Codes - HTTP status codes used by responses.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

from enum import Enum
from typing import Union


class StatusCode(Enum):
    """HTTP status codes with their reason phrases."""

    # 2xx
    OK = (200, "OK")
    CREATED = (201, "Created")
    NO_CONTENT = (204, "No Content")

    # 3xx
    MOVED_PERMANENTLY = (301, "Moved Permanently")
    FOUND = (302, "Found")
    NOT_MODIFIED = (304, "Not Modified")

    # 4xx
    BAD_REQUEST = (400, "Bad Request")
    UNAUTHORIZED = (401, "Unauthorized")
    FORBIDDEN = (403, "Forbidden")
    NOT_FOUND = (404, "Not Found")
    METHOD_NOT_ALLOWED = (405, "Method Not Allowed")
    REQUEST_TIMEOUT = (408, "Request Timeout")
    GONE = (410, "Gone")
    TOO_MANY_REQUESTS = (429, "Too Many Requests")

    # 5xx
    INTERNAL_SERVER_ERROR = (500, "Internal Server Error")
    NOT_IMPLEMENTED = (501, "Not Implemented")
    SERVICE_UNAVAILABLE = (503, "Service Unavailable")

    def __init__(self, code: int, message: str):
        self.code = code
        self.message = message

    @classmethod
    def from_code(cls, code: int) -> "StatusCode":
        """Look up a status by its numeric code."""
        for status in cls:
            if status.code == code:
                return status
        raise ValueError(f"Unknown status code: {code}")


def status_message(status: Union[StatusCode, int]) -> str:
    """Get the reason phrase for a status or numeric code."""
    if isinstance(status, StatusCode):
        return status.message
    try:
        return StatusCode.from_code(status).message
    except ValueError:
        return "Unknown"


__all__ = [
    "StatusCode",
    "status_message",
]
