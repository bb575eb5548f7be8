"""Helper utilities.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

from typing import Dict, Optional, Tuple
from urllib.parse import unquote_plus


def split_query(raw_path: str) -> Tuple[str, str]:
    """Split a request target into path and query string."""
    path, _, query_string = raw_path.partition("?")
    return path, query_string


def strip_query(raw_path: str) -> str:
    """Remove the query string from a request target."""
    return split_query(raw_path)[0]


def parse_parameters(data: str) -> Optional[Dict[str, str]]:
    """Parse ``key=value&key=value`` pairs.

    Keys and values are URL-decoded. Any pair that is not exactly
    ``key=value`` makes the whole input invalid.

    Returns:
        Dict of decoded pairs, or None if the input is malformed
    """
    params: Dict[str, str] = {}

    pairs = data.split("&")
    # Trailing separators don't start a new pair
    while len(pairs) > 1 and not pairs[-1]:
        pairs.pop()

    for pair in pairs:
        fields = pair.split("=")
        if len(fields) != 2 or not fields[1]:
            return None
        params[unquote_plus(fields[0])] = unquote_plus(fields[1])

    return params


def join_lines(text: str) -> str:
    """Normalize line endings to ``\\n`` and drop a trailing newline."""
    return "\n".join(text.splitlines())


__all__ = [
    "split_query",
    "strip_query",
    "parse_parameters",
    "join_lines",
]
