"""Wildcards - Path parameter bindings for a matched route.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

from typing import Dict, Iterator, Mapping, Optional

from roadrouter_core.routing.segments import SegmentKind, classify_segment, split_segments
from roadrouter_core.utils.helpers import strip_query

INT_MIN, INT_MAX = -(2 ** 31), 2 ** 31 - 1
LONG_MIN, LONG_MAX = -(2 ** 63), 2 ** 63 - 1


def _parse_integer(value: Optional[str], low: int, high: int) -> Optional[int]:
    """Parse a plain signed decimal within [low, high]."""
    if not value:
        return None

    digits = value[1:] if value[0] in "+-" else value
    if not digits or not all("0" <= ch <= "9" for ch in digits):
        return None

    number = int(value)
    if number < low or number > high:
        return None
    return number


def _normalize_name(name: str) -> str:
    return name.replace("{", "").replace("}", "").lower()


class WildcardBindings(Mapping[str, str]):
    """Read-only wildcard values for one request.

    Names are stored lower-cased and without braces; values keep the
    casing of the request path. Every accessor returns None instead of
    raising when a wildcard is missing or cannot be converted.
    """

    def __init__(self, values: Optional[Dict[str, str]] = None):
        self._values: Dict[str, str] = {}
        for name, value in (values or {}).items():
            self._values[_normalize_name(name)] = value

    def get(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """Get a wildcard value as a string."""
        return self._values.get(_normalize_name(name), default)

    def get_as_integer(self, name: str) -> Optional[int]:
        """Get a wildcard as a 32-bit integer, None if it fails to parse."""
        return _parse_integer(self.get(name), INT_MIN, INT_MAX)

    def get_as_long(self, name: str) -> Optional[int]:
        """Get a wildcard as a 64-bit integer, None if it fails to parse."""
        return _parse_integer(self.get(name), LONG_MIN, LONG_MAX)

    def to_dict(self) -> Dict[str, str]:
        return dict(self._values)

    def __getitem__(self, name: str) -> str:
        return self._values[_normalize_name(name)]

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and _normalize_name(name) in self._values

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"WildcardBindings({self._values!r})"


def extract_wildcards(path_pattern: str, request_path: str) -> WildcardBindings:
    """Bind every ``{name}`` template segment to its request segment.

    The request path is split the same way the matcher splits it, but
    without case folding, so bound values keep their original casing.
    """
    values: Dict[str, str] = {}
    pattern_segments = split_segments(path_pattern)
    path_segments = split_segments(strip_query(request_path))

    for pattern_seg, path_seg in zip(pattern_segments, path_segments):
        if classify_segment(pattern_seg) is SegmentKind.WILDCARD:
            values[pattern_seg[1:-1]] = path_seg

    return WildcardBindings(values)


__all__ = [
    "WildcardBindings",
    "extract_wildcards",
]
