"""Segments - Path segmentation shared by matching and extraction.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

from enum import Enum, auto
from typing import List


class SegmentKind(Enum):
    """Kinds of template segments."""

    LITERAL = auto()     # users
    WILDCARD = auto()    # {id}
    MALFORMED = auto()   # {id, id}, {}


def split_segments(path: str) -> List[str]:
    """Split a path into segments.

    One leading ``/`` is stripped and trailing empty segments are dropped,
    so ``/users/7/`` and ``users/7`` have the same shape. An empty path
    yields a single empty segment (the root).
    """
    if path.startswith("/"):
        path = path[1:]

    segments = path.split("/")
    while len(segments) > 1 and segments[-1] == "":
        segments.pop()
    return segments


def classify_segment(segment: str) -> SegmentKind:
    """Classify a template segment."""
    if "{" not in segment and "}" not in segment:
        return SegmentKind.LITERAL
    if len(segment) > 2 and segment.startswith("{") and segment.endswith("}"):
        return SegmentKind.WILDCARD
    return SegmentKind.MALFORMED


__all__ = [
    "SegmentKind",
    "split_segments",
    "classify_segment",
]
