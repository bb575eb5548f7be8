"""Route Matcher - Segment-wise route template matching.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.

Templates are split into ``/`` separated segments. A segment is either a
literal (``users``) or a wildcard (``{id}``) that binds any single non-empty
request segment:

    Template:  users/{id}/orders
                 │     │     │
    Request:  /Users/42/orders?page=2
                 │     │     │
    Check:    literal any   literal      ──▶ match, id = "42"

Matching is case-insensitive and never raises; a malformed template segment
such as ``{id`` or ``id}`` simply makes the route unreachable.
"""

from __future__ import annotations

from typing import Optional, Sequence

from roadrouter_core.routing.route import RouteTemplate
from roadrouter_core.routing.segments import SegmentKind, classify_segment, split_segments
from roadrouter_core.routing.wildcards import WildcardBindings, extract_wildcards
from roadrouter_core.utils.helpers import strip_query


def segments_match(pattern_segments: Sequence[str], path_segments: Sequence[str]) -> bool:
    """Check already split (and case-folded) segments against each other."""
    if len(pattern_segments) != len(path_segments):
        return False

    for pattern_seg, path_seg in zip(pattern_segments, path_segments):
        kind = classify_segment(pattern_seg)
        if kind is SegmentKind.LITERAL:
            if pattern_seg != path_seg:
                return False
        elif kind is SegmentKind.WILDCARD:
            if not path_seg:
                return False
        else:
            return False

    return True


def matches(request_method: str, request_path: str, route: RouteTemplate) -> bool:
    """Check if a request method and path match a route template.

    Args:
        request_method: Method from the request line
        request_path: Request path, query string allowed
        route: Route template to test

    Returns:
        True if every segment of the template accepts the request
    """
    if request_method.upper() != route.method.value:
        return False

    path_segments = split_segments(strip_query(request_path).lower())
    pattern_segments = split_segments(route.path_pattern.lower())

    return segments_match(pattern_segments, path_segments)


class RouteMatcher:
    """Combined matcher and wildcard extractor.

    Usage:
        matcher = RouteMatcher()
        bindings = matcher.match("GET", "/users/7", route)
        if bindings is not None:
            user_id = bindings.get_as_integer("id")
    """

    def matches(self, request_method: str, request_path: str, route: RouteTemplate) -> bool:
        """Check if request matches route."""
        return matches(request_method, request_path, route)

    def match(
        self,
        request_method: str,
        request_path: str,
        route: RouteTemplate,
    ) -> Optional[WildcardBindings]:
        """Match and extract wildcards.

        Returns:
            Bindings for the route if it matches, None otherwise
        """
        if not matches(request_method, request_path, route):
            return None
        return extract_wildcards(route.path_pattern, request_path)


__all__ = [
    "segments_match",
    "matches",
    "RouteMatcher",
]
