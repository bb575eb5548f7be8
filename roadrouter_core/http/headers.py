"""Headers - Case-insensitive, multi-valued HTTP headers.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Set, Tuple, Union

HeaderSource = Union[Mapping[str, str], Iterable[Tuple[str, str]]]


class Headers:
    """HTTP header collection.

    Names are matched case-insensitively and keep the casing they were
    first added with. A name may carry several values.
    """

    def __init__(self, headers: Optional[HeaderSource] = None):
        self._values: Dict[str, List[str]] = {}
        self._names: Dict[str, str] = {}

        if headers is None:
            return
        items = headers.items() if isinstance(headers, Mapping) else headers
        for name, value in items:
            self.set(name, value)

    def clear(self) -> None:
        """Remove every header."""
        self._values.clear()
        self._names.clear()

    def contains_key(self, name: str) -> bool:
        """Check if at least one value exists for ``name``."""
        return name.lower() in self._values

    def get_first(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """Get the first value for ``name``."""
        values = self._values.get(name.lower())
        if not values:
            return default
        return values[0]

    def get(self, name: str) -> Optional[List[str]]:
        """Get all values for ``name``, None if absent."""
        values = self._values.get(name.lower())
        return list(values) if values is not None else None

    def keys(self) -> Set[str]:
        """Get header names as first added."""
        return set(self._names.values())

    def set(self, name: str, value: str) -> None:
        """Add a value for ``name``, keeping existing values."""
        key = name.lower()
        self._names.setdefault(key, name)
        self._values.setdefault(key, []).append(str(value))

    def items(self) -> Iterator[Tuple[str, str]]:
        """Iterate ``(name, value)`` pairs, one per value."""
        for key, values in self._values.items():
            for value in values:
                yield self._names[key], value

    def size(self) -> int:
        """Number of distinct header names."""
        return len(self._values)

    def copy(self) -> "Headers":
        return Headers(list(self.items()))

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.contains_key(name)

    def __len__(self) -> int:
        return self.size()

    def __iter__(self) -> Iterator[str]:
        return iter(self._names.values())

    def __repr__(self) -> str:
        return f"Headers({list(self.items())!r})"


__all__ = [
    "Headers",
]
