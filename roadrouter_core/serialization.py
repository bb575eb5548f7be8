"""Serialization - Body encoding for requests and responses.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from typing import Any, Optional, Type, Union

logger = logging.getLogger(__name__)


class Serializer(ABC):
    """Abstract body serializer."""

    content_type: str = "application/octet-stream"

    @abstractmethod
    def encode(self, value: Any) -> bytes:
        """Encode a value to bytes."""
        pass

    @abstractmethod
    def decode(self, data: Union[bytes, str], target: Optional[Type] = None) -> Any:
        """Decode bytes to a value.

        Returns:
            Decoded value, or None if the data is malformed or is not
            an instance of ``target``
        """
        pass


class JSONSerializer(Serializer):
    """JSON serializer.

    Pretty-prints by default and writes non-ASCII characters as-is.
    """

    content_type = "application/json"

    def __init__(self, indent: Optional[int] = 2, sort_keys: bool = False):
        self.indent = indent
        self.sort_keys = sort_keys

    def encode(self, value: Any) -> bytes:
        """Encode value as UTF-8 JSON."""
        text = json.dumps(
            value,
            indent=self.indent,
            sort_keys=self.sort_keys,
            ensure_ascii=False,
            default=str,
        )
        return text.encode("utf-8")

    def decode(self, data: Union[bytes, str], target: Optional[Type] = None) -> Any:
        """Decode JSON, returning None on malformed input."""
        try:
            if isinstance(data, bytes):
                data = data.decode("utf-8")
            value = json.loads(data)
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            logger.warning(f"Malformed JSON received: {e}")
            return None

        if target is not None and not isinstance(value, target):
            logger.warning(
                f"JSON body is {type(value).__name__}, expected {target.__name__}"
            )
            return None

        return value


__all__ = [
    "Serializer",
    "JSONSerializer",
]
