"""Configuration utilities.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional, Type, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T", bound="RouterConfig")


@dataclass
class RouterConfig:
    """Router server configuration."""

    # Server settings
    host: str = "0.0.0.0"
    port: int = 8080
    workers: int = 20
    backlog: int = 128

    # Dispatch
    dispatch_mode: str = "fan_out_all"
    strict_templates: bool = False

    # Serialization
    json_indent: int = 2

    # Logging
    log_level: str = "INFO"
    log_format: str = "text"
    access_log: bool = True

    def __post_init__(self):
        if self.workers <= 0:
            raise ValueError("workers must be positive")

    @classmethod
    def from_dict(cls: Type[T], data: Dict[str, Any]) -> T:
        """Create config from dictionary."""
        # Filter to only valid fields
        valid_fields = {f.name for f in fields(cls)}
        unknown = set(data) - valid_fields
        if unknown:
            logger.warning(f"Ignoring unknown config keys: {sorted(unknown)}")
        filtered = {k: v for k, v in data.items() if k in valid_fields}
        return cls(**filtered)

    @classmethod
    def from_json(cls: Type[T], path: str) -> T:
        """Load config from JSON file."""
        return cls.from_dict(read_json(path))

    @classmethod
    def from_yaml(cls: Type[T], path: str) -> T:
        """Load config from YAML file."""
        return cls.from_dict(read_yaml(path))

    @classmethod
    def from_env(cls: Type[T], prefix: str = "ROUTER_") -> T:
        """Load config from environment variables."""
        return cls.from_dict(read_env(prefix))

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {f.name: getattr(self, f.name) for f in fields(self)}

    def merge(self, overrides: Dict[str, Any]) -> "RouterConfig":
        """Return a copy with ``overrides`` applied."""
        data = self.to_dict()
        data.update(overrides)
        return type(self).from_dict(data)


def read_json(path: str) -> Dict[str, Any]:
    """Read a JSON config file."""
    with open(path, "r") as f:
        return json.load(f) or {}


def read_yaml(path: str) -> Dict[str, Any]:
    """Read a YAML config file."""
    try:
        import yaml
    except ImportError:
        raise ImportError("PyYAML required for YAML config")

    with open(path, "r") as f:
        return yaml.safe_load(f) or {}


def read_env(prefix: str = "ROUTER_") -> Dict[str, Any]:
    """Collect prefixed environment variables with type conversion."""
    data: Dict[str, Any] = {}

    for key, value in os.environ.items():
        if key.startswith(prefix):
            config_key = key[len(prefix):].lower()

            # Type conversion
            if value.lower() in ("true", "false"):
                data[config_key] = value.lower() == "true"
            elif value.isdigit():
                data[config_key] = int(value)
            else:
                try:
                    data[config_key] = float(value)
                except ValueError:
                    data[config_key] = value

    return data


def load_config(
    path: Optional[str] = None,
    env_prefix: str = "ROUTER_",
) -> RouterConfig:
    """Load configuration from multiple sources.

    Priority (highest to lowest):
    1. Environment variables
    2. Config file (if provided)
    3. Defaults
    """
    data: Dict[str, Any] = {}

    # Load from file if provided
    if path:
        if Path(path).exists():
            if path.endswith(".json"):
                data.update(read_json(path))
            elif path.endswith((".yaml", ".yml")):
                data.update(read_yaml(path))
            else:
                logger.warning(f"Unknown config format: {path}")
        else:
            logger.warning(f"Config file not found: {path}")

    # Override with environment variables
    data.update(read_env(env_prefix))

    return RouterConfig.from_dict(data)


__all__ = [
    "RouterConfig",
    "load_config",
]
