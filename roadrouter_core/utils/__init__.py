"""Utils module - Utility functions."""

from roadrouter_core.utils.config import (
    RouterConfig,
    load_config,
)
from roadrouter_core.utils.helpers import (
    split_query,
    strip_query,
    parse_parameters,
)
from roadrouter_core.utils.logging import configure_logging

__all__ = [
    "RouterConfig",
    "load_config",
    "split_query",
    "strip_query",
    "parse_parameters",
    "configure_logging",
]
