"""
Utility modules for the chatsync framework.

This package contains utility modules that provide common functionality
across the framework.
"""

from chatsync.utils.config import (
    get_component_config,
    get_section,
    load_config,
    require_keys,
    resolve_config_path,
)
from chatsync.utils.datetime_utils import (
    ensure_tz_aware,
    from_timestamp,
    from_isoformat,
    parse_wire_datetime,
)
from chatsync.utils.load_env import load_env

__all__ = [
    "get_component_config",
    "get_section",
    "load_config",
    "require_keys",
    "resolve_config_path",
    "ensure_tz_aware",
    "from_timestamp",
    "from_isoformat",
    "parse_wire_datetime",
    "load_env",
]
