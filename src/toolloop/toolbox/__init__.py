"""
Pre-registered tools resolvable by name.

Usage:
    from toolloop.toolbox import default_registry

    registry = default_registry()
    registry.get("http_get")
"""

from typing import List

from ..tools import Tool, ToolRegistry
from . import datetime_tools, web_tools

__all__ = ["datetime_tools", "web_tools", "get_all_tools", "default_registry"]


def get_all_tools() -> List[Tool]:
    """Return every pre-registered tool."""
    return [web_tools.http_get, datetime_tools.get_current_time]


def default_registry() -> ToolRegistry:
    """Build a registry holding every pre-registered tool."""
    return ToolRegistry(get_all_tools())
