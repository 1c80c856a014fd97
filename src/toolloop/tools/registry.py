"""
Registry for pre-registered tools resolvable by name.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Iterable, List, Optional

from .base import ParamMetadata, Tool
from .decorators import tool

logger = logging.getLogger(__name__)


class ToolRegistry:
    """
    Name-indexed collection of tools.

    Registries are read-only once an execution starts; concurrent executions
    may share one without locking.
    """

    def __init__(self, tools: Optional[Iterable[Tool]] = None) -> None:
        self._tools: Dict[str, Tool] = {}
        for tool_instance in tools or []:
            self.register(tool_instance)

    def register(self, tool_instance: Tool) -> None:
        """Register a Tool instance, replacing any tool with the same name."""
        if tool_instance.name in self._tools:
            logger.warning("Replacing already registered tool '%s'", tool_instance.name)
        self._tools[tool_instance.name] = tool_instance

    def get(self, name: str) -> Optional[Tool]:
        """Get a tool by name."""
        return self._tools.get(name)

    def names(self) -> List[str]:
        return list(self._tools.keys())

    def list_tools(self) -> List[Tool]:
        """Return all registered tools as a list."""
        return list(self._tools.values())

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)

    def tool(
        self,
        *,
        name: Optional[str] = None,
        description: Optional[str] = None,
        param_metadata: Optional[Dict[str, ParamMetadata]] = None,
        injected_kwargs: Optional[Dict[str, Any]] = None,
    ) -> Callable[[Callable[..., Any]], Tool]:
        """Decorator to register a function as a tool in this registry."""

        def decorator(func: Callable[..., Any]) -> Tool:
            tool_instance = tool(
                name=name,
                description=description,
                param_metadata=param_metadata,
                injected_kwargs=injected_kwargs,
            )(func)
            self.register(tool_instance)
            return tool_instance

        return decorator
