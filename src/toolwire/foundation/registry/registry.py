"""Tool registry: an ordered, name-unique set of tools.

A registry is the binding set a chat model is given: tool names are
unique within it, and tool calls coming back from the model are resolved
against it by name.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from typing import Any

from toolwire.foundation.core import BaseTool, to_tool
from toolwire.foundation.errors import DuplicateToolError, UnknownToolError


class ToolRegistry:
    """Ordered mapping of tool name → tool.

    Example:
        >>> registry = ToolRegistry.of(get_weather, GetPopulation)
        >>> registry.names()
        ['get_weather', 'get_population']
        >>> registry["get_weather"].invoke({"city": "Paris"})
        '22 degrees celsius in Paris'
    """

    __slots__ = ("_tools",)

    def __init__(self, tools: Iterable[Any] = ()) -> None:
        self._tools: dict[str, BaseTool[Any]] = {}
        for t in tools:
            self.register(t)

    @classmethod
    def of(cls, *tools: Any) -> ToolRegistry:
        """Build a registry from tools, @tool functions or params models."""
        return cls(tools)

    def register(self, tool: Any) -> BaseTool[Any]:
        """Register a tool-like object; returns the registered tool.

        Raises:
            DuplicateToolError: a tool with the same name is already registered
        """
        t = to_tool(tool)
        name = t.metadata.name
        if name in self._tools:
            raise DuplicateToolError(name)
        self._tools[name] = t
        return t

    def unregister(self, name: str) -> bool:
        """Remove a tool by name. Returns True if found."""
        return self._tools.pop(name, None) is not None

    def get(self, name: str) -> BaseTool[Any] | None:
        """Get tool by name."""
        return self._tools.get(name)

    def resolve(self, name: str) -> BaseTool[Any]:
        """Get tool by name, raising UnknownToolError if not bound."""
        if (t := self._tools.get(name)) is None:
            raise UnknownToolError(name, self.names())
        return t

    def names(self) -> list[str]:
        return list(self._tools)

    def __getitem__(self, name: str) -> BaseTool[Any]:
        """Get tool by name, raises KeyError if not found."""
        return self._tools[name]

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)

    def __iter__(self) -> Iterator[BaseTool[Any]]:
        return iter(self._tools.values())

    def __repr__(self) -> str:
        return f"ToolRegistry({self.names()})"
