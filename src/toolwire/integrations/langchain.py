"""LangChain integration for toolwire.

Provides adapters to convert toolwire tools to LangChain StructuredTools
for use with LangChain agents and chat models.

Requires: pip install toolwire[langchain]
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING, Any

from toolwire.foundation.errors import InvalidToolArguments, ToolError, ToolException
from toolwire.observability import get_logger

if TYPE_CHECKING:
    from langchain_core.tools import StructuredTool

    from toolwire.foundation.core import BaseTool
    from toolwire.foundation.registry import ToolRegistry

log = get_logger("toolwire.integrations.langchain")


def _render(name: str, exc: Exception) -> str:
    log.warning("tool failed under langchain", tool=name, error=type(exc).__name__)
    match exc:
        case InvalidToolArguments():
            return exc.to_tool_error().render()
        case ToolException():
            return exc.error.render()
        case _:
            return ToolError.from_exception(name, exc, "Execution failed").render()


def to_langchain(tool: BaseTool[Any]) -> StructuredTool:
    """Convert a toolwire tool to a LangChain StructuredTool.

    Wraps tool execution with error handling that returns rendered
    ToolError strings to the agent instead of raising.

    Args:
        tool: The toolwire tool instance to convert

    Returns:
        A LangChain StructuredTool that wraps the tool

    Example:
        >>> from toolwire.integrations import to_langchain
        >>> lc_tool = to_langchain(get_weather)
        >>> llm.bind_tools([lc_tool])

    Raises:
        ImportError: If langchain-core is not installed
    """
    try:
        from langchain_core.tools import StructuredTool
    except ImportError as e:
        raise ImportError(
            "LangChain integration requires langchain-core. "
            "Install with: pip install toolwire[langchain]"
        ) from e

    name = tool.metadata.name

    def _invoke(**kwargs: object) -> Any:
        try:
            return tool.invoke(kwargs)
        except Exception as e:
            return _render(name, e)

    async def _ainvoke(**kwargs: object) -> Any:
        try:
            return await tool.ainvoke(kwargs)
        except Exception as e:
            return _render(name, e)

    return StructuredTool.from_function(
        func=_invoke,
        coroutine=_ainvoke,
        name=name,
        description=tool.metadata.description,
        args_schema=tool.params_schema,
    )


def to_langchain_tools(tools: ToolRegistry | Iterable[BaseTool[Any]]) -> list[StructuredTool]:
    """Convert all tools in a registry (or any iterable of tools) to LangChain format.

    Example:
        >>> from toolwire.integrations import to_langchain_tools
        >>> lc_tools = to_langchain_tools(ToolRegistry.of(get_weather, get_population))
    """
    return [to_langchain(t) for t in tools]
