"""Tool definitions: class-based BaseTool, @tool functions and schema-only tools."""

from .base import BaseTool, EmptyParams, ToolMetadata
from .decorator import FunctionTool, SchemaTool, to_tool, tool

__all__ = [
    "BaseTool",
    "EmptyParams",
    "ToolMetadata",
    "FunctionTool",
    "SchemaTool",
    "tool",
    "to_tool",
]
