"""Output parsers: runnables that post-process a model reply.

    >>> chain = prompt | model.bind_tools([GetWeather]) | PydanticToolsParser([GetWeather])
    >>> chain.invoke({"city": "Paris"})
    [GetWeather(location='Paris')]
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from pydantic import BaseModel

from toolwire.foundation.registry import ToolRegistry
from toolwire.messages import AIMessage, Message
from toolwire.runnables import Runnable


def _tool_calls(reply: Message) -> list[Any]:
    if not isinstance(reply, Message):
        raise TypeError(f"Expected a message, got {type(reply).__name__}")
    return list(reply.tool_calls)


class StrOutputParser(Runnable[AIMessage | str, str]):
    """Text of the reply (strings pass through)."""

    def invoke(self, input: AIMessage | str) -> str:
        return input if isinstance(input, str) else input.text


class ToolCallsParser(Runnable[AIMessage, Any]):
    """Tool calls as plain dicts `{name, args, id}`.

    With `first_only=True` returns the first call's dict, or None when the
    reply has no tool calls.
    """

    __slots__ = ("first_only",)

    def __init__(self, *, first_only: bool = False) -> None:
        self.first_only = first_only

    def invoke(self, input: AIMessage) -> list[dict[str, Any]] | dict[str, Any] | None:
        calls = [c.model_dump() for c in _tool_calls(input)]
        if self.first_only:
            return calls[0] if calls else None
        return calls


class PydanticToolsParser(Runnable[AIMessage, Any]):
    """Tool calls validated into their tools' params models.

    Raises:
        UnknownToolError: a call names a tool outside `tools`
        InvalidToolArguments: a call's args fail its schema
    """

    __slots__ = ("_tools", "first_only")

    def __init__(self, tools: Iterable[Any] | ToolRegistry, *, first_only: bool = False) -> None:
        self._tools = tools if isinstance(tools, ToolRegistry) else ToolRegistry(tools)
        self.first_only = first_only

    def invoke(self, input: AIMessage) -> list[BaseModel] | BaseModel | None:
        parsed = [self._tools.resolve(c.name).validate(c.args) for c in _tool_calls(input)]
        if self.first_only:
            return parsed[0] if parsed else None
        return parsed
