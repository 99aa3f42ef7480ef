"""Chat model interface and tool binding.

A ChatModel turns a message list into an assistant reply. Binding tools
gives the model a set of tool schemas to choose from; the bound model
validates every tool call in the reply against the schema of the tool it
names, so callers only ever see arguments that satisfy the schema.

Example:
    >>> model = SomeChatModel()
    >>> bound = model.bind_tools([get_weather])
    >>> reply = bound.invoke(HumanMessage([
    ...     TextBlock(text="What's the weather like here?"),
    ...     image_block("https://example.com/paris.jpg"),
    ... ]))
    >>> reply.tool_calls
    [ToolCall(name='get_weather', args={'city': 'Paris', 'unit': 'celsius'}, id='call_1')]
"""

from __future__ import annotations

import asyncio
from abc import abstractmethod
from collections.abc import Iterable
from typing import TYPE_CHECKING, Any

from toolwire.foundation.config import get_settings
from toolwire.foundation.errors import UnknownToolError
from toolwire.foundation.registry import ToolRegistry
from toolwire.messages import AIMessage, Message, ToolCall, coerce_messages
from toolwire.observability import get_logger
from toolwire.runnables import Runnable, RunnableSequence

if TYPE_CHECKING:
    from pydantic import BaseModel

log = get_logger("toolwire.models")

ToolChoice = str | None

_FREE_CHOICES = frozenset({"auto", "none"})
_FORCED_CHOICES = frozenset({"any", "required"})


class ChatModel(Runnable[Any, AIMessage]):
    """Abstract chat model client.

    Subclasses implement `_generate`; provider clients also override
    `_agenerate` for native async requests. Input is anything
    `coerce_messages` accepts: a string, a message, a prompt value, or a
    list of those.
    """

    def __init__(self, *, model_name: str | None = None, temperature: float | None = None) -> None:
        defaults = get_settings().model
        self.model_name = model_name or defaults.default_model
        self.temperature = defaults.temperature if temperature is None else temperature

    def get_name(self) -> str:
        return f"{type(self).__name__}({self.model_name})"

    @abstractmethod
    def _generate(
        self,
        messages: list[Message],
        *,
        tools: ToolRegistry | None = None,
        tool_choice: ToolChoice = None,
    ) -> AIMessage:
        """Produce the assistant reply for `messages`."""
        ...

    async def _agenerate(
        self,
        messages: list[Message],
        *,
        tools: ToolRegistry | None = None,
        tool_choice: ToolChoice = None,
    ) -> AIMessage:
        return await asyncio.to_thread(self._generate, messages, tools=tools, tool_choice=tool_choice)

    def invoke(self, input: Any) -> AIMessage:
        return self._generate(coerce_messages(input))

    async def ainvoke(self, input: Any) -> AIMessage:
        return await self._agenerate(coerce_messages(input))

    # ─────────────────────────────────────────────────────────────────
    # Tool Binding
    # ─────────────────────────────────────────────────────────────────

    def bind_tools(self, tools: Iterable[Any] | ToolRegistry, *, tool_choice: ToolChoice = None) -> BoundChatModel:
        """Attach a tool set to this model.

        Args:
            tools: BaseTool instances, @tool functions, plain functions or
                Pydantic model classes; names must be unique
            tool_choice: None/"auto" (model decides), "none", "any"/"required"
                (must call some tool) or a bound tool's name

        Raises:
            DuplicateToolError: two tools share a name
            UnknownToolError: tool_choice names a tool that is not bound
        """
        registry = tools if isinstance(tools, ToolRegistry) else ToolRegistry(tools)
        return BoundChatModel(self, registry, tool_choice=tool_choice)

    def with_structured_output(self, schema: type[BaseModel]) -> RunnableSequence[Any, Any]:
        """Force a call to `schema` and return the validated model instance."""
        from .parsers import PydanticToolsParser
        bound = self.bind_tools([schema])
        (name,) = bound.tools.names()
        return BoundChatModel(self, bound.tools, tool_choice=name) | PydanticToolsParser(bound.tools, first_only=True)


class BoundChatModel(Runnable[Any, AIMessage]):
    """A chat model with a tool set attached.

    Every tool call in the reply must name a bound tool (UnknownToolError)
    and carry arguments valid for that tool's schema (InvalidToolArguments).
    The validated, schema-normalised arguments (defaults filled in, values
    coerced) replace the raw ones in the returned message.
    """

    __slots__ = ("_model", "_tools", "_tool_choice")

    def __init__(self, model: ChatModel, tools: ToolRegistry, *, tool_choice: ToolChoice = None) -> None:
        if tool_choice is not None and tool_choice not in _FREE_CHOICES | _FORCED_CHOICES and tool_choice not in tools:
            raise UnknownToolError(tool_choice, tools.names())
        self._model = model
        self._tools = tools
        self._tool_choice = tool_choice

    @property
    def model(self) -> ChatModel:
        return self._model

    @property
    def tools(self) -> ToolRegistry:
        return self._tools

    @property
    def tool_choice(self) -> ToolChoice:
        return self._tool_choice

    def get_name(self) -> str:
        return f"{self._model.get_name()}+tools"

    def bind_tools(self, *_: Any, **__: Any) -> BoundChatModel:
        raise TypeError("Model already has tools bound; call bind_tools() on the base model instead")

    def invoke(self, input: Any) -> AIMessage:
        reply = self._model._generate(coerce_messages(input), tools=self._tools, tool_choice=self._tool_choice)
        return self._validate_reply(reply)

    async def ainvoke(self, input: Any) -> AIMessage:
        reply = await self._model._agenerate(coerce_messages(input), tools=self._tools, tool_choice=self._tool_choice)
        return self._validate_reply(reply)

    def _validate_reply(self, reply: AIMessage) -> AIMessage:
        if not reply.tool_calls:
            if self._tool_choice is not None and self._tool_choice not in _FREE_CHOICES:
                log.warning("model returned no tool call despite tool_choice", tool_choice=self._tool_choice)
            return reply
        return reply.model_copy(update={"tool_calls": [self._validate_call(c) for c in reply.tool_calls]})

    def _validate_call(self, call: ToolCall) -> ToolCall:
        tool = self._tools.resolve(call.name)
        params = tool.validate(call.args)
        log.debug("tool call validated", tool=call.name, call_id=call.id)
        return ToolCall(name=call.name, args=params.model_dump(by_alias=True), id=call.id)

    def __repr__(self) -> str:
        return f"{self._model.get_name()}.bind_tools({self._tools.names()})"
