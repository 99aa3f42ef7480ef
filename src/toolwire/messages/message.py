"""Chat messages and tool-call records.

A message is a role plus content, where content is either a plain string
or an ordered list of content blocks. Assistant messages may carry tool
calls; tool messages answer one of them by id.

Example:
    >>> msg = HumanMessage([
    ...     TextBlock(text="What is the weather in this city?"),
    ...     image_block("https://example.com/paris.jpg"),
    ... ])
    >>> msg.role
    'user'
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any, Literal, Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .content import ContentBlock, ContentBlockAdapter, TextBlock

Role = Literal["system", "user", "assistant", "tool"]

_ROLE_ALIASES: dict[str, Role] = {
    "system": "system",
    "user": "user",
    "human": "user",
    "assistant": "assistant",
    "ai": "assistant",
    "tool": "tool",
}


class ToolCall(BaseModel):
    """A model's request to invoke a tool.

    Attributes:
        name: Name of the requested tool
        args: Arguments; schema-validated once they pass a tool binding
        id: Provider call identifier, used to answer with a ToolMessage
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1)
    args: dict[str, Any] = Field(default_factory=dict)
    id: str | None = None


class Message(BaseModel):
    """A chat message: role plus string or block-list content."""

    model_config = ConfigDict(frozen=True)

    role: Role
    content: str | list[ContentBlock] = ""
    name: str | None = None
    tool_calls: list[ToolCall] = Field(default_factory=list)
    tool_call_id: str | None = None

    @model_validator(mode="before")
    @classmethod
    def _normalize_role(cls, values: Any) -> Any:
        if isinstance(values, dict) and isinstance(role := values.get("role"), str):
            values = {**values, "role": _ROLE_ALIASES.get(role.lower(), role)}
        return values

    @model_validator(mode="after")
    def _check_role_fields(self) -> Message:
        if self.tool_calls and self.role != "assistant":
            raise ValueError("only assistant messages can carry tool_calls")
        if self.role == "tool" and not self.tool_call_id:
            raise ValueError("tool messages require a tool_call_id")
        return self

    @property
    def blocks(self) -> list[ContentBlock]:
        """Content as a block list; string content becomes one TextBlock."""
        if isinstance(self.content, str):
            return [TextBlock(text=self.content)] if self.content else []
        return list(self.content)

    @property
    def text(self) -> str:
        """Concatenated text of all text blocks."""
        if isinstance(self.content, str):
            return self.content
        return "".join(b.text for b in self.content if isinstance(b, TextBlock))

    def pretty(self) -> str:
        """One-line human-readable rendering."""
        parts = [f"{self.role}: {self.text}"]
        media = [b.type for b in self.blocks if not isinstance(b, TextBlock)]
        if media:
            parts.append(f" [+{', '.join(media)}]")
        for call in self.tool_calls:
            parts.append(f"\n  -> {call.name}({call.args})")
        return "".join(parts)


def _content_arg(content: Any) -> str | list[ContentBlock]:
    if isinstance(content, str):
        return content
    return [b if isinstance(b, BaseModel) else ContentBlockAdapter.validate_python(b) for b in content]


class SystemMessage(Message):
    role: Literal["system"] = "system"

    def __init__(self, content: str | list[Any] = "", **kw: Any) -> None:
        super().__init__(content=_content_arg(content), **kw)


class HumanMessage(Message):
    role: Literal["user"] = "user"

    def __init__(self, content: str | list[Any] = "", **kw: Any) -> None:
        super().__init__(content=_content_arg(content), **kw)


class AIMessage(Message):
    """Assistant reply; `tool_calls` lists the tools the model chose to call."""

    role: Literal["assistant"] = "assistant"

    def __init__(self, content: str | list[Any] = "", **kw: Any) -> None:
        super().__init__(content=_content_arg(content), **kw)


class ToolMessage(Message):
    """Result of a tool call, sent back to the model."""

    role: Literal["tool"] = "tool"

    def __init__(self, content: str | list[Any] = "", *, tool_call_id: str, **kw: Any) -> None:
        super().__init__(content=_content_arg(content), tool_call_id=tool_call_id, **kw)


_ROLE_TYPES: dict[str, type[Message]] = {
    "system": SystemMessage,
    "user": HumanMessage,
    "assistant": AIMessage,
    "tool": ToolMessage,
}


# ─────────────────────────────────────────────────────────────────────────────
# Coercion
# ─────────────────────────────────────────────────────────────────────────────


@runtime_checkable
class SupportsMessages(Protocol):
    """Anything that renders to a message list (e.g. a formatted prompt)."""

    def to_messages(self) -> list[Message]: ...


def message_from_role(role: str, content: Any, **kw: Any) -> Message:
    """Build the Message subclass for `role` (aliases: human, ai)."""
    canonical = _ROLE_ALIASES.get(role.lower())
    if canonical is None:
        raise ValueError(f"Unknown message role '{role}'. Use one of: {', '.join(_ROLE_ALIASES)}")
    return _ROLE_TYPES[canonical](content, **kw)


def _coerce_one(item: Any) -> Message:
    match item:
        case Message():
            return item
        case str():
            return HumanMessage(item)
        case (str() as role, content) if isinstance(item, tuple):
            return message_from_role(role, content)
        case Mapping():
            data = dict(item)
            role = data.pop("role", None) or data.pop("type", None)
            if not isinstance(role, str):
                raise ValueError(f"Message dict needs a 'role': {item!r}")
            return message_from_role(role, data.pop("content", ""), **data)
        case _:
            raise TypeError(f"Cannot convert {type(item).__name__} to a message")


def coerce_messages(input: Any) -> list[Message]:
    """Normalise model input into a message list.

    Accepts a string (one user message), a Message, a (role, content) tuple,
    a dict with a role, anything with `to_messages()`, or a list of these.
    """
    if isinstance(input, SupportsMessages) and not isinstance(input, Message):
        return list(input.to_messages())
    if isinstance(input, (str, Message, Mapping, tuple)):
        return [_coerce_one(input)]
    if isinstance(input, Iterable):
        return [_coerce_one(i) for i in input]
    raise TypeError(f"Cannot convert {type(input).__name__} to messages")
