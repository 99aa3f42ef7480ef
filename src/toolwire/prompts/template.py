"""Prompt templates: format variables into text or chat messages.

Templates use `str.format` fields. Chat templates format text inside
content blocks too, and media URLs, so an image can be supplied per call:

    >>> prompt = ChatPromptTemplate.from_messages([
    ...     ("system", "You are a helpful weather assistant."),
    ...     ("human", [
    ...         {"type": "text", "text": "What is the weather in {city}?"},
    ...         {"type": "image", "url": "{image_url}"},
    ...     ]),
    ... ])
    >>> value = prompt.invoke({"city": "Paris", "image_url": "https://example.com/paris.jpg"})
    >>> value.to_messages()[1].blocks[1].url
    'https://example.com/paris.jpg'
"""

from __future__ import annotations

import re
import string
from abc import abstractmethod
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Union

from pydantic import BaseModel

from toolwire.foundation.errors import PromptError
from toolwire.messages import (
    ContentBlock,
    ContentBlockAdapter,
    MediaBlock,
    Message,
    TextBlock,
    coerce_messages,
    message_from_role,
)
from toolwire.runnables import Runnable

_FORMATTER = string.Formatter()
_TEMPLATE_ROLES = frozenset({"system", "user", "human", "assistant", "ai"})


def _variables(template: str) -> list[str]:
    """Field names referenced by a template, in order of first use."""
    names: list[str] = []
    for _, field, _, _ in _FORMATTER.parse(template):
        if field is None:
            continue
        root = re.split(r"[.\[]", field, maxsplit=1)[0]
        if not root or root.isdigit():
            raise PromptError(f"Positional field '{{{field}}}' in template; use named fields")
        if root not in names:
            names.append(root)
    return names


def _format(template: str, values: Mapping[str, Any]) -> str:
    if missing := [v for v in _variables(template) if v not in values]:
        raise PromptError(f"Missing variables {missing} for template {template!r}")
    return template.format(**values)


# ─────────────────────────────────────────────────────────────────────────────
# Prompt Values
# ─────────────────────────────────────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class PromptValue:
    """Output of a template: renders as a message list or a string.

    Chat models accept a PromptValue directly as input.
    """
    messages: tuple[Message, ...]
    text: str | None = None

    @classmethod
    def from_text(cls, text: str) -> PromptValue:
        return cls((message_from_role("user", text),), text)

    def to_messages(self) -> list[Message]:
        return list(self.messages)

    def to_string(self) -> str:
        if self.text is not None:
            return self.text
        return "\n".join(f"{m.role}: {m.text}" for m in self.messages)

    def __str__(self) -> str:
        return self.to_string()


# ─────────────────────────────────────────────────────────────────────────────
# Base
# ─────────────────────────────────────────────────────────────────────────────


class BasePromptTemplate(Runnable[Any, PromptValue]):
    """Shared input handling: partial values and single-variable shorthand."""

    input_variables: list[str]
    partial_variables: dict[str, Any]

    @abstractmethod
    def format_prompt(self, **kwargs: Any) -> PromptValue:
        """Render the template into a prompt value."""

    def _merge(self, kwargs: Mapping[str, Any]) -> dict[str, Any]:
        return {**self.partial_variables, **kwargs}

    def invoke(self, input: Any) -> PromptValue:
        """Format from a mapping, or a bare value when there is one variable."""
        if not isinstance(input, Mapping):
            required = [v for v in self.input_variables if v not in self.partial_variables]
            if len(required) != 1:
                raise PromptError(f"Expected a mapping with keys {required}, got {type(input).__name__}")
            input = {required[0]: input}
        return self.format_prompt(**input)


class PromptTemplate(BasePromptTemplate):
    """A single `str.format` template producing text.

    Example:
        >>> PromptTemplate("Tell me about {topic}").format(topic="rainbows")
        'Tell me about rainbows'
    """

    __slots__ = ("template", "input_variables", "partial_variables")

    def __init__(self, template: str, *, partial_variables: Mapping[str, Any] | None = None) -> None:
        self.template = template
        self.partial_variables = dict(partial_variables or {})
        self.input_variables = _variables(template)

    @classmethod
    def from_template(cls, template: str) -> PromptTemplate:
        return cls(template)

    def format(self, **kwargs: Any) -> str:
        """Format the template.

        Raises:
            PromptError: a referenced variable was not supplied
        """
        return _format(self.template, self._merge(kwargs))

    def format_prompt(self, **kwargs: Any) -> PromptValue:
        return PromptValue.from_text(self.format(**kwargs))

    def partial(self, **kwargs: Any) -> PromptTemplate:
        """Pre-fill some variables; returns a new template."""
        return PromptTemplate(self.template, partial_variables=self._merge(kwargs))

    def __repr__(self) -> str:
        return f"PromptTemplate({self.template!r})"


# ─────────────────────────────────────────────────────────────────────────────
# Chat Templates
# ─────────────────────────────────────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class MessagesPlaceholder:
    """Splices a list of messages taken from input variable `name`."""
    name: str
    optional: bool = False


@dataclass(frozen=True, slots=True)
class _MessageTemplate:
    role: str
    content: str | tuple[ContentBlock, ...]

    def variables(self) -> list[str]:
        if isinstance(self.content, str):
            return _variables(self.content)
        names: list[str] = []
        for block in self.content:
            for v in _variables(_block_template(block)):
                if v not in names:
                    names.append(v)
        return names

    def format(self, values: Mapping[str, Any]) -> Message:
        if isinstance(self.content, str):
            return message_from_role(self.role, _format(self.content, values))
        return message_from_role(self.role, [_format_block(b, values) for b in self.content])


def _check_role(role: str) -> None:
    if role.lower() not in _TEMPLATE_ROLES:
        raise ValueError(f"Unsupported template role '{role}'. Use one of: {', '.join(sorted(_TEMPLATE_ROLES))}")


def _block_template(block: ContentBlock) -> str:
    if isinstance(block, TextBlock):
        return block.text
    if isinstance(block, MediaBlock) and block.url is not None:
        return block.url
    return ""


def _format_block(block: ContentBlock, values: Mapping[str, Any]) -> ContentBlock:
    if isinstance(block, TextBlock):
        return TextBlock(text=_format(block.text, values))
    if isinstance(block, MediaBlock) and block.url is not None:
        url = _format(block.url, values)
        # re-validate: the formatted URL may be a data: URL
        return type(block).model_validate({**block.model_dump(exclude_none=True, exclude={"url"}), "url": url})
    return block


def _block_arg(block: Any) -> ContentBlock:
    if isinstance(block, str):
        return TextBlock(text=block)
    if isinstance(block, BaseModel):
        return block  # type: ignore[return-value]
    return ContentBlockAdapter.validate_python(block)


MessageLike = Union[Message, MessagesPlaceholder, tuple[str, Any], str]


class ChatPromptTemplate(BasePromptTemplate):
    """Template producing a message list.

    Entries are `(role, template)` tuples (template is a string or a list of
    content blocks / block dicts), bare strings (user turns), Messages
    (kept verbatim) or MessagesPlaceholder.
    """

    __slots__ = ("entries", "input_variables", "partial_variables")

    def __init__(
        self,
        entries: Sequence[Message | MessagesPlaceholder | _MessageTemplate],
        *,
        partial_variables: Mapping[str, Any] | None = None,
    ) -> None:
        self.entries = list(entries)
        self.partial_variables = dict(partial_variables or {})
        names: list[str] = []
        for e in self.entries:
            found = (
                e.variables() if isinstance(e, _MessageTemplate)
                else [e.name] if isinstance(e, MessagesPlaceholder) and not e.optional
                else []
            )
            names.extend(n for n in found if n not in names)
        self.input_variables = names

    @classmethod
    def from_messages(cls, messages: Iterable[MessageLike]) -> ChatPromptTemplate:
        entries: list[Message | MessagesPlaceholder | _MessageTemplate] = []
        for m in messages:
            match m:
                case Message() | MessagesPlaceholder():
                    entries.append(m)
                case str():
                    entries.append(_MessageTemplate("user", m))
                case (str() as role, str() as text) if isinstance(m, tuple):
                    _check_role(role)
                    entries.append(_MessageTemplate(role, text))
                case (str() as role, list() as blocks) if isinstance(m, tuple):
                    _check_role(role)
                    entries.append(_MessageTemplate(role, tuple(_block_arg(b) for b in blocks)))
                case _:
                    raise TypeError(f"Unsupported prompt entry: {m!r}")
        return cls(entries)

    def format_messages(self, **kwargs: Any) -> list[Message]:
        """Format every entry into messages.

        Raises:
            PromptError: a template variable or required placeholder is missing
        """
        values = self._merge(kwargs)
        out: list[Message] = []
        for e in self.entries:
            if isinstance(e, Message):
                out.append(e)
            elif isinstance(e, MessagesPlaceholder):
                if e.name not in values:
                    if e.optional:
                        continue
                    raise PromptError(f"Missing messages for placeholder '{e.name}'")
                out.extend(coerce_messages(values[e.name]))
            else:
                out.append(e.format(values))
        return out

    def format_prompt(self, **kwargs: Any) -> PromptValue:
        return PromptValue(tuple(self.format_messages(**kwargs)))

    def partial(self, **kwargs: Any) -> ChatPromptTemplate:
        return ChatPromptTemplate(self.entries, partial_variables=self._merge(kwargs))

    def __repr__(self) -> str:
        return f"ChatPromptTemplate(input_variables={self.input_variables})"
