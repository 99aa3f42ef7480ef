"""Provider wire formats for tools and messages.

Converts bound tools and multimodal messages into the request shapes of
the major providers:
- OpenAI (Chat Completions function calling)
- Anthropic (Messages API tool_use)
- Google Gemini (function declarations)

Example:
    >>> from toolwire.models.formats import to_openai, to_anthropic, to_google
    >>>
    >>> openai_tools = to_openai([get_weather, GetPopulation])
    >>> anthropic_tools = to_anthropic(registry)
    >>> gemini_tools = to_google(registry)
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

import orjson

from toolwire.foundation.core import BaseTool
from toolwire.foundation.registry import ToolRegistry
from toolwire.messages import (
    AudioBlock,
    ContentBlock,
    FileBlock,
    ImageBlock,
    Message,
    TextBlock,
)

OpenAITool = dict[str, Any]
AnthropicTool = dict[str, Any]
GoogleTool = dict[str, Any]

ToolsLike = ToolRegistry | Iterable[Any]


def _tools(tools: ToolsLike) -> Iterable[BaseTool[Any]]:
    return tools if isinstance(tools, ToolRegistry) else ToolRegistry(tools)


def _parameters(tool: BaseTool[Any]) -> dict[str, Any]:
    """Object schema of a tool's params, without pydantic titles."""
    schema = tool.json_schema()
    params: dict[str, Any] = {
        "type": "object",
        "properties": {n: {k: v for k, v in p.items() if k != "title"} for n, p in schema.get("properties", {}).items()},
        "required": schema.get("required", []),
    }
    if defs := schema.get("$defs"):
        params["$defs"] = defs
    return params


# ─────────────────────────────────────────────────────────────────────────────
# OpenAI Format
# ─────────────────────────────────────────────────────────────────────────────


def tool_to_openai(tool: BaseTool[Any], *, strict: bool = False) -> OpenAITool:
    """Convert a tool to OpenAI function calling format.

    ```json
    {"type": "function", "function": {"name": ..., "description": ..., "parameters": {...}}}
    ```

    Args:
        tool: Tool to convert
        strict: Enable strict mode (closed object schema)
    """
    function_def: dict[str, Any] = {
        "name": tool.metadata.name,
        "description": tool.metadata.description,
        "parameters": _parameters(tool),
    }
    if strict:
        function_def["strict"] = True
        function_def["parameters"]["additionalProperties"] = False
    return {"type": "function", "function": function_def}


def to_openai(tools: ToolsLike, *, strict: bool = False) -> list[OpenAITool]:
    """Convert a registry or iterable of tool-likes to OpenAI format."""
    return [tool_to_openai(t, strict=strict) for t in _tools(tools)]


_OPENAI_AUDIO_FORMATS = {
    "audio/wav": "wav",
    "audio/x-wav": "wav",
    "audio/wave": "wav",
    "audio/vnd.wave": "wav",
    "audio/mpeg": "mp3",
    "audio/mp3": "mp3",
}


def _openai_audio_format(media_type: str | None) -> str:
    try:
        return _OPENAI_AUDIO_FORMATS[media_type]
    except KeyError:
        raise ValueError(f"OpenAI accepts wav or mp3 audio, not {media_type}") from None


def _block_to_openai(block: ContentBlock) -> dict[str, Any]:
    match block:
        case TextBlock():
            return {"type": "text", "text": block.text}
        case ImageBlock():
            return {"type": "image_url", "image_url": {"url": block.to_url()}}
        case AudioBlock(data=str()):
            return {"type": "input_audio", "input_audio": {"data": block.data, "format": _openai_audio_format(block.media_type)}}
        case FileBlock(data=str()):
            return {"type": "file", "file": {"file_data": block.to_url(), "filename": block.filename}}
        case _:
            raise ValueError(f"OpenAI does not accept {block.type} blocks by URL; inline the data instead")


def message_to_openai(message: Message) -> dict[str, Any]:
    """Convert a message to an OpenAI chat message dict."""
    out: dict[str, Any] = {"role": message.role}
    out["content"] = message.content if isinstance(message.content, str) else [_block_to_openai(b) for b in message.content]
    if message.name and message.role != "tool":
        out["name"] = message.name
    if message.tool_calls:
        out["tool_calls"] = [
            {"id": c.id, "type": "function", "function": {"name": c.name, "arguments": orjson.dumps(c.args).decode()}}
            for c in message.tool_calls
        ]
    if message.tool_call_id:
        out["tool_call_id"] = message.tool_call_id
    return out


# ─────────────────────────────────────────────────────────────────────────────
# Anthropic Format
# ─────────────────────────────────────────────────────────────────────────────


def tool_to_anthropic(tool: BaseTool[Any]) -> AnthropicTool:
    """Convert a tool to Anthropic tool_use format.

    ```json
    {"name": ..., "description": ..., "input_schema": {...}}
    ```
    """
    return {
        "name": tool.metadata.name,
        "description": tool.metadata.description,
        "input_schema": _parameters(tool),
    }


def to_anthropic(tools: ToolsLike) -> list[AnthropicTool]:
    """Convert a registry or iterable of tool-likes to Anthropic format."""
    return [tool_to_anthropic(t) for t in _tools(tools)]


def _anthropic_source(block: ImageBlock | FileBlock) -> dict[str, Any]:
    if block.is_inline:
        return {"type": "base64", "media_type": block.media_type, "data": block.data}
    return {"type": "url", "url": block.url}


def _block_to_anthropic(block: ContentBlock) -> dict[str, Any]:
    match block:
        case TextBlock():
            return {"type": "text", "text": block.text}
        case ImageBlock():
            return {"type": "image", "source": _anthropic_source(block)}
        case FileBlock():
            return {"type": "document", "source": _anthropic_source(block)}
        case _:
            raise ValueError(f"Anthropic does not accept {block.type} blocks")


def message_to_anthropic(message: Message) -> dict[str, Any]:
    """Convert a non-system message to an Anthropic Messages API dict.

    Tool results become user turns with a `tool_result` block; assistant
    tool calls become `tool_use` blocks after the text.
    """
    if message.role == "system":
        raise ValueError("Anthropic takes the system prompt as a request parameter, not a message")
    blocks = [_block_to_anthropic(b) for b in message.blocks]
    if message.role == "tool":
        return {"role": "user", "content": [{"type": "tool_result", "tool_use_id": message.tool_call_id, "content": blocks}]}
    blocks.extend({"type": "tool_use", "id": c.id, "name": c.name, "input": c.args} for c in message.tool_calls)
    return {"role": message.role, "content": blocks}


# ─────────────────────────────────────────────────────────────────────────────
# Google Gemini Format
# ─────────────────────────────────────────────────────────────────────────────


def tool_to_google(tool: BaseTool[Any]) -> GoogleTool:
    """Convert a tool to a Gemini function declaration.

    ```json
    {"name": ..., "description": ..., "parameters": {...}}
    ```
    """
    return {
        "name": tool.metadata.name,
        "description": tool.metadata.description,
        "parameters": _parameters(tool),
    }


def to_google(tools: ToolsLike) -> list[GoogleTool]:
    """Convert a registry or iterable of tool-likes to Gemini function declarations."""
    return [tool_to_google(t) for t in _tools(tools)]


def to_provider(tools: ToolsLike, provider: str, **kwargs: Any) -> list[dict[str, Any]]:
    """Convert tools for a provider by name ("openai", "anthropic", "google")."""
    match provider.lower():
        case "openai":
            return to_openai(tools, **kwargs)
        case "anthropic":
            return to_anthropic(tools)
        case "google" | "gemini":
            return to_google(tools)
        case _:
            raise ValueError(f"Unknown provider '{provider}'. Use one of: openai, anthropic, google")
