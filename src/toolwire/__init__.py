"""Toolwire - typed tool calling, multimodal messages and runnable composition.

Define tools with typed schemas, bind them to a chat model, send text
together with images, audio or files, and compose stages sequentially or
in parallel.

Quick Start (Decorator):
    >>> from typing import Literal
    >>> from toolwire import tool
    >>>
    >>> @tool
    ... def get_weather(city: str, unit: Literal["celsius", "fahrenheit"] = "celsius") -> str:
    ...     '''Get the current weather in a given city.
    ...
    ...     Args:
    ...         city: City name, e.g. Paris
    ...         unit: Temperature unit
    ...     '''
    ...     return f"22 degrees {unit} in {city}"
    >>>
    >>> get_weather(city="Paris")
    '22 degrees celsius in Paris'

Schema-Only Tools (Pydantic models):
    >>> from pydantic import BaseModel, Field
    >>>
    >>> class GetPopulation(BaseModel):
    ...     '''Get the current population in a given location.'''
    ...     location: str = Field(..., description="City and state, e.g. San Francisco, CA")

Binding Tools to a Model:
    >>> from toolwire import HumanMessage, TextBlock, image_block
    >>>
    >>> bound = model.bind_tools([get_weather, GetPopulation])
    >>> reply = bound.invoke(HumanMessage([
    ...     TextBlock(text="What's the weather where this photo was taken?"),
    ...     image_block("paris.jpg"),
    ... ]))
    >>> reply.tool_calls  # validated against the tool schemas

Parallel Composition:
    >>> from toolwire import RunnableParallel, RunnablePassthrough
    >>>
    >>> RunnableParallel(passed=RunnablePassthrough(), modified=lambda v: v["num"] + 1).invoke({"num": 1})
    {'passed': {'num': 1}, 'modified': 2}

Provider Formats:
    >>> from toolwire.models.formats import to_openai, to_anthropic, to_google
    >>> openai_tools = to_openai([get_weather, GetPopulation])

LangChain Integration:
    >>> from toolwire.integrations import to_langchain_tools
    >>> lc_tools = to_langchain_tools(bound.tools)
"""

from __future__ import annotations

__version__ = "0.1.0"

# Configuration
from .foundation.config import ToolwireSettings, clear_settings_cache, get_settings

# Tools
from .foundation.core import BaseTool, EmptyParams, FunctionTool, SchemaTool, ToolMetadata, to_tool, tool

# Errors
from .foundation.errors import (
    DuplicateToolError,
    ErrorCode,
    InvalidToolArguments,
    MediaError,
    ParallelError,
    PromptError,
    ScriptExhausted,
    ToolError,
    ToolException,
    ToolwireError,
    UnknownToolError,
)

# Registry
from .foundation.registry import ToolRegistry

# Messages
from .messages import (
    AIMessage,
    AudioBlock,
    ContentBlock,
    FileBlock,
    HumanMessage,
    ImageBlock,
    Message,
    SystemMessage,
    TextBlock,
    ToolCall,
    ToolMessage,
    audio_block,
    coerce_messages,
    encode_bytes,
    file_block,
    image_block,
)

# Models
from .models import BoundChatModel, ChatModel, PydanticToolsParser, StrOutputParser, ToolCallsParser

# Logging
from .observability import configure_logging, get_logger

# Prompts
from .prompts import ChatPromptTemplate, MessagesPlaceholder, PromptTemplate, PromptValue

# Retrieval
from .retrieval import Document, Embeddings, VectorStore, VectorStoreRetriever, format_documents

# Composition
from .runnables import (
    Runnable,
    RunnableAssign,
    RunnableLambda,
    RunnableParallel,
    RunnablePassthrough,
    RunnablePick,
    RunnableSequence,
    arun_parallel,
    parallel,
    pipeline,
    run_parallel,
)

__all__ = [
    "__version__",
    # Configuration
    "ToolwireSettings", "get_settings", "clear_settings_cache",
    # Tools
    "BaseTool", "EmptyParams", "FunctionTool", "SchemaTool", "ToolMetadata", "tool", "to_tool", "ToolRegistry",
    # Errors
    "ErrorCode", "ToolError", "ToolException", "ToolwireError", "InvalidToolArguments", "UnknownToolError",
    "DuplicateToolError", "MediaError", "PromptError", "ParallelError", "ScriptExhausted",
    # Messages
    "Message", "SystemMessage", "HumanMessage", "AIMessage", "ToolMessage", "ToolCall", "coerce_messages",
    "ContentBlock", "TextBlock", "ImageBlock", "AudioBlock", "FileBlock",
    "encode_bytes", "image_block", "audio_block", "file_block",
    # Models
    "ChatModel", "BoundChatModel", "StrOutputParser", "ToolCallsParser", "PydanticToolsParser",
    # Prompts
    "PromptTemplate", "ChatPromptTemplate", "MessagesPlaceholder", "PromptValue",
    # Retrieval
    "Document", "Embeddings", "VectorStore", "VectorStoreRetriever", "format_documents",
    # Composition
    "Runnable", "RunnableLambda", "RunnableSequence", "RunnableParallel", "RunnablePassthrough",
    "RunnableAssign", "RunnablePick", "parallel", "run_parallel", "arun_parallel", "pipeline",
    # Logging
    "configure_logging", "get_logger",
]
