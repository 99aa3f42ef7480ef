"""Chat model interface, tool binding, provider formats and output parsers.

Example:
    >>> from toolwire.models import ChatModel, StrOutputParser
    >>>
    >>> bound = model.bind_tools([get_weather], tool_choice="get_weather")
    >>> reply = bound.invoke("What's the weather in Paris?")
    >>> reply.tool_calls[0].args
    {'city': 'Paris', 'unit': 'celsius'}
"""

from .base import BoundChatModel, ChatModel, ToolChoice
from .formats import (
    message_to_anthropic,
    message_to_openai,
    to_anthropic,
    to_google,
    to_openai,
    to_provider,
    tool_to_anthropic,
    tool_to_google,
    tool_to_openai,
)
from .parsers import PydanticToolsParser, StrOutputParser, ToolCallsParser

__all__ = [
    # Models
    "ChatModel", "BoundChatModel", "ToolChoice",
    # Formats
    "to_openai", "to_anthropic", "to_google", "to_provider",
    "tool_to_openai", "tool_to_anthropic", "tool_to_google",
    "message_to_openai", "message_to_anthropic",
    # Parsers
    "StrOutputParser", "ToolCallsParser", "PydanticToolsParser",
]
