"""Messages, content blocks and media encoding.

Example:
    >>> from toolwire.messages import HumanMessage, TextBlock, image_block
    >>>
    >>> msg = HumanMessage([
    ...     TextBlock(text="describe the weather in this image"),
    ...     image_block("weather.jpg"),  # read from disk, base64-inlined
    ... ])
"""

from .content import (
    AudioBlock,
    ContentBlock,
    ContentBlockAdapter,
    FileBlock,
    ImageBlock,
    MediaBlock,
    TextBlock,
)
from .media import audio_block, encode_bytes, fetch_media, file_block, guess_media_type, image_block
from .message import (
    AIMessage,
    HumanMessage,
    Message,
    Role,
    SupportsMessages,
    SystemMessage,
    ToolCall,
    ToolMessage,
    coerce_messages,
    message_from_role,
)

__all__ = [
    # Blocks
    "ContentBlock", "ContentBlockAdapter", "TextBlock", "MediaBlock", "ImageBlock", "AudioBlock", "FileBlock",
    # Messages
    "Role", "Message", "SystemMessage", "HumanMessage", "AIMessage", "ToolMessage", "ToolCall",
    "SupportsMessages", "coerce_messages", "message_from_role",
    # Media
    "encode_bytes", "guess_media_type", "fetch_media", "image_block", "audio_block", "file_block",
]
