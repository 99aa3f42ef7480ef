"""Unified error handling for toolwire.

- ErrorCode: Standard error codes for tool and model failures
- ToolError/ToolException: Structured errors and exceptions
- ToolwireError and subclasses: exceptions raised by bindings, prompts, media and compositions
"""

from .errors import (
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
    classify_exception,
    format_validation_error,
)

__all__ = [
    # Structured errors
    "ErrorCode", "ToolError", "ToolException", "classify_exception", "format_validation_error",
    # Exceptions
    "ToolwireError", "InvalidToolArguments", "UnknownToolError", "DuplicateToolError",
    "MediaError", "PromptError", "ParallelError", "ScriptExhausted",
]
