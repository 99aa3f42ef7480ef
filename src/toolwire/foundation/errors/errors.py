"""Standardized error handling for tools, models, and compositions.

Provides error codes, a structured error model for agent feedback, and the
exception hierarchy raised by toolwire. Uses Pydantic for validation and
serialization of structured errors.
"""

from __future__ import annotations

import traceback
from collections.abc import Mapping
from enum import StrEnum
from functools import lru_cache
from typing import Annotated, Self

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator


class ErrorCode(StrEnum):
    """Standard error codes for tool and model failures.

    Used for programmatic error handling and for rendering errors to an LLM.
    """
    INVALID_PARAMS = "INVALID_PARAMS"
    UNKNOWN_TOOL = "UNKNOWN_TOOL"
    DUPLICATE_TOOL = "DUPLICATE_TOOL"
    INVALID_MEDIA = "INVALID_MEDIA"
    PROMPT_ERROR = "PROMPT_ERROR"
    PARALLEL_FAILURE = "PARALLEL_FAILURE"
    SCRIPT_EXHAUSTED = "SCRIPT_EXHAUSTED"
    TIMEOUT = "TIMEOUT"
    NETWORK_ERROR = "NETWORK_ERROR"
    PARSE_ERROR = "PARSE_ERROR"
    NOT_FOUND = "NOT_FOUND"
    EXTERNAL_SERVICE_ERROR = "EXTERNAL_SERVICE_ERROR"
    UNKNOWN = "UNKNOWN"


# Ordered for priority: first matching pattern wins
_PATTERN_CODES: dict[str, ErrorCode] = {
    "timeout": ErrorCode.TIMEOUT,
    "connection": ErrorCode.NETWORK_ERROR,
    "network": ErrorCode.NETWORK_ERROR,
    "parse": ErrorCode.PARSE_ERROR,
    "json": ErrorCode.PARSE_ERROR,
    "decode": ErrorCode.PARSE_ERROR,
    "validation": ErrorCode.INVALID_PARAMS,
    "value": ErrorCode.INVALID_PARAMS,
    "notfound": ErrorCode.NOT_FOUND,
    "keyerror": ErrorCode.NOT_FOUND,
}
_PATTERN_KEYS = tuple(_PATTERN_CODES.keys())


@lru_cache(maxsize=256)
def _classify_cached(exc_key: str) -> ErrorCode:
    """Cached classification by exception signature."""
    haystack = exc_key.lower()
    for pattern in _PATTERN_KEYS:
        if pattern in haystack:
            return _PATTERN_CODES[pattern]
    return ErrorCode.EXTERNAL_SERVICE_ERROR


def classify_exception(exc: Exception) -> ErrorCode:
    """Map exception to error code. toolwire errors carry their own code."""
    if isinstance(exc, ToolwireError):
        return exc.code
    return _classify_cached(f"{type(exc).__name__} {exc}")


def format_validation_error(exc: ValidationError) -> str:
    """Flatten a pydantic ValidationError into a single readable line.

    Example:
        >>> format_validation_error(err)
        "unit: Input should be 'celsius' or 'fahrenheit'; city: Field required"
    """
    parts = []
    for e in exc.errors():
        loc = ".".join(str(p) for p in e.get("loc", ())) or "<root>"
        parts.append(f"{loc}: {e.get('msg', 'invalid')}")
    return "; ".join(parts)


class ToolError(BaseModel):
    """Structured error response for tool failures.

    Attributes:
        tool_name: Name of the tool that failed
        message: Human-readable error message
        code: Machine-readable error code for programmatic handling
        recoverable: Whether the error might succeed on retry
        details: Optional detailed information (e.g., stack trace)
    """

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True, validate_default=True)

    tool_name: Annotated[str, Field(min_length=1, description="Name of the tool that produced the error")]
    message: Annotated[str, Field(min_length=1, description="Human-readable error message")]
    code: ErrorCode = Field(default=ErrorCode.UNKNOWN, description="Machine-readable error classification")
    recoverable: bool = Field(default=True, description="Whether retry might succeed")
    details: str | None = Field(default=None, description="Optional detailed error info")

    @field_validator("message", mode="before")
    @classmethod
    def _ensure_message(cls, v: str | Exception) -> str:
        """Accept Exception objects and extract message."""
        return str(v) if isinstance(v, Exception) else v

    @classmethod
    def create(
        cls,
        tool_name: str,
        message: str,
        code: ErrorCode = ErrorCode.UNKNOWN,
        *,
        recoverable: bool = True,
        details: str | None = None,
    ) -> Self:
        """Factory method for construction."""
        return cls(tool_name=tool_name, message=message, code=code, recoverable=recoverable, details=details)

    @classmethod
    def from_exception(
        cls,
        tool_name: str,
        exc: Exception,
        context: str = "",
        *,
        recoverable: bool = True,
        include_trace: bool = True,
    ) -> Self:
        """Create from exception with auto-classification."""
        return cls(
            tool_name=tool_name,
            message=f"{context}: {exc}" if context else str(exc),
            code=classify_exception(exc),
            recoverable=recoverable,
            details=traceback.format_exc() if include_trace else None,
        )

    def render(self) -> str:
        """Format error for LLM consumption."""
        parts = [f"**Tool Error ({self.tool_name}):** {self.message}"]
        if self.recoverable:
            parts.append("\n_This error may be recoverable - consider retrying or trying an alternative approach._")
        if self.details:
            parts.append(f"\n\nDetails:\n```\n{self.details}\n```")
        return "".join(parts)

    __str__ = render


# ─────────────────────────────────────────────────────────────────────────────
# Exception Hierarchy
# ─────────────────────────────────────────────────────────────────────────────


class ToolwireError(Exception):
    """Base class for all errors raised by toolwire."""

    code: ErrorCode = ErrorCode.UNKNOWN


class ToolException(ToolwireError):
    """Exception wrapping a ToolError for raising."""

    __slots__ = ("error",)

    def __init__(self, error: ToolError) -> None:
        self.error = error
        super().__init__(error.message)

    @property
    def code(self) -> ErrorCode:  # type: ignore[override]
        return self.error.code

    @classmethod
    def create(cls, tool_name: str, message: str, code: ErrorCode = ErrorCode.UNKNOWN, *, recoverable: bool = True) -> Self:
        """Create tool exception."""
        return cls(ToolError(tool_name=tool_name, message=message, code=code, recoverable=recoverable))


class InvalidToolArguments(ToolwireError):
    """Tool arguments failed validation against the tool's params schema."""

    code = ErrorCode.INVALID_PARAMS

    def __init__(self, tool_name: str, error: ValidationError) -> None:
        self.tool_name = tool_name
        self.errors = error.errors()
        super().__init__(f"Invalid arguments for tool '{tool_name}': {format_validation_error(error)}")

    def to_tool_error(self) -> ToolError:
        return ToolError.create(self.tool_name, str(self), self.code, recoverable=False)


class UnknownToolError(ToolwireError):
    """A tool call referenced a name outside the bound tool set."""

    code = ErrorCode.UNKNOWN_TOOL

    def __init__(self, name: str, available: list[str] | None = None) -> None:
        self.name = name
        self.available = available or []
        hint = f" (available: {', '.join(self.available)})" if self.available else ""
        super().__init__(f"Unknown tool '{name}'{hint}")


class DuplicateToolError(ToolwireError, ValueError):
    """Two tools in one binding set share a name."""

    code = ErrorCode.DUPLICATE_TOOL

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Tool '{name}' already registered. Use unregister() first.")


class MediaError(ToolwireError, ValueError):
    """Media payload could not be encoded or has an unusable media type."""

    code = ErrorCode.INVALID_MEDIA


class PromptError(ToolwireError, KeyError):
    """Prompt template could not be formatted from the given input."""

    code = ErrorCode.PROMPT_ERROR

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else ""


class ScriptExhausted(ToolwireError):
    """A scripted test model ran out of responses."""

    code = ErrorCode.SCRIPT_EXHAUSTED


class ParallelError(ToolwireError):
    """One or more stages of a parallel composition failed.

    Raised only when a composition collects failures instead of failing fast.

    Attributes:
        failures: Stage key → exception raised by that stage
        partial: Stage key → result, for the stages that succeeded
    """

    code = ErrorCode.PARALLEL_FAILURE

    def __init__(self, failures: Mapping[str, BaseException], partial: Mapping[str, object]) -> None:
        self.failures = dict(failures)
        self.partial = dict(partial)
        keys = ", ".join(self.failures)
        super().__init__(f"{len(self.failures)} parallel stage(s) failed: {keys}")
