"""Core tool abstractions: BaseTool, ToolMetadata, and parameter types.

A tool is a named, described callable with a typed parameter schema. The
schema is what a chat model sees when the tool is bound, and what the
model's tool-call arguments are validated against. Tools are runnables, so
they compose with `|` like any other stage.
"""

from __future__ import annotations

import asyncio
from abc import abstractmethod
from collections.abc import Mapping
from typing import Any, ClassVar, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from toolwire.foundation.errors import InvalidToolArguments
from toolwire.messages import ToolCall, ToolMessage
from toolwire.observability import get_logger
from toolwire.runnables import Runnable, run_sync

log = get_logger("toolwire.tools")


class ToolMetadata(BaseModel):
    """Metadata describing a tool.

    This information is used for:
    - LLM tool selection (name + description are sent with the schema)
    - Provider format conversion
    - Grouping and display

    Attributes:
        name: Unique identifier within a binding set (snake_case, e.g., "get_weather")
        description: What the tool does (shown to LLM for selection)
        category: Grouping category (e.g., "search", "weather", "media")
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., pattern=r"^[a-z][a-z0-9_]*$")
    description: str = Field(..., min_length=10)
    category: str = Field(default="general")


class EmptyParams(BaseModel):
    """Default parameter schema for tools with no required inputs."""
    pass


TParams = TypeVar("TParams", bound=BaseModel)


class BaseTool(Runnable[Any, Any], Generic[TParams]):
    """Abstract base class for all tools.

    Subclasses must:
    - Define `metadata` class variable with ToolMetadata
    - Define `params_schema` class variable with the Pydantic model type
    - Implement `_run(params)`

    Optional overrides:
    - `_async_run(params)` for native async implementation

    Example:
        >>> class WeatherParams(BaseModel):
        ...     city: str = Field(..., description="City name")
        ...     unit: Literal["celsius", "fahrenheit"] = "celsius"
        ...
        >>> class WeatherTool(BaseTool[WeatherParams]):
        ...     metadata = ToolMetadata(
        ...         name="get_weather",
        ...         description="Get the current weather for a city",
        ...         category="weather",
        ...     )
        ...     params_schema = WeatherParams
        ...
        ...     def _run(self, params: WeatherParams) -> str:
        ...         return f"Sunny in {params.city}"
    """

    metadata: ClassVar[ToolMetadata]
    params_schema: ClassVar[type[BaseModel]] = EmptyParams

    @property
    def name(self) -> str:  # type: ignore[override]
        return self.metadata.name

    @property
    def description(self) -> str:
        return self.metadata.description

    # ─────────────────────────────────────────────────────────────────
    # Validation
    # ─────────────────────────────────────────────────────────────────

    def validate(self, args: Mapping[str, Any] | BaseModel) -> TParams:
        """Validate raw arguments against `params_schema`.

        Raises:
            InvalidToolArguments: arguments do not satisfy the schema
        """
        if isinstance(args, self.params_schema):
            return args  # type: ignore[return-value]
        if isinstance(args, BaseModel):
            args = args.model_dump(by_alias=True)
        try:
            return self.params_schema.model_validate(dict(args))  # type: ignore[return-value]
        except ValidationError as e:
            raise InvalidToolArguments(self.metadata.name, e) from e

    def json_schema(self) -> dict[str, Any]:
        """JSON schema of the parameters, as sent to providers."""
        schema = self.params_schema.model_json_schema()
        schema.pop("title", None)
        return schema

    # ─────────────────────────────────────────────────────────────────
    # Core Execution
    # ─────────────────────────────────────────────────────────────────

    @abstractmethod
    def _run(self, params: TParams) -> Any:
        """Execute the tool synchronously with validated params."""
        ...

    async def _async_run(self, params: TParams) -> Any:
        """Execute the tool asynchronously.

        Default implementation wraps `_run` in a thread. Override for
        native async implementations.
        """
        return await asyncio.to_thread(self._run, params)

    def run(self, params: TParams) -> Any:
        """Execute with already-validated params."""
        log.debug("tool run", tool=self.metadata.name)
        return self._run(params)

    async def arun(self, params: TParams) -> Any:
        """Async execute with already-validated params."""
        log.debug("tool run", tool=self.metadata.name, mode="async")
        return await self._async_run(params)

    # ─────────────────────────────────────────────────────────────────
    # Runnable Interface
    # ─────────────────────────────────────────────────────────────────

    def invoke(self, input: Mapping[str, Any] | BaseModel | ToolCall) -> Any:
        """Validate `input` and run.

        A ToolCall input is answered with a ToolMessage carrying the call id,
        ready to be sent back to the model.
        """
        if isinstance(input, ToolCall):
            return self._answer(input, self.run(self.validate(input.args)))
        return self.run(self.validate(input))

    async def ainvoke(self, input: Mapping[str, Any] | BaseModel | ToolCall) -> Any:
        if isinstance(input, ToolCall):
            return self._answer(input, await self.arun(self.validate(input.args)))
        return await self.arun(self.validate(input))

    def _answer(self, call: ToolCall, result: Any) -> ToolMessage:
        content = result if isinstance(result, str) else str(result)
        return ToolMessage(content, tool_call_id=call.id or call.name, name=self.metadata.name)

    # ─────────────────────────────────────────────────────────────────
    # Invocation (kwargs interface)
    # ─────────────────────────────────────────────────────────────────

    def __call__(self, **kwargs: object) -> Any:
        """Invoke tool with keyword arguments."""
        return self.invoke(kwargs)

    async def acall(self, **kwargs: object) -> Any:
        """Async invoke with keyword arguments."""
        return await self.ainvoke(kwargs)

    def _run_async_sync(self, coro: Any) -> Any:
        """Run async coroutine from sync context."""
        return run_sync(coro)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.metadata.name!r})"
