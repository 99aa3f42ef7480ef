"""Decorator-based tool definition for simple functions.

Transforms decorated functions into full BaseTool instances with
auto-generated parameter schemas from type hints.

Example:
    >>> @tool(category="weather")
    ... def get_weather(city: str, unit: Literal["celsius", "fahrenheit"] = "celsius") -> str:
    ...     '''Get the current weather for a city.
    ...
    ...     Args:
    ...         city: City name, e.g. "Paris"
    ...         unit: Temperature unit
    ...     '''
    ...     return f"22 degrees {unit} in {city}"
    ...
    >>> get_weather(city="Paris")
    '22 degrees celsius in Paris'
    >>> get_weather(city="Paris", unit="kelvin")
    Traceback (most recent call last):
    InvalidToolArguments: Invalid arguments for tool 'get_weather': unit: Input should be 'celsius' or 'fahrenheit'
"""

from __future__ import annotations

import asyncio
import inspect
import re
from functools import wraps
from typing import Annotated, Any, Callable, ParamSpec, get_type_hints, overload

from pydantic import BaseModel, Field, create_model
from pydantic.fields import FieldInfo

from .base import BaseTool, EmptyParams, ToolMetadata

P = ParamSpec("P")


# ─────────────────────────────────────────────────────────────────────────────
# Docstring Parsing
# ─────────────────────────────────────────────────────────────────────────────

_PARAM_PATTERN = re.compile(
    r"^\s*(?P<name>\w+)\s*(?:\([^)]*\))?\s*:\s*(?P<desc>.+?)(?=\n\s*\w+\s*(?:\([^)]*\))?\s*:|\Z)",
    re.MULTILINE | re.DOTALL,
)


def _parse_docstring_params(docstring: str | None) -> dict[str, str]:
    """Extract parameter descriptions from Google style docstrings."""
    if not docstring:
        return {}

    sections = re.split(r"\n\s*(?:Args|Arguments|Parameters)\s*:\s*\n", docstring, flags=re.IGNORECASE)
    if len(sections) < 2:
        return {}

    # Parse until next section or end
    args_section = re.split(r"\n\s*(?:Returns|Raises|Examples?|Notes?|Yields)\s*:", sections[1], flags=re.IGNORECASE)[0]

    params: dict[str, str] = {}
    for match in _PARAM_PATTERN.finditer(args_section):
        params[match.group("name")] = " ".join(match.group("desc").split())
    return params


# ─────────────────────────────────────────────────────────────────────────────
# Schema Generation
# ─────────────────────────────────────────────────────────────────────────────


def _generate_schema(func: Callable[..., Any], model_name: str) -> type[BaseModel]:
    """Generate Pydantic model from function signature.

    Introspects type hints and defaults to build Field definitions. A
    default given as `Field(...)` keeps its constraints; Annotated hints
    keep theirs. Descriptions come from the docstring's Args section.
    """
    sig = inspect.signature(func)
    hints = get_type_hints(func, include_extras=True)
    param_docs = _parse_docstring_params(func.__doc__)

    fields: dict[str, tuple[Any, Any]] = {}

    for name, param in sig.parameters.items():
        if name in ("self", "cls"):
            continue
        if param.kind in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD):
            raise TypeError(f"Tool function '{func.__name__}' cannot take *args or **kwargs")

        field_type = hints.get(name, str)
        description = param_docs.get(name)

        if isinstance(param.default, FieldInfo):
            info = param.default
            if info.description is None and description:
                # Annotated metadata merges under the assigned Field
                field_type = Annotated[field_type, Field(description=description)]
            fields[name] = (field_type, info)
        elif param.default is inspect.Parameter.empty:
            fields[name] = (field_type, Field(..., description=description))
        else:
            fields[name] = (field_type, Field(default=param.default, description=description))

    if not fields:
        return EmptyParams
    model: type[BaseModel] = create_model(model_name, **fields)  # type: ignore[call-overload]
    return model


# ─────────────────────────────────────────────────────────────────────────────
# FunctionTool: BaseTool wrapper for functions
# ─────────────────────────────────────────────────────────────────────────────


class FunctionTool(BaseTool[BaseModel]):
    """BaseTool implementation that wraps a decorated function.

    Bridges the function-based API with the class-based BaseTool system,
    so decorated functions bind to models and compose like any tool.
    """

    __slots__ = ("_func", "_is_async")

    def __init__(
        self,
        func: Callable[..., Any],
        metadata: ToolMetadata,
        params_schema: type[BaseModel],
    ) -> None:
        self._func = func
        self._is_async = asyncio.iscoroutinefunction(func)

        # BaseTool expects ClassVars; give each instance its own subclass
        self.__class__ = type(
            f"FunctionTool_{metadata.name}",
            (FunctionTool,),
            {"metadata": metadata, "params_schema": params_schema},
        )

    def _kwargs(self, params: BaseModel) -> dict[str, Any]:
        return dict(params)

    def _run(self, params: BaseModel) -> Any:
        """Execute the wrapped function synchronously."""
        if self._is_async:
            return self._run_async_sync(self._func(**self._kwargs(params)))
        return self._func(**self._kwargs(params))

    async def _async_run(self, params: BaseModel) -> Any:
        """Execute the wrapped function asynchronously."""
        if self._is_async:
            return await self._func(**self._kwargs(params))
        return await asyncio.to_thread(self._func, **self._kwargs(params))

    @property
    def func(self) -> Callable[..., Any]:
        """Access the original wrapped function."""
        return self._func


# ─────────────────────────────────────────────────────────────────────────────
# SchemaTool: a params model bound as a tool
# ─────────────────────────────────────────────────────────────────────────────


class SchemaTool(BaseTool[BaseModel]):
    """A Pydantic model used directly as a tool definition.

    The model's class name (snake-cased) is the tool name and its
    docstring the description. Running it returns the validated model,
    which makes it useful for structured extraction.

    Example:
        >>> class GetWeather(BaseModel):
        ...     '''Get the current weather in a given location.'''
        ...     location: str = Field(..., description="City and state")
        ...
        >>> SchemaTool.from_model(GetWeather).invoke({"location": "Paris"})
        GetWeather(location='Paris')
    """

    __slots__ = ()

    @classmethod
    def from_model(cls, model: type[BaseModel], *, name: str | None = None, description: str | None = None) -> SchemaTool:
        tool_name = name or _to_snake_case(model.__name__)
        meta = ToolMetadata(
            name=tool_name,
            description=_pad_description(description or _extract_description(model.__doc__) or f"Return {tool_name}"),
            category="schema",
        )
        sub = type(f"SchemaTool_{tool_name}", (SchemaTool,), {"metadata": meta, "params_schema": model})
        return sub()

    def _run(self, params: BaseModel) -> BaseModel:
        return params


# ─────────────────────────────────────────────────────────────────────────────
# The @tool Decorator
# ─────────────────────────────────────────────────────────────────────────────


@overload
def tool(func: Callable[P, Any]) -> FunctionTool: ...

@overload
def tool(
    *,
    name: str | None = None,
    description: str | None = None,
    category: str = "general",
) -> Callable[[Callable[P, Any]], FunctionTool]: ...


def tool(
    func: Callable[P, Any] | None = None,
    *,
    name: str | None = None,
    description: str | None = None,
    category: str = "general",
) -> FunctionTool | Callable[[Callable[P, Any]], FunctionTool]:
    """Decorator to create a tool from a function.

    Transforms a function into a full BaseTool instance with auto-generated
    parameter schema from type hints.

    Args:
        func: The function to wrap (used when decorator called without parens)
        name: Tool name (defaults to function name, converted to snake_case)
        description: Tool description (defaults to first line of docstring)
        category: Tool category for grouping

    Returns:
        FunctionTool instance that wraps the function

    Notes:
        - Parameters without type hints are treated as str
        - Literal hints become enumerations in the schema
        - Async functions are fully supported
    """
    def decorator(fn: Callable[P, Any]) -> FunctionTool:
        tool_name = name or _to_snake_case(fn.__name__)
        tool_desc = _pad_description(description or _extract_description(fn.__doc__) or f"Execute {tool_name}")

        meta = ToolMetadata(name=tool_name, description=tool_desc, category=category)
        schema = _generate_schema(fn, f"{_to_pascal_case(tool_name)}Params")

        tool_instance = FunctionTool(fn, meta, schema)
        wraps(fn)(tool_instance)
        return tool_instance

    # Support both @tool and @tool(...) syntax
    if func is not None:
        return decorator(func)
    return decorator


def to_tool(obj: BaseTool[Any] | type[BaseModel] | Callable[..., Any]) -> BaseTool[Any]:
    """Coerce a tool-like object: tools pass through, models become SchemaTool, functions are decorated."""
    if isinstance(obj, BaseTool):
        return obj
    if isinstance(obj, type) and issubclass(obj, BaseModel):
        return SchemaTool.from_model(obj)
    if callable(obj):
        return tool(obj)
    raise TypeError(f"Cannot use {type(obj).__name__} as a tool")


# ─────────────────────────────────────────────────────────────────────────────
# Utilities
# ─────────────────────────────────────────────────────────────────────────────


def _to_snake_case(name: str) -> str:
    """Convert CamelCase or mixed to snake_case."""
    s1 = re.sub(r"(.)([A-Z][a-z]+)", r"\1_\2", name)
    return re.sub(r"([a-z0-9])([A-Z])", r"\1_\2", s1).lower()


def _to_pascal_case(name: str) -> str:
    """Convert snake_case to PascalCase."""
    return "".join(word.capitalize() for word in name.split("_"))


def _extract_description(docstring: str | None) -> str | None:
    """Extract first line of docstring as description."""
    if not docstring:
        return None
    lines = docstring.strip().split("\n")
    return lines[0].strip() if lines else None


def _pad_description(desc: str) -> str:
    """ToolMetadata needs 10+ chars; pad short ones."""
    return desc if len(desc) >= 10 else f"{desc} - automatically generated tool"
