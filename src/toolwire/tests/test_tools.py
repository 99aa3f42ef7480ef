"""Tests for tool definitions, schemas, validation and the registry."""

from __future__ import annotations

from typing import Annotated

import pytest
from pydantic import BaseModel, Field

from toolwire import (
    BaseTool,
    DuplicateToolError,
    EmptyParams,
    FunctionTool,
    InvalidToolArguments,
    SchemaTool,
    ToolCall,
    ToolMessage,
    ToolMetadata,
    ToolRegistry,
    UnknownToolError,
    to_tool,
    tool,
)
from toolwire.foundation.errors import ErrorCode
from toolwire.testing import mock_tool

from .conftest import GetPopulation, get_weather


class MultiplyParams(BaseModel):
    a: int = Field(..., description="First factor")
    b: int = Field(default=2, ge=0, description="Second factor")


class MultiplyTool(BaseTool[MultiplyParams]):
    metadata = ToolMetadata(name="multiply", description="Multiply two integers", category="math")
    params_schema = MultiplyParams

    def _run(self, params: MultiplyParams) -> int:
        return params.a * params.b


# ─────────────────────────────────────────────────────────────────────────────
# Decorator
# ─────────────────────────────────────────────────────────────────────────────


class TestToolDecorator:
    def test_metadata_from_function(self) -> None:
        assert isinstance(get_weather, FunctionTool)
        assert get_weather.name == "get_weather"
        assert get_weather.description == "Get the current weather in a given city."

    def test_schema_from_hints_and_docstring(self) -> None:
        schema = get_weather.json_schema()
        assert schema["required"] == ["city"]
        assert schema["properties"]["city"]["description"] == "City name, e.g. Paris"
        assert schema["properties"]["unit"]["enum"] == ["celsius", "fahrenheit"]
        assert schema["properties"]["unit"]["default"] == "celsius"
        assert "title" not in schema

    def test_call_with_kwargs(self) -> None:
        assert get_weather(city="Paris") == "22 degrees celsius in Paris"
        assert get_weather.invoke({"city": "Oslo", "unit": "fahrenheit"}) == "22 degrees fahrenheit in Oslo"

    def test_literal_violation_raises(self) -> None:
        with pytest.raises(InvalidToolArguments) as info:
            get_weather(city="Paris", unit="kelvin")
        err = info.value
        assert err.tool_name == "get_weather"
        assert err.code == ErrorCode.INVALID_PARAMS
        assert err.errors[0]["loc"] == ("unit",)
        assert "unit" in str(err)

    def test_missing_required_raises(self) -> None:
        with pytest.raises(InvalidToolArguments, match="city"):
            get_weather.invoke({})

    def test_decorator_options(self) -> None:
        @tool(name="lookup_city", description="Look up facts about a city", category="geo")
        def lookup(city: str) -> str:
            return city

        assert lookup.name == "lookup_city"
        assert lookup.metadata.category == "geo"

    def test_short_description_is_padded(self) -> None:
        @tool
        def ping() -> str:
            """Ping."""
            return "pong"

        assert len(ping.description) >= 10
        assert ping.params_schema is EmptyParams
        assert ping() == "pong"

    def test_field_default_keeps_constraints(self) -> None:
        @tool
        def repeat(text: str, times: int = Field(default=1, ge=1, le=3)) -> str:
            """Repeat text a few times.

            Args:
                text: Text to repeat
                times: Number of repetitions
            """
            return text * times

        props = repeat.json_schema()["properties"]
        assert props["times"]["maximum"] == 3
        assert props["times"]["description"] == "Number of repetitions"
        with pytest.raises(InvalidToolArguments):
            repeat(text="a", times=5)

    def test_annotated_constraints(self) -> None:
        @tool
        def top(k: Annotated[int, Field(ge=1)]) -> int:
            """Return k unchanged for testing."""
            return k

        assert top(k="3") == 3
        with pytest.raises(InvalidToolArguments):
            top(k=0)

    def test_varargs_rejected(self) -> None:
        with pytest.raises(TypeError, match=r"\*args"):
            @tool
            def bad(*values: int) -> int:
                """Sum some values together."""
                return sum(values)

    @pytest.mark.asyncio
    async def test_async_function_tool(self) -> None:
        @tool
        async def fetch_title(url: str) -> str:
            """Fetch the title of a page."""
            return f"title of {url}"

        assert await fetch_title.ainvoke({"url": "x"}) == "title of x"
        assert fetch_title.invoke({"url": "y"}) == "title of y"


# ─────────────────────────────────────────────────────────────────────────────
# Class-based and Schema Tools
# ─────────────────────────────────────────────────────────────────────────────


class TestBaseTool:
    def test_class_tool_runs(self) -> None:
        assert MultiplyTool()(a=3) == 6
        assert MultiplyTool().invoke({"a": 3, "b": 4}) == 12

    def test_validate_returns_params(self) -> None:
        params = MultiplyTool().validate({"a": "5"})
        assert isinstance(params, MultiplyParams)
        assert params.a == 5 and params.b == 2

    def test_validate_rejects_constraint(self) -> None:
        with pytest.raises(InvalidToolArguments):
            MultiplyTool().validate({"a": 1, "b": -1})

    def test_tool_call_answered_with_tool_message(self) -> None:
        reply = MultiplyTool().invoke(ToolCall(name="multiply", args={"a": 2, "b": 5}, id="call_9"))
        assert isinstance(reply, ToolMessage)
        assert reply.content == "10"
        assert reply.tool_call_id == "call_9"
        assert reply.name == "multiply"

    @pytest.mark.asyncio
    async def test_async_tool_call(self) -> None:
        reply = await get_weather.ainvoke(ToolCall(name="get_weather", args={"city": "Rome"}, id="c1"))
        assert reply.content == "22 degrees celsius in Rome"

    def test_tools_compose(self) -> None:
        chain = (lambda n: {"a": n}) | MultiplyTool()
        assert chain.invoke(4) == 8


class TestSchemaTool:
    def test_from_model(self) -> None:
        t = SchemaTool.from_model(GetPopulation)
        assert t.name == "get_population"
        assert t.description == "Get the current population in a given location."
        assert t.json_schema()["required"] == ["location"]

    def test_run_returns_validated_model(self) -> None:
        out = SchemaTool.from_model(GetPopulation).invoke({"location": "Paris"})
        assert out == GetPopulation(location="Paris")

    def test_to_tool(self) -> None:
        assert to_tool(get_weather) is get_weather
        assert isinstance(to_tool(GetPopulation), SchemaTool)
        with pytest.raises(TypeError):
            to_tool(42)  # type: ignore[arg-type]


# ─────────────────────────────────────────────────────────────────────────────
# Registry
# ─────────────────────────────────────────────────────────────────────────────


class TestRegistry:
    def test_of_and_names(self) -> None:
        registry = ToolRegistry.of(get_weather, GetPopulation)
        assert registry.names() == ["get_weather", "get_population"]
        assert "get_weather" in registry
        assert len(registry) == 2

    def test_duplicate_name_rejected(self) -> None:
        registry = ToolRegistry([get_weather])
        with pytest.raises(DuplicateToolError) as info:
            registry.register(get_weather)
        assert info.value.name == "get_weather"
        assert isinstance(info.value, ValueError)

    def test_resolve_unknown(self) -> None:
        registry = ToolRegistry([get_weather])
        with pytest.raises(UnknownToolError) as info:
            registry.resolve("get_time")
        assert info.value.available == ["get_weather"]
        assert registry.get("get_time") is None

    def test_unregister(self) -> None:
        registry = ToolRegistry([get_weather])
        assert registry.unregister("get_weather") is True
        assert registry.unregister("get_weather") is False
        assert len(registry) == 0


# ─────────────────────────────────────────────────────────────────────────────
# Mocks
# ─────────────────────────────────────────────────────────────────────────────


class TestMockTool:
    def test_return_value_and_recording(self) -> None:
        with mock_tool(get_weather, return_value="sunny") as mock:
            assert get_weather(city="Paris") == "sunny"
            mock.assert_called_with(city="Paris", unit="celsius")
        assert mock.call_count == 1
        assert get_weather(city="Paris") == "22 degrees celsius in Paris"

    def test_validation_still_applies(self) -> None:
        with mock_tool(get_weather, return_value="sunny") as mock:
            with pytest.raises(InvalidToolArguments):
                get_weather(city="Paris", unit="kelvin")
            mock.assert_not_called()

    def test_raises_is_recorded_and_propagated(self) -> None:
        with mock_tool(MultiplyTool, raises=ConnectionError("down")) as mock:
            with pytest.raises(ConnectionError):
                MultiplyTool()(a=1)
        assert mock.last_call is not None
        assert isinstance(mock.last_call.exception, ConnectionError)

    def test_side_effect(self) -> None:
        with mock_tool(MultiplyTool, side_effect=lambda p: p["a"] + p["b"]):
            assert MultiplyTool()(a=1, b=1) == 2

    @pytest.mark.asyncio
    async def test_async_path_is_mocked(self) -> None:
        with mock_tool(get_weather, return_value="rainy") as mock:
            assert await get_weather.ainvoke({"city": "Oslo"}) == "rainy"
        mock.assert_called()
