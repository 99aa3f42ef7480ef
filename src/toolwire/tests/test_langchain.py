"""Tests for the LangChain adapter (skipped without langchain-core)."""

from __future__ import annotations

import pytest

pytest.importorskip("langchain_core")

from toolwire import ToolRegistry  # noqa: E402
from toolwire.integrations import to_langchain, to_langchain_tools  # noqa: E402
from toolwire.testing import mock_tool  # noqa: E402

from .conftest import GetPopulation, get_weather  # noqa: E402


class TestToLangchain:
    def test_wraps_metadata_and_schema(self) -> None:
        lc = to_langchain(get_weather)
        assert lc.name == "get_weather"
        assert lc.description == get_weather.description
        assert lc.args_schema is get_weather.params_schema

    def test_invoke(self) -> None:
        assert to_langchain(get_weather).invoke({"city": "Paris"}) == "22 degrees celsius in Paris"

    @pytest.mark.asyncio
    async def test_ainvoke(self) -> None:
        assert await to_langchain(get_weather).ainvoke({"city": "Rome"}) == "22 degrees celsius in Rome"

    def test_tool_failure_is_rendered(self) -> None:
        with mock_tool(get_weather, raises=ConnectionError("service down")):
            out = to_langchain(get_weather).invoke({"city": "Paris"})
        assert out.startswith("**Tool Error (get_weather):**")
        assert "service down" in out

    def test_registry(self) -> None:
        tools = to_langchain_tools(ToolRegistry.of(get_weather, GetPopulation))
        assert [t.name for t in tools] == ["get_weather", "get_population"]
