"""Shared fixtures: silent logging, fresh settings, and demo tools."""

from __future__ import annotations

from typing import Literal

import pytest
from pydantic import BaseModel, Field

from toolwire import tool
from toolwire.foundation.config import clear_settings_cache
from toolwire.observability import configure_logging


@pytest.fixture(autouse=True)
def _isolate(monkeypatch: pytest.MonkeyPatch):
    """Fresh settings per test, no .env leakage, no log output."""
    for var in ("TOOLWIRE_PARALLEL_FAIL_FAST", "TOOLWIRE_PARALLEL_MAX_CONCURRENCY", "TOOLWIRE_MEDIA_MAX_BYTES"):
        monkeypatch.delenv(var, raising=False)
    clear_settings_cache()
    configure_logging(format="none")
    yield
    clear_settings_cache()


@tool
def get_weather(city: str, unit: Literal["celsius", "fahrenheit"] = "celsius") -> str:
    """Get the current weather in a given city.

    Args:
        city: City name, e.g. Paris
        unit: Temperature unit
    """
    return f"22 degrees {unit} in {city}"


class GetPopulation(BaseModel):
    """Get the current population in a given location."""
    location: str = Field(..., description="The city and state, e.g. San Francisco, CA")


@pytest.fixture
def weather_tool():
    return get_weather


@pytest.fixture
def population_model() -> type[GetPopulation]:
    return GetPopulation
