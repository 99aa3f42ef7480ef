"""Testing utilities: a scripted chat model and tool mocks.

Example:
    >>> from toolwire.testing import FakeChatModel, mock_tool
    >>>
    >>> model = FakeChatModel(["Hello!"])
    >>> model.invoke("hi").text
    'Hello!'
    >>> with mock_tool(get_weather, return_value="sunny") as mock:
    ...     get_weather(city="Paris")
    ...     mock.assert_called_with(city="Paris")
"""

from .fake import FakeChatModel, ModelCall
from .mock import Invocation, MockTool, mock_tool

__all__ = ["FakeChatModel", "ModelCall", "Invocation", "MockTool", "mock_tool"]
