"""Tests for text and chat prompt templates."""

from __future__ import annotations

import pytest

from toolwire import (
    AIMessage,
    ChatPromptTemplate,
    HumanMessage,
    ImageBlock,
    MessagesPlaceholder,
    PromptError,
    PromptTemplate,
    PromptValue,
    RunnablePassthrough,
    StrOutputParser,
    SystemMessage,
    TextBlock,
    encode_bytes,
)
from toolwire.prompts import BasePromptTemplate
from toolwire.testing import FakeChatModel


class TestPromptTemplate:
    def test_base_template_is_abstract(self) -> None:
        with pytest.raises(TypeError):
            BasePromptTemplate()  # type: ignore[abstract]

    def test_format(self) -> None:
        prompt = PromptTemplate("Tell me about {topic} in {lang}")
        assert prompt.input_variables == ["topic", "lang"]
        assert prompt.format(topic="rain", lang="French") == "Tell me about rain in French"

    def test_missing_variable(self) -> None:
        with pytest.raises(PromptError, match="topic"):
            PromptTemplate("Tell me about {topic}").format()

    def test_prompt_error_is_key_error(self) -> None:
        with pytest.raises(KeyError):
            PromptTemplate("{x}").format()

    def test_positional_fields_rejected(self) -> None:
        with pytest.raises(PromptError):
            PromptTemplate("{} and {}")

    def test_invoke_returns_prompt_value(self) -> None:
        value = PromptTemplate("Hi {name}").invoke({"name": "Ada"})
        assert isinstance(value, PromptValue)
        assert value.to_string() == "Hi Ada"
        assert value.to_messages() == [HumanMessage("Hi Ada")]

    def test_single_variable_shorthand(self) -> None:
        assert PromptTemplate("Echo {x}").invoke("hello").to_string() == "Echo hello"
        with pytest.raises(PromptError):
            PromptTemplate("{a} {b}").invoke("oops")

    def test_partial(self) -> None:
        prompt = PromptTemplate("{greeting}, {name}").partial(greeting="Hello")
        assert prompt.format(name="Ada") == "Hello, Ada"
        assert prompt.invoke("Bob").to_string() == "Hello, Bob"


class TestChatPromptTemplate:
    def test_role_tuples(self) -> None:
        prompt = ChatPromptTemplate.from_messages([
            ("system", "You answer in {lang}."),
            ("human", "{question}"),
        ])
        assert prompt.input_variables == ["lang", "question"]
        messages = prompt.invoke({"lang": "French", "question": "Hi?"}).to_messages()
        assert messages == [SystemMessage("You answer in French."), HumanMessage("Hi?")]

    def test_verbatim_messages_and_placeholder(self) -> None:
        prompt = ChatPromptTemplate.from_messages([
            SystemMessage("Keep {braces} as-is"),
            MessagesPlaceholder("history"),
            "{question}",
        ])
        assert prompt.input_variables == ["history", "question"]
        messages = prompt.format_messages(history=[("human", "hi"), AIMessage("hello")], question="and now?")
        assert [m.role for m in messages] == ["system", "user", "assistant", "user"]
        assert messages[0].text == "Keep {braces} as-is"

    def test_missing_placeholder(self) -> None:
        prompt = ChatPromptTemplate.from_messages([MessagesPlaceholder("history")])
        with pytest.raises(PromptError, match="history"):
            prompt.format_messages()

    def test_optional_placeholder(self) -> None:
        prompt = ChatPromptTemplate.from_messages([MessagesPlaceholder("history", optional=True), "hi"])
        assert prompt.input_variables == []
        assert len(prompt.format_messages()) == 1

    def test_multimodal_blocks_formatted(self) -> None:
        prompt = ChatPromptTemplate.from_messages([
            ("human", [
                {"type": "text", "text": "What is the weather in {city}?"},
                {"type": "image", "url": "{image_url}"},
            ]),
        ])
        assert prompt.input_variables == ["city", "image_url"]
        (msg,) = prompt.invoke({"city": "Paris", "image_url": "https://example.com/paris.jpg"}).to_messages()
        assert msg.blocks[0] == TextBlock(text="What is the weather in Paris?")
        assert msg.blocks[1] == ImageBlock(url="https://example.com/paris.jpg")

    def test_image_placeholder_accepts_data_url(self) -> None:
        prompt = ChatPromptTemplate.from_messages([("human", [{"type": "image", "url": "{image}"}])])
        data_url = f"data:image/png;base64,{encode_bytes(b'png')}"
        (msg,) = prompt.format_messages(image=data_url)
        block = msg.blocks[0]
        assert isinstance(block, ImageBlock)
        assert block.is_inline
        assert block.decode() == b"png"

    def test_unknown_role(self) -> None:
        with pytest.raises(ValueError):
            ChatPromptTemplate.from_messages([("robot", "beep")])
        with pytest.raises(TypeError):
            ChatPromptTemplate.from_messages([42])  # type: ignore[list-item]

    def test_to_string(self) -> None:
        value = ChatPromptTemplate.from_messages([("system", "s"), ("human", "h")]).invoke({})
        assert value.to_string() == "system: s\nuser: h"

    def test_chain_with_parallel_setup(self) -> None:
        prompt = ChatPromptTemplate.from_messages([("human", "Context: {context}\nQuestion: {question}")])
        model = FakeChatModel([lambda messages, tools: messages[-1].text])
        chain = {"context": lambda q: "harrison worked at kensho", "question": RunnablePassthrough()} | prompt | model | StrOutputParser()
        assert chain.invoke("where did harrison work?") == (
            "Context: harrison worked at kensho\nQuestion: where did harrison work?"
        )
