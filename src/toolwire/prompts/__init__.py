"""Prompt templates producing text or chat messages."""

from .template import (
    BasePromptTemplate,
    ChatPromptTemplate,
    MessagesPlaceholder,
    PromptTemplate,
    PromptValue,
)

__all__ = ["BasePromptTemplate", "PromptTemplate", "ChatPromptTemplate", "MessagesPlaceholder", "PromptValue"]
