"""Retriever interface over vector stores.

Only the interface ships; concrete stores and embedding models plug in by
subclassing `VectorStore` and `Embeddings`.

    >>> retriever = MyStore.from_documents(docs, MyEmbeddings()).as_retriever(k=2)
    >>> setup = {"context": retriever | format_documents, "question": RunnablePassthrough()}
    >>> chain = setup | prompt | model | StrOutputParser()
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable, Sequence
from typing import Any, Self

from pydantic import BaseModel, ConfigDict, Field

from toolwire.observability import get_logger
from toolwire.runnables import Runnable

log = get_logger("toolwire.retrieval")


class Document(BaseModel):
    """A piece of text with metadata."""

    model_config = ConfigDict(frozen=True)

    page_content: str
    metadata: dict[str, Any] = Field(default_factory=dict)


class Embeddings(ABC):
    """Text embedding model."""

    @abstractmethod
    def embed_documents(self, texts: list[str]) -> list[list[float]]:
        """Embed a batch of documents."""
        ...

    @abstractmethod
    def embed_query(self, text: str) -> list[float]:
        """Embed a search query."""
        ...


class VectorStore(ABC):
    """Similarity-searchable document store."""

    @classmethod
    @abstractmethod
    def from_documents(cls, documents: Iterable[Document], embedding: Embeddings, **kwargs: Any) -> Self:
        """Build a store by embedding `documents`."""
        ...

    @abstractmethod
    def similarity_search(self, query: str, k: int = 4) -> list[Document]:
        """Up to `k` documents most similar to `query`, best first."""
        ...

    def as_retriever(self, *, k: int = 4) -> VectorStoreRetriever:
        return VectorStoreRetriever(self, k=k)


class VectorStoreRetriever(Runnable[str, list[Document]]):
    """Runnable that answers a query with the store's top-k documents."""

    __slots__ = ("store", "k")

    def __init__(self, store: VectorStore, *, k: int = 4) -> None:
        if k < 1:
            raise ValueError(f"k must be >= 1, got {k}")
        self.store = store
        self.k = k

    def invoke(self, input: str) -> list[Document]:
        docs = self.store.similarity_search(input, k=self.k)
        log.debug("retrieved documents", store=type(self.store).__name__, count=len(docs))
        return docs

    def __repr__(self) -> str:
        return f"VectorStoreRetriever({type(self.store).__name__}, k={self.k})"


def format_documents(docs: Sequence[Document], sep: str = "\n\n") -> str:
    """Join page contents; usable directly as a pipeline stage."""
    return sep.join(d.page_content for d in docs)
