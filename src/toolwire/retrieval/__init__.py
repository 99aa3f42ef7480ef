from .base import Document, Embeddings, VectorStore, VectorStoreRetriever, format_documents

__all__ = ["Document", "Embeddings", "VectorStore", "VectorStoreRetriever", "format_documents"]
