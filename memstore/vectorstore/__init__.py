"""
Vector store for cosine-similarity search over stored memories.

Components:
- VectorStore: abstract interface for vector backends
- PgVectorStore: pgvector implementation backed by the documents table
- VectorStoreManager: embeds a text query and runs the search
"""

from memstore.vectorstore.base import VectorSearchFilter, VectorSearchResult, VectorStore
from memstore.vectorstore.config import VectorStoreConfig
from memstore.vectorstore.manager import VectorStoreManager
from memstore.vectorstore.pgvector_store import PgVectorStore

__all__ = [
    "PgVectorStore",
    "VectorSearchFilter",
    "VectorSearchResult",
    "VectorStore",
    "VectorStoreConfig",
    "VectorStoreManager",
]
