"""Pytest fixtures for vectorstore tests."""

from unittest.mock import AsyncMock

import pytest

from memstore.vectorstore.base import VectorSearchResult
from memstore.vectorstore.config import VectorStoreConfig


@pytest.fixture
def vector_store_config() -> VectorStoreConfig:
    """Default vector store configuration for tests."""
    return VectorStoreConfig(
        default_limit=10,
        max_limit=100,
        default_threshold=0.3,
        ivfflat_probes=7,
    )


@pytest.fixture
def sample_search_result(created_at) -> VectorSearchResult:
    """Sample search result."""
    return VectorSearchResult(
        document_id="doc-1",
        score=0.85,
        content="We use Postgres with pgvector for embeddings",
        metadata={"source": "chat"},
        container_tag="work",
        created_at=created_at,
        updated_at=created_at,
    )


@pytest.fixture
def mock_vector_store(sample_search_result):
    """Mock VectorStore returning one result."""
    store = AsyncMock()
    store.search = AsyncMock(return_value=[sample_search_result])
    return store


@pytest.fixture
def similarity_row(make_row):
    """Factory for search rows carrying a similarity column."""

    def _make(doc_id: str, similarity: float, **kwargs):
        return make_row(doc_id=doc_id, similarity=similarity, **kwargs)

    return _make
