"""Unit tests for VectorStoreManager."""

import pytest

from memstore.exceptions import EmbeddingFailure, ValidationError
from memstore.vectorstore.base import VectorSearchFilter
from memstore.vectorstore.manager import VectorStoreManager


@pytest.fixture
def manager(mock_vector_store, mock_embedding_service, vector_store_config) -> VectorStoreManager:
    return VectorStoreManager(
        vector_store=mock_vector_store,
        embedding_service=mock_embedding_service,
        config=vector_store_config,
    )


class TestQuery:
    """Tests for VectorStoreManager.query()."""

    @pytest.mark.asyncio
    async def test_query_embeds_and_searches(
        self, manager, mock_vector_store, mock_embedding_service, sample_embedding, sample_search_result
    ):
        results = await manager.query("what database do we use?")

        mock_embedding_service.embed.assert_awaited_once_with("what database do we use?")
        kwargs = mock_vector_store.search.call_args.kwargs
        assert kwargs["query_embedding"] == sample_embedding
        assert kwargs["limit"] == 10
        assert kwargs["threshold"] == 0.3
        assert kwargs["filters"] is None
        assert results == [sample_search_result]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("text", ["", "   ", None])
    async def test_empty_query_rejected_before_embedding(
        self, manager, mock_embedding_service, mock_vector_store, text
    ):
        with pytest.raises(ValidationError, match="q is required"):
            await manager.query(text)

        mock_embedding_service.embed.assert_not_called()
        mock_vector_store.search.assert_not_called()

    @pytest.mark.asyncio
    async def test_zero_values_are_honored(self, manager, mock_vector_store):
        await manager.query("hello", limit=0, threshold=0.0)

        kwargs = mock_vector_store.search.call_args.kwargs
        assert kwargs["limit"] == 0
        assert kwargs["threshold"] == 0.0

    @pytest.mark.asyncio
    async def test_limit_capped_at_max(self, manager, mock_vector_store):
        await manager.query("hello", limit=5000)
        assert mock_vector_store.search.call_args.kwargs["limit"] == 100

    @pytest.mark.asyncio
    async def test_negative_limit_rejected(self, manager, mock_embedding_service):
        with pytest.raises(ValidationError):
            await manager.query("hello", limit=-1)
        mock_embedding_service.embed.assert_not_called()

    @pytest.mark.asyncio
    async def test_container_tag_becomes_filter(self, manager, mock_vector_store):
        await manager.query("hello", container_tag="work")

        assert mock_vector_store.search.call_args.kwargs["filters"] == VectorSearchFilter(
            container_tag="work"
        )

    @pytest.mark.asyncio
    async def test_embedding_failure_propagates(
        self, manager, mock_embedding_service, mock_vector_store
    ):
        mock_embedding_service.embed.side_effect = EmbeddingFailure("endpoint down")

        with pytest.raises(EmbeddingFailure):
            await manager.query("hello")

        mock_vector_store.search.assert_not_called()


class TestQueryByEmbedding:
    """Tests for VectorStoreManager.query_by_embedding()."""

    @pytest.mark.asyncio
    async def test_skips_embedding_call(
        self, manager, mock_embedding_service, mock_vector_store, sample_embedding
    ):
        await manager.query_by_embedding(sample_embedding, limit=3, threshold=0.5)

        mock_embedding_service.embed.assert_not_called()
        kwargs = mock_vector_store.search.call_args.kwargs
        assert kwargs["limit"] == 3
        assert kwargs["threshold"] == 0.5
