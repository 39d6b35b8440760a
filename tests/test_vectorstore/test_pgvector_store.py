"""Unit tests for PgVectorStore implementation."""

import pytest

from memstore.exceptions import EmbeddingDimensionError
from memstore.vectorstore.base import VectorSearchFilter
from memstore.vectorstore.pgvector_store import PgVectorStore

DIMS = 3


@pytest.fixture
def store(mock_database, vector_store_config) -> PgVectorStore:
    return PgVectorStore(mock_database, config=vector_store_config, dimensions=DIMS)


class TestPgVectorStoreSearch:
    """Tests for PgVectorStore.search()."""

    @pytest.mark.asyncio
    async def test_search_sql_shape(self, store, mock_database):
        await store.search([1.0, 0.0, 0.0], limit=5, threshold=0.3)

        sql, *params = mock_database.conn.fetch.call_args.args
        assert "1 - (embedding <=> $1::vector) AS similarity" in sql
        assert "1 - (embedding <=> $1::vector) > $2" in sql
        assert "ORDER BY embedding <=> $1::vector" in sql
        assert "embedding IS NOT NULL" in sql
        assert "LIMIT $3" in sql
        assert params == ["[1.0,0.0,0.0]", 0.3, 5]

    @pytest.mark.asyncio
    async def test_probes_set_locally_before_query(self, store, mock_database):
        await store.search([1.0, 0.0, 0.0])

        mock_database.transaction.assert_called_once()
        mock_database.conn.execute.assert_awaited_once_with("SET LOCAL ivfflat.probes = 7")

    @pytest.mark.asyncio
    async def test_container_tag_filter(self, store, mock_database):
        await store.search(
            [1.0, 0.0, 0.0],
            limit=5,
            threshold=0.0,
            filters=VectorSearchFilter(container_tag="work"),
        )

        sql, *params = mock_database.conn.fetch.call_args.args
        assert "container_tag = $2" in sql
        assert "> $3" in sql
        assert params == ["[1.0,0.0,0.0]", "work", 0.0, 5]

    @pytest.mark.asyncio
    async def test_zero_vectors_excluded(self, store, mock_database):
        await store.search([1.0, 0.0, 0.0])

        sql = mock_database.conn.fetch.call_args.args[0]
        assert "(embedding <=> $1::vector) <> 'NaN'::float8" in sql

    @pytest.mark.asyncio
    async def test_results_converted_in_order(self, store, mock_database, similarity_row):
        mock_database.conn.fetch.return_value = [
            similarity_row("a", 0.91, container_tag="work", metadata={"x": 1}),
            similarity_row("b", 0.42),
        ]

        results = await store.search([1.0, 0.0, 0.0])

        assert [r.document_id for r in results] == ["a", "b"]
        assert results[0].score == 0.91
        assert results[0].metadata == {"x": 1}
        assert results[0].container_tag == "work"
        assert results[1].content

    @pytest.mark.asyncio
    async def test_negative_scores_not_clamped(self, store, mock_database, similarity_row):
        mock_database.conn.fetch.return_value = [similarity_row("opposite", -0.8)]

        results = await store.search([1.0, 0.0, 0.0], threshold=-1.0)

        assert results[0].score == -0.8

    @pytest.mark.asyncio
    async def test_zero_limit_returns_empty(self, store, mock_database):
        assert await store.search([1.0, 0.0, 0.0], limit=0) == []
        mock_database.conn.fetch.assert_not_called()

    @pytest.mark.asyncio
    async def test_wrong_dimension_rejected(self, store, mock_database):
        with pytest.raises(EmbeddingDimensionError):
            await store.search([1.0, 0.0])
        mock_database.transaction.assert_not_called()
