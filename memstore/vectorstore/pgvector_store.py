"""
pgvector implementation of the VectorStore interface.

Runs cosine-similarity searches against the documents table, letting
the IVFFlat index do approximate nearest neighbor lookup.
"""

from typing import Any

import structlog

from memstore.documents.schemas import DEFAULT_CONTAINER_TAG, vector_to_sql
from memstore.embedding.config import EMBEDDING_DIMENSIONS
from memstore.exceptions import EmbeddingDimensionError
from memstore.storage.database import Database
from memstore.vectorstore.base import VectorSearchFilter, VectorSearchResult, VectorStore
from memstore.vectorstore.config import VectorStoreConfig

logger = structlog.get_logger(__name__)


class PgVectorStore(VectorStore):
    """
    pgvector-based vector store implementation.

    Builds dynamic SQL for filtered similarity searches:
    - score is ``1 - (embedding <=> query)``, unclamped
    - only rows with ``score > threshold`` are returned
    - rows without an embedding never match, nor do zero vectors (their
      cosine distance is NaN, which PostgreSQL sorts above every number)
    - results are ordered by distance ascending (score descending)

    ``ivfflat.probes`` is set per query inside a transaction so it only
    applies to that search.
    """

    def __init__(
        self,
        database: Database,
        config: VectorStoreConfig | None = None,
        dimensions: int = EMBEDDING_DIMENSIONS,
    ):
        """
        Initialize pgvector store.

        Args:
            database: Connected Database instance
            config: Optional configuration
            dimensions: Expected query vector length
        """
        self._db = database
        self._config = config or VectorStoreConfig()
        self._dimensions = dimensions

    async def search(
        self,
        query_embedding: list[float],
        limit: int = 10,
        threshold: float = 0.3,
        filters: VectorSearchFilter | None = None,
    ) -> list[VectorSearchResult]:
        """
        Search for similar documents using cosine similarity.

        Args:
            query_embedding: Query vector
            limit: Maximum results to return
            threshold: Exclusive lower bound on the similarity score
            filters: Optional filter criteria

        Returns:
            List of search results sorted by similarity (descending)
        """
        if len(query_embedding) != self._dimensions:
            raise EmbeddingDimensionError(expected=self._dimensions, actual=len(query_embedding))

        if limit <= 0:
            return []

        conditions = [
            "embedding IS NOT NULL",
            "(embedding <=> $1::vector) <> 'NaN'::float8",
        ]
        params: list[Any] = [vector_to_sql(query_embedding)]
        param_idx = 2

        if filters and filters.container_tag:
            conditions.append(f"container_tag = ${param_idx}")
            params.append(filters.container_tag)
            param_idx += 1

        where_clause = " AND ".join(conditions)

        sql = f"""
            SELECT
                id,
                content,
                metadata,
                container_tag,
                created_at,
                updated_at,
                1 - (embedding <=> $1::vector) AS similarity
            FROM documents
            WHERE {where_clause}
              AND 1 - (embedding <=> $1::vector) > ${param_idx}
            ORDER BY embedding <=> $1::vector
            LIMIT ${param_idx + 1}
        """
        params.extend([threshold, limit])

        # SET LOCAL does not accept bind parameters; probes is a validated int
        probes = int(self._config.ivfflat_probes)
        async with self._db.transaction() as conn:
            await conn.execute(f"SET LOCAL ivfflat.probes = {probes}")
            rows = await conn.fetch(sql, *params)

        logger.debug(
            "Vector search complete",
            results=len(rows),
            limit=limit,
            threshold=threshold,
            container_tag=filters.container_tag if filters else None,
        )
        return [self._row_to_result(row) for row in rows]

    def _row_to_result(self, row: Any) -> VectorSearchResult:
        """Convert a database row to a VectorSearchResult."""
        metadata = row.get("metadata") or {}

        return VectorSearchResult(
            document_id=row["id"],
            score=float(row["similarity"]),
            content=row.get("content") or "",
            metadata=dict(metadata) if isinstance(metadata, dict) else {},
            container_tag=row.get("container_tag") or DEFAULT_CONTAINER_TAG,
            created_at=row.get("created_at"),
            updated_at=row.get("updated_at"),
        )
