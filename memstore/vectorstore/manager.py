"""
High-level manager for similarity search.

VectorStoreManager turns a text query into an embedding and runs it
against the VectorStore with the configured defaults.
"""

import time

import structlog

from memstore.embedding.service import EmbeddingService
from memstore.exceptions import ValidationError
from memstore.vectorstore.base import VectorSearchFilter, VectorSearchResult, VectorStore
from memstore.vectorstore.config import VectorStoreConfig

logger = structlog.get_logger(__name__)


class VectorStoreManager:
    """
    High-level orchestration for search.

    Combines EmbeddingService and VectorStore:
    - Querying by text (embed query + search)
    - Querying by a precomputed embedding

    This is the primary search interface for the API, CLI and tests.
    """

    def __init__(
        self,
        vector_store: VectorStore,
        embedding_service: EmbeddingService,
        config: VectorStoreConfig | None = None,
    ):
        """
        Initialize the manager.

        Args:
            vector_store: VectorStore implementation for search
            embedding_service: Service for generating query embeddings
            config: Optional configuration
        """
        self._store = vector_store
        self._embedding = embedding_service
        self._config = config or VectorStoreConfig()

    @property
    def config(self) -> VectorStoreConfig:
        return self._config

    def _resolve(self, limit: int | None, threshold: float | None) -> tuple[int, float]:
        if limit is None:
            limit = self._config.default_limit
        if threshold is None:
            threshold = self._config.default_threshold
        if limit < 0:
            raise ValidationError("limit must be non-negative")
        return min(limit, self._config.max_limit), threshold

    async def query(
        self,
        text: str,
        limit: int | None = None,
        threshold: float | None = None,
        container_tag: str | None = None,
    ) -> list[VectorSearchResult]:
        """
        Search for documents similar to a text query.

        The query is validated before the embedding endpoint is called.
        Explicit zero values for limit and threshold are honored.

        Args:
            text: Query text
            limit: Maximum results (default from config)
            threshold: Exclusive minimum similarity (default from config)
            container_tag: Restrict to one container

        Returns:
            List of search results sorted by similarity

        Raises:
            ValidationError: If the query is empty
            EmbeddingFailure: If embedding the query fails
            StorageFailure: If the search query fails
        """
        if not isinstance(text, str) or not text.strip():
            raise ValidationError("q is required")

        limit, threshold = self._resolve(limit, threshold)

        query_embedding = await self._embedding.embed(text)

        return await self.query_by_embedding(
            query_embedding,
            limit=limit,
            threshold=threshold,
            container_tag=container_tag,
        )

    async def query_by_embedding(
        self,
        embedding: list[float],
        limit: int | None = None,
        threshold: float | None = None,
        container_tag: str | None = None,
    ) -> list[VectorSearchResult]:
        """
        Search using a pre-computed embedding.

        Args:
            embedding: Pre-computed query vector
            limit: Maximum results
            threshold: Exclusive minimum similarity
            container_tag: Restrict to one container

        Returns:
            List of search results
        """
        limit, threshold = self._resolve(limit, threshold)
        filters = VectorSearchFilter(container_tag=container_tag) if container_tag else None

        start = time.perf_counter()
        results = await self._store.search(
            query_embedding=embedding,
            limit=limit,
            threshold=threshold,
            filters=filters,
        )
        logger.info(
            "Search complete",
            results=len(results),
            limit=limit,
            threshold=threshold,
            container_tag=container_tag,
            latency_ms=round((time.perf_counter() - start) * 1000, 2),
        )
        return results
