"""
Abstract base class and data models for vector store implementations.

Defines the interface that all vector store backends must implement,
plus shared data structures for search results and filters.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


@dataclass
class VectorSearchResult:
    """
    Result from a vector similarity search.

    The score is ``1 - cosine_distance``. Cosine distance spans [0, 2], so
    the score spans [-1, 1]; it is reported as computed, never clamped.

    Attributes:
        document_id: Unique identifier of the matched document
        score: Similarity score (higher is more similar)
        content: Document text
        metadata: Document metadata
        container_tag: Partition label of the document
        created_at: Document creation time
        updated_at: Last mutation time
    """

    document_id: str
    score: float
    content: str = ""
    metadata: dict[str, Any] = field(default_factory=dict)
    container_tag: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def __post_init__(self) -> None:
        """Validate score is in the cosine similarity range."""
        # Allow a small epsilon for floating point error at the extremes
        if not -1.0 - 1e-6 <= self.score <= 1.0 + 1e-6:
            raise ValueError(f"Score must be between -1.0 and 1.0, got {self.score}")


@dataclass
class VectorSearchFilter:
    """
    Filter criteria for vector searches.

    Attributes:
        container_tag: Only match documents in this container
    """

    container_tag: str | None = None


class VectorStore(ABC):
    """
    Abstract base class for vector store implementations.

    Defines the core interface for searching stored embeddings.
    Implementations delegate approximate nearest neighbor search to the
    storage engine's own index.

    All methods are async to support non-blocking I/O.
    """

    @abstractmethod
    async def search(
        self,
        query_embedding: list[float],
        limit: int = 10,
        threshold: float = 0.3,
        filters: VectorSearchFilter | None = None,
    ) -> list[VectorSearchResult]:
        """
        Search for similar documents using a query embedding.

        Args:
            query_embedding: Query vector to find similar documents
            limit: Maximum number of results to return
            threshold: Scores must be strictly greater than this
            filters: Optional filter criteria

        Returns:
            List of search results sorted by similarity (descending)
        """
        ...
