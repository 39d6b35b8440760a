"""
Document repository for CRUD operations.

Provides the SQL layer for memory documents. Embedding generation lives
in DocumentService; this class only persists and reads rows. Every vector
is checked against the schema dimension before it reaches PostgreSQL.
"""

import logging
from typing import Any

from memstore.documents.schemas import (
    DEFAULT_CONTAINER_TAG,
    Document,
    DocumentStatus,
    row_to_document,
    vector_to_sql,
)
from memstore.embedding.config import EMBEDDING_DIMENSIONS
from memstore.exceptions import EmbeddingDimensionError
from memstore.storage.database import Database

logger = logging.getLogger(__name__)

_DOCUMENT_COLUMNS = "id, content, metadata, container_tag, status, created_at, updated_at"


def _parse_row_count(status: str) -> int:
    """Extract the affected-row count from a command tag like 'DELETE 3'."""
    try:
        return int(status.rsplit(" ", 1)[-1])
    except (ValueError, AttributeError, IndexError):
        return 0


class DocumentRepository:
    """
    Repository for document storage and retrieval.

    Provides:
    - Single inserts with the vector written alongside the text
    - Point lookups and paginated listing by container tag
    - Column-group updates (content+embedding, metadata) that never
      overwrite each other
    - Physical deletion by id, id list, or container tag

    Tables:
        - documents: Main document storage
    """

    def __init__(self, database: Database, dimensions: int = EMBEDDING_DIMENSIONS):
        """
        Initialize repository.

        Args:
            database: Connected Database instance
            dimensions: Vector dimension declared by the storage schema
        """
        self._db = database
        self._dimensions = dimensions

    @property
    def dimensions(self) -> int:
        return self._dimensions

    def _check_dimension(self, embedding: list[float]) -> str:
        """Reject vectors that disagree with the schema, then format for SQL."""
        if len(embedding) != self._dimensions:
            raise EmbeddingDimensionError(expected=self._dimensions, actual=len(embedding))
        return vector_to_sql(embedding)

    async def insert(
        self,
        doc_id: str,
        content: str,
        embedding: list[float] | None,
        metadata: dict[str, Any] | None = None,
        container_tag: str = DEFAULT_CONTAINER_TAG,
        status: DocumentStatus = DocumentStatus.PROCESSED,
    ) -> Document:
        """
        Insert a single document.

        Args:
            doc_id: New unique identifier
            content: Document text
            embedding: Vector for the text (None for not-yet-embedded rows)
            metadata: JSON metadata
            container_tag: Partition label
            status: Ingestion status

        Returns:
            The stored Document with DB-assigned timestamps

        Raises:
            EmbeddingDimensionError: If the vector has the wrong length
        """
        vector = self._check_dimension(embedding) if embedding is not None else None

        sql = f"""
            INSERT INTO documents (id, content, metadata, embedding, container_tag, status)
            VALUES ($1, $2, $3::jsonb, $4::vector, $5, $6)
            RETURNING {_DOCUMENT_COLUMNS}
        """
        row = await self._db.fetchrow(
            sql,
            doc_id,
            content,
            metadata or {},
            vector,
            container_tag,
            status.value,
        )
        document = row_to_document(row)
        document.embedding = embedding
        return document

    async def get_by_id(self, doc_id: str, include_embedding: bool = False) -> Document | None:
        """
        Get a document by ID.

        Args:
            doc_id: Document identifier
            include_embedding: Whether to load the vector column

        Returns:
            Document or None if not found
        """
        columns = _DOCUMENT_COLUMNS + (", embedding::text AS embedding" if include_embedding else "")
        row = await self._db.fetchrow(
            f"SELECT {columns} FROM documents WHERE id = $1",
            doc_id,
        )
        return row_to_document(row) if row else None

    async def exists(self, doc_id: str) -> bool:
        """Check whether a document exists."""
        found = await self._db.fetchval("SELECT 1 FROM documents WHERE id = $1", doc_id)
        return found is not None

    async def list_documents(
        self,
        container_tag: str | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> list[Document]:
        """
        List documents, newest first.

        Args:
            container_tag: Optional tag filter
            limit: Page size
            offset: Rows to skip

        Returns:
            Documents ordered by created_at descending
        """
        conditions: list[str] = []
        params: list[Any] = []
        param_idx = 1

        if container_tag:
            conditions.append(f"container_tag = ${param_idx}")
            params.append(container_tag)
            param_idx += 1

        where_clause = ""
        if conditions:
            where_clause = "WHERE " + " AND ".join(conditions)

        sql = f"""
            SELECT {_DOCUMENT_COLUMNS}
            FROM documents
            {where_clause}
            ORDER BY created_at DESC, id
            LIMIT ${param_idx} OFFSET ${param_idx + 1}
        """
        params.extend([limit, offset])

        rows = await self._db.fetch(sql, *params)
        return [row_to_document(row) for row in rows]

    async def count_documents(self, container_tag: str | None = None) -> int:
        """Count documents for the same tag filter used by list_documents()."""
        if container_tag:
            total = await self._db.fetchval(
                "SELECT COUNT(*) FROM documents WHERE container_tag = $1",
                container_tag,
            )
        else:
            total = await self._db.fetchval("SELECT COUNT(*) FROM documents")
        return int(total or 0)

    async def list_by_status(self, status: DocumentStatus) -> list[Document]:
        """Get all documents in the given ingestion status, newest first."""
        sql = f"""
            SELECT {_DOCUMENT_COLUMNS}
            FROM documents
            WHERE status = $1
            ORDER BY created_at DESC
        """
        rows = await self._db.fetch(sql, status.value)
        return [row_to_document(row) for row in rows]

    async def update_content(
        self,
        doc_id: str,
        content: str,
        embedding: list[float],
    ) -> bool:
        """
        Replace content and its embedding together.

        Only the content/embedding column group is written, so a
        concurrent metadata merge on the same row is preserved.

        Returns:
            True if the document was updated
        """
        vector = self._check_dimension(embedding)
        sql = """
            UPDATE documents
            SET content = $2,
                embedding = $3::vector,
                status = $4,
                updated_at = NOW()
            WHERE id = $1
            RETURNING id
        """
        result = await self._db.fetchval(
            sql, doc_id, content, vector, DocumentStatus.PROCESSED.value
        )
        return result is not None

    async def merge_metadata(self, doc_id: str, patch: dict[str, Any]) -> bool:
        """
        Shallow-merge a patch into the document's metadata.

        Top-level keys in the patch overwrite; all other keys are kept.

        Returns:
            True if the document was updated
        """
        sql = """
            UPDATE documents
            SET metadata = metadata || $2::jsonb,
                updated_at = NOW()
            WHERE id = $1
            RETURNING id
        """
        result = await self._db.fetchval(sql, doc_id, patch)
        return result is not None

    async def delete(self, doc_id: str) -> bool:
        """
        Delete a document by ID.

        Returns:
            True if a row was removed
        """
        result = await self._db.fetchval(
            "DELETE FROM documents WHERE id = $1 RETURNING id",
            doc_id,
        )
        return result is not None

    async def delete_many(self, doc_ids: list[str]) -> list[str]:
        """
        Delete documents by ID.

        Args:
            doc_ids: Document IDs to delete (unknown IDs are ignored)

        Returns:
            IDs that were actually deleted
        """
        if not doc_ids:
            return []

        rows = await self._db.fetch(
            "DELETE FROM documents WHERE id = ANY($1::text[]) RETURNING id",
            doc_ids,
        )
        deleted = [row["id"] for row in rows]

        logger.info(f"Deleted {len(deleted)}/{len(doc_ids)} documents")
        return deleted

    async def delete_by_tag(self, container_tag: str) -> int:
        """
        Delete every document with the given container tag.

        Returns:
            Number of documents deleted
        """
        status = await self._db.execute(
            "DELETE FROM documents WHERE container_tag = $1",
            container_tag,
        )
        deleted = _parse_row_count(status)

        logger.info(f"Deleted {deleted} documents with container_tag={container_tag!r}")
        return deleted
