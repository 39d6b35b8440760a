"""
Document service: the embedding-aware write path of the memory store.

Combines EmbeddingService and DocumentRepository so that every stored
document carries a vector computed from its current content:
- insert: embed, then write (all-or-nothing)
- insert_batch: one batched embedding call, then per-item writes
- update: re-embed on content change, shallow-merge metadata
- delete by id, id list, or container tag
"""

import uuid
from typing import Any

import structlog

from memstore.documents.schemas import (
    DEFAULT_CONTAINER_TAG,
    BatchItemResult,
    Document,
    DocumentStatus,
    NewDocument,
)
from memstore.embedding.service import EmbeddingService
from memstore.exceptions import NotFound, StorageFailure, ValidationError
from memstore.observability.metrics import get_metrics
from memstore.storage.repository import DocumentRepository

logger = structlog.get_logger(__name__)


def new_document_id() -> str:
    """Generate a new unique document identifier."""
    return str(uuid.uuid4())


def _require_content(content: Any, field_name: str = "content") -> str:
    if not isinstance(content, str) or not content.strip():
        raise ValidationError(f"{field_name} is required")
    return content


class DocumentService:
    """
    High-level document operations.

    This is the primary interface for the API and CLI. It owns no state
    besides its injected collaborators and is safe to share across
    concurrent requests.
    """

    def __init__(
        self,
        repository: DocumentRepository,
        embedding_service: EmbeddingService,
    ):
        """
        Initialize the service.

        Args:
            repository: SQL access for the documents table
            embedding_service: Client for the embedding endpoint
        """
        self._repo = repository
        self._embedding = embedding_service

    async def insert(
        self,
        content: str,
        metadata: dict[str, Any] | None = None,
        container_tag: str | None = None,
    ) -> Document:
        """
        Embed and store a single document.

        The embedding is generated before anything is written, so an
        embedding failure leaves no row behind.

        Args:
            content: Document text (required, non-empty)
            metadata: Optional JSON metadata
            container_tag: Partition label (defaults to "default")

        Returns:
            The stored document with status ``processed``

        Raises:
            ValidationError: If content is empty
            EmbeddingFailure: If the embedding call fails
            StorageFailure: If the write fails
        """
        content = _require_content(content)
        tag = container_tag or DEFAULT_CONTAINER_TAG

        embedding = await self._embedding.embed(content)
        document = await self._repo.insert(
            doc_id=new_document_id(),
            content=content,
            embedding=embedding,
            metadata=metadata,
            container_tag=tag,
            status=DocumentStatus.PROCESSED,
        )

        get_metrics().record_write("insert")
        logger.info(
            "Document stored",
            document_id=document.id,
            container_tag=tag,
            content_length=len(content),
        )
        return document

    async def insert_batch(self, items: list[NewDocument]) -> list[BatchItemResult]:
        """
        Embed and store several documents.

        Items with empty content are reported as failed and skipped. All
        remaining texts are embedded in one batched call; if that call
        fails nothing is written. Rows are then written one by one. A
        failed write marks that item failed and the batch continues; rows
        already written stay committed.

        Args:
            items: Documents to store

        Returns:
            One result per input item, in input order

        Raises:
            ValidationError: If items is empty
            EmbeddingFailure: If the batched embedding call fails
        """
        if not items:
            raise ValidationError("documents array is required")

        results: list[BatchItemResult | None] = [None] * len(items)
        valid: list[tuple[int, NewDocument]] = []

        for index, item in enumerate(items):
            if not isinstance(item.content, str) or not item.content.strip():
                results[index] = BatchItemResult(
                    index=index,
                    id=None,
                    status="failed",
                    error="content is required",
                )
            else:
                valid.append((index, item))

        if valid:
            embeddings = await self._embedding.embed_batch([item.content for _, item in valid])

            for (index, item), embedding in zip(valid, embeddings):
                doc_id = new_document_id()
                try:
                    await self._repo.insert(
                        doc_id=doc_id,
                        content=item.content,
                        embedding=embedding,
                        metadata=item.metadata,
                        container_tag=item.container_tag or DEFAULT_CONTAINER_TAG,
                        status=DocumentStatus.PROCESSED,
                    )
                except StorageFailure as e:
                    logger.warning(
                        "Batch item write failed",
                        index=index,
                        error=str(e),
                    )
                    results[index] = BatchItemResult(
                        index=index, id=None, status="failed", error=str(e)
                    )
                    continue

                results[index] = BatchItemResult(
                    index=index, id=doc_id, status=DocumentStatus.PROCESSED.value
                )

        final = [r for r in results if r is not None]
        stored = sum(1 for r in final if r.ok)
        get_metrics().record_write("batch_insert", stored)
        logger.info(
            "Batch stored",
            requested=len(items),
            stored=stored,
            failed=len(final) - stored,
        )
        return final

    async def insert_file(
        self,
        filename: str | None,
        data: bytes,
        content_type: str | None = None,
    ) -> Document:
        """
        Store an uploaded file's text content.

        Bytes are decoded as UTF-8 (invalid sequences replaced). The file
        name, size and MIME type are recorded as metadata.

        Raises:
            ValidationError: If the file has no text content
        """
        content = data.decode("utf-8", errors="replace")
        if not content.strip():
            raise ValidationError("file is empty")

        metadata = {
            "filename": filename,
            "size": len(data),
            "type": content_type or "",
        }
        document = await self.insert(content, metadata=metadata)
        get_metrics().record_write("file")
        return document

    async def get(self, doc_id: str, include_embedding: bool = False) -> Document:
        """
        Get a document by ID.

        Raises:
            NotFound: If the document does not exist
        """
        document = await self._repo.get_by_id(doc_id, include_embedding=include_embedding)
        if document is None:
            raise NotFound(doc_id)
        return document

    async def list_documents(
        self,
        container_tag: str | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> tuple[list[Document], int]:
        """
        List documents newest first.

        Returns:
            (page of documents, total count for the same tag filter)
        """
        if limit < 0 or offset < 0:
            raise ValidationError("limit and offset must be non-negative")

        documents = await self._repo.list_documents(
            container_tag=container_tag, limit=limit, offset=offset
        )
        total = await self._repo.count_documents(container_tag=container_tag)
        return documents, total

    async def update(
        self,
        doc_id: str,
        content: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> None:
        """
        Update content and/or metadata.

        New content is embedded before anything is written, so a failed
        embedding leaves the document unchanged. Metadata is merged
        shallowly into the existing mapping.

        Raises:
            NotFound: If the document does not exist
            ValidationError: If content is given but empty
            EmbeddingFailure: If re-embedding fails
        """
        if content is not None:
            _require_content(content)
        if metadata is not None and not isinstance(metadata, dict):
            raise ValidationError("metadata must be a JSON object")

        if not await self._repo.exists(doc_id):
            raise NotFound(doc_id)

        if content is not None:
            embedding = await self._embedding.embed(content)
            if not await self._repo.update_content(doc_id, content, embedding):
                raise NotFound(doc_id)

        if metadata is not None:
            if not await self._repo.merge_metadata(doc_id, metadata):
                raise NotFound(doc_id)

        get_metrics().record_write("update")
        logger.info(
            "Document updated",
            document_id=doc_id,
            content_changed=content is not None,
            metadata_keys=sorted(metadata) if metadata else [],
        )

    async def delete(self, doc_id: str) -> bool:
        """
        Delete a document.

        Returns:
            True if the document existed and was removed
        """
        deleted = await self._repo.delete(doc_id)
        if deleted:
            get_metrics().record_delete("single", 1)
            logger.info("Document deleted", document_id=doc_id)
        return deleted

    async def delete_bulk(self, doc_ids: list[str]) -> list[str]:
        """
        Delete several documents by ID.

        Returns:
            IDs that were actually deleted
        """
        if not isinstance(doc_ids, list) or not all(isinstance(i, str) for i in doc_ids):
            raise ValidationError("ids array is required")

        deleted = await self._repo.delete_many(doc_ids)
        get_metrics().record_delete("bulk", len(deleted))
        return deleted

    async def delete_by_tag(self, container_tag: str) -> int:
        """
        Delete every document in a container.

        Returns:
            Number of documents deleted
        """
        if not container_tag:
            raise ValidationError("containerTag is required")

        count = await self._repo.delete_by_tag(container_tag)
        get_metrics().record_delete("tag", count)
        return count

    async def list_processing(self) -> list[Document]:
        """Documents accepted but not yet embedded."""
        return await self._repo.list_by_status(DocumentStatus.PROCESSING)
