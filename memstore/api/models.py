"""
Request and response models for the memory API.

Field names on the wire are camelCase (``containerTag``, ``createdAt``);
Python attributes are snake_case. Models accept either form on input and
always serialize by alias.

Timestamps are UTC with millisecond precision (``2026-03-01T12:00:00.000Z``).
"""

import datetime as dt
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, SerializerFunctionWrapHandler, model_serializer

from memstore.documents.schemas import Document
from memstore.vectorstore.base import VectorSearchResult


def format_timestamp(value: dt.datetime | None) -> str | None:
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=dt.timezone.utc)
    value = value.astimezone(dt.timezone.utc)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"


class APIModel(BaseModel):
    """Base model with camelCase aliases."""

    model_config = ConfigDict(populate_by_name=True)


# Documents


class AddDocumentRequest(APIModel):
    """Request model for adding a single document."""

    content: str | None = Field(default=None, description="Document text (required)")
    metadata: dict[str, Any] | None = Field(default=None, description="Arbitrary JSON metadata")
    container_tag: str | None = Field(
        default=None,
        alias="containerTag",
        description="Partition label (default: 'default')",
    )


class AddDocumentResponse(APIModel):
    """Response model for a stored document."""

    id: str
    status: str = "processed"
    message: str = "Document added successfully"


class BatchAddRequest(APIModel):
    """Request model for batch document insert."""

    documents: list[AddDocumentRequest] | None = Field(
        default=None,
        description="Documents to store",
    )


class BatchItemResponse(APIModel):
    """Per-item outcome of a batch insert.

    Stored items serialize as `{id, status}`; failed items add `error`.
    """

    id: str | None
    status: str
    error: str | None = None

    @model_serializer(mode="wrap")
    def _omit_empty_error(self, handler: SerializerFunctionWrapHandler) -> dict[str, Any]:
        data = handler(self)
        if self.error is None:
            data.pop("error", None)
        return data


class BatchAddResponse(APIModel):
    """Response model for batch document insert."""

    results: list[BatchItemResponse]


class ListDocumentsRequest(APIModel):
    """Request model for paginated document listing."""

    container_tag: str | None = Field(default=None, alias="containerTag")
    limit: int = Field(default=50, ge=0, le=1000)
    offset: int = Field(default=0, ge=0)


class DocumentItem(APIModel):
    """A stored document as returned by the API."""

    id: str
    content: str
    metadata: dict[str, Any] = Field(default_factory=dict)
    container_tag: str = Field(alias="containerTag")
    status: str
    created_at: str = Field(alias="createdAt")
    updated_at: str = Field(alias="updatedAt")

    @classmethod
    def from_document(cls, document: Document) -> "DocumentItem":
        return cls(
            id=document.id,
            content=document.content,
            metadata=document.metadata,
            container_tag=document.container_tag,
            status=document.status.value,
            created_at=format_timestamp(document.created_at),
            updated_at=format_timestamp(document.updated_at),
        )


class ListDocumentsResponse(APIModel):
    """Response model for document listing."""

    documents: list[DocumentItem]
    total: int


class ProcessingDocumentsResponse(APIModel):
    """Response model for documents awaiting embedding."""

    documents: list[DocumentItem]


class UpdateDocumentRequest(APIModel):
    """Request model for updating content and/or metadata."""

    content: str | None = None
    metadata: dict[str, Any] | None = None


class DocumentStatusResponse(APIModel):
    """Response model for update and delete."""

    id: str
    status: str


class BulkDeleteRequest(APIModel):
    """Request model for bulk delete by id."""

    ids: list[str] | None = None


class BulkDeleteResponse(APIModel):
    """Response model for bulk delete."""

    deleted: list[str]
    count: int


class FileUploadResponse(APIModel):
    """Response model for file upload."""

    id: str
    status: str = "processed"


# Search


class SearchRequest(APIModel):
    """Request model for similarity search."""

    q: str | None = Field(default=None, description="Query text (required)")
    container_tag: str | None = Field(default=None, alias="containerTag")
    limit: int | None = Field(default=None, ge=0, description="Maximum results (default 10)")
    threshold: float | None = Field(
        default=None,
        ge=-1.0,
        le=1.0,
        description="Exclusive minimum score (default 0.3)",
    )


class SearchResultV3(APIModel):
    """A search hit in the v3 shape."""

    id: str
    content: str
    metadata: dict[str, Any] = Field(default_factory=dict)
    container_tag: str | None = Field(default=None, alias="containerTag")
    score: float
    created_at: str | None = Field(default=None, alias="createdAt")
    updated_at: str | None = Field(default=None, alias="updatedAt")

    @classmethod
    def from_result(cls, result: VectorSearchResult) -> "SearchResultV3":
        return cls(
            id=result.document_id,
            content=result.content,
            metadata=result.metadata,
            container_tag=result.container_tag,
            score=result.score,
            created_at=format_timestamp(result.created_at),
            updated_at=format_timestamp(result.updated_at),
        )


class SearchResponseV3(APIModel):
    """Response model for /v3/search."""

    results: list[SearchResultV3]
    count: int


class MemoryV4(APIModel):
    """A search hit in the v4 shape (no containerTag or updatedAt)."""

    id: str
    content: str
    metadata: dict[str, Any] = Field(default_factory=dict)
    score: float
    created_at: str | None = Field(default=None, alias="createdAt")

    @classmethod
    def from_result(cls, result: VectorSearchResult) -> "MemoryV4":
        return cls(
            id=result.document_id,
            content=result.content,
            metadata=result.metadata,
            score=result.score,
            created_at=format_timestamp(result.created_at),
        )


class SearchResponseV4(APIModel):
    """Response model for /v4/search."""

    memories: list[MemoryV4]


# Memories


class ForgetRequest(APIModel):
    """Request model for DELETE /v4/memories."""

    ids: list[str] | None = None
    container_tag: str | None = Field(default=None, alias="containerTag")


class ForgetResponse(APIModel):
    """Response model for DELETE /v4/memories."""

    deleted: int


class UpdateMemoryRequest(APIModel):
    """Request model for PATCH /v4/memories."""

    id: str | None = None
    content: str | None = None
    metadata: dict[str, Any] | None = None


# Health


class HealthResponse(APIModel):
    """Response model for health check."""

    status: str = Field(default="ok", description="Always 'ok' when the process is serving")
    version: str
    database: str = Field(
        default="unavailable",
        description="Database reachability: ok or unavailable",
    )


class ErrorResponse(APIModel):
    """Response model for errors."""

    error: str
