"""Schema definitions for memory documents.

Maps 1:1 to the ``documents`` database table. A document is one stored
memory unit: text, open metadata, its embedding and a container tag.
"""

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

DEFAULT_CONTAINER_TAG = "default"


class DocumentStatus(str, Enum):
    """Ingestion state of a document.

    ``processing`` is reserved for asynchronous ingestion; the synchronous
    write path always stores ``processed``.
    """

    PROCESSING = "processing"
    PROCESSED = "processed"


@dataclass
class Document:
    """A persisted document from the documents table.

    Attributes:
        id: Opaque unique identifier, assigned at creation.
        content: Text body.
        metadata: Open JSON mapping, shallow-merged on update.
        container_tag: Partition label used to scope search and deletion.
        status: Ingestion state.
        created_at: Creation time, immutable.
        updated_at: Refreshed on every mutation.
        embedding: Vector derived from content, None until embedded.
    """

    id: str
    content: str
    metadata: dict[str, Any] = field(default_factory=dict)
    container_tag: str = DEFAULT_CONTAINER_TAG
    status: DocumentStatus = DocumentStatus.PROCESSED
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    embedding: list[float] | None = None


@dataclass
class NewDocument:
    """Input for a single document in a batch insert."""

    content: str
    metadata: dict[str, Any] | None = None
    container_tag: str | None = None


@dataclass
class BatchItemResult:
    """Outcome of one item of a batch insert.

    Batch inserts are best-effort per item: each entry reports whether
    that item was persisted.
    """

    index: int
    id: str | None
    status: str
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.status == DocumentStatus.PROCESSED.value


def vector_to_sql(embedding: list[float]) -> str:
    """Format an embedding as a pgvector text literal."""
    return f"[{','.join(str(float(x)) for x in embedding)}]"


def vector_from_sql(value: Any) -> list[float] | None:
    """Parse a pgvector column value returned in text form."""
    if value is None:
        return None
    if isinstance(value, str):
        stripped = value.strip("[]")
        if not stripped:
            return []
        return [float(x) for x in stripped.split(",")]
    return [float(x) for x in value]


def row_to_document(row: Any) -> Document:
    """Convert a database row to a Document."""
    metadata = row.get("metadata") or {}
    if isinstance(metadata, str):
        metadata = json.loads(metadata)

    return Document(
        id=row["id"],
        content=row["content"],
        metadata=dict(metadata),
        container_tag=row.get("container_tag") or DEFAULT_CONTAINER_TAG,
        status=DocumentStatus(row.get("status") or DocumentStatus.PROCESSED.value),
        created_at=row["created_at"],
        updated_at=row.get("updated_at") or row["created_at"],
        embedding=vector_from_sql(row.get("embedding")),
    )
