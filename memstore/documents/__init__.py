"""
Memory documents: schemas and the embedding-aware document service.

The service lives in ``memstore.documents.service`` and is imported from
there directly; this package only re-exports the plain data types so the
storage layer can depend on them without import cycles.
"""

from memstore.documents.schemas import (
    DEFAULT_CONTAINER_TAG,
    BatchItemResult,
    Document,
    DocumentStatus,
    NewDocument,
)

__all__ = [
    "DEFAULT_CONTAINER_TAG",
    "BatchItemResult",
    "Document",
    "DocumentStatus",
    "NewDocument",
]
