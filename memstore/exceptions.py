"""
Error taxonomy for the memory store.

Every error raised by the core derives from MemstoreError so the API
layer can map it to a status code in one place.
"""


class MemstoreError(Exception):
    """Base exception for all memstore errors."""

    status_code: int = 500


class ValidationError(MemstoreError):
    """
    A required field is missing or empty.

    Raised before any external call is made. Never retried.
    """

    status_code = 400


class NotFound(MemstoreError):
    """The requested document does not exist."""

    status_code = 404

    def __init__(self, document_id: str, message: str = "Document not found"):
        super().__init__(message)
        self.document_id = document_id


class EmbeddingFailure(MemstoreError):
    """
    The external embedding call failed or returned malformed data.

    Raised when:
    - The inference endpoint is unreachable or times out
    - The endpoint returns a non-success status
    - The response is missing vectors or has the wrong shape

    The failing operation is aborted; nothing is written.
    """

    status_code = 502

    def __init__(self, message: str, cause: BaseException | None = None):
        super().__init__(message)
        self.cause = cause


class EmbeddingDimensionError(EmbeddingFailure):
    """
    A vector does not match the dimension declared by the storage schema.

    This is a configuration error: the embedding model or the `dimensions`
    setting disagrees with the `vector(N)` column. Changing the dimension
    requires recreating every stored vector.
    """

    status_code = 500

    def __init__(self, expected: int, actual: int):
        super().__init__(
            f"Embedding dimension mismatch: storage expects {expected}, got {actual}. "
            "Check EMBEDDING_DIMENSIONS against the documents.embedding column."
        )
        self.expected = expected
        self.actual = actual


class StorageFailure(MemstoreError):
    """
    Database connection or query failure.

    Raised when:
    - The pool is exhausted and no connection frees up in time
    - The connection is lost mid-query
    - PostgreSQL rejects a statement
    """

    status_code = 503
