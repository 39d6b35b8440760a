"""
Document endpoints: add, batch add, list, get, update and delete.

Static paths (``/batch``, ``/list``, ``/file``, ``/bulk``, ``/processing``)
are registered before ``/{document_id}`` so they are never captured as ids.
"""

from fastapi import APIRouter, Depends, File, UploadFile
from starlette.requests import Request

from memstore.api.dependencies import get_document_service
from memstore.api.models import (
    AddDocumentRequest,
    AddDocumentResponse,
    BatchAddRequest,
    BatchAddResponse,
    BatchItemResponse,
    BulkDeleteRequest,
    BulkDeleteResponse,
    DocumentItem,
    DocumentStatusResponse,
    ErrorResponse,
    FileUploadResponse,
    ListDocumentsRequest,
    ListDocumentsResponse,
    ProcessingDocumentsResponse,
    UpdateDocumentRequest,
)
from memstore.api.rate_limit import limiter
from memstore.config.settings import get_settings
from memstore.documents.schemas import NewDocument
from memstore.documents.service import DocumentService
from memstore.exceptions import NotFound, ValidationError

router = APIRouter(prefix="/v3/documents")

_ERRORS = {
    400: {"model": ErrorResponse, "description": "Missing or invalid field"},
    401: {"model": ErrorResponse, "description": "Missing or invalid bearer token"},
    502: {"model": ErrorResponse, "description": "Embedding endpoint failed"},
    503: {"model": ErrorResponse, "description": "Database unavailable"},
}


@router.post(
    "",
    response_model=AddDocumentResponse,
    responses=_ERRORS,
    summary="Add a document",
)
@limiter.limit(lambda: get_settings().rate_limit_default)
async def add_document(
    request: Request,
    body: AddDocumentRequest,
    service: DocumentService = Depends(get_document_service),
) -> AddDocumentResponse:
    """Embed and store one document."""
    document = await service.insert(
        content=body.content,
        metadata=body.metadata,
        container_tag=body.container_tag,
    )
    return AddDocumentResponse(id=document.id, status=document.status.value)


@router.post(
    "/batch",
    response_model=BatchAddResponse,
    responses=_ERRORS,
    summary="Add several documents",
    description="""
    Embed all documents in one call, then store them one by one.

    The batch is not atomic. Each entry in `results` reports its own
    outcome; failed entries carry `id: null`, `status: "failed"` and an
    `error` message. If the embedding call itself fails, nothing is stored.
    """,
)
@limiter.limit(lambda: get_settings().rate_limit_default)
async def add_documents_batch(
    request: Request,
    body: BatchAddRequest,
    service: DocumentService = Depends(get_document_service),
) -> BatchAddResponse:
    if not body.documents:
        raise ValidationError("documents array is required")

    items = [
        NewDocument(
            content=doc.content or "",
            metadata=doc.metadata,
            container_tag=doc.container_tag,
        )
        for doc in body.documents
    ]
    results = await service.insert_batch(items)

    return BatchAddResponse(
        results=[
            BatchItemResponse(id=r.id, status=r.status, error=r.error)
            for r in results
        ]
    )


@router.post(
    "/list",
    response_model=ListDocumentsResponse,
    responses=_ERRORS,
    summary="List documents",
)
async def list_documents(
    body: ListDocumentsRequest | None = None,
    service: DocumentService = Depends(get_document_service),
) -> ListDocumentsResponse:
    """List documents newest first, optionally filtered by container tag."""
    body = body or ListDocumentsRequest()
    documents, total = await service.list_documents(
        container_tag=body.container_tag,
        limit=body.limit,
        offset=body.offset,
    )
    return ListDocumentsResponse(
        documents=[DocumentItem.from_document(d) for d in documents],
        total=total,
    )


@router.post(
    "/file",
    response_model=FileUploadResponse,
    responses=_ERRORS,
    summary="Upload a text file",
)
async def upload_file(
    file: UploadFile | None = File(default=None),
    service: DocumentService = Depends(get_document_service),
) -> FileUploadResponse:
    """Store the text content of an uploaded file in the default container."""
    if file is None:
        raise ValidationError("file is required")

    data = await file.read()
    document = await service.insert_file(
        filename=file.filename,
        data=data,
        content_type=file.content_type,
    )
    return FileUploadResponse(id=document.id, status=document.status.value)


@router.get(
    "/processing",
    response_model=ProcessingDocumentsResponse,
    responses=_ERRORS,
    summary="List documents awaiting embedding",
)
async def list_processing(
    service: DocumentService = Depends(get_document_service),
) -> ProcessingDocumentsResponse:
    documents = await service.list_processing()
    return ProcessingDocumentsResponse(
        documents=[DocumentItem.from_document(d) for d in documents]
    )


@router.delete(
    "/bulk",
    response_model=BulkDeleteResponse,
    responses=_ERRORS,
    summary="Delete several documents by id",
)
async def delete_bulk(
    body: BulkDeleteRequest,
    service: DocumentService = Depends(get_document_service),
) -> BulkDeleteResponse:
    if body.ids is None:
        raise ValidationError("ids array is required")

    deleted = await service.delete_bulk(body.ids)
    return BulkDeleteResponse(deleted=deleted, count=len(deleted))


@router.get(
    "/{document_id}",
    response_model=DocumentItem,
    responses={404: {"model": ErrorResponse, "description": "Document not found"}, **_ERRORS},
    summary="Get a document",
)
async def get_document(
    document_id: str,
    service: DocumentService = Depends(get_document_service),
) -> DocumentItem:
    document = await service.get(document_id)
    return DocumentItem.from_document(document)


@router.patch(
    "/{document_id}",
    response_model=DocumentStatusResponse,
    responses={404: {"model": ErrorResponse, "description": "Document not found"}, **_ERRORS},
    summary="Update a document",
)
async def update_document(
    document_id: str,
    body: UpdateDocumentRequest,
    service: DocumentService = Depends(get_document_service),
) -> DocumentStatusResponse:
    """Re-embed on content change; shallow-merge metadata."""
    await service.update(document_id, content=body.content, metadata=body.metadata)
    return DocumentStatusResponse(id=document_id, status="updated")


@router.delete(
    "/{document_id}",
    response_model=DocumentStatusResponse,
    responses={404: {"model": ErrorResponse, "description": "Document not found"}, **_ERRORS},
    summary="Delete a document",
)
async def delete_document(
    document_id: str,
    service: DocumentService = Depends(get_document_service),
) -> DocumentStatusResponse:
    if not await service.delete(document_id):
        raise NotFound(document_id)
    return DocumentStatusResponse(id=document_id, status="deleted")
