"""
Memory endpoints: forget, update and the profile echo.
"""

from typing import Any

from fastapi import APIRouter, Body, Depends

from memstore.api.dependencies import get_document_service
from memstore.api.models import (
    DocumentStatusResponse,
    ErrorResponse,
    ForgetRequest,
    ForgetResponse,
    UpdateMemoryRequest,
)
from memstore.documents.service import DocumentService
from memstore.exceptions import ValidationError

router = APIRouter(prefix="/v4")


@router.delete(
    "/memories",
    response_model=ForgetResponse,
    responses={400: {"model": ErrorResponse, "description": "Neither ids nor containerTag"}},
    summary="Forget memories",
)
async def forget_memories(
    body: ForgetRequest | None = None,
    service: DocumentService = Depends(get_document_service),
) -> ForgetResponse:
    """Delete by `ids` when given, otherwise every memory in `containerTag`."""
    body = body or ForgetRequest()

    if body.ids is not None:
        deleted = await service.delete_bulk(body.ids)
        return ForgetResponse(deleted=len(deleted))

    if body.container_tag:
        count = await service.delete_by_tag(body.container_tag)
        return ForgetResponse(deleted=count)

    raise ValidationError("Provide ids or containerTag")


@router.patch(
    "/memories",
    response_model=DocumentStatusResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Missing id"},
        404: {"model": ErrorResponse, "description": "Memory not found"},
    },
    summary="Update a memory",
)
async def update_memory(
    body: UpdateMemoryRequest,
    service: DocumentService = Depends(get_document_service),
) -> DocumentStatusResponse:
    if not body.id:
        raise ValidationError("id is required")

    await service.update(body.id, content=body.content, metadata=body.metadata)
    return DocumentStatusResponse(id=body.id, status="updated")


@router.post("/profile", summary="Profile placeholder")
async def profile(body: dict[str, Any] | None = Body(default=None)) -> dict[str, Any]:
    """Echo the request body with `status: ok`."""
    return {"status": "ok", **(body or {})}
