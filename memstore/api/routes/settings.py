"""
Settings endpoints: read and shallow-merge the single settings record.
"""

from typing import Any

from fastapi import APIRouter, Body, Depends

from memstore.api.dependencies import get_settings_repository
from memstore.api.models import ErrorResponse
from memstore.storage.settings_repository import SettingsRepository

router = APIRouter(prefix="/v3/settings")


@router.get("", summary="Get settings")
async def get_settings_data(
    repository: SettingsRepository = Depends(get_settings_repository),
) -> dict[str, Any]:
    return await repository.get()


@router.patch(
    "",
    responses={400: {"model": ErrorResponse, "description": "Body is not a JSON object"}},
    summary="Merge settings",
)
async def merge_settings(
    patch: dict[str, Any] = Body(...),
    repository: SettingsRepository = Depends(get_settings_repository),
) -> dict[str, Any]:
    """Top-level keys in the body overwrite stored keys; others are kept."""
    return await repository.merge(patch)
