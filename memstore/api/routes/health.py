"""
Health check endpoint. Never requires authentication.
"""

import structlog
from fastapi import APIRouter, Depends

from memstore.api.dependencies import get_optional_database
from memstore.api.models import HealthResponse
from memstore.config.settings import get_settings
from memstore.storage.database import Database

router = APIRouter()
logger = structlog.get_logger(__name__)


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health",
)
async def health_check(
    database: Database | None = Depends(get_optional_database),
) -> HealthResponse:
    """
    Report service liveness and database reachability.

    Always returns 200 with `status: ok` while the process is serving; a
    database outage shows up as `database: unavailable`.
    """
    database_status = "unavailable"
    if database is not None and await database.health_check():
        database_status = "ok"

    return HealthResponse(
        status="ok",
        version=get_settings().service_version,
        database=database_status,
    )
