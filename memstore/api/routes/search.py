"""
Semantic search endpoints.

``/v3/search`` and ``/v4/search`` share one ranking path
(VectorStoreManager.query) and differ only in how hits are projected.
"""

import time

import structlog
from fastapi import APIRouter, Depends
from starlette.requests import Request

from memstore.api.dependencies import get_vector_store_manager
from memstore.api.models import (
    ErrorResponse,
    MemoryV4,
    SearchRequest,
    SearchResponseV3,
    SearchResponseV4,
    SearchResultV3,
)
from memstore.api.rate_limit import limiter
from memstore.config.settings import get_settings
from memstore.exceptions import ValidationError
from memstore.observability.metrics import get_metrics
from memstore.vectorstore.base import VectorSearchResult
from memstore.vectorstore.manager import VectorStoreManager

logger = structlog.get_logger(__name__)
router = APIRouter()

_ERRORS = {
    400: {"model": ErrorResponse, "description": "Missing query"},
    401: {"model": ErrorResponse, "description": "Missing or invalid bearer token"},
    502: {"model": ErrorResponse, "description": "Embedding endpoint failed"},
    503: {"model": ErrorResponse, "description": "Database unavailable"},
}


async def _run_search(
    body: SearchRequest,
    manager: VectorStoreManager,
    api_version: str,
) -> list[VectorSearchResult]:
    if not body.q or not body.q.strip():
        raise ValidationError("q (query) is required")

    start_time = time.perf_counter()
    results = await manager.query(
        text=body.q,
        limit=body.limit,
        threshold=body.threshold,
        container_tag=body.container_tag,
    )
    latency = time.perf_counter() - start_time

    get_metrics().record_search(api_version, len(results), latency)
    logger.info(
        "Search request",
        api_version=api_version,
        results=len(results),
        latency_ms=round(latency * 1000, 2),
    )
    return results


@router.post(
    "/v3/search",
    response_model=SearchResponseV3,
    responses=_ERRORS,
    summary="Search documents",
    description="""
    Find documents semantically similar to `q`.

    Score is `1 - cosine_distance` between the query and document
    embeddings. Only documents with `score > threshold` (default 0.3) are
    returned, ordered by score descending and truncated to `limit`
    (default 10). `containerTag` restricts the search to one container.
    """,
)
@limiter.limit(lambda: get_settings().rate_limit_default)
async def search_v3(
    request: Request,
    body: SearchRequest,
    manager: VectorStoreManager = Depends(get_vector_store_manager),
) -> SearchResponseV3:
    results = await _run_search(body, manager, "v3")
    return SearchResponseV3(
        results=[SearchResultV3.from_result(r) for r in results],
        count=len(results),
    )


@router.post(
    "/v4/search",
    response_model=SearchResponseV4,
    responses=_ERRORS,
    summary="Search memories",
    description="""
    Same ranking as `/v3/search`, returned as `memories` without
    `containerTag`, `updatedAt` or a count.
    """,
)
@limiter.limit(lambda: get_settings().rate_limit_default)
async def search_v4(
    request: Request,
    body: SearchRequest,
    manager: VectorStoreManager = Depends(get_vector_store_manager),
) -> SearchResponseV4:
    results = await _run_search(body, manager, "v4")
    return SearchResponseV4(memories=[MemoryV4.from_result(r) for r in results])
