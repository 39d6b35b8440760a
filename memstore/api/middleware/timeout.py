"""
Request timeout middleware.

Bounds each request so a stalled embedding call or database query cannot
hold a worker indefinitely. Expired requests get 504 with the standard
``{"error": ...}`` body. Liveness probes are excluded.
"""

import asyncio
from collections.abc import Sequence

import structlog
from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

logger = structlog.get_logger(__name__)


class TimeoutMiddleware(BaseHTTPMiddleware):
    """Cancel requests that run longer than ``timeout_seconds``."""

    def __init__(
        self,
        app: ASGIApp,
        timeout_seconds: float = 30.0,
        exclude_prefixes: Sequence[str] = ("/health",),
    ):
        super().__init__(app)
        self.timeout_seconds = timeout_seconds
        self.exclude_prefixes = tuple(exclude_prefixes)

    async def dispatch(self, request: Request, call_next):
        if request.url.path.startswith(self.exclude_prefixes):
            return await call_next(request)

        try:
            async with asyncio.timeout(self.timeout_seconds):
                return await call_next(request)
        except TimeoutError:
            logger.warning(
                "Request timed out",
                path=request.url.path,
                method=request.method,
                timeout_seconds=self.timeout_seconds,
            )
            return JSONResponse(
                status_code=504,
                content={"error": f"Request timed out after {self.timeout_seconds}s"},
            )
