"""
API authentication using a bearer token in the Authorization header.
"""

from fastapi import HTTPException, Security, status
from fastapi.security import APIKeyHeader

from memstore.config.settings import get_settings

# Read the raw header; the "Bearer " prefix is checked exactly below
authorization_header = APIKeyHeader(name="Authorization", auto_error=False)

_BEARER_PREFIX = "Bearer "


async def verify_api_key(authorization: str | None = Security(authorization_header)) -> str:
    """
    Verify the bearer token against the configured API key.

    Args:
        authorization: Raw Authorization header value

    Returns:
        The validated key, or "dev-mode" when no key is configured

    Raises:
        HTTPException: 401 if the token is missing or does not match
    """
    settings = get_settings()

    # No key configured: allow all requests (dev mode)
    if not settings.auth_enabled:
        return "dev-mode"

    token = None
    if authorization and authorization.startswith(_BEARER_PREFIX):
        token = authorization[len(_BEARER_PREFIX):]

    if token != settings.api_key:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
        )

    return token
