"""Authentication dependencies for FastAPI routes.

Requests authenticate with a Supabase access token in the
``Authorization: Bearer`` header. Any missing or invalid token is a 401.
"""

from functools import lru_cache
from typing import Annotated, Optional

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from permit_buddy.core.config import settings
from permit_buddy.core.jwks import JWKSService
from permit_buddy.core.jwt import JWTVerifier
from permit_buddy.schemas.auth import CurrentUser
from permit_buddy.utils.logging import get_logger

LOGGER = get_logger(__name__)

security = HTTPBearer(auto_error=False)


@lru_cache
def get_jwks_service() -> JWKSService:
    """Process-wide JWKS client so fetched keys stay cached between requests."""
    return JWKSService(
        supabase_url=settings.supabase_url,
        cache_ttl=settings.supabase_jwks_cache_ttl,
    )


def get_jwt_verifier(
    jwks_service: Annotated[JWKSService, Depends(get_jwks_service)],
) -> JWTVerifier:
    return JWTVerifier(
        supabase_url=settings.supabase_url,
        jwt_secret=settings.supabase_jwt_secret,
        jwks_service=jwks_service,
    )


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user(
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(security)],
    verifier: Annotated[JWTVerifier, Depends(get_jwt_verifier)],
) -> CurrentUser:
    """Get the current authenticated user from the bearer token.

    Returns:
        CurrentUser: Authenticated user information

    Raises:
        HTTPException: 401 if the token is missing, invalid, or expired
    """
    if not credentials:
        LOGGER.warning("No authorization credentials provided")
        raise _unauthorized("Unauthorized")

    try:
        claims = await verifier.verify_token(credentials.credentials)
    except jwt.InvalidTokenError as e:
        LOGGER.warning(f"Invalid token: {e}")
        raise _unauthorized("Unauthorized") from e

    user = CurrentUser(
        id=claims.sub,
        email=claims.email or None,
        role=claims.role,
        app_metadata=claims.app_metadata,
        user_metadata=claims.user_metadata,
    )
    LOGGER.debug(f"Authenticated user: {user.id}")
    return user
