"""Authentication dependencies for FastAPI routes.

Tokens are issued elsewhere; this module only verifies HS256 bearer tokens
signed with ``JWT_SECRET`` and exposes the user they carry.
"""

from typing import Any, Dict, Optional

import jwt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from newsnexus.core.config import settings
from newsnexus.core.exceptions import (
    AuthenticationError,
    ConfigurationError,
    PermissionDeniedError,
)
from newsnexus.schemas.auth import CurrentUser
from newsnexus.utils.logging import get_logger

LOGGER = get_logger(__name__)

# HTTP Bearer token scheme
security = HTTPBearer(auto_error=False)


def decode_token(token: str) -> Dict[str, Any]:
    """Verify a bearer token and return its payload.

    Raises:
        AuthenticationError: If the token is invalid or expired
        ConfigurationError: If no signing secret is configured
    """
    if not settings.auth.jwt_secret:
        raise ConfigurationError("JWT_SECRET is not configured")

    try:
        return jwt.decode(
            token,
            settings.auth.jwt_secret,
            algorithms=[settings.auth.jwt_algorithm],
        )
    except jwt.ExpiredSignatureError as e:
        LOGGER.warning("Expired token")
        raise AuthenticationError("Token expired", original_error=e) from e
    except jwt.InvalidTokenError as e:
        LOGGER.warning(f"Invalid token: {e}")
        raise AuthenticationError("Invalid authentication token", original_error=e) from e


def create_access_token(payload: Dict[str, Any]) -> str:
    """Sign a payload with the configured secret (used by tests and tooling)."""
    return jwt.encode(payload, settings.auth.jwt_secret, algorithm=settings.auth.jwt_algorithm)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> CurrentUser:
    """Get the current authenticated user from the bearer token.

    Args:
        credentials: HTTP Authorization credentials (automatically injected)

    Returns:
        CurrentUser: Authenticated user information

    Raises:
        AuthenticationError: If the token is missing or invalid
    """
    if not credentials:
        LOGGER.warning("No authorization credentials provided")
        raise AuthenticationError("Authorization header missing")

    claims = decode_token(credentials.credentials)

    user_id = claims.get("id", claims.get("sub"))
    try:
        user_id = int(user_id)
    except (TypeError, ValueError) as e:
        raise AuthenticationError("Token does not identify a user", original_error=e) from e

    user = CurrentUser(
        id=user_id,
        email=claims.get("email"),
        username=claims.get("username"),
        is_admin=bool(claims.get("isAdmin") or claims.get("is_admin") or claims.get("role") == "admin"),
    )
    LOGGER.debug(f"Authenticated user: {user.id} ({user.email})")
    return user


async def require_admin(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
    """Dependency that only lets administrators through."""
    if not user.is_admin:
        LOGGER.warning(f"Access denied for user {user.id}: admin required")
        raise PermissionDeniedError("Insufficient permissions. Admin access required")
    return user
