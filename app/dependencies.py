"""Authentication dependencies for FastAPI routes.

Two independent credential chains: session bearer tokens for user-facing
routes and ``X-API-Key`` for machine routes. Both attach the resolved user to
``request.state`` before the route body runs.
"""

import logging
from dataclasses import dataclass

from fastapi import Depends, Request
from fastapi.security import APIKeyHeader, HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from app.database import get_db
from app.exceptions import APIKeyError, AuthenticationError
from app.services.api_key import get_api_key_service
from app.services.jwt import get_jwt_service

logger = logging.getLogger("kkal_tracker.auth")

API_KEY_HEADER = "X-API-Key"

bearer_scheme = HTTPBearer(auto_error=False)
api_key_scheme = APIKeyHeader(name=API_KEY_HEADER, auto_error=False)


@dataclass
class CurrentUser:
    """Authenticated user context from a session token."""

    user_id: int
    email: str


@dataclass
class APIKeyPrincipal:
    """Authenticated machine client."""

    user_id: int
    key_id: int
    key_prefix: str


def get_current_user(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> CurrentUser:
    """Require ``Authorization: Bearer <token>``. Raises 401 if missing or invalid."""
    if credentials is None:
        raise AuthenticationError("Not authenticated", code="MISSING_TOKEN")

    claims = get_jwt_service().validate_token(credentials.credentials)

    request.state.user_id = claims.user_id
    request.state.user_email = claims.email
    return CurrentUser(user_id=claims.user_id, email=claims.email)


def get_api_key_principal(
    request: Request,
    raw_key: str | None = Depends(api_key_scheme),
    db: Session = Depends(get_db),
) -> APIKeyPrincipal:
    """Require a valid ``X-API-Key``. Every rejection reason yields the same 401."""
    if not raw_key:
        raise AuthenticationError("API key required", code="MISSING_API_KEY")

    try:
        api_key = get_api_key_service().validate_key(db, raw_key)
    except APIKeyError as e:
        logger.debug("API key rejected: %s", e.reason)
        raise

    request.state.user_id = api_key.user_id
    return APIKeyPrincipal(user_id=api_key.user_id, key_id=api_key.id, key_prefix=api_key.key_prefix)
