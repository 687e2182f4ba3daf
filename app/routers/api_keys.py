"""API key management endpoints."""

from fastapi import APIRouter, Depends, Request, Response, status
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import CurrentUser, get_current_user
from app.rate_limit import limiter
from app.schemas.api_key import APIKeyCreateRequest, APIKeyCreateResponse, APIKeyResponse
from app.services.api_key import get_api_key_service

router = APIRouter(prefix="/api/v1/api-keys", tags=["API Keys"])


@router.post("", response_model=APIKeyCreateResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit("10/minute")
def create_api_key(
    request: Request,
    body: APIKeyCreateRequest,
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> APIKeyCreateResponse:
    """Create an API key. The raw key is included in this response only."""
    api_key, raw_key = get_api_key_service().create_key(db, user.user_id, body.name, body.expiry_days)
    return APIKeyCreateResponse(
        id=api_key.id,
        name=api_key.name,
        key=raw_key,
        key_prefix=api_key.key_prefix,
        expires_at=api_key.expires_at,
        created_at=api_key.created_at,
    )


@router.get("", response_model=list[APIKeyResponse])
def list_api_keys(
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> list[APIKeyResponse]:
    """List the current user's API keys."""
    keys = get_api_key_service().get_user_keys(db, user.user_id)
    return [APIKeyResponse.model_validate(k) for k in keys]


@router.post("/{key_id}/revoke")
def revoke_api_key(
    key_id: int,
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    """Revoke an API key. Revocation cannot be undone."""
    get_api_key_service().revoke_key(db, key_id, user.user_id)
    return {"message": "API key revoked"}


@router.delete("/{key_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_api_key(
    key_id: int,
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> Response:
    """Delete an API key."""
    get_api_key_service().delete_key(db, key_id, user.user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
