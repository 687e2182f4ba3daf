"""Machine-to-machine endpoints authenticated with X-API-Key."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import APIKeyPrincipal, get_api_key_principal
from app.schemas.api_key import ExternalProfileResponse
from app.services.auth import get_auth_service

router = APIRouter(prefix="/api/v1/external", tags=["External"])


@router.get("/profile", response_model=ExternalProfileResponse)
def external_profile(
    principal: APIKeyPrincipal = Depends(get_api_key_principal),
    db: Session = Depends(get_db),
) -> ExternalProfileResponse:
    """Identify the account an API key belongs to."""
    user = get_auth_service().get_current_user(db, principal.user_id)
    return ExternalProfileResponse(user_id=user.id, email=user.email, language=user.language)
