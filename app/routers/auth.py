"""Authentication API endpoints."""

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import CurrentUser, get_current_user
from app.rate_limit import limiter
from app.schemas.auth import (
    ActivationResponse,
    LoginRequest,
    LoginResponse,
    LoginUser,
    RegisterRequest,
    RegisterResponse,
    UserResponse,
)
from app.services.auth import get_auth_service

router = APIRouter(prefix="/api/v1/auth", tags=["Authentication"])


@router.post("/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit("5/minute")
def register(request: Request, body: RegisterRequest, db: Session = Depends(get_db)) -> RegisterResponse:
    """Register a new account. The account stays inactive until the emailed link is opened."""
    auth_service = get_auth_service()
    user, _ = auth_service.register(db, body.email, body.password, body.language_code)
    return RegisterResponse(
        message="Registration successful. Please check your email to activate your account.",
        email=user.email,
    )


@router.post("/login", response_model=LoginResponse)
@limiter.limit("10/minute")
def login(request: Request, body: LoginRequest, db: Session = Depends(get_db)) -> LoginResponse:
    """Authenticate and receive a JWT token."""
    auth_service = get_auth_service()
    user, token = auth_service.login(db, body.email, body.password)
    return LoginResponse(token=token, user=LoginUser(email=user.email))


@router.get("/activate/{token}", response_model=ActivationResponse)
@limiter.limit("10/minute")
def activate(request: Request, token: str, db: Session = Depends(get_db)) -> ActivationResponse:
    """Activate an account with the token from the activation email."""
    get_auth_service().activate_user(db, token)
    return ActivationResponse(message="Account activated successfully. You can now log in.")


@router.get("/me", response_model=UserResponse)
def me(user: CurrentUser = Depends(get_current_user), db: Session = Depends(get_db)) -> UserResponse:
    """Return the profile of the authenticated user."""
    current = get_auth_service().get_current_user(db, user.user_id)
    return UserResponse.model_validate(current)
