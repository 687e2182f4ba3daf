"""Authentication service: registration, activation, login."""

import logging
from datetime import datetime, timedelta

from sqlalchemy.orm import Session

from app.config import get_settings
from app.exceptions import (
    InvalidActivationTokenError,
    InvalidCredentialsError,
    UserAlreadyExistsError,
    UserNotActivatedError,
    UserNotFoundError,
)
from app.models.user import User
from app.services.activation_token import ActivationTokenStore
from app.services.email import EmailService, get_email_service
from app.services.jwt import JWTService, get_jwt_service
from app.services.saga import Saga, SagaContext
from app.services.security import hash_password, token_preview, verify_password
from app.services.user import UserStore

logger = logging.getLogger("kkal_tracker.auth")

DEFAULT_LANGUAGE = "en_US"


class AuthService:
    """Orchestrates the identity lifecycle across the user and token stores."""

    def __init__(
        self,
        jwt_service: JWTService,
        email_service: EmailService,
        users: UserStore | None = None,
        tokens: ActivationTokenStore | None = None,
        activation_ttl: timedelta = timedelta(hours=24),
    ) -> None:
        self.jwt_service = jwt_service
        self.email_service = email_service
        self.users = users or UserStore()
        self.tokens = tokens or ActivationTokenStore()
        self.activation_ttl = activation_ttl

    def register(
        self,
        db: Session,
        email: str,
        password: str,
        language_code: str = DEFAULT_LANGUAGE,
        skip_activation: bool = False,
    ) -> tuple[User, str]:
        """Register a new user.

        With ``skip_activation`` the user is created active and a session token
        is returned immediately (trusted/CLI path). Otherwise the user is created
        inactive, an activation token is stored and emailed, and the token in the
        returned tuple is empty. If any step after the user insert fails, the
        steps already done are undone before the error propagates.

        Raises:
            UserAlreadyExistsError: the email is taken.
            EmailDeliveryError: the activation email could not be sent.
        """
        if self.users.get_by_email(db, email) is not None:
            logger.debug("Register failed - user already exists: %s", email)
            raise UserAlreadyExistsError()

        password_hash = hash_password(password)

        if skip_activation:
            user = self.users.create_with_starter_data(db, email, password_hash, language_code, is_active=True)
            token = self.jwt_service.create_token(user.id, user.email)
            logger.info("Active user %d created without activation", user.id)
            return user, token

        saga = Saga("registration")
        saga.add_step(
            "user",
            lambda ctx: self.users.create_with_starter_data(db, email, password_hash, language_code, is_active=False),
            compensation=lambda ctx: self.users.delete(db, ctx["user"].id),
        )
        saga.add_step(
            "activation_token",
            lambda ctx: self.tokens.create(db, ctx["user"].id, datetime.utcnow() + self.activation_ttl),
            compensation=lambda ctx: self._discard_token(db, ctx["activation_token"].token),
        )
        saga.add_step("email", lambda ctx: self._send_activation(ctx, language_code))
        ctx = saga.run()

        user = ctx["user"]
        logger.info("Inactive user %d created, activation email sent", user.id)
        return user, ""

    def activate_user(self, db: Session, token: str) -> None:
        """Activate the owner of a token and consume the token.

        Unknown, used and expired tokens all raise InvalidActivationTokenError.
        """
        activation_token = self.tokens.get_by_token(db, token)
        if activation_token is None:
            logger.debug("Activation failed - token not found: %s", token_preview(token))
            raise InvalidActivationTokenError()

        if activation_token.is_expired():
            logger.debug("Activation failed - token expired: %s", token_preview(token))
            try:
                self.tokens.delete(db, token)
            except Exception:
                logger.exception("Failed to delete expired activation token %s", token_preview(token))
            raise InvalidActivationTokenError()

        user_id = activation_token.user_id
        self.users.activate(db, user_id)

        try:
            self.tokens.delete(db, token)
        except Exception:
            # The user is already active; a leftover row is removed by the expired sweep.
            logger.exception("Failed to delete used activation token %s", token_preview(token))

        logger.info("User %d activated", user_id)

    def login(self, db: Session, email: str, password: str) -> tuple[User, str]:
        """Check credentials and mint a session token for an active user."""
        user = self.users.get_by_email(db, email)
        if user is None or not verify_password(user.password_hash, password):
            logger.debug("Login failed - invalid credentials: %s", email)
            raise InvalidCredentialsError()

        if not user.is_active:
            logger.debug("Login failed - user %d not activated", user.id)
            raise UserNotActivatedError()

        token = self.jwt_service.create_token(user.id, user.email)
        logger.debug("Login successful for user %d", user.id)
        return user, token

    def get_current_user(self, db: Session, user_id: int) -> User:
        user = self.users.get_by_id(db, user_id)
        if user is None:
            raise UserNotFoundError()
        return user

    def purge_expired_tokens(self, db: Session) -> int:
        """Remove activation tokens whose window has passed."""
        return self.tokens.delete_expired(db)

    def _send_activation(self, ctx: SagaContext, language_code: str) -> None:
        user = ctx["user"]
        self.email_service.send_activation_email(user.email, ctx["activation_token"].token, user.language or language_code)

    def _discard_token(self, db: Session, token: str) -> None:
        if not self.tokens.delete(db, token):
            logger.warning("Activation token %s was already gone during rollback", token_preview(token))


_auth_service: AuthService | None = None


def get_auth_service() -> AuthService:
    """Get singleton auth service instance."""
    global _auth_service
    if _auth_service is None:
        settings = get_settings()
        _auth_service = AuthService(
            jwt_service=get_jwt_service(),
            email_service=get_email_service(),
            activation_ttl=timedelta(hours=settings.ACTIVATION_TOKEN_TTL_HOURS),
        )
    return _auth_service
