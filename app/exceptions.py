"""
Domain exceptions for the identity and access layer.

Services raise these; the API layer maps each base class to an HTTP status
in one place (see ``main.py``). Messages are safe to show to clients.
"""

from typing import Any, Optional


class KkalTrackerError(Exception):
    """Base exception for all Kkal Tracker errors."""

    status_code = 500

    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__

    def to_dict(self) -> dict[str, Any]:
        return {"detail": self.message, "code": self.code}


class AuthenticationError(KkalTrackerError):
    """Credentials missing, wrong, or no longer valid."""

    status_code = 401


class AuthorizationError(KkalTrackerError):
    """Caller is known but not allowed to proceed."""

    status_code = 403


class BadRequestError(KkalTrackerError):
    status_code = 400


class NotFoundError(KkalTrackerError):
    status_code = 404


class ConflictError(KkalTrackerError):
    status_code = 409


class ExternalServiceError(KkalTrackerError):
    """An outbound collaborator (SMTP, ...) failed."""

    status_code = 503


# --- Users & login ---


class InvalidCredentialsError(AuthenticationError):
    """Unknown email or wrong password. Both cases produce the same error."""

    def __init__(self) -> None:
        super().__init__("Invalid credentials", code="INVALID_CREDENTIALS")


class UserNotActivatedError(AuthorizationError):
    def __init__(self) -> None:
        super().__init__("Account is not activated. Check your email for the activation link.", code="USER_NOT_ACTIVATED")


class UserAlreadyExistsError(ConflictError):
    def __init__(self) -> None:
        super().__init__("User already exists", code="USER_ALREADY_EXISTS")


class UserNotFoundError(NotFoundError):
    def __init__(self) -> None:
        super().__init__("User not found", code="USER_NOT_FOUND")


class InvalidActivationTokenError(BadRequestError):
    """Covers unknown, already used and expired activation tokens."""

    def __init__(self) -> None:
        super().__init__("Invalid or expired activation token", code="INVALID_ACTIVATION_TOKEN")


class EmailDeliveryError(ExternalServiceError):
    def __init__(self, message: str = "Failed to send activation email. Please try again later.") -> None:
        super().__init__(message, code="EMAIL_DELIVERY_FAILED")


# --- Bearer tokens ---


class TokenValidationError(AuthenticationError):
    def __init__(self) -> None:
        super().__init__("Invalid or expired token", code="INVALID_TOKEN")


# --- API keys ---


class APIKeyError(AuthenticationError):
    """Any API key rejection. Subclasses differ only for logging."""

    def __init__(self, reason: str) -> None:
        super().__init__("Invalid or expired API key", code="INVALID_API_KEY")
        self.reason = reason


class APIKeyInvalidError(APIKeyError):
    def __init__(self) -> None:
        super().__init__("unknown key")


class APIKeyRevokedError(APIKeyError):
    def __init__(self) -> None:
        super().__init__("key revoked")


class APIKeyExpiredError(APIKeyError):
    def __init__(self) -> None:
        super().__init__("key expired")


class APIKeyNotFoundError(NotFoundError):
    def __init__(self) -> None:
        super().__init__("API key not found", code="API_KEY_NOT_FOUND")
