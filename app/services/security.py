"""Password hashing and random token material.

Passwords are low-entropy and go through bcrypt. Activation tokens and API
keys are 32 random bytes, so a fast SHA-256 digest is enough to make them
safe to index and look up.
"""

import hashlib
import secrets

import bcrypt

from app.config import get_settings

TOKEN_BYTES = 32
API_KEY_PREFIX_LENGTH = 8


def hash_password(password: str, rounds: int | None = None) -> str:
    """Hash a password with bcrypt. Errors propagate to the caller."""
    if rounds is None:
        rounds = get_settings().BCRYPT_ROUNDS
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_password(password_hash: str, password: str) -> bool:
    """Check a password against a stored bcrypt hash."""
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Malformed stored hash or a password bcrypt refuses to process.
        return False


def generate_token() -> str:
    """Return 64 hex characters of cryptographically secure randomness."""
    return secrets.token_hex(TOKEN_BYTES)


def hash_token(raw: str) -> str:
    """SHA-256 hex digest used as the lookup key for stored secrets."""
    return hashlib.sha256(raw.encode("utf-8")).hexdigest()


def generate_api_key() -> tuple[str, str, str]:
    """
    Generate a new API key.

    Returns:
        (raw_key, key_prefix, key_hash): the raw key is shown to the user once;
        only the prefix and hash are persisted.
    """
    raw_key = generate_token()
    return raw_key, raw_key[:API_KEY_PREFIX_LENGTH], hash_token(raw_key)


def token_preview(token: str) -> str:
    """Loggable prefix of a secret token."""
    if len(token) < 8:
        return "..."
    return token[:8] + "..."
