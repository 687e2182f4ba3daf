"""API key persistence and validation."""

import logging
from datetime import datetime, timedelta

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.exceptions import APIKeyExpiredError, APIKeyInvalidError, APIKeyNotFoundError, APIKeyRevokedError
from app.models.api_key import APIKey
from app.services.security import generate_api_key, hash_token

logger = logging.getLogger("kkal_tracker.api_keys")


class APIKeyStore:
    """Stores API keys by hash. Mutations are scoped to the owning user."""

    def create(
        self,
        db: Session,
        user_id: int,
        name: str,
        key_hash: str,
        key_prefix: str,
        expires_at: datetime | None,
    ) -> APIKey:
        api_key = APIKey(
            user_id=user_id,
            name=name,
            key_hash=key_hash,
            key_prefix=key_prefix,
            expires_at=expires_at,
            is_revoked=False,
        )
        try:
            db.add(api_key)
            db.commit()
        except SQLAlchemyError:
            db.rollback()
            raise
        db.refresh(api_key)
        return api_key

    def get_by_hash(self, db: Session, key_hash: str) -> APIKey | None:
        return db.query(APIKey).filter(APIKey.key_hash == key_hash).first()

    def list_for_user(self, db: Session, user_id: int) -> list[APIKey]:
        """All keys for a user, newest first."""
        return db.query(APIKey).filter(APIKey.user_id == user_id).order_by(APIKey.created_at.desc(), APIKey.id.desc()).all()

    def revoke(self, db: Session, key_id: int, user_id: int) -> bool:
        """Mark a key revoked. Returns False if no key with this id belongs to the user."""
        try:
            updated = (
                db.query(APIKey)
                .filter(APIKey.id == key_id, APIKey.user_id == user_id)
                .update({APIKey.is_revoked: True}, synchronize_session=False)
            )
            db.commit()
        except SQLAlchemyError:
            db.rollback()
            raise
        return updated > 0

    def delete(self, db: Session, key_id: int, user_id: int) -> bool:
        """Hard-delete a key. Returns False if no key with this id belongs to the user."""
        try:
            deleted = (
                db.query(APIKey).filter(APIKey.id == key_id, APIKey.user_id == user_id).delete(synchronize_session=False)
            )
            db.commit()
        except SQLAlchemyError:
            db.rollback()
            raise
        return deleted > 0


class APIKeyService:
    """Issues, validates and revokes API keys."""

    def __init__(self, store: APIKeyStore | None = None) -> None:
        self.store = store or APIKeyStore()

    def create_key(self, db: Session, user_id: int, name: str, expiry_days: int | None = None) -> tuple[APIKey, str]:
        """Create a key. The raw key in the returned tuple is never retrievable again."""
        raw_key, key_prefix, key_hash = generate_api_key()
        expires_at = datetime.utcnow() + timedelta(days=expiry_days) if expiry_days is not None else None

        api_key = self.store.create(db, user_id, name, key_hash, key_prefix, expires_at)
        logger.info("API key %d created for user %d (prefix %s...)", api_key.id, user_id, key_prefix)
        return api_key, raw_key

    def validate_key(self, db: Session, raw_key: str) -> APIKey:
        """Resolve a presented key by its hash.

        Raises APIKeyInvalidError, APIKeyRevokedError or APIKeyExpiredError.
        Callers should treat all three the same way.
        """
        api_key = self.store.get_by_hash(db, hash_token(raw_key))
        if api_key is None:
            raise APIKeyInvalidError()
        if api_key.is_revoked:
            raise APIKeyRevokedError()
        if api_key.is_expired():
            raise APIKeyExpiredError()
        return api_key

    def get_user_keys(self, db: Session, user_id: int) -> list[APIKey]:
        return self.store.list_for_user(db, user_id)

    def revoke_key(self, db: Session, key_id: int, user_id: int) -> None:
        if not self.store.revoke(db, key_id, user_id):
            raise APIKeyNotFoundError()
        logger.info("API key %d revoked by user %d", key_id, user_id)

    def delete_key(self, db: Session, key_id: int, user_id: int) -> None:
        if not self.store.delete(db, key_id, user_id):
            raise APIKeyNotFoundError()
        logger.info("API key %d deleted by user %d", key_id, user_id)


_api_key_service: APIKeyService | None = None


def get_api_key_service() -> APIKeyService:
    """Get singleton API key service instance."""
    global _api_key_service
    if _api_key_service is None:
        _api_key_service = APIKeyService()
    return _api_key_service
