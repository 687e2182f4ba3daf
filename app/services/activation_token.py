"""Activation token persistence."""

import logging
from datetime import datetime

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.models.activation_token import ActivationToken
from app.services.security import generate_token, token_preview

logger = logging.getLogger("kkal_tracker.activation_tokens")


class ActivationTokenStore:
    """Stores single-use activation tokens keyed by their random token string."""

    def create(self, db: Session, user_id: int, expires_at: datetime) -> ActivationToken:
        """Generate and persist a fresh token for the user."""
        activation_token = ActivationToken(user_id=user_id, token=generate_token(), expires_at=expires_at)
        try:
            db.add(activation_token)
            db.commit()
        except SQLAlchemyError:
            db.rollback()
            raise
        db.refresh(activation_token)
        logger.debug("Activation token %d created for user %d", activation_token.id, user_id)
        return activation_token

    def get_by_token(self, db: Session, token: str) -> ActivationToken | None:
        return db.query(ActivationToken).filter(ActivationToken.token == token).first()

    def delete(self, db: Session, token: str) -> bool:
        """Delete a token. Returns False when nothing matched."""
        try:
            deleted = db.query(ActivationToken).filter(ActivationToken.token == token).delete(synchronize_session=False)
            db.commit()
        except SQLAlchemyError:
            db.rollback()
            raise
        if deleted == 0:
            logger.debug("No activation token deleted for %s", token_preview(token))
        return deleted > 0

    def delete_expired(self, db: Session, now: datetime | None = None) -> int:
        """Bulk-delete every expired token and return how many were removed."""
        cutoff = now or datetime.utcnow()
        try:
            deleted = (
                db.query(ActivationToken)
                .filter(ActivationToken.expires_at <= cutoff)
                .delete(synchronize_session=False)
            )
            db.commit()
        except SQLAlchemyError:
            db.rollback()
            raise
        logger.info("Expired activation tokens deleted: %d", deleted)
        return deleted
