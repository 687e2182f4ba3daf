"""User persistence, including the starter-data copy done at creation time."""

import logging

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.exceptions import UserAlreadyExistsError, UserNotFoundError
from app.models.activation_token import ActivationToken
from app.models.api_key import APIKey
from app.models.ingredient import GlobalIngredient, GlobalIngredientName, UserIngredient
from app.models.user import User

logger = logging.getLogger("kkal_tracker.users")


class UserStore:
    """CRUD for user rows. Every write commits or rolls back before returning."""

    def get_by_email(self, db: Session, email: str) -> User | None:
        return db.query(User).filter(User.email == email).first()

    def get_by_id(self, db: Session, user_id: int) -> User | None:
        return db.query(User).filter(User.id == user_id).first()

    def create_with_starter_data(
        self,
        db: Session,
        email: str,
        password_hash: str,
        language_code: str,
        is_active: bool,
    ) -> User:
        """Insert the user and copy the global ingredients for its language in one transaction.

        Raises UserAlreadyExistsError when the email is taken, including when a
        concurrent registration wins the race and the unique index rejects the insert.
        """
        user = User(email=email, password_hash=password_hash, language=language_code, is_active=is_active)
        try:
            db.add(user)
            db.flush()
            copied = self._copy_global_ingredients(db, user.id, language_code)
            db.commit()
        except IntegrityError:
            db.rollback()
            if self.get_by_email(db, email) is not None:
                raise UserAlreadyExistsError() from None
            raise
        except SQLAlchemyError:
            db.rollback()
            raise

        db.refresh(user)
        logger.debug("User %d created (active=%s, %d starter ingredients)", user.id, is_active, copied)
        return user

    def activate(self, db: Session, user_id: int) -> None:
        try:
            updated = db.query(User).filter(User.id == user_id).update({User.is_active: True}, synchronize_session=False)
            db.commit()
        except SQLAlchemyError:
            db.rollback()
            raise
        if updated == 0:
            raise UserNotFoundError()

    def delete(self, db: Session, user_id: int) -> None:
        """Hard-delete a user and every row that belongs to it."""
        try:
            db.query(UserIngredient).filter(UserIngredient.user_id == user_id).delete(synchronize_session=False)
            db.query(ActivationToken).filter(ActivationToken.user_id == user_id).delete(synchronize_session=False)
            db.query(APIKey).filter(APIKey.user_id == user_id).delete(synchronize_session=False)
            deleted = db.query(User).filter(User.id == user_id).delete(synchronize_session=False)
            db.commit()
        except SQLAlchemyError:
            db.rollback()
            raise
        if deleted == 0:
            raise UserNotFoundError()
        logger.debug("User %d deleted", user_id)

    def _copy_global_ingredients(self, db: Session, user_id: int, language_code: str) -> int:
        # Duplicate names within a language keep the lowest global id.
        rows = (
            db.query(GlobalIngredient, GlobalIngredientName.name)
            .join(GlobalIngredientName, GlobalIngredientName.ingredient_id == GlobalIngredient.id)
            .filter(GlobalIngredientName.language_code == language_code)
            .order_by(GlobalIngredient.id)
            .all()
        )
        seen: set[str] = set()
        for ingredient, name in rows:
            if name in seen:
                continue
            seen.add(name)
            db.add(
                UserIngredient(
                    user_id=user_id,
                    name=name,
                    kcal_per_100g=ingredient.kcal_per_100g,
                    fats=ingredient.fats,
                    carbs=ingredient.carbs,
                    proteins=ingredient.proteins,
                    global_ingredient_id=ingredient.id,
                )
            )
        db.flush()
        return len(seen)
