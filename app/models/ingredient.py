"""Ingredient models: the shared catalogue and each user's private copy."""

from datetime import datetime

from sqlalchemy import Column, DateTime, Float, ForeignKey, Integer, String, UniqueConstraint

from app.database import Base


class GlobalIngredient(Base):
    """Admin-managed reference ingredient."""

    __tablename__ = "global_ingredient"

    id = Column(Integer, primary_key=True, autoincrement=True)
    kcal_per_100g = Column(Float, nullable=False)
    fats = Column(Float, nullable=True)
    carbs = Column(Float, nullable=True)
    proteins = Column(Float, nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)


class GlobalIngredientName(Base):
    """Localised name of a global ingredient."""

    __tablename__ = "global_ingredient_name"
    __table_args__ = (UniqueConstraint("ingredient_id", "language_code", name="uq_global_ingredient_name_lang"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    ingredient_id = Column(Integer, ForeignKey("global_ingredient.id"), nullable=False, index=True)
    language_code = Column(String(16), nullable=False, index=True)
    name = Column(String(256), nullable=False)


class UserIngredient(Base):
    """Per-user ingredient, seeded from the global catalogue at registration."""

    __tablename__ = "user_ingredient"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("user.id"), nullable=False, index=True)
    name = Column(String(256), nullable=False)
    kcal_per_100g = Column(Float, nullable=False)
    fats = Column(Float, nullable=True)
    carbs = Column(Float, nullable=True)
    proteins = Column(Float, nullable=True)
    global_ingredient_id = Column(Integer, ForeignKey("global_ingredient.id"), nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
