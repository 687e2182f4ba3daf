"""Create global and per-user ingredient tables

Revision ID: 002
Revises: 001
Create Date: 2026-10-17

"""

from collections.abc import Sequence

import sqlalchemy as sa

from alembic import op

revision: str = "002"
down_revision: str | None = "001"
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "global_ingredient",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("kcal_per_100g", sa.Float(), nullable=False),
        sa.Column("fats", sa.Float(), nullable=True),
        sa.Column("carbs", sa.Float(), nullable=True),
        sa.Column("proteins", sa.Float(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "global_ingredient_name",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("ingredient_id", sa.Integer(), nullable=False),
        sa.Column("language_code", sa.String(length=16), nullable=False),
        sa.Column("name", sa.String(length=256), nullable=False),
        sa.ForeignKeyConstraint(["ingredient_id"], ["global_ingredient.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("ingredient_id", "language_code", name="uq_global_ingredient_name_lang"),
    )
    op.create_index(
        op.f("ix_global_ingredient_name_ingredient_id"), "global_ingredient_name", ["ingredient_id"], unique=False
    )
    op.create_index(
        op.f("ix_global_ingredient_name_language_code"), "global_ingredient_name", ["language_code"], unique=False
    )

    op.create_table(
        "user_ingredient",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=256), nullable=False),
        sa.Column("kcal_per_100g", sa.Float(), nullable=False),
        sa.Column("fats", sa.Float(), nullable=True),
        sa.Column("carbs", sa.Float(), nullable=True),
        sa.Column("proteins", sa.Float(), nullable=True),
        sa.Column("global_ingredient_id", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["user.id"]),
        sa.ForeignKeyConstraint(["global_ingredient_id"], ["global_ingredient.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_user_ingredient_user_id"), "user_ingredient", ["user_id"], unique=False)


def downgrade() -> None:
    op.drop_index(op.f("ix_user_ingredient_user_id"), table_name="user_ingredient")
    op.drop_table("user_ingredient")
    op.drop_index(op.f("ix_global_ingredient_name_language_code"), table_name="global_ingredient_name")
    op.drop_index(op.f("ix_global_ingredient_name_ingredient_id"), table_name="global_ingredient_name")
    op.drop_table("global_ingredient_name")
    op.drop_table("global_ingredient")
