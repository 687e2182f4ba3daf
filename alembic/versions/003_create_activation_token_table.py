"""Create activation token table

Revision ID: 003
Revises: 002
Create Date: 2026-10-17

"""

from collections.abc import Sequence

import sqlalchemy as sa

from alembic import op

revision: str = "003"
down_revision: str | None = "002"
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "activation_token",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("token", sa.String(length=128), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("expires_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["user_id"], ["user.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_activation_token_token"), "activation_token", ["token"], unique=True)
    op.create_index(op.f("ix_activation_token_user_id"), "activation_token", ["user_id"], unique=False)


def downgrade() -> None:
    op.drop_index(op.f("ix_activation_token_user_id"), table_name="activation_token")
    op.drop_index(op.f("ix_activation_token_token"), table_name="activation_token")
    op.drop_table("activation_token")
