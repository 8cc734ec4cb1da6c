"""create_system_tables

Revision ID: 0001
Revises:
Create Date: 2026-10-18 09:12:41.000000

"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "0001"
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Create _collections, _migrations and _migration_lock tables."""
    op.create_table(
        "_collections",
        sa.Column("id", sa.String(length=36), nullable=False, comment="Collection ID"),
        sa.Column("name", sa.String(length=255), nullable=False, comment="Collection name"),
        sa.Column("type", sa.String(length=16), nullable=False, server_default="base"),
        sa.Column("system", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column(
            "schema",
            sa.Text(),
            nullable=False,
            comment="JSON array of field definitions",
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("(CURRENT_TIMESTAMP)"),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("(CURRENT_TIMESTAMP)"),
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("name"),
    )
    with op.batch_alter_table("_collections", schema=None) as batch_op:
        batch_op.create_index(batch_op.f("ix__collections_name"), ["name"], unique=False)

    op.create_table(
        "_migrations",
        sa.Column("file", sa.String(length=255), nullable=False, comment="Migration name"),
        sa.Column(
            "applied",
            sa.DateTime(timezone=True),
            nullable=False,
            comment="When the migration was applied",
        ),
        sa.PrimaryKeyConstraint("file"),
    )
    with op.batch_alter_table("_migrations", schema=None) as batch_op:
        batch_op.create_index(batch_op.f("ix__migrations_applied"), ["applied"], unique=False)

    op.create_table(
        "_migration_lock",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("owner", sa.String(length=255), nullable=False),
        sa.Column("acquired_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )


def downgrade() -> None:
    """Drop the system tables."""
    op.drop_table("_migration_lock")

    with op.batch_alter_table("_migrations", schema=None) as batch_op:
        batch_op.drop_index(batch_op.f("ix__migrations_applied"))
    op.drop_table("_migrations")

    with op.batch_alter_table("_collections", schema=None) as batch_op:
        batch_op.drop_index(batch_op.f("ix__collections_name"))
    op.drop_table("_collections")
