"""directory entry

Revision ID: 5b1f0c2d9e41
Revises:
Create Date: 2026-10-18 10:12:44.531802

"""
from __future__ import annotations

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "5b1f0c2d9e41"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create the id directory table."""
    op.create_table(
        "directory_entry",
        sa.Column("id", sa.Text(), nullable=False),
        sa.Column("invite_code", sa.Text(), nullable=False),
        sa.Column("owner_pubkey", sa.Text(), nullable=False),
        sa.Column("permanent", sa.Boolean(), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        op.f("ix_directory_entry_owner_pubkey"),
        "directory_entry",
        ["owner_pubkey"],
        unique=False,
    )


def downgrade() -> None:
    """Drop the id directory table."""
    op.drop_index(op.f("ix_directory_entry_owner_pubkey"), table_name="directory_entry")
    op.drop_table("directory_entry")
