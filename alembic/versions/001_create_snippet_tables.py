"""Create snippet_collections and snippets tables

Revision ID: 001
Revises: None
Create Date: 2025-11-02 00:00:00.000000+00:00

What:  Initial schema: collections, snippets and their indexes, including the
       partial unique index that allows one default collection per user.

Rollback: downgrade() drops both tables (destructive).
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "snippet_collections",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("user_id", sa.String(255), nullable=False, comment="Owner principal id; immutable"),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("icon", sa.Text(), nullable=True),
        sa.Column("is_default", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_snippet_collections_user_created",
        "snippet_collections",
        ["user_id", sa.text("created_at DESC")],
    )
    # One default per user; clear-then-set inside one transaction never trips it
    op.create_index(
        "uq_snippet_collections_user_default",
        "snippet_collections",
        ["user_id"],
        unique=True,
        postgresql_where=sa.text("is_default"),
        sqlite_where=sa.text("is_default"),
    )

    op.create_table(
        "snippets",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("collection_id", sa.String(36), nullable=False),
        sa.Column(
            "user_id",
            sa.String(255),
            nullable=False,
            comment="Owner principal id, denormalized from the collection",
        ),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("language", sa.Text(), nullable=True),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("tags", sa.Text(), nullable=True),
        sa.Column("is_favorite", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("is_archived", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.ForeignKeyConstraint(["collection_id"], ["snippet_collections.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_snippets_collection_id", "snippets", ["collection_id"])
    op.create_index(
        "ix_snippets_user_updated",
        "snippets",
        ["user_id", sa.text("updated_at DESC")],
    )


def downgrade() -> None:
    """Drop both tables. WARNING: all snippet data is lost."""
    op.drop_index("ix_snippets_user_updated", table_name="snippets")
    op.drop_index("ix_snippets_collection_id", table_name="snippets")
    op.drop_table("snippets")
    op.drop_index("uq_snippet_collections_user_default", table_name="snippet_collections")
    op.drop_index("ix_snippet_collections_user_created", table_name="snippet_collections")
    op.drop_table("snippet_collections")
