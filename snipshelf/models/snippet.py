"""
SnipShelf Backend — Snippet SQLAlchemy Model
==============================================

What:  ORM model for the `snippets` table.
Who:   Used by the auth guard, SnippetService and Alembic.

Notes:
    - user_id duplicates the owning collection's user_id so every query can
      be owner-scoped without a join. It is copied from the caller at insert
      and never changes; moving a snippet only ever targets a collection of
      the same user.
    - tags is stored verbatim (JSON or comma-separated, the client decides).
    - is_archived is the only "removal" there is. Archived rows stay in the
      table and are hidden from listSnippets unless includeArchived is set.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column

from snipshelf.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Snippet(Base):
    """
    A stored code/text payload with metadata, belonging to one collection.

    Archival state:
        active (initial) ──archiveSnippet──▶ archived
        There is no unarchive action.

    Query Patterns:
        - Ownership check: WHERE id = :id AND user_id = :uid
        - List: WHERE user_id = :uid [AND collection_id = :cid]
          [AND NOT is_archived] ORDER BY updated_at DESC LIMIT/OFFSET
          → ix_snippets_user_updated
    """

    __tablename__ = "snippets"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4()),
    )

    collection_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("snippet_collections.id"),
        nullable=False,
        index=True,
    )

    user_id: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Owner principal id, denormalized from the collection",
    )

    title: Mapped[str] = mapped_column(Text, nullable=False)

    # "js", "ts", "sql", "text"
    language: Mapped[str | None] = mapped_column(Text, nullable=True)

    content: Mapped[str] = mapped_column(Text, nullable=False)

    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    tags: Mapped[str | None] = mapped_column(Text, nullable=True)

    is_favorite: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        server_default=text("false"),
    )

    is_archived: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        server_default=text("false"),
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    __table_args__ = (
        Index("ix_snippets_user_updated", "user_id", updated_at.desc()),
    )

    def __repr__(self) -> str:
        return (
            f"<Snippet(id={self.id}, collection_id={self.collection_id}, "
            f"title='{self.title}', is_archived={self.is_archived})>"
        )
