"""
SnipShelf Backend — Snippet Collection SQLAlchemy Model
=========================================================

What:  ORM model for the `snippet_collections` table.
Who:   Used by the auth guard (ownership lookups), CollectionService and Alembic.

Table Design Rationale:
    - Text primary key holding a UUID4 string: ids are opaque to callers,
      so an arbitrary string in a request is simply "not found", never a
      parse error.
    - user_id: Opaque principal id from the upstream gateway (no users table).
    - is_default: At most one TRUE per user. The services clear the old
      default before setting a new one inside the same transaction; the
      partial unique index rejects anything that slips past (concurrent
      requests from the same user).
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Boolean, DateTime, Index, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column

from snipshelf.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SnippetCollection(Base):
    """
    A named grouping of snippets owned by one user.

    Lifecycle:
        1. Created by createSnippetCollection (server id + timestamps)
        2. Mutated only by updateSnippetCollection, or by another create/update
           of the same user taking over the default flag
        3. Never deleted

    Query Patterns:
        - Ownership check: WHERE id = :id AND user_id = :uid (primary key)
        - List mine: WHERE user_id = :uid ORDER BY created_at DESC LIMIT/OFFSET
          → ix_snippet_collections_user_created
        - Clear default: UPDATE ... WHERE user_id = :uid AND is_default
    """

    __tablename__ = "snippet_collections"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4()),
    )

    user_id: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Owner principal id; immutable",
    )

    # e.g. "Astro DB helpers"
    name: Mapped[str] = mapped_column(Text, nullable=False)

    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    # e.g. "puzzle", "laptop"
    icon: Mapped[str | None] = mapped_column(Text, nullable=True)

    is_default: Mapped[bool] = mapped_column(
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
        Index("ix_snippet_collections_user_created", "user_id", created_at.desc()),
        Index(
            "uq_snippet_collections_user_default",
            "user_id",
            unique=True,
            postgresql_where=text("is_default"),
            sqlite_where=text("is_default"),
        ),
    )

    def __repr__(self) -> str:
        return (
            f"<SnippetCollection(id={self.id}, user_id='{self.user_id}', "
            f"name='{self.name}', is_default={self.is_default})>"
        )
