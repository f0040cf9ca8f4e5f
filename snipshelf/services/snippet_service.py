"""
SnipShelf Backend — Snippet Service (Business Logic)
======================================================

What:  create / update / archive / list / get for snippets.
Who:   Called by routes/snippets.py.

Ownership rules enforced here:
    - create: target collection must belong to the caller; nothing is
      inserted otherwise.
    - update: snippet must belong to the caller; a collectionId that differs
      from the current one must ALSO belong to the caller. A failed move
      leaves the row untouched (the ownership check runs before the UPDATE).
    - list with collectionId: the collection is checked too, so a bad id
      fails with NOT_FOUND instead of quietly returning an empty page.

Archival:
    archive only ever sets is_archived = TRUE, so repeating it is harmless.
    There is no unarchive action.
"""

import logging
import uuid
from datetime import datetime, timezone

from sqlalchemy import and_, desc, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from snipshelf.auth import CurrentUser, ensure_collection_owned, ensure_snippet_owned
from snipshelf.exceptions import DatabaseError
from snipshelf.models.snippet import Snippet
from snipshelf.schemas.snippet import (
    ArchivedSnippetData,
    CreateSnippetInput,
    ListSnippetsInput,
    SnippetData,
    SnippetOut,
    SnippetPage,
    UpdateSnippetInput,
)

logger = logging.getLogger(__name__)


class SnippetService:
    """Business logic layer for snippet actions. Stateless; see module singleton."""

    async def create_snippet(
        self,
        db: AsyncSession,
        user: CurrentUser,
        data: CreateSnippetInput,
    ) -> SnippetData:
        """
        Insert a snippet into one of the caller's collections.

        user_id comes from the authenticated caller, never from the input.

        Raises:
            NotFoundError: collectionId missing or owned by another user
            DatabaseError: Insert failed
        """
        await ensure_collection_owned(db, data.collection_id, user.id)
        now = datetime.now(timezone.utc)

        snippet = Snippet(
            id=str(uuid.uuid4()),
            collection_id=data.collection_id,
            user_id=user.id,
            title=data.title,
            language=data.language,
            content=data.content,
            description=data.description,
            tags=data.tags,
            is_favorite=bool(data.is_favorite),
            is_archived=False,
            created_at=now,
            updated_at=now,
        )
        try:
            db.add(snippet)
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error creating snippet: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not create the snippet. Please try again.",
                context={"collection_id": data.collection_id},
            ) from e

        logger.info(
            "Snippet %s created in collection %s for user %s",
            snippet.id, snippet.collection_id, user.id,
        )
        return SnippetData(snippet=SnippetOut.model_validate(snippet))

    async def update_snippet(
        self,
        db: AsyncSession,
        user: CurrentUser,
        data: UpdateSnippetInput,
    ) -> SnippetData:
        """
        Apply the fields present in `data` to one of the caller's snippets.

        Workflow:
            1. Ownership check on the snippet
            2. collectionId sent and different → ownership check on the target
            3. UPDATE only the sent columns, always bumping updated_at
            4. Re-fetch and return the stored row
        """
        existing = await ensure_snippet_owned(db, data.id, user.id)
        current_collection_id = existing.collection_id
        now = datetime.now(timezone.utc)

        values = data.changes()
        if (
            "collection_id" in data.model_fields_set
            and data.collection_id != current_collection_id
        ):
            await ensure_collection_owned(db, data.collection_id, user.id)
            values["collection_id"] = data.collection_id
        values["updated_at"] = now

        try:
            await db.execute(
                update(Snippet)
                .where(Snippet.id == existing.id)
                .values(**values)
                .execution_options(synchronize_session=False)
            )
            snippet = await self._refetch(db, existing.id)
        except SQLAlchemyError as e:
            logger.error(
                "Database error updating snippet %s: %s", existing.id, str(e), exc_info=True
            )
            raise DatabaseError(
                message="Could not update the snippet. Please try again.",
                context={"snippet_id": existing.id},
            ) from e

        if snippet.collection_id != current_collection_id:
            logger.info(
                "Snippet %s moved from collection %s to %s",
                snippet.id, current_collection_id, snippet.collection_id,
            )
        logger.info(
            "Snippet %s updated by user %s (fields=%s)", snippet.id, user.id, sorted(values)
        )
        return SnippetData(snippet=SnippetOut.model_validate(snippet))

    async def archive_snippet(
        self,
        db: AsyncSession,
        user: CurrentUser,
        snippet_id: str,
    ) -> ArchivedSnippetData:
        """Mark one of the caller's snippets archived. Returns only its id."""
        existing = await ensure_snippet_owned(db, snippet_id, user.id)
        now = datetime.now(timezone.utc)

        try:
            await db.execute(
                update(Snippet)
                .where(Snippet.id == existing.id)
                .values(is_archived=True, updated_at=now)
                .execution_options(synchronize_session=False)
            )
        except SQLAlchemyError as e:
            logger.error(
                "Database error archiving snippet %s: %s", existing.id, str(e), exc_info=True
            )
            raise DatabaseError(
                message="Could not archive the snippet. Please try again.",
                context={"snippet_id": existing.id},
            ) from e

        logger.info("Snippet %s archived by user %s", existing.id, user.id)
        return ArchivedSnippetData(id=existing.id)

    async def list_snippets(
        self,
        db: AsyncSession,
        user: CurrentUser,
        params: ListSnippetsInput,
    ) -> SnippetPage:
        """
        One page of the caller's snippets, most recently updated first.

        Filters (always AND-ed):
            user_id = caller                       (always)
            collection_id = :cid                   (non-empty collectionId)
            is_archived = FALSE                    (unless includeArchived)

        `total` is the size of the returned page.
        """
        filters = [Snippet.user_id == user.id]

        if params.collection_id:
            await ensure_collection_owned(db, params.collection_id, user.id)
            filters.append(Snippet.collection_id == params.collection_id)

        if not params.include_archived:
            filters.append(Snippet.is_archived.is_(False))

        try:
            result = await db.execute(
                select(Snippet)
                .where(and_(*filters))
                .order_by(desc(Snippet.updated_at))
                .limit(params.page_size)
                .offset(params.offset)
            )
            rows = list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error("Database error listing snippets: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve snippets. Please try again.",
                context={"error_type": type(e).__name__},
            ) from e

        items = [SnippetOut.model_validate(row) for row in rows]
        return SnippetPage(items=items, total=len(items))

    async def get_snippet(
        self,
        db: AsyncSession,
        user: CurrentUser,
        snippet_id: str,
    ) -> SnippetData:
        snippet = await ensure_snippet_owned(db, snippet_id, user.id)
        return SnippetData(snippet=SnippetOut.model_validate(snippet))

    async def _refetch(self, db: AsyncSession, snippet_id: str) -> Snippet:
        result = await db.execute(
            select(Snippet)
            .where(Snippet.id == snippet_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one()


# ── Singleton Instance ────────────────────────────────────────────────────
snippet_service = SnippetService()
