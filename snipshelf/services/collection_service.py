"""
SnipShelf Backend — Collection Service (Business Logic)
=========================================================

What:  create / update / list for snippet collections.
How:   validate (schemas) → authorize (auth guard) → persist → return schema.
Who:   Called by routes/collections.py.

Default Collection Invariant:
    At most one collection per user has is_default = TRUE.

    create(isDefault=true):  UPDATE ... SET is_default = FALSE WHERE user's
                             current default  →  INSERT new row (TRUE)
    update(isDefault=true):  same clear, excluding the target  →  UPDATE target

    Both steps run in the request's single transaction (see database.py), and
    uq_snippet_collections_user_default rejects a concurrent second default,
    so the invariant holds even when two requests race.

Design Decision:
    CollectionService is stateless. It receives the session and the current
    user for each call; the module-level singleton is shared by all requests.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import desc, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from snipshelf.auth import CurrentUser, ensure_collection_owned
from snipshelf.exceptions import DatabaseError
from snipshelf.models.collection import SnippetCollection
from snipshelf.schemas.collection import (
    CollectionData,
    CollectionOut,
    CollectionPage,
    CreateCollectionInput,
    ListCollectionsInput,
    UpdateCollectionInput,
)

logger = logging.getLogger(__name__)


class CollectionService:
    """
    Business logic layer for collection actions.

    Error Handling Strategy:
        Guard failures (NotFoundError) propagate untouched. SQLAlchemy errors
        are logged with the stack trace and re-raised as DatabaseError, which
        carries a generic message only.
    """

    async def create_collection(
        self,
        db: AsyncSession,
        user: CurrentUser,
        data: CreateCollectionInput,
    ) -> CollectionData:
        """
        Insert a new collection owned by `user`.

        If `data.is_default` is true the user's current default (if any) is
        cleared first. Returns the row as inserted.
        """
        now = datetime.now(timezone.utc)
        try:
            if data.is_default:
                await self._clear_default(db, user.id, now)

            collection = SnippetCollection(
                id=str(uuid.uuid4()),
                user_id=user.id,
                name=data.name,
                description=data.description,
                icon=data.icon,
                is_default=bool(data.is_default),
                created_at=now,
                updated_at=now,
            )
            db.add(collection)
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error creating collection: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not create the collection. Please try again.",
                context={"error_type": type(e).__name__},
            ) from e

        logger.info(
            "Collection %s created for user %s (default=%s)",
            collection.id, user.id, collection.is_default,
        )
        return CollectionData(collection=CollectionOut.model_validate(collection))

    async def update_collection(
        self,
        db: AsyncSession,
        user: CurrentUser,
        data: UpdateCollectionInput,
    ) -> CollectionData:
        """
        Apply the fields present in `data` to one of the user's collections.

        Workflow:
            1. Ownership check (NOT_FOUND for missing or foreign ids)
            2. isDefault=true → clear the user's other default
            3. UPDATE only the sent columns, always bumping updated_at
            4. Re-fetch the row so the response shows what is stored

        Raises:
            NotFoundError: Collection missing or owned by another user
            DatabaseError: Statement failed
        """
        existing = await ensure_collection_owned(db, data.id, user.id)
        now = datetime.now(timezone.utc)

        values = data.changes()
        values["updated_at"] = now

        try:
            if data.is_default:
                await self._clear_default(db, user.id, now, keep_id=existing.id)

            await db.execute(
                update(SnippetCollection)
                .where(SnippetCollection.id == existing.id)
                .values(**values)
                .execution_options(synchronize_session=False)
            )
            collection = await self._refetch(db, existing.id)
        except SQLAlchemyError as e:
            logger.error(
                "Database error updating collection %s: %s", existing.id, str(e), exc_info=True
            )
            raise DatabaseError(
                message="Could not update the collection. Please try again.",
                context={"collection_id": existing.id},
            ) from e

        logger.info(
            "Collection %s updated by user %s (fields=%s)",
            collection.id, user.id, sorted(values),
        )
        return CollectionData(collection=CollectionOut.model_validate(collection))

    async def list_collections(
        self,
        db: AsyncSession,
        user: CurrentUser,
        params: ListCollectionsInput,
    ) -> CollectionPage:
        """
        One page of the user's collections, newest first.

        Query plan:
            SELECT * FROM snippet_collections WHERE user_id = :uid
            ORDER BY created_at DESC LIMIT :page_size OFFSET :offset
            → ix_snippet_collections_user_created

        `total` is the size of the returned page.
        """
        try:
            result = await db.execute(
                select(SnippetCollection)
                .where(SnippetCollection.user_id == user.id)
                .order_by(desc(SnippetCollection.created_at))
                .limit(params.page_size)
                .offset(params.offset)
            )
            rows = list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error("Database error listing collections: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve collections. Please try again.",
                context={"error_type": type(e).__name__},
            ) from e

        items = [CollectionOut.model_validate(row) for row in rows]
        return CollectionPage(items=items, total=len(items))

    # ── Helpers ───────────────────────────────────────────────────────────

    async def _clear_default(
        self,
        db: AsyncSession,
        user_id: str,
        now: datetime,
        keep_id: Optional[str] = None,
    ) -> None:
        """Unset is_default on the user's current default, except `keep_id`."""
        stmt = (
            update(SnippetCollection)
            .where(
                SnippetCollection.user_id == user_id,
                SnippetCollection.is_default.is_(True),
            )
            .values(is_default=False, updated_at=now)
            .execution_options(synchronize_session=False)
        )
        if keep_id is not None:
            stmt = stmt.where(SnippetCollection.id != keep_id)
        await db.execute(stmt)

    async def _refetch(self, db: AsyncSession, collection_id: str) -> SnippetCollection:
        # populate_existing: overwrite the instance the guard loaded earlier
        result = await db.execute(
            select(SnippetCollection)
            .where(SnippetCollection.id == collection_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one()


# ── Singleton Instance ────────────────────────────────────────────────────
collection_service = CollectionService()
