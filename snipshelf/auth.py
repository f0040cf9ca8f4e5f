"""
SnipShelf Backend — Authorization Guard
=========================================

What:  The only trust-boundary checks in the system.
How:   `require_user` turns the principal resolved by AuthenticationMiddleware
       into a `CurrentUser` (or UNAUTHORIZED). The `ensure_*_owned` helpers
       fetch a row by id AND owner in one query; an empty result is NOT_FOUND.
Who:   `require_user` is a FastAPI dependency on every action route; the
       ownership helpers are called by the services before they touch a row.

Enumeration safety:
    "Does not exist" and "belongs to someone else" raise the identical
    NotFoundError. The owner filter is part of the SELECT itself, so the
    service never even loads another user's row.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Type, TypeVar

from fastapi import Request
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from snipshelf.exceptions import NotFoundError, UnauthorizedError
from snipshelf.models.collection import SnippetCollection
from snipshelf.models.snippet import Snippet

logger = logging.getLogger(__name__)

OwnedT = TypeVar("OwnedT", SnippetCollection, Snippet)


@dataclass(frozen=True)
class CurrentUser:
    """The authenticated principal, as forwarded by the upstream gateway."""
    id: str
    email: Optional[str] = None
    name: Optional[str] = None


def require_user(request: Request) -> CurrentUser:
    """
    FastAPI dependency: the authenticated caller, or UnauthorizedError.

    Runs before the session dependency does any work, so an anonymous call
    never reaches the database.
    """
    user = getattr(request.state, "user", None)
    if user is None:
        raise UnauthorizedError()
    return user


async def ensure_owned(
    db: AsyncSession,
    model: Type[OwnedT],
    resource_id: str,
    user_id: str,
    resource: str,
) -> OwnedT:
    """
    Fetch `model` row `resource_id` if and only if `user_id` owns it.

    Args:
        db:          Request-scoped session
        model:       SnippetCollection or Snippet (anything with id + user_id)
        resource_id: Opaque id supplied by the caller
        user_id:     Authenticated caller
        resource:    Name used in the NOT_FOUND message ("Collection", "Snippet")

    Raises:
        NotFoundError: No such row, or the row belongs to another user
    """
    result = await db.execute(
        select(model).where(model.id == resource_id, model.user_id == user_id)
    )
    row = result.scalar_one_or_none()
    if row is None:
        logger.info(
            "%s %s not found for user %s", resource, resource_id, user_id
        )
        raise NotFoundError(resource=resource, resource_id=resource_id)
    return row


async def ensure_collection_owned(
    db: AsyncSession, collection_id: str, user_id: str
) -> SnippetCollection:
    return await ensure_owned(db, SnippetCollection, collection_id, user_id, "Collection")


async def ensure_snippet_owned(
    db: AsyncSession, snippet_id: str, user_id: str
) -> Snippet:
    return await ensure_owned(db, Snippet, snippet_id, user_id, "Snippet")
