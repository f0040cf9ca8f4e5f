"""
SnipShelf Backend — Snippet Action Routes
===========================================

What:  POST /_actions/createSnippet, updateSnippet, archiveSnippet,
       listSnippets, getSnippet.
How:   Same pipeline as the collection actions: validated body →
       require_user → SnippetService → {success, data}.
"""

from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from snipshelf.auth import CurrentUser, require_user
from snipshelf.database import get_db_session
from snipshelf.routes import ACTION_ERROR_RESPONSES, ACTIONS_PREFIX
from snipshelf.schemas.common import ActionResponse, IdInput
from snipshelf.schemas.snippet import (
    ArchivedSnippetData,
    CreateSnippetInput,
    ListSnippetsInput,
    SnippetData,
    SnippetPage,
    UpdateSnippetInput,
)
from snipshelf.services.snippet_service import snippet_service

router = APIRouter(prefix=ACTIONS_PREFIX, tags=["Snippets"])


@router.post(
    "/createSnippet",
    response_model=ActionResponse[SnippetData],
    responses=ACTION_ERROR_RESPONSES,
    summary="Create a snippet in one of the caller's collections",
)
async def create_snippet(
    data: CreateSnippetInput,
    user: CurrentUser = Depends(require_user),
    db: AsyncSession = Depends(get_db_session, scope="function"),
) -> ActionResponse[SnippetData]:
    result = await snippet_service.create_snippet(db=db, user=user, data=data)
    return ActionResponse(data=result)


@router.post(
    "/updateSnippet",
    response_model=ActionResponse[SnippetData],
    responses=ACTION_ERROR_RESPONSES,
    summary="Update a snippet",
    description=(
        "Applies only the fields present in the body. A different collectionId moves the "
        "snippet, which requires the target collection to be the caller's too."
    ),
)
async def update_snippet(
    data: UpdateSnippetInput,
    user: CurrentUser = Depends(require_user),
    db: AsyncSession = Depends(get_db_session, scope="function"),
) -> ActionResponse[SnippetData]:
    result = await snippet_service.update_snippet(db=db, user=user, data=data)
    return ActionResponse(data=result)


@router.post(
    "/archiveSnippet",
    response_model=ActionResponse[ArchivedSnippetData],
    responses=ACTION_ERROR_RESPONSES,
    summary="Archive a snippet",
    description="Hides the snippet from default listings. Returns only the id. Repeatable.",
)
async def archive_snippet(
    data: IdInput,
    user: CurrentUser = Depends(require_user),
    db: AsyncSession = Depends(get_db_session, scope="function"),
) -> ActionResponse[ArchivedSnippetData]:
    result = await snippet_service.archive_snippet(db=db, user=user, snippet_id=data.id)
    return ActionResponse(data=result)


@router.post(
    "/listSnippets",
    response_model=ActionResponse[SnippetPage],
    responses=ACTION_ERROR_RESPONSES,
    summary="List the caller's snippets",
    description=(
        "Most recently updated first. Archived snippets are excluded unless includeArchived "
        "is true. `total` counts the items on this page only."
    ),
)
async def list_snippets(
    params: Optional[ListSnippetsInput] = None,
    user: CurrentUser = Depends(require_user),
    db: AsyncSession = Depends(get_db_session, scope="function"),
) -> ActionResponse[SnippetPage]:
    result = await snippet_service.list_snippets(
        db=db, user=user, params=params or ListSnippetsInput()
    )
    return ActionResponse(data=result)


@router.post(
    "/getSnippet",
    response_model=ActionResponse[SnippetData],
    responses=ACTION_ERROR_RESPONSES,
    summary="Get one snippet",
)
async def get_snippet(
    data: IdInput,
    user: CurrentUser = Depends(require_user),
    db: AsyncSession = Depends(get_db_session, scope="function"),
) -> ActionResponse[SnippetData]:
    result = await snippet_service.get_snippet(db=db, user=user, snippet_id=data.id)
    return ActionResponse(data=result)
