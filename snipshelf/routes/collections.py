"""
SnipShelf Backend — Collection Action Routes
==============================================

What:  POST /_actions/createSnippetCollection
       POST /_actions/updateSnippetCollection
       POST /_actions/listMySnippetCollections
How:   Body validated by the input schema, caller resolved by require_user,
       work delegated to CollectionService, result wrapped in the envelope.
"""

from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from snipshelf.auth import CurrentUser, require_user
from snipshelf.database import get_db_session
from snipshelf.routes import ACTION_ERROR_RESPONSES, ACTIONS_PREFIX
from snipshelf.schemas.collection import (
    CollectionData,
    CollectionPage,
    CreateCollectionInput,
    ListCollectionsInput,
    UpdateCollectionInput,
)
from snipshelf.schemas.common import ActionResponse
from snipshelf.services.collection_service import collection_service

router = APIRouter(prefix=ACTIONS_PREFIX, tags=["Collections"])


@router.post(
    "/createSnippetCollection",
    response_model=ActionResponse[CollectionData],
    responses=ACTION_ERROR_RESPONSES,
    summary="Create a snippet collection",
    description="Creates a collection owned by the caller. isDefault=true takes the default flag "
                "away from the caller's current default collection.",
)
async def create_snippet_collection(
    data: CreateCollectionInput,
    user: CurrentUser = Depends(require_user),
    db: AsyncSession = Depends(get_db_session, scope="function"),
) -> ActionResponse[CollectionData]:
    result = await collection_service.create_collection(db=db, user=user, data=data)
    return ActionResponse(data=result)


@router.post(
    "/updateSnippetCollection",
    response_model=ActionResponse[CollectionData],
    responses=ACTION_ERROR_RESPONSES,
    summary="Update a snippet collection",
    description="Applies only the fields present in the body. Returns the stored row.",
)
async def update_snippet_collection(
    data: UpdateCollectionInput,
    user: CurrentUser = Depends(require_user),
    db: AsyncSession = Depends(get_db_session, scope="function"),
) -> ActionResponse[CollectionData]:
    result = await collection_service.update_collection(db=db, user=user, data=data)
    return ActionResponse(data=result)


@router.post(
    "/listMySnippetCollections",
    response_model=ActionResponse[CollectionPage],
    responses=ACTION_ERROR_RESPONSES,
    summary="List the caller's collections",
    description="Newest first, offset pagination. `total` counts the items on this page only.",
)
async def list_my_snippet_collections(
    params: Optional[ListCollectionsInput] = None,
    user: CurrentUser = Depends(require_user),
    db: AsyncSession = Depends(get_db_session, scope="function"),
) -> ActionResponse[CollectionPage]:
    # An empty body means "first page, default size"
    result = await collection_service.list_collections(
        db=db, user=user, params=params or ListCollectionsInput()
    )
    return ActionResponse(data=result)
