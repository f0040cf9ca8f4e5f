"""
SnipShelf Backend — Collection Request/Response Schemas
=========================================================

What:  Input shapes for the three collection actions and the collection
       representation returned to clients.
"""

from typing import Dict, Optional

from pydantic import Field, field_validator

from snipshelf.schemas.common import (
    CamelInput,
    CamelModel,
    PageData,
    PaginationParams,
    UtcDatetime,
    reject_explicit_null,
)


class CollectionOut(CamelModel):
    """Full collection row as returned by every collection action."""
    id: str
    user_id: str
    name: str
    description: Optional[str] = None
    icon: Optional[str] = None
    is_default: bool
    created_at: UtcDatetime
    updated_at: UtcDatetime


class CollectionData(CamelModel):
    collection: CollectionOut


CollectionPage = PageData[CollectionOut]


class CreateCollectionInput(CamelInput):
    name: str = Field(min_length=1, description="Display name, e.g. 'SQL'")
    description: Optional[str] = None
    icon: Optional[str] = None
    is_default: Optional[bool] = Field(
        default=None,
        description="Make this the user's default collection (clears any other default)",
    )


class UpdateCollectionInput(CamelInput):
    """
    Partial update: only fields present in the request body are applied.

    Omitted       → left unchanged
    `null`        → clears description / icon; rejected for name / isDefault
    """
    id: str = Field(min_length=1)
    name: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    icon: Optional[str] = None
    is_default: Optional[bool] = None

    @field_validator("name", "is_default")
    @classmethod
    def not_null(cls, v, info):
        return reject_explicit_null(v, info.field_name)

    def changes(self) -> Dict[str, object]:
        """Column → value for every field the client actually sent (id excluded)."""
        return self.model_dump(include=self.model_fields_set - {"id"})


class ListCollectionsInput(PaginationParams):
    pass
