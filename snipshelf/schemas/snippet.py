"""
SnipShelf Backend — Snippet Request/Response Schemas
======================================================

What:  Input shapes for the snippet actions and the snippet representation.
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


class SnippetOut(CamelModel):
    """Full snippet row as returned by create/update/get/list."""
    id: str
    collection_id: str
    user_id: str
    title: str
    language: Optional[str] = None
    content: str
    description: Optional[str] = None
    tags: Optional[str] = None
    is_favorite: bool
    is_archived: bool
    created_at: UtcDatetime
    updated_at: UtcDatetime


class SnippetData(CamelModel):
    snippet: SnippetOut


class ArchivedSnippetData(CamelModel):
    id: str


SnippetPage = PageData[SnippetOut]


class CreateSnippetInput(CamelInput):
    collection_id: str = Field(min_length=1)
    title: str = Field(min_length=1)
    language: Optional[str] = Field(default=None, description='e.g. "js", "ts", "sql", "text"')
    content: str = Field(min_length=1)
    description: Optional[str] = None
    tags: Optional[str] = Field(default=None, description="Free text; stored as given")
    is_favorite: Optional[bool] = None


class UpdateSnippetInput(CamelInput):
    """
    Partial update: only fields present in the request body are applied.

    `null` clears language / description / tags. title, content, the flags
    and collectionId cannot be null.
    """
    id: str = Field(min_length=1)
    title: Optional[str] = Field(default=None, min_length=1)
    language: Optional[str] = None
    content: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    tags: Optional[str] = None
    is_favorite: Optional[bool] = None
    is_archived: Optional[bool] = None
    collection_id: Optional[str] = None

    @field_validator("title", "content", "is_favorite", "is_archived", "collection_id")
    @classmethod
    def not_null(cls, v, info):
        return reject_explicit_null(v, info.field_name)

    def changes(self) -> Dict[str, object]:
        """
        Column → value for every sent field except id and collectionId.

        collectionId is handled separately: a move needs its own ownership check.
        """
        return self.model_dump(include=self.model_fields_set - {"id", "collection_id"})


class ListSnippetsInput(PaginationParams):
    collection_id: Optional[str] = Field(
        default=None,
        description="Restrict to one collection (must be yours). Empty string means all.",
    )
    include_archived: bool = False
