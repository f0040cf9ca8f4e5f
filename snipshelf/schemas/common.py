"""
SnipShelf Backend — Shared Pydantic Schemas
=============================================

What:  Base model, action envelope, pagination input and error/health shapes
       shared by every action.
Why:   Every action answers with the same `{success, data}` envelope and every
       failure with the same error body, so clients parse one format.

Naming:
    Python attributes are snake_case; the wire format is camelCase
    (`pageSize`, `isDefault`, `createdAt`). `populate_by_name` lets tests and
    internal callers use either spelling on input.
"""

from datetime import datetime, timezone
from typing import Annotated, Any, Dict, Generic, List, Optional, TypeVar

from pydantic import AfterValidator, BaseModel, Field
from pydantic.alias_generators import to_camel

DataT = TypeVar("DataT")

MAX_PAGE_SIZE = 100
DEFAULT_PAGE_SIZE = 20


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; everything is stored in UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


# Timestamp that always serializes as UTC ISO 8601 ("...Z")
UtcDatetime = Annotated[datetime, AfterValidator(_as_utc)]


class CamelModel(BaseModel):
    """Base for every request/response model: camelCase on the wire."""

    model_config = {
        "alias_generator": to_camel,
        "populate_by_name": True,
        "from_attributes": True,
    }


class CamelInput(CamelModel):
    """
    Base for action inputs. Strict: `"yes"` is not a bool and `"2"` is not
    an int; wrongly typed values fail as BAD_REQUEST instead of being coerced.
    """

    model_config = {"strict": True}


def reject_explicit_null(value: Any, field_name: str) -> Any:
    """
    Guard for partial-update fields whose column is NOT NULL.

    Field validators only run for values the client actually sent, so this
    fires for an explicit `null` and never for an omitted field.
    """
    if value is None:
        raise ValueError(f"{field_name} may be omitted but not set to null")
    return value


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class PaginationParams(CamelInput):
    """
    Offset pagination shared by the list actions.

    offset = (page - 1) * pageSize. There is no cursor; rows inserted while
    a client pages through may shift results between pages.
    """
    page: int = Field(default=1, ge=1, description="1-based page number")
    page_size: int = Field(
        default=DEFAULT_PAGE_SIZE,
        ge=1,
        le=MAX_PAGE_SIZE,
        description=f"Items per page (max {MAX_PAGE_SIZE})",
    )

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size


class IdInput(CamelInput):
    """Body of the single-id actions (getSnippet, archiveSnippet)."""
    id: str = Field(min_length=1)


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class ActionResponse(CamelModel, Generic[DataT]):
    """
    Uniform success envelope: `{"success": true, "data": {...}}`.

    There is no failure variant: errors are raised and rendered by the
    global exception handlers as ErrorResponse.
    """
    success: bool = True
    data: DataT


class PageData(CamelModel, Generic[DataT]):
    """
    One page of list results.

    `total` is the number of items on THIS page, not the number of matching
    rows across all pages.
    """
    items: List[DataT]
    total: int


class ErrorResponse(BaseModel):
    """
    Error body for every failed action.

    Example:
        {
            "code": "NOT_FOUND",
            "message": "Collection not found.",
            "request_id": "550e8400"
        }
    """
    code: str = Field(description="UNAUTHORIZED | NOT_FOUND | BAD_REQUEST | INTERNAL_SERVER_ERROR")
    message: str = Field(description="Human-readable error description")
    details: Optional[Dict[str, Any]] = Field(default=None, description="Validation issues")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """Returned by GET /health for load balancer and Docker probes."""
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
