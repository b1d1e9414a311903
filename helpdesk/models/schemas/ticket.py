from datetime import datetime
from typing import Annotated, Literal

from pydantic import BaseModel, StringConstraints

from helpdesk.models.schemas.reference import ReferenceRead
from helpdesk.models.schemas.user import UserSummary

TicketStatus = Literal["OPEN", "IN_PROGRESS", "CLOSED"]
TicketSortField = Literal["created_at", "updated_at", "title", "status", "priority", "assignee"]
SortOrder = Literal["asc", "desc"]
# Stored titles are never blank and never longer than the column allows.
TicketTitle = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=200)]


class TicketCreateRequest(BaseModel):
    title: str
    description: str | None = None
    status: TicketStatus = "OPEN"
    priority_id: int | None = None
    category_id: int | None = None
    assignee_id: int | None = None
    creator_id: str | None = None
    site: str | None = None
    system: str | None = None
    error_code: str | None = None
    sla_due_at: datetime | None = None


class TicketUpdateRequest(BaseModel):
    """Partial update; only the fields present in the request body are written."""

    title: str | None = None
    description: str | None = None
    status: TicketStatus | None = None
    priority_id: int | None = None
    category_id: int | None = None
    assignee_id: int | None = None
    site: str | None = None
    system: str | None = None
    error_code: str | None = None
    sla_due_at: datetime | None = None


class TicketRead(BaseModel):
    id: str
    title: TicketTitle
    description: str | None = None
    status: TicketStatus
    priority_id: int | None = None
    category_id: int | None = None
    assignee_id: int | None = None
    creator_id: str | None = None
    site: str | None = None
    system: str | None = None
    error_code: str | None = None
    created_at: datetime
    updated_at: datetime
    closed_at: datetime | None = None
    sla_due_at: datetime | None = None
    priority: ReferenceRead | None = None
    category: ReferenceRead | None = None
    assignee: ReferenceRead | None = None
    creator: UserSummary | None = None


class TicketDataResponse(BaseModel):
    data: TicketRead


class TicketListMeta(BaseModel):
    page: int
    page_size: int
    total: int


class TicketListResponse(BaseModel):
    data: list[TicketRead]
    meta: TicketListMeta
