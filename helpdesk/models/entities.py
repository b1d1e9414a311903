from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Literal

TicketStatus = Literal["OPEN", "IN_PROGRESS", "CLOSED"]
TICKET_STATUSES: tuple[TicketStatus, ...] = ("OPEN", "IN_PROGRESS", "CLOSED")


@dataclass(slots=True)
class ReferenceEntity:
    id: int
    name: str


@dataclass(slots=True)
class TicketEntity:
    id: str
    title: str
    description: str | None
    status: TicketStatus
    priority_id: int | None
    category_id: int | None
    assignee_id: int | None
    creator_id: str | None
    site: str | None
    system: str | None
    error_code: str | None
    created_at: datetime
    updated_at: datetime
    closed_at: datetime | None
    sla_due_at: datetime | None
    priority_name: str | None = None
    category_name: str | None = None
    assignee_name: str | None = None
    creator_name: str | None = None
    creator_email: str | None = None


@dataclass(slots=True)
class UserEntity:
    id: str
    name: str
    email: str
    department_id: int | None
    created_at: datetime
    password_hash: str | None = None
    department_name: str | None = None


@dataclass(slots=True)
class UserRoleEntity:
    id: int
    user_id: str
    role_id: int
    role_name: str
    assigned_at: datetime


@dataclass(slots=True)
class ActivityEntity:
    """A comment or a note attached to a ticket."""

    id: int
    ticket_id: str
    user_id: str | None
    content: str
    created_at: datetime
    author_name: str | None = None


@dataclass(slots=True)
class HistoryEntity:
    id: int
    ticket_id: str
    user_id: str | None
    action: str
    timestamp: datetime
    details: dict[str, Any] = field(default_factory=dict)
