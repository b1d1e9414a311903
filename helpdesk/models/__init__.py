"""Domain entities and API schemas."""

from helpdesk.models.entities import (
    TICKET_STATUSES,
    ActivityEntity,
    HistoryEntity,
    ReferenceEntity,
    TicketEntity,
    TicketStatus,
    UserEntity,
    UserRoleEntity,
)

__all__ = [
    "TICKET_STATUSES",
    "ActivityEntity",
    "HistoryEntity",
    "ReferenceEntity",
    "TicketEntity",
    "TicketStatus",
    "UserEntity",
    "UserRoleEntity",
]
