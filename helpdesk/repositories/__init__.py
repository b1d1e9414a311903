"""Database repositories."""

from helpdesk.repositories.activity_repository import ActivityRepository
from helpdesk.repositories.health_repository import HealthRepository
from helpdesk.repositories.history_repository import HistoryRepository
from helpdesk.repositories.reference_repository import ReferenceRepository
from helpdesk.repositories.ticket_repository import TicketRepository
from helpdesk.repositories.user_repository import UserRepository
from helpdesk.repositories.user_role_repository import UserRoleRepository

__all__ = [
    "ActivityRepository",
    "HealthRepository",
    "HistoryRepository",
    "ReferenceRepository",
    "TicketRepository",
    "UserRepository",
    "UserRoleRepository",
]
