"""Business services."""

from helpdesk.services.activity_service import ActivityService
from helpdesk.services.auth_service import AuthService
from helpdesk.services.dashboard_service import DashboardService
from helpdesk.services.health_service import HealthService
from helpdesk.services.reference_service import ReferenceService
from helpdesk.services.ticket_service import TicketService
from helpdesk.services.user_service import UserService

__all__ = [
    "ActivityService",
    "AuthService",
    "DashboardService",
    "HealthService",
    "ReferenceService",
    "TicketService",
    "UserService",
]
