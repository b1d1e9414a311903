from helpdesk.models.schemas.dashboard import DashboardStats, DepartmentCount
from helpdesk.models.schemas.ticket import TicketRead
from helpdesk.repositories.ticket_repository import TicketRepository
from helpdesk.repositories.user_repository import UserRepository
from helpdesk.services.ticket_service import to_ticket_read


class DashboardService:
    def __init__(
        self,
        ticket_repository: TicketRepository,
        user_repository: UserRepository,
    ) -> None:
        self.ticket_repository = ticket_repository
        self.user_repository = user_repository

    def get_stats(self) -> DashboardStats:
        counts = self.ticket_repository.status_counts()
        return DashboardStats(
            total=counts.get("total", 0),
            open=counts.get("open", 0),
            in_progress=counts.get("in_progress", 0),
            closed=counts.get("closed", 0),
            high_priority=counts.get("high_priority", 0),
        )

    def get_recent_tickets(self, limit: int = 5) -> list[TicketRead]:
        return [to_ticket_read(ticket) for ticket in self.ticket_repository.list_recent(limit=limit)]

    def get_department_counts(self) -> list[DepartmentCount]:
        return [
            DepartmentCount(department=department, count=count)
            for department, count in self.user_repository.count_by_department()
        ]
