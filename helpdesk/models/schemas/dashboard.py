from pydantic import BaseModel

from helpdesk.models.schemas.ticket import TicketRead


class DashboardStats(BaseModel):
    total: int
    open: int
    in_progress: int
    closed: int
    high_priority: int


class DashboardStatsResponse(BaseModel):
    data: DashboardStats


class RecentTicketsResponse(BaseModel):
    data: list[TicketRead]


class DepartmentCount(BaseModel):
    department: str
    count: int


class DepartmentCountListResponse(BaseModel):
    data: list[DepartmentCount]
