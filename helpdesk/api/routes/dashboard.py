from typing import Annotated

from fastapi import APIRouter, Depends, Query

from helpdesk.models.schemas.dashboard import (
    DashboardStatsResponse,
    DepartmentCountListResponse,
    RecentTicketsResponse,
)
from helpdesk.repositories.ticket_repository import TicketRepository
from helpdesk.repositories.user_repository import UserRepository
from helpdesk.services.dashboard_service import DashboardService

router = APIRouter(prefix="/dashboard")


def get_dashboard_service() -> DashboardService:
    return DashboardService(
        ticket_repository=TicketRepository(),
        user_repository=UserRepository(),
    )


@router.get("/stats", response_model=DashboardStatsResponse)
def get_stats(
    dashboard_service: Annotated[DashboardService, Depends(get_dashboard_service)],
) -> DashboardStatsResponse:
    return DashboardStatsResponse(data=dashboard_service.get_stats())


@router.get("/recent", response_model=RecentTicketsResponse)
def get_recent_tickets(
    dashboard_service: Annotated[DashboardService, Depends(get_dashboard_service)],
    limit: Annotated[int, Query(ge=1, le=50)] = 5,
) -> RecentTicketsResponse:
    return RecentTicketsResponse(data=dashboard_service.get_recent_tickets(limit))


@router.get("/departments", response_model=DepartmentCountListResponse)
def get_department_counts(
    dashboard_service: Annotated[DashboardService, Depends(get_dashboard_service)],
) -> DepartmentCountListResponse:
    return DepartmentCountListResponse(data=dashboard_service.get_department_counts())
