"""Pydantic schema definitions."""

from helpdesk.models.schemas.activity import (
    ActivityCreateRequest,
    ActivityDataResponse,
    ActivityListResponse,
    ActivityRead,
    HistoryListResponse,
    HistoryRead,
)
from helpdesk.models.schemas.auth import (
    SessionDataResponse,
    SessionRead,
    SignInRequest,
    SignUpRequest,
)
from helpdesk.models.schemas.dashboard import (
    DashboardStats,
    DashboardStatsResponse,
    DepartmentCount,
    DepartmentCountListResponse,
    RecentTicketsResponse,
)
from helpdesk.models.schemas.health import DatabaseHealth, HealthResponse
from helpdesk.models.schemas.reference import (
    ReferenceDataResponse,
    ReferenceKind,
    ReferenceListResponse,
    ReferenceRead,
    ReferenceWriteRequest,
)
from helpdesk.models.schemas.ticket import (
    TicketCreateRequest,
    TicketDataResponse,
    TicketListMeta,
    TicketListResponse,
    TicketRead,
    TicketUpdateRequest,
)
from helpdesk.models.schemas.user import (
    UserCreateRequest,
    UserDataResponse,
    UserListResponse,
    UserRead,
    UserRoleListResponse,
    UserRoleRead,
    UserRolesWriteRequest,
    UserSummary,
    UserUpdateRequest,
)

__all__ = [
    "ActivityCreateRequest",
    "ActivityDataResponse",
    "ActivityListResponse",
    "ActivityRead",
    "DashboardStats",
    "DashboardStatsResponse",
    "DatabaseHealth",
    "DepartmentCount",
    "DepartmentCountListResponse",
    "HealthResponse",
    "HistoryListResponse",
    "HistoryRead",
    "RecentTicketsResponse",
    "ReferenceDataResponse",
    "ReferenceKind",
    "ReferenceListResponse",
    "ReferenceRead",
    "ReferenceWriteRequest",
    "SessionDataResponse",
    "SessionRead",
    "SignInRequest",
    "SignUpRequest",
    "TicketCreateRequest",
    "TicketDataResponse",
    "TicketListMeta",
    "TicketListResponse",
    "TicketRead",
    "TicketUpdateRequest",
    "UserCreateRequest",
    "UserDataResponse",
    "UserListResponse",
    "UserRead",
    "UserRoleListResponse",
    "UserRoleRead",
    "UserRolesWriteRequest",
    "UserSummary",
    "UserUpdateRequest",
]
