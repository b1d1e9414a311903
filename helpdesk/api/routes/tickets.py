from typing import Annotated

from fastapi import APIRouter, Depends, Query, Response, status

from helpdesk.api.deps import CurrentUser
from helpdesk.models.schemas.activity import HistoryListResponse
from helpdesk.models.schemas.ticket import (
    SortOrder,
    TicketCreateRequest,
    TicketDataResponse,
    TicketListResponse,
    TicketSortField,
    TicketStatus,
    TicketUpdateRequest,
)
from helpdesk.repositories.history_repository import HistoryRepository
from helpdesk.repositories.ticket_repository import TicketRepository
from helpdesk.services.ticket_service import TicketService

router = APIRouter(prefix="/tickets")


def get_ticket_service() -> TicketService:
    return TicketService(
        ticket_repository=TicketRepository(),
        history_repository=HistoryRepository(),
    )


@router.get("", response_model=TicketListResponse)
def list_tickets(
    ticket_service: Annotated[TicketService, Depends(get_ticket_service)],
    statuses: Annotated[list[TicketStatus] | None, Query(alias="status")] = None,
    category_id: Annotated[list[int] | None, Query()] = None,
    priority_id: Annotated[list[int] | None, Query()] = None,
    assignee_id: Annotated[int | None, Query()] = None,
    creator_id: Annotated[str | None, Query()] = None,
    q: Annotated[str | None, Query()] = None,
    sort: Annotated[TicketSortField, Query()] = "created_at",
    order: Annotated[SortOrder, Query()] = "desc",
    page: Annotated[int, Query(ge=1)] = 1,
    page_size: Annotated[int, Query(ge=1, le=200)] = 20,
) -> TicketListResponse:
    return ticket_service.list_tickets(
        statuses=statuses,
        category_ids=category_id,
        priority_ids=priority_id,
        assignee_id=assignee_id,
        creator_id=creator_id,
        q=q,
        sort=sort,
        order=order,
        page=page,
        page_size=page_size,
    )


@router.post("", response_model=TicketDataResponse, status_code=status.HTTP_201_CREATED)
def create_ticket(
    payload: TicketCreateRequest,
    user: CurrentUser,
    ticket_service: Annotated[TicketService, Depends(get_ticket_service)],
) -> TicketDataResponse:
    ticket = ticket_service.create_ticket(payload, actor_id=user.id)
    return TicketDataResponse(data=ticket)


@router.get("/{ticket_id}", response_model=TicketDataResponse)
def get_ticket(
    ticket_id: str,
    ticket_service: Annotated[TicketService, Depends(get_ticket_service)],
) -> TicketDataResponse:
    ticket = ticket_service.get_ticket(ticket_id)
    return TicketDataResponse(data=ticket)


@router.patch("/{ticket_id}", response_model=TicketDataResponse)
def update_ticket(
    ticket_id: str,
    payload: TicketUpdateRequest,
    user: CurrentUser,
    ticket_service: Annotated[TicketService, Depends(get_ticket_service)],
) -> TicketDataResponse:
    ticket = ticket_service.update_ticket(ticket_id, payload, actor_id=user.id)
    return TicketDataResponse(data=ticket)


@router.delete("/{ticket_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_ticket(
    ticket_id: str,
    ticket_service: Annotated[TicketService, Depends(get_ticket_service)],
) -> Response:
    ticket_service.delete_ticket(ticket_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{ticket_id}/history", response_model=HistoryListResponse)
def list_ticket_history(
    ticket_id: str,
    ticket_service: Annotated[TicketService, Depends(get_ticket_service)],
) -> HistoryListResponse:
    return HistoryListResponse(data=ticket_service.list_history(ticket_id))
