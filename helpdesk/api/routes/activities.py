from typing import Annotated

from fastapi import APIRouter, Depends, Response, status

from helpdesk.api.deps import CurrentUser
from helpdesk.models.schemas.activity import (
    ActivityCreateRequest,
    ActivityDataResponse,
    ActivityListResponse,
)
from helpdesk.repositories.activity_repository import ActivityRepository
from helpdesk.repositories.ticket_repository import TicketRepository
from helpdesk.services.activity_service import ActivityService

router = APIRouter()


def get_comment_service() -> ActivityService:
    return ActivityService(
        activity_repository=ActivityRepository("comment"),
        ticket_repository=TicketRepository(),
    )


def get_note_service() -> ActivityService:
    return ActivityService(
        activity_repository=ActivityRepository("note"),
        ticket_repository=TicketRepository(),
    )


@router.get("/tickets/{ticket_id}/comments", response_model=ActivityListResponse)
def list_comments(
    ticket_id: str,
    comment_service: Annotated[ActivityService, Depends(get_comment_service)],
) -> ActivityListResponse:
    return ActivityListResponse(data=comment_service.list_for_ticket(ticket_id))


@router.post(
    "/tickets/{ticket_id}/comments",
    response_model=ActivityDataResponse,
    status_code=status.HTTP_201_CREATED,
)
def add_comment(
    ticket_id: str,
    payload: ActivityCreateRequest,
    user: CurrentUser,
    comment_service: Annotated[ActivityService, Depends(get_comment_service)],
) -> ActivityDataResponse:
    created = comment_service.add(ticket_id, payload, actor_id=user.id)
    return ActivityDataResponse(data=created)


@router.delete("/comments/{comment_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_comment(
    comment_id: int,
    comment_service: Annotated[ActivityService, Depends(get_comment_service)],
) -> Response:
    comment_service.delete(comment_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/tickets/{ticket_id}/notes", response_model=ActivityListResponse)
def list_notes(
    ticket_id: str,
    note_service: Annotated[ActivityService, Depends(get_note_service)],
) -> ActivityListResponse:
    return ActivityListResponse(data=note_service.list_for_ticket(ticket_id))


@router.post(
    "/tickets/{ticket_id}/notes",
    response_model=ActivityDataResponse,
    status_code=status.HTTP_201_CREATED,
)
def add_note(
    ticket_id: str,
    payload: ActivityCreateRequest,
    user: CurrentUser,
    note_service: Annotated[ActivityService, Depends(get_note_service)],
) -> ActivityDataResponse:
    created = note_service.add(ticket_id, payload, actor_id=user.id)
    return ActivityDataResponse(data=created)


@router.delete("/notes/{note_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_note(
    note_id: int,
    note_service: Annotated[ActivityService, Depends(get_note_service)],
) -> Response:
    note_service.delete(note_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
