import logging
from datetime import UTC, datetime
from typing import Any
from uuid import UUID

from psycopg.errors import ForeignKeyViolation

from helpdesk.core.database import get_connection
from helpdesk.core.errors import AppError
from helpdesk.models.entities import HistoryEntity, TicketEntity, TicketStatus
from helpdesk.models.schemas.activity import HistoryRead
from helpdesk.models.schemas.reference import ReferenceRead
from helpdesk.models.schemas.ticket import (
    SortOrder,
    TicketCreateRequest,
    TicketListMeta,
    TicketListResponse,
    TicketRead,
    TicketSortField,
    TicketUpdateRequest,
)
from helpdesk.models.schemas.user import UserSummary
from helpdesk.repositories.history_repository import HistoryRepository
from helpdesk.repositories.ticket_repository import TicketRepository

logger = logging.getLogger(__name__)


def to_ticket_read(ticket: TicketEntity) -> TicketRead:
    return TicketRead(
        id=ticket.id,
        title=ticket.title,
        description=ticket.description,
        status=ticket.status,
        priority_id=ticket.priority_id,
        category_id=ticket.category_id,
        assignee_id=ticket.assignee_id,
        creator_id=ticket.creator_id,
        site=ticket.site,
        system=ticket.system,
        error_code=ticket.error_code,
        created_at=ticket.created_at,
        updated_at=ticket.updated_at,
        closed_at=ticket.closed_at,
        sla_due_at=ticket.sla_due_at,
        priority=_reference(ticket.priority_id, ticket.priority_name),
        category=_reference(ticket.category_id, ticket.category_name),
        assignee=_reference(ticket.assignee_id, ticket.assignee_name),
        creator=(
            UserSummary(
                id=ticket.creator_id,
                name=ticket.creator_name,
                email=ticket.creator_email or "",
            )
            if ticket.creator_id is not None and ticket.creator_name is not None
            else None
        ),
    )


def _reference(entity_id: int | None, name: str | None) -> ReferenceRead | None:
    if entity_id is None or name is None:
        return None
    return ReferenceRead(id=entity_id, name=name)


def to_history_read(entry: HistoryEntity) -> HistoryRead:
    return HistoryRead(
        id=entry.id,
        ticket_id=entry.ticket_id,
        user_id=entry.user_id,
        action=entry.action,
        details=entry.details,
        timestamp=entry.timestamp,
    )


class TicketService:
    def __init__(
        self,
        ticket_repository: TicketRepository,
        history_repository: HistoryRepository,
        database_url: str | None = None,
    ) -> None:
        self.ticket_repository = ticket_repository
        self.history_repository = history_repository
        self.database_url = database_url

    def create_ticket(
        self,
        payload: TicketCreateRequest,
        *,
        actor_id: str | None = None,
    ) -> TicketRead:
        title = self._validate_title(payload.title)
        creator_id = self._normalize_user_id(payload.creator_id or actor_id)
        closed_at = datetime.now(UTC) if payload.status == "CLOSED" else None

        try:
            with get_connection(self.database_url) as connection:
                ticket = self.ticket_repository.create(
                    title=title,
                    description=payload.description,
                    status=payload.status,
                    priority_id=payload.priority_id,
                    category_id=payload.category_id,
                    assignee_id=payload.assignee_id,
                    creator_id=creator_id,
                    site=payload.site,
                    system=payload.system,
                    error_code=payload.error_code,
                    sla_due_at=payload.sla_due_at,
                    closed_at=closed_at,
                    connection=connection,
                )
                self.history_repository.record(
                    ticket_id=ticket.id,
                    user_id=actor_id,
                    action="created",
                    details={"title": ticket.title, "status": ticket.status},
                    connection=connection,
                )
        except ForeignKeyViolation as exc:
            self._raise_invalid_reference(exc)

        logger.info("Created ticket %s (%s)", ticket.id, ticket.status)
        return to_ticket_read(ticket)

    def list_tickets(
        self,
        *,
        statuses: list[TicketStatus] | None = None,
        category_ids: list[int] | None = None,
        priority_ids: list[int] | None = None,
        assignee_id: int | None = None,
        creator_id: str | None = None,
        q: str | None = None,
        sort: TicketSortField = "created_at",
        order: SortOrder = "desc",
        page: int = 1,
        page_size: int = 20,
    ) -> TicketListResponse:
        normalized_q = q.strip() if q else None
        offset = (page - 1) * page_size
        if creator_id is not None:
            creator_id = self._normalize_user_id(creator_id)

        tickets, total = self.ticket_repository.list_filtered(
            statuses=statuses,
            category_ids=category_ids,
            priority_ids=priority_ids,
            assignee_id=assignee_id,
            creator_id=creator_id,
            q=normalized_q,
            sort=sort,
            order=order,
            limit=page_size,
            offset=offset,
        )
        return TicketListResponse(
            data=[to_ticket_read(ticket) for ticket in tickets],
            meta=TicketListMeta(page=page, page_size=page_size, total=total),
        )

    def get_ticket(self, ticket_id: str) -> TicketRead:
        normalized_id = self._normalize_ticket_id(ticket_id)
        ticket = self.ticket_repository.get_by_id(normalized_id)
        if ticket is None:
            self._raise_ticket_not_found(ticket_id)
        return to_ticket_read(ticket)

    def update_ticket(
        self,
        ticket_id: str,
        payload: TicketUpdateRequest,
        *,
        actor_id: str | None = None,
    ) -> TicketRead:
        normalized_id = self._normalize_ticket_id(ticket_id)
        fields: dict[str, Any] = payload.model_dump(exclude_unset=True)
        changes = payload.model_dump(mode="json", exclude_unset=True)

        if "title" in fields:
            fields["title"] = self._validate_title(fields["title"] or "")
            changes["title"] = fields["title"]
        if "status" in fields and fields["status"] is None:
            raise AppError.bad_request("INVALID_TICKET_STATUS", "Ticket status cannot be empty.")

        try:
            with get_connection(self.database_url) as connection:
                current = self.ticket_repository.get_by_id(normalized_id, connection=connection)
                if current is None:
                    self._raise_ticket_not_found(ticket_id)
                if not fields:
                    return to_ticket_read(current)

                status_changed = "status" in fields and fields["status"] != current.status
                if status_changed:
                    fields["closed_at"] = (
                        datetime.now(UTC) if fields["status"] == "CLOSED" else None
                    )

                updated = self.ticket_repository.update(
                    ticket_id=normalized_id,
                    fields=fields,
                    connection=connection,
                )
                if updated is None:
                    self._raise_ticket_not_found(ticket_id)

                details: dict[str, Any] = {"changes": changes}
                if status_changed:
                    details["from"] = current.status
                    details["to"] = updated.status
                self.history_repository.record(
                    ticket_id=normalized_id,
                    user_id=actor_id,
                    action="status_changed" if status_changed else "updated",
                    details=details,
                    connection=connection,
                )
        except ForeignKeyViolation as exc:
            self._raise_invalid_reference(exc)

        logger.info("Updated ticket %s fields=%s", normalized_id, sorted(changes))
        return to_ticket_read(updated)

    def delete_ticket(self, ticket_id: str) -> None:
        normalized_id = self._normalize_ticket_id(ticket_id)
        deleted = self.ticket_repository.delete(ticket_id=normalized_id)
        if not deleted:
            self._raise_ticket_not_found(ticket_id)
        logger.info("Deleted ticket %s", normalized_id)

    def list_history(self, ticket_id: str) -> list[HistoryRead]:
        normalized_id = self._normalize_ticket_id(ticket_id)
        with get_connection(self.database_url) as connection:
            ticket = self.ticket_repository.get_by_id(normalized_id, connection=connection)
            if ticket is None:
                self._raise_ticket_not_found(ticket_id)
            entries = self.history_repository.list_for_ticket(
                normalized_id,
                connection=connection,
            )
        return [to_history_read(entry) for entry in entries]

    def _validate_title(self, title: str) -> str:
        normalized = title.strip()
        if not 1 <= len(normalized) <= 200:
            raise AppError.bad_request(
                "INVALID_TICKET_TITLE",
                "Ticket title length must be between 1 and 200 characters.",
            )
        return normalized

    def _normalize_ticket_id(self, ticket_id: str) -> str:
        try:
            return str(UUID(ticket_id))
        except ValueError:
            self._raise_ticket_not_found(ticket_id)

    def _normalize_user_id(self, user_id: str | None) -> str | None:
        if user_id is None:
            return None
        try:
            return str(UUID(user_id))
        except ValueError as exc:
            raise AppError.invalid_reference(
                "Referenced user does not exist.",
                user_id=user_id,
            ) from exc

    def _raise_invalid_reference(self, exc: ForeignKeyViolation) -> None:
        constraint = exc.diag.constraint_name if exc.diag else None
        raise AppError.invalid_reference(
            "Some referenced records do not exist.",
            constraint=constraint,
        ) from exc

    def _raise_ticket_not_found(self, ticket_id: str) -> None:
        raise AppError.not_found("ticket", ticket_id=ticket_id)
