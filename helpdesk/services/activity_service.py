import logging
from uuid import UUID

from psycopg import Connection
from psycopg.errors import ForeignKeyViolation

from helpdesk.core.database import get_connection
from helpdesk.core.errors import AppError
from helpdesk.models.entities import ActivityEntity
from helpdesk.models.schemas.activity import ActivityCreateRequest, ActivityRead
from helpdesk.repositories.activity_repository import ActivityRepository
from helpdesk.repositories.ticket_repository import TicketRepository

logger = logging.getLogger(__name__)

MAX_CONTENT_LENGTH = 10_000


def to_activity_read(entity: ActivityEntity) -> ActivityRead:
    return ActivityRead(
        id=entity.id,
        ticket_id=entity.ticket_id,
        user_id=entity.user_id,
        author_name=entity.author_name,
        content=entity.content,
        created_at=entity.created_at,
    )


class ActivityService:
    """Comments and notes on a ticket. Records can be added and deleted, not edited."""

    def __init__(
        self,
        activity_repository: ActivityRepository,
        ticket_repository: TicketRepository,
        database_url: str | None = None,
    ) -> None:
        self.activity_repository = activity_repository
        self.ticket_repository = ticket_repository
        self.database_url = database_url

    @property
    def kind(self) -> str:
        return self.activity_repository.kind

    def list_for_ticket(self, ticket_id: str) -> list[ActivityRead]:
        normalized_id = self._normalize_ticket_id(ticket_id)
        with get_connection(self.database_url) as connection:
            self._ensure_ticket_exists(normalized_id, ticket_id, connection=connection)
            entries = self.activity_repository.list_for_ticket(
                normalized_id,
                connection=connection,
            )
        return [to_activity_read(entry) for entry in entries]

    def add(
        self,
        ticket_id: str,
        payload: ActivityCreateRequest,
        *,
        actor_id: str | None = None,
    ) -> ActivityRead:
        normalized_id = self._normalize_ticket_id(ticket_id)
        content = self._validate_content(payload.content)
        user_id = payload.user_id or actor_id
        if user_id is not None:
            try:
                user_id = str(UUID(user_id))
            except ValueError as exc:
                raise AppError.invalid_reference(
                    "Referenced user does not exist.",
                    user_id=user_id,
                ) from exc

        try:
            with get_connection(self.database_url) as connection:
                self._ensure_ticket_exists(normalized_id, ticket_id, connection=connection)
                created = self.activity_repository.create(
                    ticket_id=normalized_id,
                    user_id=user_id,
                    content=content,
                    connection=connection,
                )
        except ForeignKeyViolation as exc:
            raise AppError.invalid_reference(
                "Referenced user does not exist.",
                user_id=user_id,
            ) from exc

        logger.info("Added %s %s to ticket %s", self.kind, created.id, normalized_id)
        return to_activity_read(created)

    def delete(self, activity_id: int) -> None:
        deleted = self.activity_repository.delete(activity_id)
        if not deleted:
            raise AppError.not_found(self.kind, id=activity_id)

    def _validate_content(self, content: str) -> str:
        normalized = content.strip()
        if not 1 <= len(normalized) <= MAX_CONTENT_LENGTH:
            raise AppError.bad_request(
                f"INVALID_{self.kind.upper()}_CONTENT",
                (
                    f"{self.kind.capitalize()} content length must be between "
                    f"1 and {MAX_CONTENT_LENGTH} characters."
                ),
            )
        return normalized

    def _ensure_ticket_exists(
        self,
        normalized_id: str,
        ticket_id: str,
        connection: Connection | None = None,
    ) -> None:
        if self.ticket_repository.get_by_id(normalized_id, connection=connection) is None:
            self._raise_ticket_not_found(ticket_id)

    def _normalize_ticket_id(self, ticket_id: str) -> str:
        try:
            return str(UUID(ticket_id))
        except ValueError:
            self._raise_ticket_not_found(ticket_id)

    def _raise_ticket_not_found(self, ticket_id: str) -> None:
        raise AppError.not_found("ticket", ticket_id=ticket_id)
