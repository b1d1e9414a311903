import logging
from collections.abc import Callable
from typing import Any

from helpdesk.client.events import TICKET_CREATED, EventBus
from helpdesk.client.gateway import ResourceGateway
from helpdesk.client.session import AuthSession
from helpdesk.client.transport import AuthenticationError, BackendError
from helpdesk.models.entities import TICKET_STATUSES
from helpdesk.models.schemas.ticket import TicketRead

logger = logging.getLogger(__name__)

DEFAULT_PRIORITY = "LOW"
MAX_TITLE_LENGTH = 200


class TicketComposer:
    """Creates tickets on behalf of the signed-in user and announces them on the bus."""

    def __init__(
        self,
        *,
        tickets: ResourceGateway,
        priorities: ResourceGateway,
        categories: ResourceGateway,
        notes_for: Callable[[str], ResourceGateway],
        session: AuthSession,
        bus: EventBus,
    ) -> None:
        self.tickets = tickets
        self.priorities = priorities
        self.categories = categories
        self.notes_for = notes_for
        self.session = session
        self.bus = bus

    async def create(
        self,
        title: str,
        *,
        description: str | None = None,
        status: str = "OPEN",
        priority: str | None = None,
        category: str | None = None,
        assignee_id: int | None = None,
        site: str | None = None,
        system: str | None = None,
        error_code: str | None = None,
        note: str | None = None,
    ) -> TicketRead:
        title = title.strip()
        if not 1 <= len(title) <= MAX_TITLE_LENGTH:
            raise ValueError(f"Title must be between 1 and {MAX_TITLE_LENGTH} characters.")
        if status not in TICKET_STATUSES:
            raise ValueError(f"Unknown ticket status: {status}")

        user = self.session.current_user
        if user is None:
            raise AuthenticationError("You must be signed in to create tickets.", code="NOT_AUTHENTICATED")

        payload: dict[str, Any] = {
            "title": title,
            "description": description or "",
            "status": status,
            "priority_id": await self._resolve_priority(priority),
            "category_id": await self._resolve(self.categories, category, "category"),
            "creator_id": user.id,
        }
        optional = {"assignee_id": assignee_id, "site": site, "system": system, "error_code": error_code}
        payload.update({key: value for key, value in optional.items() if value is not None})

        created = TicketRead.model_validate(await self.tickets.insert(payload))
        if note and note.strip():
            # The ticket exists even when its note is rejected.
            try:
                await self.notes_for(created.id).insert({"content": note.strip(), "user_id": user.id})
            except BackendError as exc:
                logger.warning("Ticket %s created but its initial note failed: %s", created.id, exc)

        logger.info("Created ticket %s", created.id)
        await self.bus.emit(TICKET_CREATED, created)
        return created

    async def _resolve_priority(self, name: str | None) -> int | None:
        """Resolve the requested priority; with none requested, use LOW when it exists."""
        if name is not None:
            return await self._resolve(self.priorities, name, "priority")
        try:
            return await self._resolve(self.priorities, DEFAULT_PRIORITY, "priority")
        except ValueError:
            logger.info("Default priority %s is not defined, leaving priority unset", DEFAULT_PRIORITY)
            return None

    async def _resolve(self, gateway: ResourceGateway, name: str | None, label: str) -> int | None:
        if name is None:
            return None
        wanted = name.strip().casefold()
        for row in await gateway.fetch_collection():
            if row["name"].casefold() == wanted:
                return row["id"]
        raise ValueError(f"Unknown {label}: {name}")
