import logging
from dataclasses import dataclass, field

from helpdesk.client.store import OptimisticTicketStore
from helpdesk.client.transport import BackendError
from helpdesk.models.entities import TICKET_STATUSES, TicketStatus
from helpdesk.models.schemas.ticket import TicketRead

logger = logging.getLogger(__name__)

COLUMN_TITLES: dict[TicketStatus, str] = {
    "OPEN": "Open",
    "IN_PROGRESS": "In Progress",
    "CLOSED": "Closed",
}


@dataclass(slots=True)
class BoardColumn:
    status: TicketStatus
    title: str
    tickets: list[TicketRead] = field(default_factory=list)


class KanbanBoard:
    """Three status columns over an ``OptimisticTicketStore``.

    Columns hold no state of their own; membership is recomputed from the
    store on every call, so a store reload is all it takes to revert a move.
    """

    def __init__(self, store: OptimisticTicketStore) -> None:
        self.store = store

    def columns(self) -> list[BoardColumn]:
        return [
            BoardColumn(
                status=status,
                title=COLUMN_TITLES[status],
                tickets=[ticket for ticket in self.store.tickets if ticket.status == status],
            )
            for status in TICKET_STATUSES
        ]

    async def move(self, ticket_id: str, status: str) -> bool:
        if status not in TICKET_STATUSES:
            raise ValueError(f"Unknown ticket status: {status}")

        ticket = self.store.get(ticket_id)
        if ticket is None or ticket.status == status:
            return False
        if self.store.is_pending(ticket_id):
            logger.info("Ignoring move of ticket %s while a write is pending", ticket_id)
            return False

        patch = {"status": status}
        try:
            await self.store.commit(ticket_id, patch, patch)
        except BackendError as exc:
            logger.error("Failed to move ticket %s to %s: %s", ticket_id, status, exc.message)
            return False
        return True
