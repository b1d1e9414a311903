"""In-memory ticket collection with optimistic local mutations.

Local patches are applied before the backend confirms them. A failed write
discards local state and reloads the authoritative collection.
"""

import asyncio
import logging
from collections import Counter
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from typing import Any

from pydantic import ValidationError

from helpdesk.client.events import TICKET_CREATED, EventBus
from helpdesk.client.gateway import ResourceGateway
from helpdesk.client.transport import BackendError
from helpdesk.models.schemas.ticket import TicketRead

logger = logging.getLogger(__name__)

TIMESTAMP_STEP = timedelta(microseconds=1)


class OptimisticTicketStore:
    def __init__(
        self,
        gateway: ResourceGateway,
        *,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.gateway = gateway
        self.tickets: list[TicketRead] = []
        self.loading = False
        self.error: str | None = None
        self._clock = clock or (lambda: datetime.now(UTC))
        self._locks: dict[str, asyncio.Lock] = {}
        self._pending: Counter[str] = Counter()
        # Bumped whenever a reload replaces local state, so queued writes can tell.
        self._generation = 0

    def get(self, ticket_id: str) -> TicketRead | None:
        return next((ticket for ticket in self.tickets if ticket.id == ticket_id), None)

    def is_pending(self, ticket_id: str) -> bool:
        return self._pending[ticket_id] > 0

    async def load(self) -> None:
        self.loading = True
        self.error = None
        try:
            rows = await self.gateway.fetch_collection()
            tickets = [TicketRead.model_validate(row) for row in rows]
        except (BackendError, ValidationError) as exc:
            logger.warning("Failed to load tickets: %s", exc)
            self.error = "Failed to load tickets."
            return
        finally:
            self.loading = False
        self.tickets = tickets
        self._generation += 1

    def apply_optimistic(self, ticket_id: str, patch: dict[str, Any]) -> None:
        unknown = set(patch) - set(TicketRead.model_fields)
        if unknown:
            raise ValueError(f"Unknown ticket fields: {sorted(unknown)}")

        for index, ticket in enumerate(self.tickets):
            if ticket.id == ticket_id:
                stamp = max(self._clock(), ticket.updated_at + TIMESTAMP_STEP)
                # Revalidated so a patch cannot break status or title constraints.
                self.tickets[index] = TicketRead.model_validate(
                    {**ticket.model_dump(), **patch, "updated_at": stamp}
                )
                return

    def add_optimistic(self, ticket: TicketRead) -> None:
        self.tickets = [ticket, *self.tickets]

    async def commit(
        self,
        ticket_id: str,
        local_patch: dict[str, Any],
        backend_patch: dict[str, Any],
    ) -> None:
        """Patch the local record now, then write ``backend_patch``.

        Writes to the same ticket run one at a time. On failure the collection
        is reloaded and the error re-raised.
        """
        self.apply_optimistic(ticket_id, local_patch)
        generation = self._generation
        self._pending[ticket_id] += 1
        try:
            async with self._lock_for(ticket_id):
                if generation != self._generation:
                    self.apply_optimistic(ticket_id, local_patch)
                try:
                    await self.gateway.update(ticket_id, backend_patch)
                except BackendError:
                    logger.warning("Update of ticket %s failed, reloading tickets", ticket_id)
                    await self._resync()
                    raise
        finally:
            self._release(ticket_id)

    async def remove(self, ticket_id: str) -> None:
        snapshot = list(self.tickets)
        generation = self._generation
        self.tickets = [ticket for ticket in self.tickets if ticket.id != ticket_id]
        self._pending[ticket_id] += 1
        try:
            async with self._lock_for(ticket_id):
                try:
                    await self.gateway.delete(ticket_id)
                except BackendError:
                    logger.warning("Delete of ticket %s failed", ticket_id)
                    if generation == self._generation:
                        self.tickets = snapshot
                    else:
                        await self._resync()
                    raise
                if generation != self._generation:
                    self.tickets = [ticket for ticket in self.tickets if ticket.id != ticket_id]
        finally:
            self._release(ticket_id)

    def bind(self, bus: EventBus) -> Callable[[], None]:
        """Reload whenever a ticket is created elsewhere in the app."""
        return bus.subscribe(TICKET_CREATED, self._on_ticket_created)

    async def _on_ticket_created(self, _ticket: Any) -> None:
        await self.load()

    async def _resync(self) -> None:
        self._generation += 1
        self.tickets = []
        await self.load()

    def _lock_for(self, ticket_id: str) -> asyncio.Lock:
        lock = self._locks.get(ticket_id)
        if lock is None:
            lock = self._locks[ticket_id] = asyncio.Lock()
        return lock

    def _release(self, ticket_id: str) -> None:
        self._pending[ticket_id] -= 1
        if self._pending[ticket_id] <= 0:
            del self._pending[ticket_id]
            self._locks.pop(ticket_id, None)
