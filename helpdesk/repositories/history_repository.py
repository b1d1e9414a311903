from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from psycopg import Connection
from psycopg.types.json import Jsonb

from helpdesk.core.database import get_connection
from helpdesk.models.entities import HistoryEntity


def _to_history_entity(row: dict[str, Any]) -> HistoryEntity:
    return HistoryEntity(
        id=row["id"],
        ticket_id=str(row["ticket_id"]),
        user_id=str(row["user_id"]) if row["user_id"] is not None else None,
        action=row["action"],
        timestamp=row["timestamp"],
        details=row["details"] or {},
    )


class HistoryRepository:
    def __init__(self, database_url: str | None = None) -> None:
        self.database_url = database_url

    @contextmanager
    def _use_connection(self, connection: Connection | None) -> Iterator[Connection]:
        if connection is not None:
            yield connection
            return
        with get_connection(self.database_url) as managed:
            yield managed

    def record(
        self,
        *,
        ticket_id: str,
        user_id: str | None,
        action: str,
        details: dict[str, Any] | None = None,
        connection: Connection | None = None,
    ) -> HistoryEntity:
        query = """
            INSERT INTO ticket_history (ticket_id, user_id, action, details)
            VALUES (%s, %s, %s, %s)
            RETURNING id, ticket_id, user_id, action, details, timestamp
        """
        with self._use_connection(connection) as active_connection:
            with active_connection.cursor() as cursor:
                cursor.execute(query, (ticket_id, user_id, action, Jsonb(details or {})))
                row = cursor.fetchone()
        if row is None:
            raise RuntimeError("Failed to record ticket history.")
        return _to_history_entity(row)

    def list_for_ticket(
        self,
        ticket_id: str,
        connection: Connection | None = None,
    ) -> list[HistoryEntity]:
        query = """
            SELECT id, ticket_id, user_id, action, details, timestamp
            FROM ticket_history
            WHERE ticket_id = %s
            ORDER BY timestamp DESC, id DESC
        """
        with self._use_connection(connection) as active_connection:
            with active_connection.cursor() as cursor:
                cursor.execute(query, (ticket_id,))
                rows = cursor.fetchall()
        return [_to_history_entity(row) for row in rows]
