from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any, Literal

from psycopg import Connection, sql

from helpdesk.core.database import get_connection
from helpdesk.models.entities import ActivityEntity

ActivityKind = Literal["comment", "note"]

ACTIVITY_TABLES: dict[ActivityKind, str] = {
    "comment": "ticket_comments",
    "note": "ticket_notes",
}


def _to_activity_entity(row: dict[str, Any]) -> ActivityEntity:
    return ActivityEntity(
        id=row["id"],
        ticket_id=str(row["ticket_id"]),
        user_id=str(row["user_id"]) if row["user_id"] is not None else None,
        content=row["content"],
        created_at=row["created_at"],
        author_name=row.get("author_name"),
    )


class ActivityRepository:
    """Append-only child records of a ticket: comments or notes."""

    def __init__(self, kind: ActivityKind, database_url: str | None = None) -> None:
        self.kind = kind
        self.table = sql.Identifier(ACTIVITY_TABLES[kind])
        self.database_url = database_url

    @contextmanager
    def _use_connection(self, connection: Connection | None) -> Iterator[Connection]:
        if connection is not None:
            yield connection
            return
        with get_connection(self.database_url) as managed:
            yield managed

    def create(
        self,
        *,
        ticket_id: str,
        user_id: str | None,
        content: str,
        connection: Connection | None = None,
    ) -> ActivityEntity:
        query = sql.SQL(
            """
            WITH inserted AS (
                INSERT INTO {} (ticket_id, user_id, content)
                VALUES (%s, %s, %s)
                RETURNING id, ticket_id, user_id, content, created_at
            )
            SELECT i.*, u.name AS author_name
            FROM inserted i
            LEFT JOIN users u ON u.id = i.user_id
            """
        ).format(self.table)
        with self._use_connection(connection) as active_connection:
            with active_connection.cursor() as cursor:
                cursor.execute(query, (ticket_id, user_id, content))
                row = cursor.fetchone()
        if row is None:
            raise RuntimeError(f"Failed to create {self.kind}.")
        return _to_activity_entity(row)

    def list_for_ticket(
        self,
        ticket_id: str,
        connection: Connection | None = None,
    ) -> list[ActivityEntity]:
        query = sql.SQL(
            """
            SELECT r.id, r.ticket_id, r.user_id, r.content, r.created_at, u.name AS author_name
            FROM {} r
            LEFT JOIN users u ON u.id = r.user_id
            WHERE r.ticket_id = %s
            ORDER BY r.created_at ASC, r.id ASC
            """
        ).format(self.table)
        with self._use_connection(connection) as active_connection:
            with active_connection.cursor() as cursor:
                cursor.execute(query, (ticket_id,))
                rows = cursor.fetchall()
        return [_to_activity_entity(row) for row in rows]

    def delete(self, activity_id: int, connection: Connection | None = None) -> bool:
        query = sql.SQL("DELETE FROM {} WHERE id = %s").format(self.table)
        with self._use_connection(connection) as active_connection:
            with active_connection.cursor() as cursor:
                cursor.execute(query, (activity_id,))
                return cursor.rowcount > 0
