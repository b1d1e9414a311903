from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from psycopg import Connection, sql

from helpdesk.core.database import get_connection
from helpdesk.models.entities import ReferenceEntity
from helpdesk.models.schemas.reference import ReferenceKind

REFERENCE_TABLES: dict[ReferenceKind, str] = {
    "priority": "ticket_priorities",
    "category": "ticket_categories",
    "assignee": "assignees",
    "department": "departments",
    "role": "roles",
}


def _to_reference_entity(row: dict[str, Any]) -> ReferenceEntity:
    return ReferenceEntity(id=row["id"], name=row["name"])


class ReferenceRepository:
    """CRUD over one of the small named lookup tables."""

    def __init__(self, kind: ReferenceKind, database_url: str | None = None) -> None:
        self.kind = kind
        self.table = sql.Identifier(REFERENCE_TABLES[kind])
        self.database_url = database_url

    @contextmanager
    def _use_connection(self, connection: Connection | None) -> Iterator[Connection]:
        if connection is not None:
            yield connection
            return
        with get_connection(self.database_url) as managed:
            yield managed

    def create(self, *, name: str, connection: Connection | None = None) -> ReferenceEntity:
        query = sql.SQL("INSERT INTO {} (name) VALUES (%s) RETURNING id, name").format(self.table)
        with self._use_connection(connection) as active_connection:
            with active_connection.cursor() as cursor:
                cursor.execute(query, (name,))
                row = cursor.fetchone()
        if row is None:
            raise RuntimeError(f"Failed to create {self.kind}.")
        return _to_reference_entity(row)

    def get_by_id(
        self,
        entity_id: int,
        connection: Connection | None = None,
    ) -> ReferenceEntity | None:
        query = sql.SQL("SELECT id, name FROM {} WHERE id = %s").format(self.table)
        with self._use_connection(connection) as active_connection:
            with active_connection.cursor() as cursor:
                cursor.execute(query, (entity_id,))
                row = cursor.fetchone()
        if row is None:
            return None
        return _to_reference_entity(row)

    def get_by_name(
        self,
        name: str,
        connection: Connection | None = None,
    ) -> ReferenceEntity | None:
        query = sql.SQL("SELECT id, name FROM {} WHERE LOWER(name) = LOWER(%s)").format(
            self.table
        )
        with self._use_connection(connection) as active_connection:
            with active_connection.cursor() as cursor:
                cursor.execute(query, (name,))
                row = cursor.fetchone()
        if row is None:
            return None
        return _to_reference_entity(row)

    def update(
        self,
        *,
        entity_id: int,
        name: str,
        connection: Connection | None = None,
    ) -> ReferenceEntity | None:
        query = sql.SQL("UPDATE {} SET name = %s WHERE id = %s RETURNING id, name").format(
            self.table
        )
        with self._use_connection(connection) as active_connection:
            with active_connection.cursor() as cursor:
                cursor.execute(query, (name, entity_id))
                row = cursor.fetchone()
        if row is None:
            return None
        return _to_reference_entity(row)

    def delete(self, entity_id: int, connection: Connection | None = None) -> bool:
        query = sql.SQL("DELETE FROM {} WHERE id = %s").format(self.table)
        with self._use_connection(connection) as active_connection:
            with active_connection.cursor() as cursor:
                cursor.execute(query, (entity_id,))
                return cursor.rowcount > 0

    def list_all(self, connection: Connection | None = None) -> list[ReferenceEntity]:
        query = sql.SQL("SELECT id, name FROM {} ORDER BY name ASC, id ASC").format(self.table)
        with self._use_connection(connection) as active_connection:
            with active_connection.cursor() as cursor:
                cursor.execute(query)
                rows = cursor.fetchall()
        return [_to_reference_entity(row) for row in rows]

    def list_by_ids(
        self,
        entity_ids: list[int],
        connection: Connection | None = None,
    ) -> list[ReferenceEntity]:
        if not entity_ids:
            return []

        query = sql.SQL("SELECT id, name FROM {} WHERE id = ANY(%s) ORDER BY id ASC").format(
            self.table
        )
        with self._use_connection(connection) as active_connection:
            with active_connection.cursor() as cursor:
                cursor.execute(query, (entity_ids,))
                rows = cursor.fetchall()
        return [_to_reference_entity(row) for row in rows]
