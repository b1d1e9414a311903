from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime
from typing import Any

from psycopg import Connection, sql

from helpdesk.core.database import get_connection
from helpdesk.models.entities import TicketEntity, TicketStatus

TICKET_SELECT = """
    SELECT
        t.id,
        t.title,
        t.description,
        t.status,
        t.priority_id,
        t.category_id,
        t.assignee_id,
        t.creator_id,
        t.site,
        t.system,
        t.error_code,
        t.created_at,
        t.updated_at,
        t.closed_at,
        t.sla_due_at,
        p.name AS priority_name,
        c.name AS category_name,
        a.name AS assignee_name,
        u.name AS creator_name,
        u.email AS creator_email
    FROM tickets t
    LEFT JOIN ticket_priorities p ON p.id = t.priority_id
    LEFT JOIN ticket_categories c ON c.id = t.category_id
    LEFT JOIN assignees a ON a.id = t.assignee_id
    LEFT JOIN users u ON u.id = t.creator_id
"""

SORT_COLUMNS = {
    "created_at": "t.created_at",
    "updated_at": "t.updated_at",
    "title": "t.title",
    "status": "t.status",
    "priority": "p.name",
    "assignee": "a.name",
}

WRITABLE_COLUMNS = frozenset(
    {
        "title",
        "description",
        "status",
        "priority_id",
        "category_id",
        "assignee_id",
        "site",
        "system",
        "error_code",
        "sla_due_at",
        "closed_at",
    }
)


def _to_ticket_entity(row: dict[str, Any]) -> TicketEntity:
    return TicketEntity(
        id=str(row["id"]),
        title=row["title"],
        description=row["description"],
        status=row["status"],
        priority_id=row["priority_id"],
        category_id=row["category_id"],
        assignee_id=row["assignee_id"],
        creator_id=str(row["creator_id"]) if row["creator_id"] is not None else None,
        site=row["site"],
        system=row["system"],
        error_code=row["error_code"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
        closed_at=row["closed_at"],
        sla_due_at=row["sla_due_at"],
        priority_name=row.get("priority_name"),
        category_name=row.get("category_name"),
        assignee_name=row.get("assignee_name"),
        creator_name=row.get("creator_name"),
        creator_email=row.get("creator_email"),
    )


class TicketRepository:
    def __init__(self, database_url: str | None = None) -> None:
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
        title: str,
        description: str | None = None,
        status: TicketStatus = "OPEN",
        priority_id: int | None = None,
        category_id: int | None = None,
        assignee_id: int | None = None,
        creator_id: str | None = None,
        site: str | None = None,
        system: str | None = None,
        error_code: str | None = None,
        sla_due_at: datetime | None = None,
        closed_at: datetime | None = None,
        connection: Connection | None = None,
    ) -> TicketEntity:
        query = """
            INSERT INTO tickets (
                title, description, status, priority_id, category_id, assignee_id,
                creator_id, site, system, error_code, sla_due_at, closed_at
            )
            VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s)
            RETURNING id
        """
        params = (
            title,
            description,
            status,
            priority_id,
            category_id,
            assignee_id,
            creator_id,
            site,
            system,
            error_code,
            sla_due_at,
            closed_at,
        )
        with self._use_connection(connection) as active_connection:
            with active_connection.cursor() as cursor:
                cursor.execute(query, params)
                created = cursor.fetchone()
            if created is None:
                raise RuntimeError("Failed to create ticket.")
            ticket = self.get_by_id(str(created["id"]), connection=active_connection)
        if ticket is None:
            raise RuntimeError("Failed to load created ticket.")
        return ticket

    def get_by_id(
        self,
        ticket_id: str,
        connection: Connection | None = None,
    ) -> TicketEntity | None:
        query = TICKET_SELECT + " WHERE t.id = %s"
        with self._use_connection(connection) as active_connection:
            with active_connection.cursor() as cursor:
                cursor.execute(query, (ticket_id,))
                row = cursor.fetchone()
        if row is None:
            return None
        return _to_ticket_entity(row)

    def update(
        self,
        *,
        ticket_id: str,
        fields: dict[str, Any],
        connection: Connection | None = None,
    ) -> TicketEntity | None:
        unknown = set(fields) - WRITABLE_COLUMNS
        if unknown:
            raise ValueError(f"Unsupported ticket columns: {sorted(unknown)}")

        assignments = [
            sql.SQL("{} = %s").format(sql.Identifier(column)) for column in fields
        ]
        assignments.append(sql.SQL("updated_at = NOW()"))
        query = sql.SQL("UPDATE tickets SET {} WHERE id = %s RETURNING id").format(
            sql.SQL(", ").join(assignments)
        )
        with self._use_connection(connection) as active_connection:
            with active_connection.cursor() as cursor:
                cursor.execute(query, [*fields.values(), ticket_id])
                row = cursor.fetchone()
            if row is None:
                return None
            return self.get_by_id(ticket_id, connection=active_connection)

    def delete(self, ticket_id: str, connection: Connection | None = None) -> bool:
        query = "DELETE FROM tickets WHERE id = %s"
        with self._use_connection(connection) as active_connection:
            with active_connection.cursor() as cursor:
                cursor.execute(query, (ticket_id,))
                return cursor.rowcount > 0

    def list_recent(
        self,
        *,
        limit: int = 5,
        connection: Connection | None = None,
    ) -> list[TicketEntity]:
        query = TICKET_SELECT + " ORDER BY t.created_at DESC, t.id DESC LIMIT %s"
        with self._use_connection(connection) as active_connection:
            with active_connection.cursor() as cursor:
                cursor.execute(query, (limit,))
                rows = cursor.fetchall()
        return [_to_ticket_entity(row) for row in rows]

    def list_filtered(
        self,
        *,
        statuses: list[TicketStatus] | None = None,
        category_ids: list[int] | None = None,
        priority_ids: list[int] | None = None,
        assignee_id: int | None = None,
        creator_id: str | None = None,
        q: str | None = None,
        sort: str = "created_at",
        order: str = "desc",
        limit: int,
        offset: int,
        connection: Connection | None = None,
    ) -> tuple[list[TicketEntity], int]:
        where_clauses: list[str] = []
        params: list[Any] = []

        if statuses:
            where_clauses.append("t.status = ANY(%s)")
            params.append(list(statuses))

        if category_ids:
            where_clauses.append("t.category_id = ANY(%s)")
            params.append(list(category_ids))

        if priority_ids:
            where_clauses.append("t.priority_id = ANY(%s)")
            params.append(list(priority_ids))

        if assignee_id is not None:
            where_clauses.append("t.assignee_id = %s")
            params.append(assignee_id)

        if creator_id is not None:
            where_clauses.append("t.creator_id = %s")
            params.append(creator_id)

        if q:
            where_clauses.append("(t.title ILIKE %s OR t.description ILIKE %s)")
            params.extend([f"%{q}%", f"%{q}%"])

        where_sql = ""
        if where_clauses:
            where_sql = "WHERE " + " AND ".join(where_clauses)

        sort_column = SORT_COLUMNS.get(sort, SORT_COLUMNS["created_at"])
        direction = "ASC" if order == "asc" else "DESC"
        list_query = f"""
            {TICKET_SELECT}
            {where_sql}
            ORDER BY {sort_column} {direction} NULLS LAST, t.id {direction}
            LIMIT %s OFFSET %s
        """
        count_query = f"""
            SELECT COUNT(1) AS total
            FROM tickets t
            {where_sql}
        """
        list_params = [*params, limit, offset]

        with self._use_connection(connection) as active_connection:
            with active_connection.cursor() as cursor:
                cursor.execute(count_query, params)
                count_row = cursor.fetchone()
                total = int(count_row["total"]) if count_row is not None else 0

                cursor.execute(list_query, list_params)
                rows = cursor.fetchall()

        return ([_to_ticket_entity(row) for row in rows], total)

    def status_counts(self, connection: Connection | None = None) -> dict[str, int]:
        query = """
            SELECT
                COUNT(1) AS total,
                COUNT(1) FILTER (WHERE t.status = 'OPEN') AS open,
                COUNT(1) FILTER (WHERE t.status = 'IN_PROGRESS') AS in_progress,
                COUNT(1) FILTER (WHERE t.status = 'CLOSED') AS closed,
                COUNT(1) FILTER (WHERE UPPER(p.name) = 'HIGH') AS high_priority
            FROM tickets t
            LEFT JOIN ticket_priorities p ON p.id = t.priority_id
        """
        with self._use_connection(connection) as active_connection:
            with active_connection.cursor() as cursor:
                cursor.execute(query)
                row = cursor.fetchone()
        if row is None:
            return {"total": 0, "open": 0, "in_progress": 0, "closed": 0, "high_priority": 0}
        return {key: int(value) for key, value in row.items()}
