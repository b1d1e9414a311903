from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from psycopg import Connection, sql

from helpdesk.core.database import get_connection
from helpdesk.models.entities import UserEntity

USER_SELECT = """
    SELECT
        u.id,
        u.name,
        u.email,
        u.department_id,
        u.created_at,
        u.password_hash,
        d.name AS department_name
    FROM users u
    LEFT JOIN departments d ON d.id = u.department_id
"""

WRITABLE_COLUMNS = frozenset({"name", "email", "department_id", "password_hash"})


def _to_user_entity(row: dict[str, Any]) -> UserEntity:
    return UserEntity(
        id=str(row["id"]),
        name=row["name"],
        email=row["email"],
        department_id=row["department_id"],
        created_at=row["created_at"],
        password_hash=row.get("password_hash"),
        department_name=row.get("department_name"),
    )


class UserRepository:
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
        name: str,
        email: str,
        department_id: int | None = None,
        password_hash: str | None = None,
        connection: Connection | None = None,
    ) -> UserEntity:
        query = """
            INSERT INTO users (name, email, department_id, password_hash)
            VALUES (%s, %s, %s, %s)
            RETURNING id
        """
        with self._use_connection(connection) as active_connection:
            with active_connection.cursor() as cursor:
                cursor.execute(query, (name, email, department_id, password_hash))
                created = cursor.fetchone()
            if created is None:
                raise RuntimeError("Failed to create user.")
            user = self.get_by_id(str(created["id"]), connection=active_connection)
        if user is None:
            raise RuntimeError("Failed to load created user.")
        return user

    def get_by_id(self, user_id: str, connection: Connection | None = None) -> UserEntity | None:
        query = USER_SELECT + " WHERE u.id = %s"
        with self._use_connection(connection) as active_connection:
            with active_connection.cursor() as cursor:
                cursor.execute(query, (user_id,))
                row = cursor.fetchone()
        if row is None:
            return None
        return _to_user_entity(row)

    def get_by_email(self, email: str, connection: Connection | None = None) -> UserEntity | None:
        query = USER_SELECT + " WHERE LOWER(u.email) = LOWER(%s)"
        with self._use_connection(connection) as active_connection:
            with active_connection.cursor() as cursor:
                cursor.execute(query, (email,))
                row = cursor.fetchone()
        if row is None:
            return None
        return _to_user_entity(row)

    def update(
        self,
        *,
        user_id: str,
        fields: dict[str, Any],
        connection: Connection | None = None,
    ) -> UserEntity | None:
        unknown = set(fields) - WRITABLE_COLUMNS
        if unknown:
            raise ValueError(f"Unsupported user columns: {sorted(unknown)}")
        if not fields:
            return self.get_by_id(user_id, connection=connection)

        assignments = sql.SQL(", ").join(
            sql.SQL("{} = %s").format(sql.Identifier(column)) for column in fields
        )
        query = sql.SQL("UPDATE users SET {} WHERE id = %s RETURNING id").format(assignments)
        with self._use_connection(connection) as active_connection:
            with active_connection.cursor() as cursor:
                cursor.execute(query, [*fields.values(), user_id])
                row = cursor.fetchone()
            if row is None:
                return None
            return self.get_by_id(user_id, connection=active_connection)

    def delete(self, user_id: str, connection: Connection | None = None) -> bool:
        query = "DELETE FROM users WHERE id = %s"
        with self._use_connection(connection) as active_connection:
            with active_connection.cursor() as cursor:
                cursor.execute(query, (user_id,))
                return cursor.rowcount > 0

    def list_all(self, connection: Connection | None = None) -> list[UserEntity]:
        query = USER_SELECT + " ORDER BY u.name ASC, u.id ASC"
        with self._use_connection(connection) as active_connection:
            with active_connection.cursor() as cursor:
                cursor.execute(query)
                rows = cursor.fetchall()
        return [_to_user_entity(row) for row in rows]

    def list_by_role(self, role_id: int, connection: Connection | None = None) -> list[UserEntity]:
        query = (
            USER_SELECT
            + """
            JOIN user_roles ur ON ur.user_id = u.id
            WHERE ur.role_id = %s
            ORDER BY u.name ASC, u.id ASC
            """
        )
        with self._use_connection(connection) as active_connection:
            with active_connection.cursor() as cursor:
                cursor.execute(query, (role_id,))
                rows = cursor.fetchall()
        return [_to_user_entity(row) for row in rows]

    def count_by_department(self, connection: Connection | None = None) -> list[tuple[str, int]]:
        query = """
            SELECT d.name AS department, COUNT(u.id) AS total
            FROM users u
            JOIN departments d ON d.id = u.department_id
            GROUP BY d.name
            ORDER BY d.name ASC
        """
        with self._use_connection(connection) as active_connection:
            with active_connection.cursor() as cursor:
                cursor.execute(query)
                rows = cursor.fetchall()
        return [(row["department"], int(row["total"])) for row in rows]
