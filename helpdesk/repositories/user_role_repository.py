from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from psycopg import Connection

from helpdesk.core.database import get_connection
from helpdesk.models.entities import UserRoleEntity


def _to_user_role_entity(row: dict[str, Any]) -> UserRoleEntity:
    return UserRoleEntity(
        id=row["id"],
        user_id=str(row["user_id"]),
        role_id=row["role_id"],
        role_name=row["role_name"],
        assigned_at=row["assigned_at"],
    )


class UserRoleRepository:
    def __init__(self, database_url: str | None = None) -> None:
        self.database_url = database_url

    @contextmanager
    def _use_connection(self, connection: Connection | None) -> Iterator[Connection]:
        if connection is not None:
            yield connection
            return
        with get_connection(self.database_url) as managed:
            yield managed

    def replace_roles(
        self,
        *,
        user_id: str,
        role_ids: list[int],
        connection: Connection | None = None,
    ) -> None:
        deduped_role_ids = list(dict.fromkeys(role_ids))

        with self._use_connection(connection) as active_connection:
            with active_connection.cursor() as cursor:
                cursor.execute("DELETE FROM user_roles WHERE user_id = %s", (user_id,))
                if deduped_role_ids:
                    cursor.executemany(
                        "INSERT INTO user_roles (user_id, role_id) VALUES (%s, %s)",
                        [(user_id, role_id) for role_id in deduped_role_ids],
                    )

    def list_for_user(
        self,
        user_id: str,
        connection: Connection | None = None,
    ) -> list[UserRoleEntity]:
        query = """
            SELECT ur.id, ur.user_id, ur.role_id, r.name AS role_name, ur.assigned_at
            FROM user_roles ur
            JOIN roles r ON r.id = ur.role_id
            WHERE ur.user_id = %s
            ORDER BY ur.assigned_at DESC, ur.id DESC
        """
        with self._use_connection(connection) as active_connection:
            with active_connection.cursor() as cursor:
                cursor.execute(query, (user_id,))
                rows = cursor.fetchall()
        return [_to_user_role_entity(row) for row in rows]

    def list_for_users(
        self,
        user_ids: list[str],
        connection: Connection | None = None,
    ) -> dict[str, list[UserRoleEntity]]:
        if not user_ids:
            return {}

        query = """
            SELECT ur.id, ur.user_id, ur.role_id, r.name AS role_name, ur.assigned_at
            FROM user_roles ur
            JOIN roles r ON r.id = ur.role_id
            WHERE ur.user_id = ANY(%s::uuid[])
            ORDER BY r.name ASC
        """
        with self._use_connection(connection) as active_connection:
            with active_connection.cursor() as cursor:
                cursor.execute(query, (user_ids,))
                rows = cursor.fetchall()

        mapping: dict[str, list[UserRoleEntity]] = {user_id: [] for user_id in user_ids}
        for row in rows:
            entity = _to_user_role_entity(row)
            mapping.setdefault(entity.user_id, []).append(entity)
        return mapping
