import logging

from psycopg import connect
from psycopg.errors import UndefinedTable

from helpdesk.models.schemas.health import DatabaseHealth

logger = logging.getLogger(__name__)


class HealthRepository:
    def __init__(self, timeout_seconds: int = 3) -> None:
        self.timeout_seconds = timeout_seconds

    def check_connection(self, database_url: str) -> DatabaseHealth:
        """Connect, then read the applied migration revision.

        A reachable database that was never migrated reports no revision.
        """
        try:
            with connect(
                database_url,
                autocommit=True,
                connect_timeout=self.timeout_seconds,
            ) as connection:
                with connection.cursor() as cursor:
                    try:
                        cursor.execute("SELECT version_num FROM alembic_version LIMIT 1")
                        row = cursor.fetchone()
                    except UndefinedTable:
                        row = None
        except Exception as exc:
            logger.warning("Database health check failed: %s", exc)
            return DatabaseHealth(connected=False, message=str(exc))

        if row is None:
            return DatabaseHealth(connected=True, message="No migrations have been applied.")
        return DatabaseHealth(connected=True, revision=row[0])
