from collections.abc import Iterator
from contextlib import contextmanager

from psycopg import Connection, connect
from psycopg.rows import dict_row

from helpdesk.core.config import get_settings

APPLICATION_NAME = "helpdesk-backend"


def get_database_url() -> str:
    return get_settings().database_url


@contextmanager
def get_connection(database_url: str | None = None) -> Iterator[Connection]:
    """Open a dict-row connection; the block runs in one transaction, committed on exit."""
    settings = get_settings()
    with connect(
        database_url or settings.database_url,
        row_factory=dict_row,
        application_name=APPLICATION_NAME,
        connect_timeout=settings.database_connect_timeout,
    ) as connection:
        yield connection
