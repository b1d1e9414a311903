import logging
from pathlib import Path

import psycopg

from helpdesk.core.config import PROJECT_ROOT, get_settings
from helpdesk.core.logging import configure_logging

logger = logging.getLogger("helpdesk.seed")

SEED_PATH = PROJECT_ROOT / "seed.sql"


def clean_sql(raw_sql: str) -> str:
    # Drop psql meta commands such as \set ON_ERROR_STOP on.
    return "\n".join(line for line in raw_sql.splitlines() if not line.lstrip().startswith("\\"))


def strip_comment_lines(sql_text: str) -> str:
    return "\n".join(line for line in sql_text.splitlines() if not line.lstrip().startswith("--"))


def split_statements(sql_text: str) -> list[str]:
    """Split on semicolons outside single-quoted literals."""
    statements: list[str] = []
    current: list[str] = []
    in_string = False

    for ch in sql_text:
        current.append(ch)
        if ch == "'":
            # A doubled quote toggles twice and leaves the state unchanged.
            in_string = not in_string
        elif ch == ";" and not in_string:
            statement = "".join(current).strip()
            if statement:
                statements.append(statement)
            current = []

    tail = "".join(current).strip()
    if tail:
        statements.append(tail)
    return statements


def execute_seed(database_url: str, seed_path: Path = SEED_PATH) -> int:
    if not seed_path.exists():
        raise FileNotFoundError(f"Seed file not found: {seed_path}")

    statements = split_statements(strip_comment_lines(clean_sql(seed_path.read_text(encoding="utf-8"))))
    if not statements:
        raise RuntimeError(f"No SQL statements found in {seed_path}")

    with psycopg.connect(database_url) as connection:
        with connection.cursor() as cursor:
            for statement in statements:
                cursor.execute(statement)
                if cursor.description:
                    for row in cursor.fetchall():
                        logger.info("%s", row)
        connection.commit()
    return len(statements)


def main() -> None:
    settings = get_settings()
    configure_logging(settings.log_level)
    count = execute_seed(settings.database_url)
    logger.info("Seed completed: %d statements executed.", count)


if __name__ == "__main__":
    main()
