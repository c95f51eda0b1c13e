"""Schema bootstrapping.

`ensure_schema` makes sure the target database and the ``users`` table
exist. It is idempotent and safe to call on every process start: it never
drops or alters an existing table. Engine errors (e.g. missing privileges)
propagate to the caller; nothing is recovered locally.
"""

from __future__ import annotations

import logging

from . import queries
from .config import validate_schema_name
from .connection import DatabaseConnection

logger = logging.getLogger(__name__)


def ensure_schema(conn: DatabaseConnection, schema_name: str) -> None:
    """Create the database and ``users`` table if they are absent.

    Issues CREATE DATABASE IF NOT EXISTS, switches the connection's active
    schema to it, then issues CREATE TABLE IF NOT EXISTS for ``users``
    (id auto-assigned primary key, name VARCHAR(100) NOT NULL and unique,
    age nullable integer).

    Args:
        conn: Open connection (borrowed).
        schema_name: Target schema; letters, digits and underscores only.

    Raises:
        ValueError: If ``schema_name`` is empty or unsafe.
        DatabaseError: If any DDL statement fails.
        ConfigurationError: On SQLite, if ``schema_name`` is not the open
            database file.

    Logs:
        - INFO: "Ensuring schema {schema_name}" at start.
    """
    validate_schema_name(schema_name)
    logger.info("Ensuring schema %s", schema_name)

    create_database = conn.dialect.create_database_sql(schema_name)
    if create_database is not None:
        queries.execute(conn, create_database)
    conn.select_schema(schema_name)
    queries.execute(conn, conn.dialect.create_users_table_sql)


def clear_users(conn: DatabaseConnection) -> int:
    """Delete every row from ``users`` and return how many were removed.

    Used to reset the walkthrough to a known state; not something to run
    against data you care about.
    """
    removed = queries.execute(conn, "DELETE FROM users")
    logger.info("Cleared %s rows from users", removed)
    return removed
