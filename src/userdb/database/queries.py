"""Basic query execution helpers.

These wrap low-level DB-API cursor operations with logging, placeholder
rendering and typed return shapes used by the schema and command layers.
Each helper opens its own cursor and closes it before returning; driver
errors are translated into `DatabaseError`.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from typing import Any

from .connection import DatabaseConnection
from .errors import from_driver_error

logger = logging.getLogger(__name__)


def execute(
    conn: DatabaseConnection,
    sql: str,
    params: Sequence[Any] | None = None,
) -> int:
    """Execute a statement and return the number of affected rows.

    Args:
        conn: Open database connection (borrowed).
        sql: SQL statement written with ``?`` placeholders.
        params: Positional parameters bound in order.

    Returns:
        Number of rows affected, as reported by the driver.

    Raises:
        DatabaseError: If statement execution fails.

    Logs:
        - DEBUG: "Executed statement: {sql[:80]} ({rowcount} rows)" on success.
    """
    rendered = conn.dialect.render(sql)
    try:
        with conn.cursor() as cur:
            if params is None:
                cur.execute(rendered)
            else:
                cur.execute(rendered, tuple(params))
            rowcount = cur.rowcount
    except conn.driver_errors as exc:
        logger.debug("Statement failed: %s", exc)
        raise from_driver_error(exc) from exc
    logger.debug("Executed statement: %s (%s rows)", " ".join(sql.split())[:80], rowcount)
    return rowcount


def execute_each(
    conn: DatabaseConnection,
    sql: str,
    param_rows: Iterable[Sequence[Any]],
) -> int:
    """Execute one statement once per parameter row, reusing a single cursor.

    Rows are executed in input order, one round trip each. Stops at the
    first failure; rows already executed are left to the caller's
    transaction scope.

    Returns:
        Number of rows executed.

    Raises:
        DatabaseError: If any execution fails.
    """
    rendered = conn.dialect.render(sql)
    count = 0
    try:
        with conn.cursor() as cur:
            for params in param_rows:
                cur.execute(rendered, tuple(params))
                count += 1
    except conn.driver_errors as exc:
        logger.debug("Statement failed after %s rows: %s", count, exc)
        raise from_driver_error(exc) from exc
    logger.debug("Executed statement %s times: %s", count, " ".join(sql.split())[:80])
    return count


def fetch_one(
    conn: DatabaseConnection,
    sql: str,
    params: Sequence[Any] | None = None,
) -> dict[str, Any] | None:
    """Execute query and return single row as dict, or None if no results."""
    rows = _fetch(conn, sql, params, limit_one=True)
    return rows[0] if rows else None


def fetch_all(
    conn: DatabaseConnection,
    sql: str,
    params: Sequence[Any] | None = None,
) -> list[dict[str, Any]]:
    """Execute query and return all rows as list of dicts.

    The result is fully materialized before the cursor is closed.

    Returns:
        List of dictionaries, one per row, with column names as keys.
        Empty list if no rows match.
    """
    return _fetch(conn, sql, params, limit_one=False)


def _fetch(
    conn: DatabaseConnection,
    sql: str,
    params: Sequence[Any] | None,
    *,
    limit_one: bool,
) -> list[dict[str, Any]]:
    rendered = conn.dialect.render(sql)
    try:
        with conn.cursor() as cur:
            if params is None:
                cur.execute(rendered)
            else:
                cur.execute(rendered, tuple(params))
            if limit_one:
                row = cur.fetchone()
                rows = [] if row is None else [row]
            else:
                rows = cur.fetchall()
            result = [dict(row) for row in rows]
    except conn.driver_errors as exc:
        logger.debug("Query failed: %s", exc)
        raise from_driver_error(exc) from exc
    logger.debug("Fetched %s rows: %s", len(result), " ".join(sql.split())[:80])
    return result
