"""Command layer for the ``users`` table.

Each operation maps to one parameterized SQL statement. They do *not*
open or close connections and never open transactions; callers provide a
connection and own the transactional scope. Nothing is retried and nothing
is recovered here: every failure propagates as a `DatabaseError`.

Age convention: an age of 0 (`NO_AGE`) means "no age given". It is stored
as NULL and a NULL read back is reported as 0. This makes a real age of 0
unrepresentable; the mapping is confined to `_bind_age` / `_read_age`.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any, Mapping

from . import queries
from .connection import DatabaseConnection

logger = logging.getLogger(__name__)

NO_AGE = 0

INSERT_USER_SQL = "INSERT INTO users (name, age) VALUES (?, ?)"
UPDATE_AGE_SQL = "UPDATE users SET age = ? WHERE name = ?"
SELECT_BY_MIN_AGE_SQL = "SELECT id, name, age FROM users WHERE age >= ? ORDER BY age DESC, id ASC"
SELECT_ALL_SQL = "SELECT id, name, age FROM users ORDER BY id"


@dataclass
class UserRecord:
    """A row of the ``users`` table.

    ``id`` is None until the record has been persisted.
    """

    name: str
    age: int = NO_AGE
    id: int | None = None

    @property
    def has_age(self) -> bool:
        return self.age != NO_AGE


def _bind_age(age: int | None) -> int | None:
    if age is None or age == NO_AGE:
        return None
    return age


def _read_age(value: Any) -> int:
    return NO_AGE if value is None else int(value)


def _to_record(row: Mapping[str, Any]) -> UserRecord:
    return UserRecord(id=int(row["id"]), name=row["name"], age=_read_age(row["age"]))


def insert_one(conn: DatabaseConnection, record: UserRecord) -> int:
    """Insert one user and return the identifier the server assigned.

    The identifier is read back on the same connection right after the
    insert. The record itself is not modified.

    Args:
        conn: Open connection (borrowed).
        record: User to insert; ``age == 0`` is stored as NULL.

    Returns:
        The generated identifier, or 0 if the follow-up read yields no row.

    Raises:
        IntegrityError: If ``record.name`` already exists.
        DatabaseError: If the insert fails for any other reason.

    Logs:
        - DEBUG: "Inserted user {name} with id {id}" on success.
    """
    queries.execute(conn, INSERT_USER_SQL, (record.name, _bind_age(record.age)))
    row = queries.fetch_one(conn, conn.dialect.last_insert_id_sql)
    if row is None:
        return 0
    new_id = int(row["id"])
    logger.debug("Inserted user %s with id %s", record.name, new_id)
    return new_id


def insert_many(conn: DatabaseConnection, records: Iterable[UserRecord]) -> int:
    """Insert users in order, reusing one statement for every record.

    One round trip per record; no batching. No transaction is opened, so
    on failure the rows written before the failing one remain subject to
    the caller's transaction scope.

    Returns:
        Number of records inserted.

    Raises:
        IntegrityError: If a name already exists.
        DatabaseError: If any insert fails.
    """
    written = queries.execute_each(
        conn,
        INSERT_USER_SQL,
        ((record.name, _bind_age(record.age)) for record in records),
    )
    logger.debug("Inserted %s users", written)
    return written


def update_age_by_name(conn: DatabaseConnection, name: str, new_age: int) -> int:
    """Set the age of the user called ``name``.

    Returns:
        Number of rows matched; 0 when no user has that name.
    """
    return queries.execute(conn, UPDATE_AGE_SQL, (new_age, name))


def select_by_min_age(conn: DatabaseConnection, min_age: int) -> list[UserRecord]:
    """Return users with ``age >= min_age``, oldest first, ties by ascending id."""
    rows = queries.fetch_all(conn, SELECT_BY_MIN_AGE_SQL, (min_age,))
    return [_to_record(row) for row in rows]


def list_users(conn: DatabaseConnection) -> list[UserRecord]:
    """Return every user ordered by id. A NULL age is reported as 0."""
    rows = queries.fetch_all(conn, SELECT_ALL_SQL)
    return [_to_record(row) for row in rows]
