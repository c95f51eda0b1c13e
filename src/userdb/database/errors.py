"""Database-specific exception types for the project."""

from __future__ import annotations

import sqlite3

import pymysql

# MySQL server error code -> SQLSTATE for the errors this project is likely
# to surface. Anything else reports the generic "HY000".
_MYSQL_SQLSTATES: dict[int, str] = {
    1044: "42000",  # access denied for user to database
    1045: "28000",  # access denied (bad credentials)
    1049: "42000",  # unknown database
    1062: "23000",  # duplicate entry
    1064: "42000",  # syntax error
    1146: "42S02",  # table doesn't exist
    1213: "40001",  # deadlock
    1452: "23000",  # foreign key violation
    2003: "HY000",  # can't connect to server
}

GENERIC_SQLSTATE = "HY000"
INTEGRITY_SQLSTATE = "23000"


class DatabaseError(Exception):
    """Base exception for database-related errors.

    Carries the engine's numeric error code and a five-character SQLSTATE
    alongside the human-readable message.
    """

    def __init__(
        self,
        message: str,
        *,
        code: int | None = None,
        sqlstate: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.sqlstate = sqlstate or GENERIC_SQLSTATE


class IntegrityError(DatabaseError):
    """Raised when a constraint violation occurs."""


class DatabaseConnectionError(DatabaseError):
    """Raised when the database server cannot be reached or refuses login."""


class ConfigurationError(Exception):
    """Raised when a connection config cannot be used (e.g. unknown scheme)."""


def _from_mysql_error(error: pymysql.err.MySQLError) -> DatabaseError:
    code: int | None = None
    message = str(error)
    if len(error.args) >= 2 and isinstance(error.args[0], int):
        code = error.args[0]
        message = str(error.args[1])
    sqlstate = _MYSQL_SQLSTATES.get(code, GENERIC_SQLSTATE) if code else GENERIC_SQLSTATE

    if isinstance(error, pymysql.err.IntegrityError):
        return IntegrityError(message, code=code, sqlstate=INTEGRITY_SQLSTATE)
    if isinstance(error, pymysql.err.OperationalError) and code in (1045, 2003):
        return DatabaseConnectionError(message, code=code, sqlstate=sqlstate)
    return DatabaseError(message, code=code, sqlstate=sqlstate)


def _from_sqlite_error(error: sqlite3.Error) -> DatabaseError:
    code = getattr(error, "sqlite_errorcode", None)
    if isinstance(error, sqlite3.IntegrityError):
        return IntegrityError(str(error), code=code, sqlstate=INTEGRITY_SQLSTATE)
    return DatabaseError(str(error), code=code)


def from_driver_error(error: Exception) -> DatabaseError:
    """Map a raw driver error to a project-level DatabaseError.

    Converts PyMySQL and sqlite3 exceptions to project-specific exception
    types. Constraint violations become IntegrityError, everything else a
    plain DatabaseError (or DatabaseConnectionError for login/connect
    failures on MySQL).

    Args:
        error: Driver exception to convert.

    Returns:
        DatabaseError (or subclass) carrying code, SQLSTATE and message.
    """
    if isinstance(error, DatabaseError):
        return error
    if isinstance(error, pymysql.err.MySQLError):
        return _from_mysql_error(error)
    if isinstance(error, sqlite3.Error):
        return _from_sqlite_error(error)
    return DatabaseError(str(error))


def format_sql_error(error: DatabaseError, where: str) -> str:
    """Render a database error as a single labeled diagnostic line.

    Args:
        error: Project-level database error.
        where: Label naming the operation that failed.

    Returns:
        ``[SQL ERROR @ where] message | error code: N | SQLState: S``.
    """
    code = error.code if error.code is not None else "n/a"
    return f"[SQL ERROR @ {where}] {error.message} | error code: {code} | SQLState: {error.sqlstate}"
