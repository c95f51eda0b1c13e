"""Database connection helpers.

This module provides a small, synchronous API around a single live database
session. Connections are produced by a *connection factory* (a plain
callable taking a `ConnectionConfig`) so callers and tests can substitute
their own; `default_connection_factory` picks PyMySQL or sqlite3 from the
endpoint scheme.

The connection handle is not thread-safe: exactly one sequence of
operations runs against it at a time.
"""

from __future__ import annotations

import contextlib
import logging
from abc import ABC, abstractmethod
import sqlite3
from collections.abc import Callable, Iterator
from pathlib import Path
from typing import Any

import pymysql
import pymysql.cursors
from pymysql.constants import CLIENT

from .. import global_config as g
from .config import ConnectionConfig, validate_schema_name
from .dialects import MYSQL, SQLITE, Dialect
from .errors import ConfigurationError, DatabaseError, format_sql_error, from_driver_error

logger = logging.getLogger(__name__)


class DatabaseConnection(ABC):
    """A live session to the database service.

    Wraps a DB-API connection together with the `Dialect` used to render
    statements for it. Driver errors raised by the session-level methods
    are translated into `DatabaseError`.
    """

    driver_errors: tuple[type[Exception], ...] = ()

    def __init__(self, raw: Any, dialect: Dialect) -> None:
        self.raw = raw
        self.dialect = dialect
        self.closed = False

    @contextlib.contextmanager
    def cursor(self) -> Iterator[Any]:
        """Yield a cursor that is closed when the block exits."""
        with contextlib.closing(self.raw.cursor()) as cur:
            yield cur

    @property
    @abstractmethod
    def autocommit(self) -> bool: ...

    @abstractmethod
    def set_autocommit(self, enabled: bool) -> None: ...

    @abstractmethod
    def select_schema(self, schema: str) -> None: ...

    def commit(self) -> None:
        try:
            self.raw.commit()
        except self.driver_errors as exc:
            raise from_driver_error(exc) from exc

    def rollback(self) -> None:
        try:
            self.raw.rollback()
        except self.driver_errors as exc:
            raise from_driver_error(exc) from exc

    def close(self) -> None:
        """Close the session. Safe to call more than once."""
        if self.closed:
            return
        self.closed = True
        try:
            self.raw.close()
        except self.driver_errors as exc:
            raise from_driver_error(exc) from exc


class MySQLConnection(DatabaseConnection):
    """Session backed by a PyMySQL connection."""

    driver_errors = (pymysql.err.MySQLError,)

    def __init__(self, raw: pymysql.connections.Connection) -> None:
        super().__init__(raw, MYSQL)

    @property
    def autocommit(self) -> bool:
        return bool(self.raw.get_autocommit())

    def set_autocommit(self, enabled: bool) -> None:
        try:
            self.raw.autocommit(enabled)
        except self.driver_errors as exc:
            raise from_driver_error(exc) from exc
        logger.debug("Autocommit %s", "enabled" if enabled else "disabled")

    def select_schema(self, schema: str) -> None:
        try:
            self.raw.select_db(schema)
        except self.driver_errors as exc:
            raise from_driver_error(exc) from exc
        logger.debug("Active schema set to %s", schema)


class SQLiteConnection(DatabaseConnection):
    """Session backed by a stdlib sqlite3 connection.

    Autocommit maps onto ``isolation_level``: None means autocommit, any
    other value makes sqlite3 open a transaction before the next write.
    """

    driver_errors = (sqlite3.Error,)

    def __init__(self, raw: sqlite3.Connection, schema: str | None = None) -> None:
        super().__init__(raw, SQLITE)
        # None for in-memory databases, which accept any schema name.
        self.schema = schema

    @property
    def autocommit(self) -> bool:
        return self.raw.isolation_level is None

    def set_autocommit(self, enabled: bool) -> None:
        self.raw.isolation_level = None if enabled else "DEFERRED"
        logger.debug("Autocommit %s", "enabled" if enabled else "disabled")

    def select_schema(self, schema: str) -> None:
        """Check ``schema`` names the open database file.

        Raises:
            ConfigurationError: If another schema's file is open.
        """
        if self.schema is not None and schema != self.schema:
            msg = f"SQLite connection is bound to schema {self.schema!r}, not {schema!r}"
            raise ConfigurationError(msg)
        logger.debug("SQLite schema %s is the open database file", schema)


ConnectionFactory = Callable[[ConnectionConfig], DatabaseConnection]


def mysql_connection_factory(config: ConnectionConfig) -> MySQLConnection:
    """Open a PyMySQL session in autocommit mode.

    No database is selected at connect time; the schema bootstrapper
    creates and selects it.

    Raises:
        DatabaseConnectionError: If the server is unreachable or rejects
            the credentials.
    """
    endpoint = config.endpoint
    logger.debug("Connecting to MySQL at %s:%s as %s", endpoint.address, endpoint.port, config.user)
    try:
        raw = pymysql.connect(
            host=endpoint.address,
            port=endpoint.port or g.DEFAULT_MYSQL_PORT,
            user=config.user,
            password=config.password,
            charset="utf8mb4",
            autocommit=True,
            # Report matched rather than changed rows for UPDATE.
            client_flag=CLIENT.FOUND_ROWS,
            connect_timeout=g.DEFAULT_CONNECT_TIMEOUT_S,
            cursorclass=pymysql.cursors.DictCursor,
        )
    except pymysql.err.MySQLError as exc:
        raise from_driver_error(exc) from exc
    return MySQLConnection(raw)


def _sqlite_database_path(address: str, schema: str) -> str:
    if address == ":memory:":
        return address
    validate_schema_name(schema)
    directory = Path(address)
    directory.mkdir(parents=True, exist_ok=True)
    return str(directory / f"{schema}.sqlite")


def sqlite_connection_factory(config: ConnectionConfig) -> SQLiteConnection:
    """Open ``<dir>/<schema>.sqlite`` (or an in-memory database) in autocommit mode.

    Raises:
        ValueError: If the schema name is empty or not a plain identifier,
            since it becomes a file name.
    """
    address = config.endpoint.address
    path = _sqlite_database_path(address, config.schema)
    logger.debug("Opening SQLite database at %s", path)
    try:
        raw = sqlite3.connect(path, isolation_level=None)
        raw.row_factory = sqlite3.Row
    except sqlite3.Error as exc:
        raise from_driver_error(exc) from exc
    return SQLiteConnection(raw, schema=None if address == ":memory:" else config.schema)


_FACTORIES: dict[str, ConnectionFactory] = {
    "tcp": mysql_connection_factory,
    "mysql": mysql_connection_factory,
    "sqlite": sqlite_connection_factory,
}


def default_connection_factory(config: ConnectionConfig) -> DatabaseConnection:
    """Dispatch to the factory registered for the endpoint's scheme.

    Raises:
        ConfigurationError: If the scheme is not supported.
    """
    scheme = config.endpoint.scheme
    factory = _FACTORIES.get(scheme)
    if factory is None:
        supported = ", ".join(sorted(_FACTORIES))
        msg = f"Unsupported endpoint scheme {scheme!r} (expected one of: {supported})"
        raise ConfigurationError(msg)
    return factory(config)


def get_connection(
    config: ConnectionConfig,
    factory: ConnectionFactory | None = None,
) -> DatabaseConnection:
    """Return a new connection produced by ``factory`` (default: by scheme)."""
    factory = factory or default_connection_factory
    return factory(config)


@contextlib.contextmanager
def open_connection(
    config: ConnectionConfig,
    factory: ConnectionFactory | None = None,
) -> Iterator[DatabaseConnection]:
    """Context manager owning a connection for the duration of the block.

    The connection is closed exactly once on every exit path, including
    when the block raises.

    Logs:
        - DEBUG: "Connection closed" when the block exits.
    """
    conn = get_connection(config, factory=factory)
    try:
        yield conn
    finally:
        conn.close()
        logger.debug("Connection closed")


@contextlib.contextmanager
def transaction(conn: DatabaseConnection) -> Iterator[DatabaseConnection]:
    """Group the statements run inside the block into one transaction.

    Disables autocommit on entry. On success the transaction is committed;
    if the block (or the commit) raises, the transaction is rolled back and
    the original exception re-raised. A failing rollback, or a failure to
    re-enable autocommit afterwards, is logged and never replaces the
    original exception. Autocommit is re-enabled before returning or
    raising, on every path.

    The connection is borrowed, never closed here.

    Logs:
        - DEBUG: "Beginning transaction" at start.
        - INFO: "Transaction committed" on success.
        - WARNING: "Rolling back transaction" on failure.
        - ERROR: labeled SQL diagnostic if the rollback or the autocommit
          restore fails on the error path.
    """
    conn.set_autocommit(False)
    logger.debug("Beginning transaction")
    try:
        yield conn
        conn.commit()
        logger.info("Transaction committed")
    except BaseException as exc:
        # Re-enabling autocommit commits an open transaction on both engines.
        logger.warning("Rolling back transaction: %s", exc)
        try:
            conn.rollback()
            logger.info("Transaction rolled back")
        except DatabaseError as rollback_exc:
            logger.error(format_sql_error(rollback_exc, "rollback"))
        try:
            conn.set_autocommit(True)
        except DatabaseError as restore_exc:
            logger.error(format_sql_error(restore_exc, "restore autocommit"))
        raise
    conn.set_autocommit(True)
