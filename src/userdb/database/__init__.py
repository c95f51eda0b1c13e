"""Public interface for the database package.

This module exposes the main primitives needed by the rest of the
project: connection configuration and factories, the transaction
coordinator, the schema bootstrapper, and the ``users`` command layer.
"""

from .config import ConnectionConfig, Endpoint, parse_endpoint
from .connection import (
    ConnectionFactory,
    DatabaseConnection,
    default_connection_factory,
    get_connection,
    mysql_connection_factory,
    open_connection,
    sqlite_connection_factory,
    transaction,
)
from .errors import (
    ConfigurationError,
    DatabaseConnectionError,
    DatabaseError,
    IntegrityError,
    format_sql_error,
    from_driver_error,
)
from .schema import clear_users, ensure_schema
from .users import (
    NO_AGE,
    UserRecord,
    insert_many,
    insert_one,
    list_users,
    select_by_min_age,
    update_age_by_name,
)

__all__ = [
    "ConnectionConfig",
    "Endpoint",
    "parse_endpoint",
    "ConnectionFactory",
    "DatabaseConnection",
    "default_connection_factory",
    "get_connection",
    "mysql_connection_factory",
    "sqlite_connection_factory",
    "open_connection",
    "transaction",
    "ConfigurationError",
    "DatabaseConnectionError",
    "DatabaseError",
    "IntegrityError",
    "format_sql_error",
    "from_driver_error",
    "ensure_schema",
    "clear_users",
    "NO_AGE",
    "UserRecord",
    "insert_one",
    "insert_many",
    "update_age_by_name",
    "select_by_min_age",
    "list_users",
]
