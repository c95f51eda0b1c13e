"""SQL that differs between the supported engines.

Statements elsewhere in the package are written once with ``?``
placeholders; `Dialect.render` rewrites them into the driver's paramstyle.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Dialect:
    name: str
    placeholder: str
    last_insert_id_sql: str
    create_users_table_sql: str
    supports_databases: bool

    def render(self, sql: str) -> str:
        """Return ``sql`` with ``?`` placeholders in this driver's style."""
        if self.placeholder == "?":
            return sql
        return sql.replace("?", self.placeholder)

    def create_database_sql(self, schema: str) -> str | None:
        """Return the CREATE DATABASE statement, or None if the engine has none."""
        if not self.supports_databases:
            return None
        return f"CREATE DATABASE IF NOT EXISTS `{schema}`"


MYSQL = Dialect(
    name="mysql",
    placeholder="%s",
    last_insert_id_sql="SELECT LAST_INSERT_ID() AS id",
    create_users_table_sql="""
        CREATE TABLE IF NOT EXISTS users (
            id INT AUTO_INCREMENT PRIMARY KEY,
            name VARCHAR(100) NOT NULL,
            age INT NULL,
            UNIQUE KEY uq_users_name (name)
        ) ENGINE=InnoDB DEFAULT CHARSET=utf8mb4
    """,
    supports_databases=True,
)

# SQLite has no CREATE DATABASE: the schema name selects the database file.
SQLITE = Dialect(
    name="sqlite",
    placeholder="?",
    last_insert_id_sql="SELECT last_insert_rowid() AS id",
    create_users_table_sql="""
        CREATE TABLE IF NOT EXISTS users (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            name VARCHAR(100) NOT NULL,
            age INTEGER NULL,
            CONSTRAINT uq_users_name UNIQUE (name)
        )
    """,
    supports_databases=False,
)
