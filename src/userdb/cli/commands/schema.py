"""CLI commands for schema management."""

from __future__ import annotations

from typing import Any

import typer

from ... import global_config as g
from ...database import ConnectionConfig, ensure_schema, open_connection
from ..base import BaseCLI, HostOption, PasswordOption, SchemaOption, UserOption, build_config

schema_app = typer.Typer(help="Schema management commands.")


class SchemaCLI(BaseCLI):
    """CLI helpers for schema management."""

    def __init__(self) -> None:
        super().__init__()

    def ensure(self, *, config: ConnectionConfig) -> dict[str, Any]:
        """Create the schema and users table if missing, via the CLI operation handler."""
        return self.handle_cli_operation(
            operation="schema ensure",
            op_callable=lambda: self._ensure_operation(config=config),
        )

    def _ensure_operation(self, *, config: ConnectionConfig) -> dict[str, Any]:
        with open_connection(config) as conn:
            ensure_schema(conn, config.schema)
        return {"success": True, "message": f"Schema {config.schema} is ready"}


cli = SchemaCLI()


@schema_app.command("ensure")
def ensure_command(
    host: HostOption = g.DEFAULT_HOST,
    user: UserOption = g.DEFAULT_USER,
    password: PasswordOption = g.DEFAULT_PASSWORD,
    schema: SchemaOption = g.DEFAULT_SCHEMA,
) -> None:
    """Create the target schema and the users table if they do not exist.

    Safe to run repeatedly; existing tables and rows are left untouched.
    """
    cli.ensure(config=build_config(host=host, user=user, password=password, schema=schema))


app = schema_app
