"""CLI commands for the users table."""

from __future__ import annotations

from typing import Annotated, Any

import typer

from ... import global_config as g
from ...database import (
    NO_AGE,
    ConnectionConfig,
    UserRecord,
    ensure_schema,
    insert_many,
    insert_one,
    list_users,
    open_connection,
    select_by_min_age,
    transaction,
    update_age_by_name,
)
from ...demo import print_users_table
from ..base import (
    BaseCLI,
    HostOption,
    PasswordOption,
    SchemaOption,
    UserOption,
    build_config,
    handle_errors,
)

users_app = typer.Typer(help="Insert, update and list users.")


def parse_user_spec(spec: str) -> UserRecord:
    """Parse ``NAME`` or ``NAME:AGE`` into a UserRecord.

    Raises:
        ValueError: If the name is empty or the age is not an integer.
    """
    name, sep, age_text = spec.partition(":")
    name = name.strip()
    if not name:
        msg = f"Missing name in {spec!r}"
        raise ValueError(msg)
    if not sep or not age_text.strip():
        return UserRecord(name)
    try:
        age = int(age_text)
    except ValueError:
        msg = f"Age must be an integer in {spec!r}"
        raise ValueError(msg) from None
    return UserRecord(name, age)


class UsersCLI(BaseCLI):
    """CLI helpers for the users command layer.

    Every operation ensures the schema first so the commands work against
    a fresh server.
    """

    def __init__(self) -> None:
        super().__init__()

    def add(self, *, config: ConnectionConfig, record: UserRecord) -> dict[str, Any]:
        def _add() -> dict[str, Any]:
            with open_connection(config) as conn:
                ensure_schema(conn, config.schema)
                new_id = insert_one(conn, record)
            return {"success": True, "message": f"Inserted {record.name} with id = {new_id}"}

        return self.handle_cli_operation(operation="users add", op_callable=_add)

    def add_many(self, *, config: ConnectionConfig, specs: list[str]) -> dict[str, Any]:
        def _add_many() -> dict[str, Any]:
            records = [parse_user_spec(spec) for spec in specs]
            with open_connection(config) as conn:
                ensure_schema(conn, config.schema)
                with transaction(conn):
                    written = insert_many(conn, records)
            return {
                "success": True,
                "total": written,
                "items": [record.name for record in records],
            }

        return self.handle_cli_operation(operation="users add-many", op_callable=_add_many)

    def set_age(self, *, config: ConnectionConfig, name: str, age: int) -> dict[str, Any]:
        def _set_age() -> dict[str, Any]:
            with open_connection(config) as conn:
                ensure_schema(conn, config.schema)
                affected = update_age_by_name(conn, name, age)
            return {"success": True, "message": f"Updated rows ({name} -> {age}): {affected}"}

        return self.handle_cli_operation(operation="users set-age", op_callable=_set_age)

    def show(self, *, config: ConnectionConfig, min_age: int | None) -> list[UserRecord]:
        with handle_errors("users list", logger=self.logger):
            with open_connection(config) as conn:
                ensure_schema(conn, config.schema)
                if min_age is None:
                    users = list_users(conn)
                else:
                    users = select_by_min_age(conn, min_age)
        print_users_table(users)
        return users


cli = UsersCLI()


@users_app.command("add")
def add_command(
    name: Annotated[str, typer.Argument(help="Unique user name")],
    age: Annotated[
        int,
        typer.Option("--age", help="Age; 0 (the default) stores no age"),
    ] = NO_AGE,
    host: HostOption = g.DEFAULT_HOST,
    user: UserOption = g.DEFAULT_USER,
    password: PasswordOption = g.DEFAULT_PASSWORD,
    schema: SchemaOption = g.DEFAULT_SCHEMA,
) -> None:
    """Insert one user and print the generated id.

    Exits with code 1 if the name already exists.
    """
    config = build_config(host=host, user=user, password=password, schema=schema)
    cli.add(config=config, record=UserRecord(name, age))


@users_app.command("add-many")
def add_many_command(
    specs: Annotated[list[str], typer.Argument(help="Users as NAME or NAME:AGE")],
    host: HostOption = g.DEFAULT_HOST,
    user: UserOption = g.DEFAULT_USER,
    password: PasswordOption = g.DEFAULT_PASSWORD,
    schema: SchemaOption = g.DEFAULT_SCHEMA,
) -> None:
    """Insert several users in order inside one transaction.

    Either every user is inserted or, on the first failure, none are.
    """
    config = build_config(host=host, user=user, password=password, schema=schema)
    cli.add_many(config=config, specs=specs)


@users_app.command("set-age")
def set_age_command(
    name: Annotated[str, typer.Argument(help="Name of the user to update")],
    age: Annotated[int, typer.Argument(help="New age")],
    host: HostOption = g.DEFAULT_HOST,
    user: UserOption = g.DEFAULT_USER,
    password: PasswordOption = g.DEFAULT_PASSWORD,
    schema: SchemaOption = g.DEFAULT_SCHEMA,
) -> None:
    """Set a user's age by name and print how many rows changed (0 if unknown)."""
    config = build_config(host=host, user=user, password=password, schema=schema)
    cli.set_age(config=config, name=name, age=age)


@users_app.command("list")
def list_command(
    min_age: Annotated[
        int | None,
        typer.Option("--min-age", help="Only users at least this old, oldest first"),
    ] = None,
    host: HostOption = g.DEFAULT_HOST,
    user: UserOption = g.DEFAULT_USER,
    password: PasswordOption = g.DEFAULT_PASSWORD,
    schema: SchemaOption = g.DEFAULT_SCHEMA,
) -> None:
    """List users ordered by id, or by age with --min-age.

    A missing age is shown as -1.
    """
    config = build_config(host=host, user=user, password=password, schema=schema)
    cli.show(config=config, min_age=min_age)


app = users_app
