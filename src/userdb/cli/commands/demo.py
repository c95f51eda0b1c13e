"""CLI command running the full walkthrough."""

from __future__ import annotations

from typing import Annotated

import typer

from ... import global_config as g
from ...demo import run_demo
from ..base import (
    HostOption,
    PasswordOption,
    SchemaOption,
    UserOption,
    build_config,
    get_logger,
    handle_errors,
)

logger = get_logger(__name__)


def demo_command(
    host: HostOption = g.DEFAULT_HOST,
    user: UserOption = g.DEFAULT_USER,
    password: PasswordOption = g.DEFAULT_PASSWORD,
    schema: SchemaOption = g.DEFAULT_SCHEMA,
    simulate_failure: Annotated[
        bool,
        typer.Option(
            "--simulate-failure",
            help="Insert a duplicate name inside the transaction to force a rollback",
        ),
    ] = False,
    reset: Annotated[
        bool,
        typer.Option("--reset/--no-reset", help="Delete existing users before starting"),
    ] = True,
) -> None:
    """Run the walkthrough: schema, insert, transaction, queries, update.

    Ensures the schema exists, clears the users table, inserts carol,
    inserts alice and bob and updates alice inside a transaction, lists
    users aged 25 or more, sets bob's age to 31 and prints the final table.

    Exits with code 1 on any database or runtime error outside the
    transaction step.
    """
    config = build_config(host=host, user=user, password=password, schema=schema)
    with handle_errors("demo", logger=logger):
        run_demo(config, simulate_failure=simulate_failure, reset=reset)
