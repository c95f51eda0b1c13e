from __future__ import annotations

import logging
from typing import Annotated

import typer

from .base import configure_logging
from .commands.demo import demo_command
from .commands.schema import app as schema_app
from .commands.users import app as users_app

app = typer.Typer(
    help="Relational database client walkthrough",
    context_settings={"help_option_names": ["-h", "--help"]},
)

app.add_typer(schema_app, name="schema")
app.add_typer(users_app, name="users")
app.command("demo")(demo_command)


@app.callback()
def root(
    verbose: Annotated[
        bool,
        typer.Option("-v", "--verbose", help="Log executed statements and transaction steps"),
    ] = False,
) -> None:
    """Connect to a database, bootstrap a schema and run parameterized commands."""
    configure_logging(logging.DEBUG if verbose else logging.WARNING)


def main() -> None:
    """Main entry point for package CLI.

    Invokes the Typer application, which handles command parsing and
    execution.

    Side Effects:
        - Processes CLI arguments and executes commands.
        - Exits with code 1 on unrecovered database or runtime errors.
    """
    app()


if __name__ == "__main__":
    main()
