"""The end-to-end walkthrough: schema, single insert, transaction, queries.

`run_demo` drives every step against one connection, printing as it goes.
The transaction step is allowed to fail (it rolls back and the walkthrough
carries on); any other failure propagates to the caller.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field

import typer

from .database import (
    ConnectionConfig,
    ConnectionFactory,
    DatabaseConnection,
    DatabaseError,
    UserRecord,
    clear_users,
    ensure_schema,
    format_sql_error,
    insert_many,
    insert_one,
    list_users,
    open_connection,
    select_by_min_age,
    transaction,
    update_age_by_name,
)

logger = logging.getLogger(__name__)

Echo = Callable[..., None]

MIN_AGE = 25
MISSING_AGE_DISPLAY = -1


@dataclass
class DemoReport:
    """What the walkthrough did, for callers that want more than the output."""

    inserted_id: int = 0
    transaction_committed: bool = False
    transaction_rows_updated: int = 0
    selected: list[UserRecord] = field(default_factory=list)
    rows_updated: int = 0
    final_users: list[UserRecord] = field(default_factory=list)


def _display_age(record: UserRecord) -> int:
    return record.age if record.has_age else MISSING_AGE_DISPLAY


def run_transaction_demo(
    conn: DatabaseConnection,
    *,
    simulate_failure: bool = False,
    echo: Echo = typer.echo,
) -> int:
    """Insert alice and bob, then bump alice's age, all in one transaction.

    With ``simulate_failure`` a second ``alice`` is inserted at the end,
    which violates the unique name constraint and rolls everything back.

    Returns:
        Rows updated by the age change.

    Raises:
        DatabaseError: If any step fails (after the rollback).
    """
    with transaction(conn):
        insert_many(conn, [UserRecord("alice", 24), UserRecord("bob", 29)])
        changed = update_age_by_name(conn, "alice", 25)
        echo(f"Rows updated: {changed}")
        if simulate_failure:
            insert_one(conn, UserRecord("alice", 40))
    echo("Transaction committed.")
    return changed


def print_users_table(users: list[UserRecord], echo: Echo = typer.echo) -> None:
    echo(f"{'ID':<5}{'Name':<12}Age")
    for user in users:
        echo(f"{user.id!s:<5}{user.name:<12}{_display_age(user)}")


def print_final_users(users: list[UserRecord], echo: Echo = typer.echo) -> None:
    echo("Final users:")
    for user in users:
        echo(f"ID={user.id} | name={user.name} | age={_display_age(user)}")


def run_demo(
    config: ConnectionConfig,
    *,
    factory: ConnectionFactory | None = None,
    simulate_failure: bool = False,
    reset: bool = True,
    echo: Echo = typer.echo,
) -> DemoReport:
    """Run the walkthrough against the database described by ``config``.

    Steps, all on a single connection that is closed on every exit path:
    ensure schema, clear ``users`` (unless ``reset`` is False), insert carol,
    run the transaction demo, list users aged 25 or more, set bob's age to
    31 outside any transaction, and print the final table.

    Raises:
        DatabaseError: If any step other than the transaction demo fails.
    """
    report = DemoReport()

    with open_connection(config, factory=factory) as conn:
        ensure_schema(conn, config.schema)

        if reset:
            clear_users(conn)

        report.inserted_id = insert_one(conn, UserRecord("carol", 32))
        echo(f"Inserted carol with id = {report.inserted_id}")

        try:
            report.transaction_rows_updated = run_transaction_demo(
                conn, simulate_failure=simulate_failure, echo=echo
            )
            report.transaction_committed = True
        # Only database failures are absorbed; anything else ends the run.
        except DatabaseError as exc:
            echo(format_sql_error(exc, "transaction demo"), err=True)
            echo("Transaction demo failed (rolled back).", err=True)

        report.selected = select_by_min_age(conn, MIN_AGE)
        echo(f"\nUsers with age >= {MIN_AGE}:")
        print_users_table(report.selected, echo=echo)

        report.rows_updated = update_age_by_name(conn, "bob", 31)
        echo(f"\nUpdated rows (bob -> 31): {report.rows_updated}")

        report.final_users = list_users(conn)
        echo("")
        print_final_users(report.final_users, echo=echo)

    logger.debug("Demo finished: %s", report)
    return report
