from __future__ import annotations

import logging
from collections.abc import Callable, Generator
from contextlib import contextmanager
from typing import Annotated, Any

import typer

from .. import global_config as g
from ..database import ConnectionConfig, DatabaseError, format_sql_error

_LOGGING_CONFIGURED = False


def configure_logging(level: int = logging.WARNING) -> None:
    """Configure CLI-wide logging once.

    Sets up basic logging configuration for the CLI. Safe to call multiple
    times; only configures on first call.

    Args:
        level: Logging level (defaults to WARNING so walkthrough output
            stays readable; ``--verbose`` passes DEBUG).

    Side Effects:
        - Configures Python logging module globally.
        - Sets module-level flag to prevent reconfiguration.
    """
    global _LOGGING_CONFIGURED
    if _LOGGING_CONFIGURED:
        return

    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    _LOGGING_CONFIGURED = True


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a logger hooked into the shared CLI configuration."""
    return logging.getLogger(name)


HostOption = Annotated[
    str,
    typer.Option("--host", envvar=g.ENV_HOST, help="Endpoint, e.g. tcp://127.0.0.1:3306 or sqlite:///path/to/dir"),
]
UserOption = Annotated[str, typer.Option("--user", envvar=g.ENV_USER, help="Database user")]
PasswordOption = Annotated[
    str,
    typer.Option("--password", envvar=g.ENV_PASSWORD, help="Database password"),
]
SchemaOption = Annotated[
    str,
    typer.Option("--schema", envvar=g.ENV_SCHEMA, help="Target schema (created if missing)"),
]


def build_config(*, host: str, user: str, password: str, schema: str) -> ConnectionConfig:
    """Collect the shared connection options into a ConnectionConfig."""
    return ConnectionConfig(host=host, user=user, password=password, schema=schema)


@contextmanager
def handle_errors(
    operation: str,
    *,
    logger: logging.Logger | None = None,
) -> Generator[None, None, None]:
    """Provide consistent exception handling for CLI operations.

    Context manager that catches exceptions, prints a diagnostic labeled
    with ``operation`` to stderr, and exits with code 1. Re-raises
    typer.Exit to allow normal CLI exit flow.

    Args:
        operation: Human-readable operation name used as the error label.
        logger: Logger instance. Defaults to module logger if None.

    Raises:
        typer.Exit: Always exits with code 1 on exception (except typer.Exit
            which is re-raised).

    Logs:
        - ERROR: "Error during {operation}" with full exception traceback.

    User Output:
        - Database errors: "[SQL ERROR @ {operation}] message | error code: N
          | SQLState: S" in red on stderr.
        - Anything else: "[ERROR @ {operation}] message" in red on stderr.
    """
    logger = logger or get_logger(__name__)
    try:
        yield
    except typer.Exit:
        raise
    except DatabaseError as exc:
        logger.exception("Database error during %s", operation)
        typer.secho(format_sql_error(exc, operation), fg=typer.colors.RED, err=True)
        raise typer.Exit(1) from exc
    except Exception as exc:  # noqa: BLE001
        logger.exception("Error during %s", operation)
        typer.secho(f"[ERROR @ {operation}] {exc}", fg=typer.colors.RED, err=True)
        raise typer.Exit(1) from exc


def format_result(result: dict[str, Any], *, operation: str) -> str:
    """Format an operation result into CLI-friendly text.

    Args:
        result: Result dictionary with optional keys: success, total,
            message, items.
        operation: Operation label to display.

    Returns:
        Formatted multi-line string.
    """
    icon = "✓" if result.get("success", True) else "✗"
    lines = [f"{icon} {operation}"]

    if result.get("total") is not None:
        lines.append(f"  total: {result['total']}")

    message = result.get("message")
    if message:
        lines.append(f"  ℹ {message}")

    items = result.get("items") or []
    if items:
        lines.append("  Items:")
        for item in items:
            lines.append(f"    • {item}")

    return "\n".join(lines)


class BaseCLI:
    """Utility base class for CLI command groups."""

    def __init__(self) -> None:
        self.logger = get_logger(__name__)

    def handle_cli_operation(
        self,
        *,
        operation: str,
        op_callable: Callable[[], dict[str, Any]],
    ) -> dict[str, Any]:
        """Run an operation with consistent logging, formatting, and errors.

        Args:
            operation: Human-readable operation name for error handling.
            op_callable: Callable that performs the operation and returns
                a result dictionary.

        Returns:
            Result from op_callable.

        User Output:
            - Prints formatted result via typer.echo().
            - Error messages handled by handle_errors context manager.
        """
        with handle_errors(operation, logger=self.logger):
            result = op_callable()

        typer.echo(format_result(result, operation=operation))
        return result
