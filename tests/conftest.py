from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import pytest

from userdb.database import (
    ConnectionConfig,
    DatabaseConnection,
    DatabaseError,
    ensure_schema,
    sqlite_connection_factory,
)
from userdb.database.connection import SQLiteConnection


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """
    Removes USERDB_* overrides so tests never pick up a real server.
    Automatically applied to all tests.
    """
    for var in ("USERDB_HOST", "USERDB_USER", "USERDB_PASSWORD", "USERDB_SCHEMA"):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def project_root(tmp_path: Path) -> Path:
    """
    A dedicated temp root directory for each test.
    All filesystem writes in tests should be under this root (or tmp_path directly).
    """
    root = tmp_path / "proj"
    (root / "data" / "db").mkdir(parents=True)
    return root


@pytest.fixture(autouse=True)
def chdir_to_project_root(project_root: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """
    Automatically change working directory to project_root for all tests.
    This ensures relative-path operations go into the temp directory by default.
    """
    monkeypatch.chdir(project_root)


@pytest.fixture
def sqlite_dir(project_root: Path) -> Path:
    """
    Directory acting as the SQLite "server": each schema is a file inside it.
    """
    return project_root / "data" / "db"


@pytest.fixture
def config(sqlite_dir: Path) -> ConnectionConfig:
    """On-disk SQLite config under the temp project root (more realistic than :memory:)."""
    return ConnectionConfig(host=f"sqlite://{sqlite_dir}", schema="testdb")


@pytest.fixture
def db_conn(config: ConnectionConfig, project_root: Path) -> Iterator[DatabaseConnection]:
    """
    A bootstrapped connection that is always closed after each test.

    Safety enforcement: the database directory must be under project_root
    (prevents touching real databases).
    """
    try:
        Path(config.endpoint.address).resolve().relative_to(project_root.resolve())
    except ValueError:
        raise AssertionError(
            f"SQLite directory {config.endpoint.address} is not under project_root {project_root}. "
            "This prevents accidental writes to real databases."
        )

    conn = sqlite_connection_factory(config)
    try:
        ensure_schema(conn, config.schema)
        yield conn
    finally:
        conn.close()


@pytest.fixture
def second_conn(config: ConnectionConfig) -> Iterator[DatabaseConnection]:
    """An independent session on the same database, for visibility checks."""
    conn = sqlite_connection_factory(config)
    try:
        yield conn
    finally:
        conn.close()


class RecordingConnection(SQLiteConnection):
    """SQLite session that counts closes and can be told to fail rollbacks
    or the re-enabling of autocommit."""

    def __init__(
        self,
        raw,
        schema: str | None = None,
        *,
        fail_rollback: bool = False,
        fail_restore: bool = False,
    ) -> None:
        super().__init__(raw, schema)
        self.fail_rollback = fail_rollback
        self.fail_restore = fail_restore
        self.close_calls = 0
        self.autocommit_history: list[bool] = []

    def set_autocommit(self, enabled: bool) -> None:
        self.autocommit_history.append(enabled)
        super().set_autocommit(enabled)
        if enabled and self.fail_restore:
            raise DatabaseError("MySQL server has gone away", code=2006)

    def rollback(self) -> None:
        super().rollback()
        if self.fail_rollback:
            raise DatabaseError("Lost connection to server during rollback", code=2013)

    def close(self) -> None:
        self.close_calls += 1
        super().close()


@pytest.fixture
def recording_factory():
    """
    Connection factory producing RecordingConnection objects.

    Returns a (factory, created) pair; ``created`` lists every connection
    the factory handed out.
    """
    created: list[RecordingConnection] = []

    def _make(*, fail_rollback: bool = False, fail_restore: bool = False):
        def factory(config: ConnectionConfig) -> RecordingConnection:
            raw = sqlite_connection_factory(config).raw
            conn = RecordingConnection(
                raw,
                config.schema,
                fail_rollback=fail_rollback,
                fail_restore=fail_restore,
            )
            created.append(conn)
            return conn

        return factory

    return _make, created
