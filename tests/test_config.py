"""Tests for connection configuration and factory dispatch."""

from __future__ import annotations

from pathlib import Path

import pytest

from userdb.database import (
    ConfigurationError,
    ConnectionConfig,
    DatabaseConnection,
    Endpoint,
    default_connection_factory,
    ensure_schema,
    open_connection,
    parse_endpoint,
)
from userdb.database.connection import SQLiteConnection
from userdb.database.dialects import SQLITE


class TestParseEndpoint:
    """Tests for parse_endpoint."""

    def test_tcp_endpoint(self) -> None:
        assert parse_endpoint("tcp://127.0.0.1:3306") == Endpoint("tcp", "127.0.0.1", 3306)

    def test_bare_host_defaults_to_tcp_and_mysql_port(self) -> None:
        assert parse_endpoint("db.internal") == Endpoint("tcp", "db.internal", 3306)

    def test_mysql_scheme_with_custom_port(self) -> None:
        assert parse_endpoint("mysql://db.internal:3307") == Endpoint("mysql", "db.internal", 3307)

    def test_sqlite_directory(self) -> None:
        assert parse_endpoint("sqlite:///var/lib/userdb") == Endpoint("sqlite", "/var/lib/userdb")

    def test_sqlite_memory(self) -> None:
        assert parse_endpoint("sqlite://:memory:") == Endpoint("sqlite", ":memory:")


class TestConnectionConfig:
    """Tests for ConnectionConfig."""

    def test_defaults(self) -> None:
        config = ConnectionConfig()
        assert config.host == "tcp://127.0.0.1:3306"
        assert config.user == "root"
        assert config.schema == "testdb"
        assert config.endpoint == Endpoint("tcp", "127.0.0.1", 3306)

    def test_is_immutable(self) -> None:
        config = ConnectionConfig()
        with pytest.raises(AttributeError):
            config.schema = "other"  # type: ignore[misc]

    def test_from_env_overrides(self) -> None:
        config = ConnectionConfig.from_env(
            {"USERDB_HOST": "tcp://10.0.0.5:3310", "USERDB_SCHEMA": "school"}
        )
        assert config.endpoint == Endpoint("tcp", "10.0.0.5", 3310)
        assert config.schema == "school"
        assert config.user == "root"

    def test_from_env_reads_process_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("USERDB_USER", "app")
        assert ConnectionConfig.from_env().user == "app"

    def test_repr_hides_password(self) -> None:
        config = ConnectionConfig(password="sinatra1")
        assert "sinatra1" not in repr(config)

    def test_construction_does_not_validate(self) -> None:
        config = ConnectionConfig(host="carrier-pigeon://nowhere")
        assert config.endpoint.scheme == "carrier-pigeon"


class TestDefaultFactory:
    """Tests for scheme-based connection factory dispatch."""

    def test_unknown_scheme_fails_at_connect(self) -> None:
        config = ConnectionConfig(host="carrier-pigeon://nowhere")
        with pytest.raises(ConfigurationError, match="carrier-pigeon"):
            default_connection_factory(config)

    def test_sqlite_scheme_opens_schema_file(self, sqlite_dir: Path) -> None:
        config = ConnectionConfig(host=f"sqlite://{sqlite_dir}", schema="school")
        with open_connection(config) as conn:
            assert isinstance(conn, SQLiteConnection)
            assert conn.autocommit
        assert (sqlite_dir / "school.sqlite").exists()

    def test_sqlite_memory(self) -> None:
        with open_connection(ConnectionConfig(host="sqlite://:memory:")) as conn:
            assert conn.dialect.name == "sqlite"

    @pytest.mark.parametrize("bad_schema", ["", "../escape", "test db"])
    def test_sqlite_rejects_unsafe_schema_file_name(self, sqlite_dir: Path, bad_schema: str) -> None:
        config = ConnectionConfig(host=f"sqlite://{sqlite_dir}", schema=bad_schema)
        with pytest.raises(ValueError):
            default_connection_factory(config)
        assert list(sqlite_dir.iterdir()) == []
        assert not (sqlite_dir.parent / "escape.sqlite").exists()

    def test_sqlite_rejects_bootstrapping_another_schema(self, sqlite_dir: Path) -> None:
        config = ConnectionConfig(host=f"sqlite://{sqlite_dir}", schema="school")
        with open_connection(config) as conn:
            with pytest.raises(ConfigurationError, match="'school', not 'other'"):
                ensure_schema(conn, "other")
        assert not (sqlite_dir / "other.sqlite").exists()

    def test_sqlite_memory_accepts_any_schema(self) -> None:
        with open_connection(ConnectionConfig(host="sqlite://:memory:")) as conn:
            ensure_schema(conn, "anything")


class Incomplete(DatabaseConnection):
    def commit(self) -> None:
        pass


@pytest.mark.unit
def test_connection_subclass_must_implement_session_methods() -> None:
    with pytest.raises(TypeError, match="abstract"):
        Incomplete(raw=None, dialect=SQLITE)
