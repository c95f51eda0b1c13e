"""Tests for the userdb CLI."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest
from typer.testing import CliRunner

from userdb.cli.commands.users import parse_user_spec
from userdb.cli.main import app
from userdb.database import UserRecord

runner = CliRunner()


@pytest.fixture
def host(sqlite_dir: Path) -> list[str]:
    return ["--host", f"sqlite://{sqlite_dir}"]


@pytest.mark.integration
def test_demo_command(host: list[str]) -> None:
    result = runner.invoke(app, ["demo", *host])

    assert result.exit_code == 0, result.output
    assert "Inserted carol with id = 1" in result.output
    assert "Transaction committed." in result.output
    assert "Users with age >= 25:" in result.output
    assert "ID=3 | name=bob | age=31" in result.output


@pytest.mark.integration
def test_demo_command_simulated_failure_still_succeeds(host: list[str]) -> None:
    result = runner.invoke(app, ["demo", "--simulate-failure", *host])

    assert result.exit_code == 0, result.output
    assert "Transaction demo failed (rolled back)." in result.output
    assert "Updated rows (bob -> 31): 0" in result.output


@pytest.mark.integration
def test_demo_command_exits_1_on_database_error(host: list[str]) -> None:
    assert runner.invoke(app, ["demo", *host]).exit_code == 0

    result = runner.invoke(app, ["demo", "--no-reset", *host])

    assert result.exit_code == 1
    assert "[SQL ERROR @ demo]" in result.output
    assert "SQLState: 23000" in result.output


@pytest.mark.unit
def test_demo_command_exits_1_on_unsupported_endpoint() -> None:
    result = runner.invoke(app, ["demo", "--host", "carrier-pigeon://nowhere"])

    assert result.exit_code == 1
    assert "[ERROR @ demo] Unsupported endpoint scheme 'carrier-pigeon'" in result.output


@pytest.mark.integration
def test_database_error_is_logged_with_traceback(
    host: list[str],
    caplog: pytest.LogCaptureFixture,
) -> None:
    assert runner.invoke(app, ["users", "add", "carol", *host]).exit_code == 0

    with caplog.at_level(logging.ERROR):
        result = runner.invoke(app, ["users", "add", "carol", *host])

    assert result.exit_code == 1
    records = [r for r in caplog.records if r.getMessage() == "Database error during users add"]
    assert len(records) == 1
    assert records[0].exc_info is not None


@pytest.mark.integration
def test_host_from_environment(sqlite_dir: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("USERDB_HOST", f"sqlite://{sqlite_dir}")
    monkeypatch.setenv("USERDB_SCHEMA", "school")

    result = runner.invoke(app, ["schema", "ensure"])

    assert result.exit_code == 0, result.output
    assert "Schema school is ready" in result.output
    assert (sqlite_dir / "school.sqlite").exists()


@pytest.mark.integration
def test_users_commands_round_trip(host: list[str]) -> None:
    added = runner.invoke(app, ["users", "add", "carol", "--age", "32", *host])
    assert added.exit_code == 0, added.output
    assert "Inserted carol with id = 1" in added.output

    many = runner.invoke(app, ["users", "add-many", "alice:24", "bob:29", "dave", *host])
    assert many.exit_code == 0, many.output
    assert "total: 3" in many.output

    updated = runner.invoke(app, ["users", "set-age", "zed", "50", *host])
    assert updated.exit_code == 0, updated.output
    assert "Updated rows (zed -> 50): 0" in updated.output

    listed = runner.invoke(app, ["users", "list", "--min-age", "25", *host])
    assert listed.exit_code == 0, listed.output
    names = [line.split()[1] for line in listed.output.splitlines()[1:]]
    assert names == ["carol", "bob"]

    everyone = runner.invoke(app, ["users", "list", *host])
    assert "4    dave        -1" in everyone.output


@pytest.mark.integration
def test_users_add_many_is_all_or_nothing(host: list[str]) -> None:
    result = runner.invoke(app, ["users", "add-many", "alice:24", "alice:40", *host])

    assert result.exit_code == 1
    assert "[SQL ERROR @ users add-many]" in result.output

    listed = runner.invoke(app, ["users", "list", *host])
    assert listed.output.splitlines() == ["ID   Name        Age"]


@pytest.mark.integration
def test_users_add_duplicate_exits_1(host: list[str]) -> None:
    assert runner.invoke(app, ["users", "add", "carol", *host]).exit_code == 0

    result = runner.invoke(app, ["users", "add", "carol", *host])

    assert result.exit_code == 1
    assert "[SQL ERROR @ users add]" in result.output


class TestParseUserSpec:
    """Tests for NAME[:AGE] parsing."""

    @pytest.mark.unit
    def test_name_and_age(self) -> None:
        assert parse_user_spec("alice:24") == UserRecord("alice", 24)

    @pytest.mark.unit
    def test_name_only(self) -> None:
        assert parse_user_spec("dave") == UserRecord("dave")

    @pytest.mark.unit
    def test_bad_age(self) -> None:
        with pytest.raises(ValueError, match="integer"):
            parse_user_spec("alice:old")

    @pytest.mark.unit
    def test_missing_name(self) -> None:
        with pytest.raises(ValueError, match="Missing name"):
            parse_user_spec(":24")
