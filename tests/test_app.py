"""Tests for mode dispatch and the error boundary (cli/app.py).

The embedded path runs end to end against the real in-memory
:class:`LocalExecutor` unless a test swaps a collaborator out; the
shutdown registry is always the isolated one from ``conftest``.
"""

from __future__ import annotations

import sqlite3
from contextlib import closing
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from sql_client.cli import app as app_module
from sql_client.cli import exit_codes
from sql_client.cli.app import cli, dispatch, main
from sql_client.core.models import Failure, SessionHandle, Success
from sql_client.core.shutdown import ShutdownRegistry
from sql_client.exceptions import (
    ConflictingOptionsError,
    InvalidOptionsError,
    UnsupportedModeError,
)


@pytest.fixture(autouse=True)
def _isolated(
    monkeypatch: pytest.MonkeyPatch,
    isolated_registry: ShutdownRegistry,
    tmp_path: Path,
) -> None:
    monkeypatch.delenv("FLINK_CONF_DIR", raising=False)
    monkeypatch.setenv("HOME", str(tmp_path))


@pytest.fixture
def spy_executor(monkeypatch: pytest.MonkeyPatch) -> MagicMock:
    """Replace the executor factory with one returning a mock."""
    executor = MagicMock()
    executor.open_session.side_effect = lambda context: SessionHandle(context.session_id)
    monkeypatch.setattr(app_module, "LocalExecutor", MagicMock(return_value=executor))
    return executor


# ---------------------------------------------------------------------------
# Dispatch
# ---------------------------------------------------------------------------

class TestDispatch:
    def test_no_arguments_open_no_session(self, spy_executor: MagicMock) -> None:
        assert dispatch([]) == Success()
        spy_executor.start.assert_not_called()

    def test_gateway_fails_before_bootstrap(self, spy_executor: MagicMock) -> None:
        outcome = dispatch(["gateway"])
        assert isinstance(outcome, Failure)
        assert isinstance(outcome.error, UnsupportedModeError)
        assert str(outcome.error) == "Gateway mode is not supported yet."
        spy_executor.start.assert_not_called()

    def test_unknown_mode_prints_usage(self, spy_executor: MagicMock) -> None:
        assert dispatch(["remote", "--file", "x"]) == Success()
        spy_executor.start.assert_not_called()

    def test_embedded_help_opens_no_session(self, spy_executor: MagicMock) -> None:
        assert dispatch(["embedded", "--help", "--file", "a.sql"]) == Success()
        spy_executor.start.assert_not_called()

    def test_invalid_option(self, spy_executor: MagicMock) -> None:
        outcome = dispatch(["embedded", "--bogus"])
        assert isinstance(outcome, Failure)
        assert isinstance(outcome.error, InvalidOptionsError)

    def test_conflict_detected_before_bootstrap(self, spy_executor: MagicMock) -> None:
        outcome = dispatch(["embedded", "--file", "a.sql", "--update", "X"])
        assert isinstance(outcome, Failure)
        assert isinstance(outcome.error, ConflictingOptionsError)
        spy_executor.start.assert_not_called()

    def test_session_closed_after_run(
        self,
        spy_executor: MagicMock,
        isolated_registry: ShutdownRegistry,
    ) -> None:
        spy_executor.execute_statement.return_value = MagicMock(is_query=False, affected_rows=1)
        outcome = dispatch(["embedded", "--update", "INSERT INTO t VALUES (1)"])

        assert outcome == Success()
        spy_executor.start.assert_called_once_with()
        spy_executor.close_session.assert_called_once_with("default")
        assert len(isolated_registry) == 1

    def test_session_closed_after_failure(self, spy_executor: MagicMock) -> None:
        outcome = dispatch(["embedded", "--update", "SELECT 1"])

        assert isinstance(outcome, Failure)
        spy_executor.close_session.assert_called_once_with("default")

    def test_session_closed_after_defect(
        self,
        spy_executor: MagicMock,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        runner = MagicMock()
        runner.return_value.run.side_effect = RuntimeError("kaboom")
        monkeypatch.setattr(app_module, "ModeRunner", runner)

        with pytest.raises(RuntimeError):
            dispatch(["embedded"])
        spy_executor.close_session.assert_called_once_with("default")

    def test_bootstrap_failure_is_a_client_error(self, spy_executor: MagicMock, tmp_path: Path) -> None:
        outcome = dispatch(["embedded", "--environment", str(tmp_path / "missing.yaml")])
        assert isinstance(outcome, Failure)
        assert "Could not read session environment file" in str(outcome.error)
        spy_executor.open_session.assert_not_called()


# ---------------------------------------------------------------------------
# main — end to end on the local executor
# ---------------------------------------------------------------------------

class TestMain:
    def test_update_statement_succeeds(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        database = tmp_path / "db.sqlite"
        env_file = tmp_path / "env.yaml"
        env_file.write_text(
            f"configuration:\n  sql-client.database: '{database}'\n",
            encoding="utf-8",
        )
        script = tmp_path / "setup.sql"
        script.write_text("CREATE TABLE t (a INTEGER);\n", encoding="utf-8")

        assert main(["embedded", "-e", str(env_file), "-f", str(script)]) == exit_codes.SUCCESS
        code = main(["embedded", "-e", str(env_file), "-u", "INSERT INTO t VALUES (1)"])

        assert code == exit_codes.SUCCESS
        assert "Statement has been submitted." in capsys.readouterr().out

    def test_script_with_comment_markers_in_literals(self, tmp_path: Path) -> None:
        database = tmp_path / "db.sqlite"
        env_file = tmp_path / "env.yaml"
        env_file.write_text(
            f"configuration:\n  sql-client.database: '{database}'\n",
            encoding="utf-8",
        )
        script = tmp_path / "load.sql"
        script.write_text(
            "CREATE TABLE t (a TEXT);\n"
            "INSERT INTO t VALUES ('a--b');\n"
            "INSERT INTO t VALUES ('c;');\n",
            encoding="utf-8",
        )

        assert main(["embedded", "-e", str(env_file), "-f", str(script)]) == exit_codes.SUCCESS

        with closing(sqlite3.connect(database)) as connection:
            rows = connection.execute("SELECT a FROM t ORDER BY rowid").fetchall()
        assert rows == [("a--b",), ("c;",)]

    def test_rejected_update_reports_error(self, capsys: pytest.CaptureFixture[str]) -> None:
        code = main(["embedded", "--update", "SELECT 1"])

        assert code == exit_codes.GENERAL_ERROR
        assert "Could not submit given SQL update statement to cluster." in capsys.readouterr().err

    def test_conflicting_options_report(self, capsys: pytest.CaptureFixture[str]) -> None:
        code = main(["embedded", "--file", "a.sql", "--update", "X"])

        assert code == exit_codes.GENERAL_ERROR
        err = capsys.readouterr().err
        assert "--file" in err
        assert "--update" in err

    def test_missing_script_reports_cause(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        code = main(["embedded", "--file", str(tmp_path / "missing.sql")])

        assert code == exit_codes.GENERAL_ERROR
        assert "Caused by: FileNotFoundError" in capsys.readouterr().err

    def test_no_session_environment_notice(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        script = tmp_path / "a.sql"
        script.write_text("SELECT 1;\n", encoding="utf-8")

        assert main(["embedded", "-f", str(script)]) == exit_codes.SUCCESS
        assert "No session environment specified." in capsys.readouterr().err

    def test_defect_is_wrapped(
        self,
        monkeypatch: pytest.MonkeyPatch,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        monkeypatch.setattr(app_module, "dispatch", MagicMock(side_effect=RuntimeError("kaboom")))

        code = main(["embedded"])

        assert code == exit_codes.UNEXPECTED_ERROR
        err = capsys.readouterr().err
        assert "This is a bug" in err
        assert "RuntimeError: kaboom" in err

    def test_failure_output_starts_with_blank_lines(self, capsys: pytest.CaptureFixture[str]) -> None:
        main(["gateway"])
        assert capsys.readouterr().err.startswith("\n\n")


# ---------------------------------------------------------------------------
# cli — process exit
# ---------------------------------------------------------------------------

class TestCliEntryPoint:
    def test_exit_code_is_propagated(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("sys.argv", ["sql-client", "gateway"])
        with pytest.raises(SystemExit) as exc_info:
            cli()
        assert exc_info.value.code == exit_codes.GENERAL_ERROR

    def test_success_exit(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("sys.argv", ["sql-client"])
        with pytest.raises(SystemExit) as exc_info:
            cli()
        assert exc_info.value.code == exit_codes.SUCCESS

    def test_keyboard_interrupt(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(app_module, "main", MagicMock(side_effect=KeyboardInterrupt))
        with pytest.raises(SystemExit) as exc_info:
            cli()
        assert exc_info.value.code == exit_codes.KEYBOARD_INTERRUPT
