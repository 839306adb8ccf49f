"""The scoped CLI resource: interactive shell, scripts and single updates.

A :class:`CliClient` is bound to one session of one executor and to a
history file.  It is a context manager; leaving the ``with`` block
closes it, whatever the reason.

Rendering
---------
* Query results are printed as Rich tables on stdout.
* Informational and error lines use the ``[INFO]`` / ``[ERROR]``
  prefixes of the interactive shell.
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Any

from sql_client.cli.console import console, out
from sql_client.core.models import SessionHandle, StatementResult
from sql_client.core.protocols import Executor
from sql_client.core.statements import (
    UPDATE_KEYWORDS,
    is_statement_complete,
    is_update_statement,
    leading_keyword,
    split_statements,
)
from sql_client.exceptions import MissingDependencyError, SqlExecutionError
from sql_client.utils.logging_config import get_logger

log = get_logger(__name__)

PROMPT: str = "Flink SQL> "
CONTINUATION_PROMPT: str = "> "

QUIT_COMMANDS: frozenset[str] = frozenset({"QUIT", "EXIT"})

MESSAGE_WELCOME: str = (
    "Welcome! Enter 'HELP;' to list all available commands. 'QUIT;' to exit."
)
MESSAGE_HELP: str = "\n".join(
    (
        "The following commands are available:",
        "",
        "HELP;        Prints the available commands.",
        "QUIT; EXIT;  Quits the SQL CLI client.",
        "SET;         Shows the configuration of the session.",
        "",
        "Any other statement is sent to the session.  Statements may span",
        "several lines and end with ';'.",
    )
)
MESSAGE_UNSUPPORTED_UPDATE: str = (
    "Unsupported SQL statement! Only statements of type "
    f"{', '.join(sorted(UPDATE_KEYWORDS))} can be submitted as an update."
)

LineReader = Callable[[str], str]
"""Reads one line for a prompt; raises ``EOFError`` / ``KeyboardInterrupt``."""


def _import_questionary() -> Any:
    """Import questionary lazily for the interactive prompt."""
    try:
        import questionary
    except ModuleNotFoundError as exc:
        raise MissingDependencyError(
            "questionary is not installed. Install with: pip install questionary",
        ) from exc
    return questionary


def _import_rich_table() -> type[Any]:
    """Import rich table lazily for result rendering."""
    try:
        from rich.table import Table
    except ModuleNotFoundError as exc:
        raise MissingDependencyError(
            "rich is not installed. Install with: pip install rich",
        ) from exc
    return Table


def _build_history(history_file_path: Path) -> Any:
    from prompt_toolkit.history import FileHistory, InMemoryHistory

    try:
        history_file_path.parent.mkdir(parents=True, exist_ok=True)
        history_file_path.touch(exist_ok=True)
    except OSError:
        log.warning(
            "Unable to create history file %s, command history is not saved",
            history_file_path,
            exc_info=True,
        )
        return InMemoryHistory()
    log.info("Command history file path: %s", history_file_path)
    return FileHistory(str(history_file_path))


def prompt_line_reader(history_file_path: Path) -> LineReader:
    """Build a :data:`LineReader` backed by questionary with file history."""
    questionary = _import_questionary()
    history = _build_history(history_file_path)

    def read_line(message: str) -> str:
        answer: str | None = questionary.text(
            message,
            qmark="",
            history=history,
        ).unsafe_ask()
        return answer or ""

    return read_line


# ---------------------------------------------------------------------------
# Result rendering
# ---------------------------------------------------------------------------

def _format_value(value: Any) -> str:
    if value is None:
        return "NULL"
    if isinstance(value, bytes):
        return value.hex()
    return str(value)


def render_result(result: StatementResult) -> None:
    """Print *result* as a table, or as an affected-rows notice."""
    if not result.is_query:
        if result.affected_rows >= 0:
            out.notice(f"[INFO] {result.affected_rows} row(s) affected.")
        else:
            out.notice("[INFO] Execute statement succeed.")
        return

    table_class = _import_rich_table()
    table = table_class(show_header=True, header_style="bold cyan", border_style="dim")
    for column in result.columns:
        table.add_column(column)
    for row in result.rows:
        table.add_row(*(_format_value(value) for value in row))

    out.print(table)
    noun = "row" if len(result) == 1 else "rows"
    out.notice(f"{len(result)} {noun} in set")


def _print_error(message: str) -> None:
    console.notice(f"[ERROR] {message}")


# ---------------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------------

class CliClient:
    """Interactive and batch front end for one session.

    Parameters
    ----------
    handle:
        The open session.
    executor:
        The executor owning *handle*.
    history_file_path:
        Where the interactive prompt keeps its history.
    line_reader:
        Source of interactive input; a questionary prompt when omitted.
    """

    def __init__(
        self,
        handle: SessionHandle,
        executor: Executor,
        history_file_path: Path,
        *,
        line_reader: LineReader | None = None,
    ) -> None:
        self._handle = handle
        self._executor = executor
        self._history_file_path = history_file_path
        self._line_reader = line_reader
        self._closed = False

    @property
    def history_file_path(self) -> Path:
        return self._history_file_path

    @property
    def closed(self) -> bool:
        return self._closed

    def __enter__(self) -> CliClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        log.debug("Closed CLI client for session %s", self._handle)

    # ------------------------------------------------------------------
    # Batch modes
    # ------------------------------------------------------------------

    def execute_file(self, content: str) -> None:
        """Run every statement of *content*, stopping at the first failure.

        Raises
        ------
        SqlExecutionError
            From the first statement the executor rejects.
        """
        for statement in split_statements(content):
            out.notice(f"{PROMPT}{statement};")
            result = self._executor.execute_statement(self._handle, statement)
            render_result(result)
            out.notice("")

    def submit_update(self, statement: str) -> bool:
        """Submit *statement* as an update; ``False`` when it was not accepted."""
        statements = split_statements(statement)
        if len(statements) != 1 or not is_update_statement(statements[0]):
            _print_error(MESSAGE_UNSUPPORTED_UPDATE)
            return False

        try:
            result = self._executor.execute_statement(self._handle, statements[0])
        except SqlExecutionError as exc:
            _print_error(str(exc))
            return False

        out.notice("[INFO] Statement has been submitted.")
        if result.affected_rows >= 0:
            out.notice(f"[INFO] {result.affected_rows} row(s) affected.")
        return True

    # ------------------------------------------------------------------
    # Interactive mode
    # ------------------------------------------------------------------

    def open(self) -> None:
        """Run the interactive shell until QUIT, EXIT or end of input."""
        read_line = self._line_reader or prompt_line_reader(self._history_file_path)
        out.notice(MESSAGE_WELCOME)

        buffer: list[str] = []
        while not self._closed:
            try:
                line = read_line(CONTINUATION_PROMPT if buffer else PROMPT)
            except KeyboardInterrupt:
                buffer.clear()
                continue
            except EOFError:
                break

            if not buffer and not line.strip():
                continue
            buffer.append(line)
            if not is_statement_complete("\n".join(buffer)):
                continue

            statements = split_statements("\n".join(buffer))
            buffer.clear()
            for statement in statements:
                if not self._call_command(statement):
                    out.notice("Goodbye!")
                    return

    def _call_command(self, statement: str) -> bool:
        """Handle one statement; ``False`` means the user asked to quit."""
        keyword = leading_keyword(statement)
        if keyword in QUIT_COMMANDS and statement.strip().upper() == keyword:
            return False
        if keyword == "HELP" and statement.strip().upper() == keyword:
            out.notice(MESSAGE_HELP)
            return True
        if keyword == "SET" and statement.strip().upper() == keyword:
            self._show_session_config()
            return True

        try:
            render_result(self._executor.execute_statement(self._handle, statement))
        except SqlExecutionError as exc:
            _print_error(str(exc))
        return True

    def _show_session_config(self) -> None:
        configuration = self._executor.get_session_config(self._handle)
        if not configuration:
            out.notice("[INFO] Session configuration is empty.")
            return
        for key in sorted(configuration):
            out.notice(f"{key}={configuration[key]}")
