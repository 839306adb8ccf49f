"""Mode runner — run one execution mode against an open session.

Exactly one of three modes runs per invocation, chosen in this order:

1. **script** — ``--file`` is set: the file's statements run in order.
2. **single update** — ``--update`` is set: the statement is submitted.
3. **interactive** — neither is set: the interactive shell opens.

The scoped CLI resource is acquired with ``with`` so it is released on
every exit path, including ``KeyboardInterrupt``.  Expected failures are
returned as :class:`~sql_client.core.models.Failure`; anything else is a
defect and propagates to the CLI error boundary.
"""

from __future__ import annotations

import platform
from collections.abc import Callable
from pathlib import Path

from sql_client.core.bootstrap import EmbeddedSession
from sql_client.core.models import ExecutionOptions, Failure, Outcome, Success
from sql_client.core.protocols import CliResource, CliResourceFactory
from sql_client.exceptions import (
    ConflictingOptionsError,
    ScriptReadError,
    SqlClientError,
    StatementSubmissionError,
)
from sql_client.utils.logging_config import get_logger

log = get_logger(__name__)

HISTORY_FILE_NAME: str = ".flink-sql-history"
WINDOWS_HISTORY_FILE_NAME: str = "flink-sql-history"


def _is_windows() -> bool:
    return platform.system().lower().startswith("windows")


def resolve_history_path(
    explicit: str | None,
    *,
    home: Path | None = None,
    is_windows: bool | None = None,
) -> Path:
    """Return the history file path.

    An explicit value always wins.  Otherwise the file lives in the
    user's home directory; Windows does not get the leading dot.
    """
    if explicit is not None:
        return Path(explicit)
    if home is None:
        home = Path.home()
    if is_windows is None:
        is_windows = _is_windows()
    return home / (WINDOWS_HISTORY_FILE_NAME if is_windows else HISTORY_FILE_NAME)


class ModeRunner:
    """Runs the mode selected by :class:`ExecutionOptions`.

    Parameters
    ----------
    cli_factory:
        Builds the scoped CLI resource for ``(handle, executor, history)``.
    read_script:
        Returns the full text behind a script locator.  May raise
        ``OSError`` or ``UnicodeDecodeError``.
    home, is_windows:
        Platform facts for history-path resolution; detected when omitted.
    """

    def __init__(
        self,
        cli_factory: CliResourceFactory,
        read_script: Callable[[str], str],
        *,
        home: Path | None = None,
        is_windows: bool | None = None,
    ) -> None:
        self._cli_factory = cli_factory
        self._read_script = read_script
        self._home = home
        self._is_windows = is_windows

    def history_path(self, options: ExecutionOptions) -> Path:
        return resolve_history_path(
            options.history_file_path,
            home=self._home,
            is_windows=self._is_windows,
        )

    def run(self, session: EmbeddedSession, options: ExecutionOptions) -> Outcome:
        """Run exactly one mode for *session*.

        Returns
        -------
        Outcome
            :class:`Success`, or :class:`Failure` carrying a
            :class:`~sql_client.exceptions.SqlClientError`.
        """
        history_file_path = self.history_path(options)

        conflicts = options.validate()
        if conflicts:
            return Failure(ConflictingOptionsError(conflicts[0]))

        try:
            with self._cli_factory(session.handle, session.executor, history_file_path) as cli:
                self._run_mode(cli, options)
        except SqlClientError as exc:
            return Failure(exc)
        return Success()

    # ------------------------------------------------------------------
    # Modes
    # ------------------------------------------------------------------

    def _run_mode(self, cli: CliResource, options: ExecutionOptions) -> None:
        if options.sql_file is not None:
            log.info("Executing SQL script %s", options.sql_file)
            cli.execute_file(self._load_script(options.sql_file))
        elif options.update_statement is not None:
            log.info("Submitting single update statement")
            if not cli.submit_update(options.update_statement):
                raise StatementSubmissionError(
                    "Could not submit given SQL update statement to cluster.",
                )
        else:
            cli.open()

    def _load_script(self, locator: str) -> str:
        try:
            return self._read_script(locator)
        except (OSError, UnicodeDecodeError) as exc:
            raise ScriptReadError(
                f"Fail to read content from the {locator}.",
            ) from exc
