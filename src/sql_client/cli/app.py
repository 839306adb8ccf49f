"""CLI application entry point and mode dispatch for sql-client.

This module is the **sole error boundary** for the entire application.
Every layer below returns an :data:`~sql_client.core.models.Outcome`;
:func:`main` is the single place that logs failures, classifies them as
client errors or defects, and translates them into process exit codes.

Architecture notes
------------------
* No business logic lives here. Session work is delegated to the core
  layer, I/O to the infrastructure layer.
* :func:`dispatch` routes on the first argument only:
  ``embedded`` runs a session, ``gateway`` is rejected, anything else
  prints usage.
"""

from __future__ import annotations

import sys
from collections.abc import Sequence

from sql_client.cli import exit_codes
from sql_client.cli.client import CliClient
from sql_client.cli.console import console, escape_markup
from sql_client.cli.options import parse_embedded_options, print_help_client, print_help_embedded
from sql_client.core.bootstrap import SessionBootstrapper
from sql_client.core.mode_runner import ModeRunner
from sql_client.core.models import (
    MODE_EMBEDDED,
    MODE_GATEWAY,
    ExecutionOptions,
    Failure,
    Outcome,
    Success,
)
from sql_client.core.shutdown import ShutdownCoordinator
from sql_client.core.shutdown import registry as shutdown_registry
from sql_client.exceptions import (
    ConflictingOptionsError,
    SqlClientError,
    UnexpectedError,
    UnsupportedModeError,
)
from sql_client.infra.environment import parse_environment, read_locator
from sql_client.infra.local_executor import LocalExecutor
from sql_client.utils.logging_config import get_logger

log = get_logger(__name__)


# ---------------------------------------------------------------------------
# Embedded mode
# ---------------------------------------------------------------------------

def _run_embedded(options: ExecutionOptions) -> Outcome:
    """Bootstrap the session, run the selected mode, close the session.

    Flow:
    1. Reject conflicting options before anything is started.
    2. Start the executor and open the session.
    3. Register the shutdown hook for abrupt termination.
    4. Run exactly one mode.
    5. Close the session, whatever happened in 4.
    """
    conflicts = options.validate()
    if conflicts:
        return Failure(ConflictingOptionsError(conflicts[0]))

    bootstrapper = SessionBootstrapper(
        LocalExecutor,
        parse_environment,
        notify=console.notice,
    )
    try:
        session = bootstrapper.bootstrap(options)
    except SqlClientError as exc:
        return Failure(exc)

    try:
        ShutdownCoordinator(shutdown_registry, notify=console.notice).register(session)
        return ModeRunner(CliClient, read_locator).run(session, options)
    finally:
        session.close()


# ---------------------------------------------------------------------------
# Dispatch
# ---------------------------------------------------------------------------

def dispatch(args: Sequence[str]) -> Outcome:
    """Route *args* to the mode named by their first element."""
    if len(args) < 1:
        print_help_client()
        return Success()

    mode, mode_args = args[0], args[1:]

    if mode == MODE_EMBEDDED:
        try:
            options = parse_embedded_options(mode_args)
        except SqlClientError as exc:
            return Failure(exc)
        if options.is_print_help:
            print_help_embedded()
            return Success()
        return _run_embedded(options)

    if mode == MODE_GATEWAY:
        return Failure(UnsupportedModeError("Gateway mode is not supported yet."))

    print_help_client()
    return Success()


# ---------------------------------------------------------------------------
# Failure reporting
# ---------------------------------------------------------------------------

def _make_space() -> None:
    console.notice("")
    console.notice("")


def _render(error: SqlClientError) -> None:
    console.print(f"[bold red]Error:[/bold red] {escape_markup(str(error))}")
    if error.hint:
        console.print(f"[yellow]Hint:[/yellow] {escape_markup(error.hint)}")
    cause = error.__cause__
    if cause is not None:
        console.notice(f"Caused by: {type(cause).__name__}: {cause}")


def report_failure(error: SqlClientError) -> int:
    """Log and render an expected client error; return its exit code."""
    _make_space()
    log.error("SQL Client must stop. %s", error)
    log.debug("Failure details", exc_info=error)
    _render(error)
    return exit_codes.GENERAL_ERROR


def report_unexpected(exc: Exception) -> int:
    """Log and render a defect; return its exit code."""
    _make_space()
    log.error("SQL Client must stop. %s", UnexpectedError.MESSAGE, exc_info=exc)
    wrapped = UnexpectedError()
    wrapped.__cause__ = exc
    _render(wrapped)
    return exit_codes.UNEXPECTED_ERROR


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------

def main(argv: list[str] | None = None) -> int:
    """Run the sql-client CLI.

    Parameters
    ----------
    argv:
        Explicit argument list.  When ``None`` (default), ``sys.argv[1:]``
        is used.  Accepting *argv* enables deterministic testing without
        monkeypatching.

    Returns
    -------
    int
        OS process exit code.
    """
    args = sys.argv[1:] if argv is None else list(argv)

    try:
        outcome = dispatch(args)
    except Exception as exc:  # noqa: BLE001
        return report_unexpected(exc)

    if isinstance(outcome, Failure):
        return report_failure(outcome.error)
    return exit_codes.SUCCESS


# ---------------------------------------------------------------------------
# Script-level error boundary
# ---------------------------------------------------------------------------

def cli() -> None:
    """Top-level entry invoked by the console-script entry point.

    Wraps :func:`main` and guarantees the process never exits with a raw
    stack trace during normal usage.
    """
    try:
        code = main()
    except KeyboardInterrupt:
        console.print("\n[yellow]Aborted by user.[/yellow]")
        sys.exit(exit_codes.KEYBOARD_INTERRUPT)
    sys.exit(code)
