"""Custom exception hierarchy for sql-client.

Every expected, user-facing failure is a :class:`SqlClientError`.
Raw collaborator exceptions (``OSError``, ``yaml.YAMLError``,
``sqlite3.Error``) must NEVER propagate beyond the infrastructure layer:
they are caught at the call site and re-raised as a typed subclass
defined here, with the original exception chained as ``__cause__``.

Anything that is *not* a :class:`SqlClientError` when it reaches the
CLI error boundary is treated as a defect and wrapped in
:class:`UnexpectedError`.

Hierarchy
---------
SqlClientError
├── InvalidOptionsError
├── ConflictingOptionsError
├── UnsupportedModeError
├── EnvironmentReadError
├── ScriptReadError
├── SqlExecutionError
├── StatementSubmissionError
├── MissingDependencyError
└── UnexpectedError
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from sql_client.core.models import OptionConflict


class SqlClientError(Exception):
    """Base exception for all sql-client errors.

    Every user-visible error condition must map to a subclass of this
    exception so that the CLI error boundary can render a clean message
    without leaking internal stack traces.
    """

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint: str | None = hint
        """Optional actionable guidance shown below the error message."""


# --- Command line ----------------------------------------------------------

class InvalidOptionsError(SqlClientError):
    """Raised when the command line cannot be parsed."""


class ConflictingOptionsError(SqlClientError):
    """Raised when mutually exclusive options are given together."""

    def __init__(self, conflict: OptionConflict) -> None:
        super().__init__(conflict.message, hint=conflict.hint)
        self.conflict: OptionConflict = conflict


class UnsupportedModeError(SqlClientError):
    """Raised for execution modes that exist on the command line only."""


# --- Session environment ---------------------------------------------------

class EnvironmentReadError(SqlClientError):
    """Raised when a session environment file cannot be read or parsed."""


# --- Statement execution ---------------------------------------------------

class ScriptReadError(SqlClientError):
    """Raised when the SQL script given with ``--file`` cannot be read."""


class SqlExecutionError(SqlClientError):
    """Raised by the executor when a statement or session call fails."""


class StatementSubmissionError(SqlClientError):
    """Raised when a single update statement was not accepted."""


# --- Environment / tooling -------------------------------------------------

class MissingDependencyError(SqlClientError):
    """Raised when a required runtime dependency is not available."""


class UnexpectedError(SqlClientError):
    """Wraps a defect that escaped every typed error path."""

    MESSAGE: str = (
        "Unexpected exception. This is a bug. Please consider filing an issue."
    )

    def __init__(self) -> None:
        super().__init__(self.MESSAGE)
