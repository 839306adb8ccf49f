"""Protocols (interfaces) consumed by the core layer.

These define the contracts that infrastructure adapters and the CLI
resource must satisfy.  Core code depends ONLY on these protocols —
never on concrete implementations — preserving the dependency
inversion principle.
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import Any, Protocol

from sql_client.core.models import EnvironmentConfig, SessionContext, SessionHandle, StatementResult


class Executor(Protocol):
    """Contract for the backend that owns sessions and runs statements.

    Implementations must map all backend-specific exceptions to
    :class:`~sql_client.exceptions.SqlExecutionError`.
    """

    def start(self) -> None:
        """Bring the backend up.  Called exactly once, never retried."""
        ...  # pragma: no cover

    def open_session(self, context: SessionContext) -> SessionHandle:
        """Open a session for *context* and return its handle.

        Raises
        ------
        SqlExecutionError
            When a session with the same identifier is already open.
        """
        ...  # pragma: no cover

    def close_session(self, handle: SessionHandle) -> None:
        """Close the session behind *handle*.

        Must be idempotent and safe when invoked concurrently from the
        main thread and the termination hook: closing an unknown or
        already-closed handle is a no-op.
        """
        ...  # pragma: no cover

    def execute_statement(self, handle: SessionHandle, statement: str) -> StatementResult:
        """Run one SQL statement inside the session."""
        ...  # pragma: no cover

    def get_session_config(self, handle: SessionHandle) -> dict[str, Any]:
        """Return the effective configuration of the session."""
        ...  # pragma: no cover


class ExecutorFactory(Protocol):
    """Builds an executor from the defaults file, jars and library dirs."""

    def __call__(
        self,
        defaults: str | None,
        jars: Sequence[str],
        library_dirs: Sequence[str],
    ) -> Executor:
        ...  # pragma: no cover


class EnvironmentParser(Protocol):
    """Parses an environment-file locator into an :class:`EnvironmentConfig`.

    Raises
    ------
    EnvironmentReadError
        When the file cannot be read or is not a valid environment.
    """

    def __call__(self, locator: str) -> EnvironmentConfig:
        ...  # pragma: no cover


class CliResource(Protocol):
    """The scoped CLI resource bound to one session for one invocation.

    Used as a context manager: ``__exit__`` calls :meth:`close`.
    """

    def open(self) -> None:
        """Run the interactive read-evaluate loop until the user quits."""
        ...  # pragma: no cover

    def execute_file(self, content: str) -> None:
        """Execute every statement of *content* in order."""
        ...  # pragma: no cover

    def submit_update(self, statement: str) -> bool:
        """Submit a single update statement; ``False`` when not accepted."""
        ...  # pragma: no cover

    def close(self) -> None:
        ...  # pragma: no cover

    def __enter__(self) -> CliResource:
        ...  # pragma: no cover

    def __exit__(self, *exc_info: object) -> None:
        ...  # pragma: no cover


class CliResourceFactory(Protocol):
    """Builds the scoped CLI resource for ``(handle, executor, history path)``."""

    def __call__(
        self,
        handle: SessionHandle,
        executor: Executor,
        history_file_path: Path,
    ) -> CliResource:
        ...  # pragma: no cover
