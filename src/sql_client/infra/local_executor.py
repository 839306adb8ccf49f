"""SQLite-backed implementation of :class:`~sql_client.core.protocols.Executor`.

This module is the **only** place in the codebase that imports
``sqlite3``.  Each session gets its own connection; the database is
chosen by the ``sql-client.database`` configuration key and defaults to
a private in-memory database.

All ``sqlite3.Error`` exceptions are caught here and re-raised as
:class:`~sql_client.exceptions.SqlExecutionError`, so nothing raw escapes
the infrastructure boundary.
"""

from __future__ import annotations

import sqlite3
import threading
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from sql_client.core.models import EnvironmentConfig, SessionContext, SessionHandle, StatementResult
from sql_client.exceptions import SqlExecutionError
from sql_client.infra.environment import (
    DEFAULTS_ENV_FILE,
    load_flink_conf,
    locator_to_path,
    parse_environment,
    resolve_conf_dir,
)
from sql_client.utils.logging_config import get_logger

log = get_logger(__name__)

DATABASE_KEY: str = "sql-client.database"
IN_MEMORY_DATABASE: str = ":memory:"
DEPENDENCY_SUFFIX: str = ".jar"


@dataclass
class _LocalSession:
    context: SessionContext
    configuration: dict[str, Any]
    connection: sqlite3.Connection
    lock: threading.RLock = field(default_factory=threading.RLock)


class LocalExecutor:
    """Executor running every session in-process.

    Usage::

        executor = LocalExecutor(None, [], [])
        executor.start()
        handle = executor.open_session(SessionContext("default", EnvironmentConfig()))
        executor.execute_statement(handle, "SELECT 1")
        executor.close_session(handle)

    Parameters
    ----------
    defaults:
        Locator of the defaults environment file.  When ``None`` the
        ``sql-client-defaults.yaml`` of the configuration directory is
        used if it exists.
    jars:
        Dependency locators; each must point to an existing file.
    library_dirs:
        Directories searched (non-recursively) for ``*.jar`` dependencies.
    conf_dir:
        Distribution configuration directory; defaults to ``FLINK_CONF_DIR``.
    """

    def __init__(
        self,
        defaults: str | None,
        jars: Sequence[str],
        library_dirs: Sequence[str],
        *,
        conf_dir: Path | None = None,
    ) -> None:
        self._defaults_locator = defaults
        self._jars = tuple(jars)
        self._library_dirs = tuple(library_dirs)
        self._conf_dir = conf_dir if conf_dir is not None else resolve_conf_dir()

        self._lock = threading.RLock()
        self._sessions: dict[str, _LocalSession] = {}
        self._started = False
        self._base_configuration: dict[str, Any] = {}
        self._defaults: EnvironmentConfig = EnvironmentConfig.empty()
        self.dependencies: tuple[Path, ...] = ()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Resolve dependencies and load the base and default configuration."""
        self.dependencies = self._discover_dependencies()
        for dependency in self.dependencies:
            log.debug("Using dependency %s", dependency)

        self._base_configuration = load_flink_conf(self._conf_dir)
        defaults_locator = self._defaults_locator
        if defaults_locator is None and self._conf_dir is not None:
            candidate = self._conf_dir / DEFAULTS_ENV_FILE
            if candidate.is_file():
                defaults_locator = str(candidate)
        if defaults_locator is not None:
            log.info("Using default environment file: %s", defaults_locator)
            self._defaults = parse_environment(defaults_locator)
        self._started = True

    def _discover_dependencies(self) -> tuple[Path, ...]:
        dependencies: list[Path] = []
        for locator in self._jars:
            path = locator_to_path(locator)
            if path is None or not path.is_file():
                raise SqlExecutionError(
                    "Could not load all required JAR files.",
                    hint=f"'{locator}' is not a readable local file.",
                )
            dependencies.append(path.resolve())

        for locator in self._library_dirs:
            directory = locator_to_path(locator)
            if directory is None or not directory.is_dir():
                raise SqlExecutionError(
                    "Could not load all required JAR files.",
                    hint=f"Library directory '{locator}' does not exist.",
                )
            dependencies.extend(
                sorted(
                    entry.resolve()
                    for entry in directory.iterdir()
                    if entry.is_file() and entry.suffix == DEPENDENCY_SUFFIX
                )
            )
        return tuple(dependencies)

    # ------------------------------------------------------------------
    # Sessions
    # ------------------------------------------------------------------

    def open_session(self, context: SessionContext) -> SessionHandle:
        if not self._started:
            raise SqlExecutionError("The executor has not been started.")

        configuration: dict[str, Any] = dict(self._base_configuration)
        configuration.update(self._defaults.configuration)
        configuration.update(context.environment.configuration)
        database = str(configuration.get(DATABASE_KEY, IN_MEMORY_DATABASE))

        with self._lock:
            if context.session_id in self._sessions:
                raise SqlExecutionError(
                    "Found another session with the same session identifier: "
                    f"{context.session_id}",
                )
            try:
                connection = sqlite3.connect(
                    database,
                    check_same_thread=False,
                    isolation_level=None,
                )
            except sqlite3.Error as exc:
                raise SqlExecutionError(
                    f"Could not open database '{database}' for session {context.session_id}.",
                ) from exc
            self._sessions[context.session_id] = _LocalSession(
                context=context,
                configuration=configuration,
                connection=connection,
            )

        log.info("Opened local session %s on %s", context.session_id, database)
        return SessionHandle(context.session_id)

    def close_session(self, handle: SessionHandle) -> None:
        """Close *handle*; unknown or already-closed handles are ignored."""
        with self._lock:
            session = self._sessions.pop(handle, None)
        if session is None:
            log.debug("Session %s is already closed", handle)
            return

        with session.lock:
            try:
                session.connection.close()
            except sqlite3.Error:
                log.warning("Error while closing session %s", handle, exc_info=True)
        log.info("Closed session %s", handle)

    def _session(self, handle: SessionHandle) -> _LocalSession:
        with self._lock:
            session = self._sessions.get(handle)
        if session is None:
            raise SqlExecutionError(f"Invalid session identifier: {handle}")
        return session

    def is_open(self, handle: SessionHandle) -> bool:
        with self._lock:
            return handle in self._sessions

    def get_session_config(self, handle: SessionHandle) -> dict[str, Any]:
        return dict(self._session(handle).configuration)

    # ------------------------------------------------------------------
    # Statements
    # ------------------------------------------------------------------

    def execute_statement(self, handle: SessionHandle, statement: str) -> StatementResult:
        """Run *statement* in the session behind *handle*.

        Raises
        ------
        SqlExecutionError
            When the session does not exist or SQLite rejects the statement.
        """
        session = self._session(handle)
        with session.lock:
            try:
                cursor = session.connection.execute(statement)
                if cursor.description is None:
                    return StatementResult(affected_rows=cursor.rowcount)
                columns = tuple(column[0] for column in cursor.description)
                rows = tuple(tuple(row) for row in cursor.fetchall())
            except sqlite3.Error as exc:
                raise SqlExecutionError(str(exc)) from exc
        return StatementResult(columns=columns, rows=rows)
