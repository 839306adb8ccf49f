"""Session bootstrap — start the executor and open the one session.

The bootstrapper owns the ``unopened → open`` transition of the session
state machine.  It is called once per process and nothing in it is
retried: any failure aborts the invocation.

Guarantees
----------
* No ``print()`` — user-facing notices go through the injected
  ``notify`` callback.
* Downstream code never sees ``None`` for the jar or library lists.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from sql_client.core.models import (
    DEFAULT_SESSION_ID,
    EnvironmentConfig,
    ExecutionOptions,
    SessionContext,
    SessionHandle,
)
from sql_client.core.protocols import EnvironmentParser, Executor, ExecutorFactory
from sql_client.exceptions import EnvironmentReadError
from sql_client.utils.logging_config import get_logger

log = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class EmbeddedSession:
    """An open session: the handle plus the executor that owns it.

    This pair is the only state shared between the main thread and the
    termination hook.
    """

    handle: SessionHandle
    executor: Executor

    def close(self) -> None:
        """Close the session.  Safe to call more than once."""
        self.executor.close_session(self.handle)


def _no_notice(message: str) -> None:
    return None


class SessionBootstrapper:
    """Starts the backend executor and opens a session.

    Parameters
    ----------
    executor_factory:
        Builds the executor from ``(defaults, jars, library_dirs)``.
    environment_parser:
        Parses a session environment file locator.
    notify:
        Receives short user-facing notices.  May be omitted.
    """

    def __init__(
        self,
        executor_factory: ExecutorFactory,
        environment_parser: EnvironmentParser,
        *,
        notify: Callable[[str], None] | None = None,
    ) -> None:
        self._executor_factory = executor_factory
        self._environment_parser = environment_parser
        self._notify: Callable[[str], None] = notify or _no_notice

    def bootstrap(self, options: ExecutionOptions) -> EmbeddedSession:
        """Start the executor and open the session described by *options*.

        Raises
        ------
        EnvironmentReadError
            When the session environment file cannot be read.
        SqlExecutionError
            When the executor refuses to start or to open the session.
        """
        jars = tuple(options.jars) if options.jars is not None else ()
        library_dirs = tuple(options.library_dirs) if options.library_dirs is not None else ()

        executor = self._executor_factory(options.defaults, jars, library_dirs)
        executor.start()

        environment = self.read_session_environment(options.environment)
        environment = environment.merged(options.python_configuration)

        session_id = options.session_id if options.session_id is not None else DEFAULT_SESSION_ID
        handle = executor.open_session(SessionContext(session_id, environment))
        log.info("Opened session %s", handle)
        return EmbeddedSession(handle=handle, executor=executor)

    def read_session_environment(self, locator: str | None) -> EnvironmentConfig:
        """Parse the session environment, or return an empty one."""
        if locator is None:
            self._notify("No session environment specified.")
            return EnvironmentConfig.empty()

        self._notify(f"Reading session environment from: {locator}")
        log.info("Using session environment file: %s", locator)
        try:
            return self._environment_parser(locator)
        except OSError as exc:
            raise EnvironmentReadError(
                f"Could not read session environment file at: {locator}",
            ) from exc
