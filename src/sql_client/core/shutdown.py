"""Shutdown coordination — close the session even on abrupt termination.

When the session opens, a :class:`SessionShutdownHook` holding only the
``(handle, executor)`` pair is added to the process-wide
:class:`ShutdownRegistry`.  The registry runs its hooks at interpreter
exit (``atexit``) and when the process receives ``SIGTERM`` or
``SIGHUP``.

The hook may race the normal teardown that runs after the mode runner
returns.  The race is accepted: both paths end in
``Executor.close_session``, which is idempotent.
"""

from __future__ import annotations

import atexit
import signal
import threading
from collections.abc import Callable
from types import FrameType

from sql_client.core.bootstrap import EmbeddedSession
from sql_client.utils.logging_config import get_logger

log = get_logger(__name__)

_TERMINATION_SIGNALS: tuple[str, ...] = ("SIGTERM", "SIGHUP")


def _no_notice(message: str) -> None:
    return None


class SessionShutdownHook:
    """Teardown action for one session.  Its body runs at most once."""

    def __init__(
        self,
        session: EmbeddedSession,
        *,
        notify: Callable[[str], None] | None = None,
    ) -> None:
        self._session = session
        self._notify: Callable[[str], None] = notify or _no_notice
        self._lock = threading.RLock()
        self._fired = False

    @property
    def session(self) -> EmbeddedSession:
        return self._session

    @property
    def fired(self) -> bool:
        return self._fired

    def __call__(self) -> None:
        with self._lock:
            if self._fired:
                return
            self._fired = True

        try:
            self._notify("\nShutting down the session...")
        finally:
            self._session.close()
        self._notify("done.")


class ShutdownRegistry:
    """Process-wide list of teardown actions.

    :meth:`install` wires the registry into the interpreter once; it is
    safe to call repeatedly.  Signal handlers can only be installed from
    the main thread, elsewhere only the ``atexit`` hook is registered.
    """

    def __init__(self) -> None:
        self._hooks: list[Callable[[], None]] = []
        self._lock = threading.RLock()
        self._installed = False

    def install(self) -> None:
        with self._lock:
            if self._installed:
                return
            self._installed = True

        atexit.register(self.run_hooks)
        if threading.current_thread() is not threading.main_thread():
            return
        for name in _TERMINATION_SIGNALS:
            signum = getattr(signal, name, None)
            if signum is not None:
                signal.signal(signum, self._handle_signal)

    def add(self, hook: Callable[[], None]) -> None:
        with self._lock:
            self._hooks.append(hook)

    def remove(self, hook: Callable[[], None]) -> None:
        with self._lock:
            if hook in self._hooks:
                self._hooks.remove(hook)

    def __len__(self) -> int:
        return len(self._hooks)

    def run_hooks(self) -> None:
        """Run every registered hook, most recent first."""
        with self._lock:
            hooks = list(reversed(self._hooks))
        for hook in hooks:
            try:
                hook()
            except Exception:
                # One broken hook must not keep the others from running.
                log.exception("Shutdown hook %r failed", hook)

    def _handle_signal(self, signum: int, frame: FrameType | None) -> None:
        log.warning("Received signal %s, shutting down", signum)
        self.run_hooks()
        raise SystemExit(128 + signum)


registry = ShutdownRegistry()
"""The registry shared by the whole process."""


class ShutdownCoordinator:
    """Registers a :class:`SessionShutdownHook` when a session opens."""

    def __init__(
        self,
        shutdown_registry: ShutdownRegistry | None = None,
        *,
        notify: Callable[[str], None] | None = None,
    ) -> None:
        self._registry = shutdown_registry if shutdown_registry is not None else registry
        self._notify = notify

    def register(self, session: EmbeddedSession) -> SessionShutdownHook:
        hook = SessionShutdownHook(session, notify=self._notify)
        self._registry.install()
        self._registry.add(hook)
        log.debug("Registered shutdown hook for session %s", session.handle)
        return hook
