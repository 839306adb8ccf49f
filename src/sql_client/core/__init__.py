"""Core / service layer — session lifecycle and mode selection.

Rules
-----
* No ``print()`` calls; notices go through injected callbacks.
* No imports from ``cli`` or ``infra``.
* Collaborators are reached only through :mod:`sql_client.core.protocols`.
"""

from sql_client.core.bootstrap import EmbeddedSession, SessionBootstrapper
from sql_client.core.mode_runner import ModeRunner, resolve_history_path
from sql_client.core.models import (
    EnvironmentConfig,
    ExecutionOptions,
    Failure,
    OptionConflict,
    Outcome,
    SessionContext,
    SessionHandle,
    StatementResult,
    Success,
)
from sql_client.core.protocols import CliResource, EnvironmentParser, Executor
from sql_client.core.shutdown import SessionShutdownHook, ShutdownCoordinator, ShutdownRegistry

__all__: list[str] = [
    "CliResource",
    "EmbeddedSession",
    "EnvironmentConfig",
    "EnvironmentParser",
    "ExecutionOptions",
    "Executor",
    "Failure",
    "ModeRunner",
    "OptionConflict",
    "Outcome",
    "SessionBootstrapper",
    "SessionContext",
    "SessionHandle",
    "SessionShutdownHook",
    "ShutdownCoordinator",
    "ShutdownRegistry",
    "StatementResult",
    "Success",
    "resolve_history_path",
]
