"""Shared pytest fixtures and configuration for the sql-client test suite.

Guidelines
----------
* No network access in any test.
* The executor is mocked at the core boundary, or the real
  :class:`LocalExecutor` runs on an in-memory SQLite database.
* No test installs real signal handlers or ``atexit`` hooks.
* Tests must not depend on the user's home directory.
"""

from __future__ import annotations

from typing import Any
from unittest.mock import MagicMock

import pytest

from sql_client.core.bootstrap import EmbeddedSession
from sql_client.core.models import SessionHandle, StatementResult
from sql_client.core.shutdown import ShutdownRegistry


@pytest.fixture
def executor() -> MagicMock:
    """A mock executor whose ``open_session`` echoes the session id."""
    mock = MagicMock()
    mock.open_session.side_effect = lambda context: SessionHandle(context.session_id)
    mock.execute_statement.return_value = StatementResult(affected_rows=1)
    mock.get_session_config.return_value = {}
    return mock


@pytest.fixture
def session(executor: MagicMock) -> EmbeddedSession:
    return EmbeddedSession(handle=SessionHandle("default"), executor=executor)


@pytest.fixture
def isolated_registry(monkeypatch: pytest.MonkeyPatch) -> ShutdownRegistry:
    """A shutdown registry that never touches ``atexit`` or signals."""
    registry = ShutdownRegistry()
    monkeypatch.setattr(registry, "install", lambda: None)
    from sql_client.cli import app as app_module

    monkeypatch.setattr(app_module, "shutdown_registry", registry)
    return registry


def make_cli_factory(cli: Any) -> MagicMock:
    """Return a CLI-resource factory whose context manager yields *cli*."""
    factory = MagicMock()
    factory.return_value.__enter__.return_value = cli
    return factory
