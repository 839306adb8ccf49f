"""Process-wide logging setup.

Logging is configured once, lazily, the first time a module asks for a
logger.  Records go to a Rich handler on stderr (plain stderr lines when
Rich is not installed), or to a plain file when ``SQL_CLIENT_LOG_FILE``
is set so the interactive terminal stays clean.

Environment overrides:

* ``SQL_CLIENT_LOG_LEVEL`` — level name, default ``WARNING``.
* ``SQL_CLIENT_LOG_FILE`` — path of a log file.
"""

from __future__ import annotations

import logging
import os

_DEFAULT_LEVEL = "WARNING"
_FILE_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
_DATEFMT = "%Y-%m-%d %H:%M:%S"
_ROOT_LOGGER = "sql_client"
_configured = False


def _build_handler(log_file: str | None) -> logging.Handler:
    if log_file:
        handler: logging.Handler = logging.FileHandler(log_file, encoding="utf-8")
        handler.setFormatter(logging.Formatter(_FILE_FORMAT, datefmt=_DATEFMT))
        return handler

    try:
        from rich.console import Console
        from rich.logging import RichHandler
    except ModuleNotFoundError:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(_FILE_FORMAT, datefmt=_DATEFMT))
        return handler

    return RichHandler(
        console=Console(stderr=True),
        show_path=False,
        rich_tracebacks=True,
    )


def configure_logging(
    level: str | int | None = None,
    log_file: str | None = None,
    *,
    force: bool = False,
) -> None:
    """Attach the sql-client handler to the package logger.

    Only the ``sql_client`` logger is touched; the root logger and
    third-party loggers keep whatever the host process configured.
    Repeated calls are no-ops unless *force* is set.
    """
    global _configured

    if _configured and not force:
        return

    if level is None:
        level = os.getenv("SQL_CLIENT_LOG_LEVEL", _DEFAULT_LEVEL)
    if isinstance(level, str):
        level = level.upper()
    if log_file is None:
        log_file = os.getenv("SQL_CLIENT_LOG_FILE")

    logger = logging.getLogger(_ROOT_LOGGER)
    for existing in list(logger.handlers):
        logger.removeHandler(existing)
    logger.addHandler(_build_handler(log_file))
    logger.setLevel(level)
    logger.propagate = False
    _configured = True


def get_logger(name: str) -> logging.Logger:
    """Return a module-scoped logger."""
    configure_logging()
    return logging.getLogger(name)
