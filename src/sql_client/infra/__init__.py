"""Infrastructure layer — external system integration.

This layer wraps all interaction with the filesystem, URLs, YAML
environment files and the SQLite database.  Every raw third-party or
standard-library exception must be caught here and re-raised as a
:class:`~sql_client.exceptions.SqlClientError` subclass.

Rules
-----
* No imports from ``cli``.
* No user-facing output (no ``print()``, no Rich rendering).
* Must expose clean, typed interfaces consumed by the core layer.
"""

from sql_client.infra.environment import (
    load_flink_conf,
    locator_to_path,
    parse_environment,
    read_locator,
    resolve_conf_dir,
)
from sql_client.infra.local_executor import LocalExecutor

__all__: list[str] = [
    "LocalExecutor",
    "load_flink_conf",
    "locator_to_path",
    "parse_environment",
    "read_locator",
    "resolve_conf_dir",
]
