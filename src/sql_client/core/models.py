"""Domain models for sql-client.

All models are **frozen** dataclasses — immutable value objects with no
behaviour beyond data access and pure derivations.  They carry zero I/O
and no dependencies on external packages.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, NewType, Union

from sql_client.exceptions import SqlClientError

SessionHandle = NewType("SessionHandle", str)
"""Opaque identifier returned by the executor when a session is opened."""

MODE_EMBEDDED: str = "embedded"
MODE_GATEWAY: str = "gateway"

DEFAULT_SESSION_ID: str = "default"

FILE_FLAGS: tuple[str, str] = ("-f", "--file")
UPDATE_FLAGS: tuple[str, str] = ("-u", "--update")


# ---------------------------------------------------------------------------
# Option validation
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class OptionConflict:
    """Two options that were given together but exclude each other."""

    first: tuple[str, str]
    """``(short, long)`` flags of the first option."""

    second: tuple[str, str]
    """``(short, long)`` flags of the second option."""

    preferred: tuple[str, str]
    """The option users should keep."""

    deprecated: tuple[str, str]
    """The option that is on its way out."""

    @property
    def message(self) -> str:
        return f"Please use either option {self.first[1]} or {self.second[1]}."

    @property
    def hint(self) -> str:
        return (
            f"The option {self.deprecated[0]} is deprecated and it's suggested "
            f"to use {self.preferred[0]} instead."
        )


# ---------------------------------------------------------------------------
# Command-line options
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class ExecutionOptions:
    """Everything the command line selected, built once and never mutated."""

    mode: str = MODE_EMBEDDED
    is_print_help: bool = False
    session_id: str | None = None
    environment: str | None = None
    """Locator (path or URL) of the session environment file."""

    defaults: str | None = None
    """Locator of the defaults environment file used by the executor."""

    jars: tuple[str, ...] | None = None
    library_dirs: tuple[str, ...] | None = None
    python_configuration: Mapping[str, str] = field(default_factory=dict)
    """Override configuration contributed by the Python bridge flags."""

    history_file_path: str | None = None
    sql_file: str | None = None
    update_statement: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(
            self,
            "python_configuration",
            MappingProxyType(dict(self.python_configuration)),
        )

    def validate(self) -> tuple[OptionConflict, ...]:
        """Return every mutual-exclusion violation; empty when consistent."""
        conflicts: list[OptionConflict] = []
        if self.sql_file is not None and self.update_statement is not None:
            conflicts.append(
                OptionConflict(
                    first=FILE_FLAGS,
                    second=UPDATE_FLAGS,
                    preferred=FILE_FLAGS,
                    deprecated=UPDATE_FLAGS,
                )
            )
        return tuple(conflicts)


# ---------------------------------------------------------------------------
# Session environment
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class EnvironmentConfig:
    """Session environment: ordered configuration plus pass-through sections.

    ``configuration`` is the key/value map that overrides are merged
    into.  ``sections`` keeps every other top-level entry of the
    environment file (``execution``, ``tables``, …) for the executor.
    """

    configuration: Mapping[str, Any] = field(default_factory=dict)
    sections: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def empty(cls) -> EnvironmentConfig:
        return cls()

    def get_configuration(self) -> dict[str, Any]:
        """Return a mutable copy of the configuration map."""
        return dict(self.configuration)

    def with_configuration(self, configuration: Mapping[str, Any]) -> EnvironmentConfig:
        """Return a copy whose configuration map is replaced by *configuration*."""
        return EnvironmentConfig(configuration=dict(configuration), sections=self.sections)

    def merged(self, overrides: Mapping[str, Any]) -> EnvironmentConfig:
        """Merge *overrides* on top of this configuration; overrides win."""
        combined = self.get_configuration()
        combined.update(overrides)
        return self.with_configuration(combined)


@dataclass(frozen=True, slots=True)
class SessionContext:
    """What the executor needs to open a session."""

    session_id: str
    environment: EnvironmentConfig


# ---------------------------------------------------------------------------
# Statement results
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class StatementResult:
    """Outcome of a single executed statement."""

    columns: tuple[str, ...] = ()
    rows: tuple[tuple[Any, ...], ...] = ()
    affected_rows: int = -1
    """Rows changed by DML, ``-1`` when the backend does not report it."""

    @property
    def is_query(self) -> bool:
        return len(self.columns) > 0

    def __len__(self) -> int:
        return len(self.rows)


# ---------------------------------------------------------------------------
# Layer results
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class Success:
    """The layer finished its work."""


@dataclass(frozen=True, slots=True)
class Failure:
    """The layer stopped on an expected, user-facing error."""

    error: SqlClientError


Outcome = Union[Success, Failure]
