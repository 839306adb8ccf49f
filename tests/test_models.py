"""Tests for domain models (core/models.py).

All models are frozen dataclasses — these tests verify immutability,
option validation, and environment merging.
"""

from __future__ import annotations

import dataclasses

import pytest

from sql_client.core.models import (
    FILE_FLAGS,
    UPDATE_FLAGS,
    EnvironmentConfig,
    ExecutionOptions,
    Failure,
    SessionContext,
    StatementResult,
    Success,
)
from sql_client.exceptions import SqlClientError


def _make_options(**overrides: object) -> ExecutionOptions:
    return ExecutionOptions(**overrides)  # type: ignore[arg-type]


# ---------------------------------------------------------------------------
# ExecutionOptions
# ---------------------------------------------------------------------------

class TestExecutionOptions:
    def test_defaults(self) -> None:
        options = _make_options()
        assert options.mode == "embedded"
        assert options.is_print_help is False
        assert options.jars is None
        assert options.library_dirs is None
        assert dict(options.python_configuration) == {}

    def test_frozen(self) -> None:
        options = _make_options()
        with pytest.raises(dataclasses.FrozenInstanceError):
            options.sql_file = "a.sql"  # type: ignore[misc]

    def test_python_configuration_is_read_only(self) -> None:
        source = {"python.files": "a.py"}
        options = _make_options(python_configuration=source)

        with pytest.raises(TypeError):
            options.python_configuration["python.files"] = "b.py"  # type: ignore[index]
        source["python.files"] = "c.py"

        assert options.python_configuration == {"python.files": "a.py"}

    def test_no_conflict_with_file_only(self) -> None:
        assert _make_options(sql_file="a.sql").validate() == ()

    def test_no_conflict_with_update_only(self) -> None:
        assert _make_options(update_statement="INSERT INTO t VALUES (1)").validate() == ()

    def test_file_and_update_conflict(self) -> None:
        conflicts = _make_options(sql_file="a.sql", update_statement="X").validate()
        assert len(conflicts) == 1
        conflict = conflicts[0]
        assert conflict.first == FILE_FLAGS
        assert conflict.second == UPDATE_FLAGS
        assert conflict.preferred == FILE_FLAGS
        assert conflict.deprecated == UPDATE_FLAGS

    def test_conflict_message_names_both_options(self) -> None:
        conflict = _make_options(sql_file="a.sql", update_statement="X").validate()[0]
        assert "--file" in conflict.message
        assert "--update" in conflict.message

    def test_conflict_hint_recommends_file(self) -> None:
        conflict = _make_options(sql_file="a.sql", update_statement="X").validate()[0]
        assert "-u is deprecated" in conflict.hint
        assert "use -f instead" in conflict.hint


# ---------------------------------------------------------------------------
# EnvironmentConfig
# ---------------------------------------------------------------------------

class TestEnvironmentConfig:
    def test_empty(self) -> None:
        env = EnvironmentConfig.empty()
        assert dict(env.configuration) == {}
        assert dict(env.sections) == {}

    def test_merge_into_empty_equals_overrides(self) -> None:
        merged = EnvironmentConfig.empty().merged({"python.files": "a.py"})
        assert merged.get_configuration() == {"python.files": "a.py"}

    def test_override_wins_on_conflict(self) -> None:
        base = EnvironmentConfig(configuration={"k": "base", "only.base": "1"})
        merged = base.merged({"k": "override"})
        assert merged.configuration["k"] == "override"
        assert merged.configuration["only.base"] == "1"

    def test_merge_keeps_base_order(self) -> None:
        base = EnvironmentConfig(configuration={"a": 1, "b": 2})
        merged = base.merged({"c": 3, "a": 9})
        assert list(merged.configuration) == ["a", "b", "c"]

    def test_merge_does_not_mutate_base(self) -> None:
        base = EnvironmentConfig(configuration={"k": "base"})
        base.merged({"k": "override"})
        assert base.configuration["k"] == "base"

    def test_merge_keeps_sections(self) -> None:
        base = EnvironmentConfig(sections={"execution": {"parallelism": 1}})
        assert base.merged({"a": 1}).sections == {"execution": {"parallelism": 1}}

    def test_get_configuration_is_a_copy(self) -> None:
        env = EnvironmentConfig(configuration={"k": "v"})
        copy = env.get_configuration()
        copy["k"] = "changed"
        assert env.configuration["k"] == "v"


# ---------------------------------------------------------------------------
# Small value objects
# ---------------------------------------------------------------------------

class TestValueObjects:
    def test_session_context_equality(self) -> None:
        env = EnvironmentConfig.empty()
        assert SessionContext("s", env) == SessionContext("s", env)

    def test_statement_result_query(self) -> None:
        result = StatementResult(columns=("a",), rows=((1,), (2,)))
        assert result.is_query
        assert len(result) == 2

    def test_statement_result_update(self) -> None:
        result = StatementResult(affected_rows=3)
        assert not result.is_query
        assert len(result) == 0

    def test_outcomes(self) -> None:
        error = SqlClientError("boom")
        assert Failure(error).error is error
        assert Success() == Success()
