import pytest

from barberpro.core.errors import BackendUnavailableError, MissingDependencyError, SqlExecutionError
from barberpro.services.health_check import check_health
from barberpro.services.migrator import (
    BUNDLED_SQL,
    MigrationResult,
    apply_migration,
    load_migration_sql,
    split_statements,
)
from conftest import sqlite_setup_sql

pytestmark = pytest.mark.unit


class ScriptedBackend:
    """Records statements and fails the ones listed in ``failures``."""

    def __init__(self, failures=None):
        self.failures = failures or {}
        self.executed = []

    def exec_sql(self, statement):
        self.executed.append(statement)
        error = self.failures.get(len(self.executed))
        if error is not None:
            raise error


SCRIPT = """
-- first a table
CREATE TABLE a (id INT);

CREATE TABLE b (
    id INT
);
-- a function with semicolons in its body
CREATE OR REPLACE FUNCTION f()
RETURNS trigger AS $$
BEGIN
    INSERT INTO a VALUES (1);
    RETURN NEW;
END;
$$ LANGUAGE plpgsql;
INSERT INTO a VALUES (2);
SELECT 1
"""


def test_split_statements_keeps_order_and_count():
    statements = split_statements(SCRIPT)

    assert len(statements) == 5
    assert statements[0] == "CREATE TABLE a (id INT);"
    assert statements[1].startswith("CREATE TABLE b (")
    assert statements[2].startswith("CREATE OR REPLACE FUNCTION f()")
    assert statements[2].endswith("$$ LANGUAGE plpgsql;")
    assert "RETURN NEW;" in statements[2]
    assert statements[3] == "INSERT INTO a VALUES (2);"
    # unterminated trailing statement is kept
    assert statements[4] == "SELECT 1"


def test_split_statements_drops_comments_and_blank_lines():
    assert split_statements("-- only a comment\n\n   \n") == []


def test_bundled_script_splits_into_statements():
    statements = split_statements(load_migration_sql(str(BUNDLED_SQL)))

    assert statements[0] == 'CREATE EXTENSION IF NOT EXISTS "pgcrypto";'
    assert sum(s.startswith("CREATE TABLE IF NOT EXISTS") for s in statements) == 6
    function = [s for s in statements if "handle_new_user()" in s and s.startswith("CREATE OR REPLACE")]
    assert len(function) == 1
    assert function[0].rstrip().endswith("SET search_path = public;")
    assert statements[-1].endswith("ON CONFLICT (barbershop_id, name) DO NOTHING;")


def test_load_migration_sql_missing_file(tmp_path):
    with pytest.raises(MissingDependencyError):
        load_migration_sql(str(tmp_path / "nope.sql"))


def test_already_exists_is_skipped():
    backend = ScriptedBackend({1: SqlExecutionError('relation "a" already exists')})

    result = apply_migration(backend, "CREATE TABLE a (id INT);\nCREATE TABLE b (id INT);", pause=0)

    assert result.applied_count == 1
    assert result.skipped_count == 1
    assert result.error_count == 0
    assert result.succeeded


def test_duplicate_key_is_skipped():
    backend = ScriptedBackend({1: SqlExecutionError("duplicate key value violates unique constraint")})

    result = apply_migration(backend, "INSERT INTO a VALUES (1);", pause=0)

    assert result.skipped_count == 1
    assert result.succeeded


def test_error_halts_without_force():
    backend = ScriptedBackend({2: SqlExecutionError("syntax error at or near")})
    sql = "SELECT 1;\nSELECT 2;\nSELECT 3;\nSELECT 4;"

    result = apply_migration(backend, sql, pause=0)

    assert len(backend.executed) == 2
    assert result.halted
    assert result.applied_count == 1
    assert result.error_count == 1
    assert not result.succeeded


def test_force_continues_past_errors():
    backend = ScriptedBackend({2: SqlExecutionError("syntax error at or near")})
    sql = "SELECT 1;\nSELECT 2;\nSELECT 3;\nSELECT 4;"

    result = apply_migration(backend, sql, force=True, pause=0)

    assert len(backend.executed) == 4
    assert result.applied_count == 3
    assert result.error_count == 1
    assert result.succeeded


def test_connectivity_failure_always_halts():
    backend = ScriptedBackend({1: BackendUnavailableError("could not connect to server")})

    result = apply_migration(backend, "SELECT 1;\nSELECT 2;", force=True, pause=0)

    assert len(backend.executed) == 1
    assert result.halted
    assert not result.succeeded


def test_forced_run_fails_when_half_the_statements_fail():
    assert not MigrationResult(applied_count=1, error_count=1, total=2).succeeded
    assert MigrationResult(applied_count=2, error_count=1, total=3).succeeded


def test_empty_database_migrates_to_healthy(empty_backend, empty_engine):
    before = check_health(empty_backend)
    assert len(before.issues) == 8
    assert set(before.missing_tables) == {
        "barbershops", "profiles", "barbers", "services", "appointments", "working_hours",
    }

    result = apply_migration(empty_backend, sqlite_setup_sql(empty_engine), pause=0)
    assert result.error_count == 0
    assert result.applied_count == result.total == 10

    after = check_health(empty_backend)
    assert after.issues == []
