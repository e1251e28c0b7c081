"""
Schema migration engine: idempotence, version tracking, ordering and the
failure path (rollback, abort, retry).
"""

import pytest
from sqlalchemy import text

from butchercalc.database import Database
from butchercalc.errors import ErrorCode, MigrationError
from butchercalc.migrations import (MIGRATIONS, Migration, get_applied_migrations,
                                    get_current_schema_version, get_pending_migrations,
                                    get_total_migrations, run_migrations)

EXPECTED_TABLES = {
    "categories", "source_materials", "recipes", "recipe_ingredients",
    "packaging_materials", "recipe_packaging", "settings", "price_history",
    "schema_migrations",
}


def table_names(database):
    with database.connect() as conn:
        rows = conn.execute(text("SELECT name FROM sqlite_master WHERE type = 'table'"))
        return {row[0] for row in rows}


@pytest.fixture
def empty_database(db_path):
    database = Database(db_path).open()
    yield database
    database.close()


def create_widgets(conn):
    conn.exec_driver_sql("CREATE TABLE widgets (id INTEGER PRIMARY KEY)")


def create_gadgets_then_fail(conn):
    conn.exec_driver_sql("CREATE TABLE gadgets (id INTEGER PRIMARY KEY)")
    conn.exec_driver_sql("INSERT INTO no_such_table VALUES (1)")


def create_gadgets(conn):
    conn.exec_driver_sql("CREATE TABLE gadgets (id INTEGER PRIMARY KEY)")


def create_sprockets(conn):
    conn.exec_driver_sql("CREATE TABLE sprockets (id INTEGER PRIMARY KEY)")


# ===========================================================================
# Applying the built-in migrations
# ===========================================================================

class TestRunMigrations:

    def test_fresh_store_gets_full_schema(self, empty_database):
        applied = run_migrations(empty_database)

        assert applied == [m.id for m in MIGRATIONS]
        assert EXPECTED_TABLES <= table_names(empty_database)

    def test_version_matches_migration_count(self, empty_database):
        assert get_current_schema_version(empty_database) == 0
        run_migrations(empty_database)
        assert get_current_schema_version(empty_database) == get_total_migrations()

    def test_second_run_is_a_no_op(self, empty_database):
        run_migrations(empty_database)
        assert run_migrations(empty_database) == []
        assert get_pending_migrations(empty_database) == []

    def test_each_unit_recorded_once(self, empty_database):
        run_migrations(empty_database)
        run_migrations(empty_database)

        with empty_database.connect() as conn:
            rows = conn.execute(text("SELECT id, name, applied_at FROM schema_migrations")).all()
        assert [(row[0], row[1]) for row in rows] == [(m.id, m.name) for m in MIGRATIONS]
        assert all(row[2] for row in rows)

    def test_foreign_keys_enforced(self, database):
        with database.connect() as conn:
            assert conn.exec_driver_sql("PRAGMA foreign_keys").scalar() == 1


# ===========================================================================
# Custom migration lists
# ===========================================================================

class TestMigrationFailure:

    def test_failing_unit_rolls_back_and_aborts(self, empty_database):
        units = (
            Migration(1, "create_widgets", create_widgets),
            Migration(2, "create_gadgets", create_gadgets_then_fail),
            Migration(3, "create_sprockets", create_sprockets),
        )

        with pytest.raises(MigrationError) as excinfo:
            run_migrations(empty_database, units)

        error = excinfo.value
        assert error.code == ErrorCode.MIGRATION_FAILED
        assert error.migration_id == 2
        assert error.migration_name == "create_gadgets"
        assert "no_such_table" in str(error)

        tables = table_names(empty_database)
        assert "widgets" in tables
        assert "gadgets" not in tables
        assert "sprockets" not in tables
        assert get_applied_migrations(empty_database) == [1]

    def test_retry_after_fix_applies_remaining(self, empty_database):
        broken = (
            Migration(1, "create_widgets", create_widgets),
            Migration(2, "create_gadgets", create_gadgets_then_fail),
        )
        with pytest.raises(MigrationError):
            run_migrations(empty_database, broken)

        fixed = (
            Migration(1, "create_widgets", create_widgets),
            Migration(2, "create_gadgets", create_gadgets),
        )
        assert run_migrations(empty_database, fixed) == [2]
        assert {"widgets", "gadgets"} <= table_names(empty_database)
        assert get_current_schema_version(empty_database) == 2

    def test_pending_excludes_applied(self, empty_database):
        units = (
            Migration(1, "create_widgets", create_widgets),
            Migration(2, "create_gadgets", create_gadgets),
        )
        run_migrations(empty_database, units[:1])

        pending = get_pending_migrations(empty_database, units)
        assert [m.id for m in pending] == [2]

    def test_out_of_order_ids_rejected(self, empty_database):
        units = (
            Migration(2, "create_gadgets", create_gadgets),
            Migration(1, "create_widgets", create_widgets),
        )
        with pytest.raises(ValueError):
            run_migrations(empty_database, units)

    def test_duplicate_ids_rejected(self, empty_database):
        units = (
            Migration(1, "create_widgets", create_widgets),
            Migration(1, "create_gadgets", create_gadgets),
        )
        with pytest.raises(ValueError):
            run_migrations(empty_database, units)
