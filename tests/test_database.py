import os

import pytest

from butchercalc.config import get_database_path, load_config
from butchercalc.database import Database, initialize_database
from butchercalc.errors import MigrationError
from butchercalc.models import Category
from butchercalc.repositories import materials
from conftest import make_material


class TestDatabase:

    def test_open_creates_directory(self, tmp_path):
        path = str(tmp_path / "nested" / "dir" / "store.db")
        with Database(path) as database:
            assert database.is_open
            with database.connect() as conn:
                conn.exec_driver_sql("SELECT 1")
        assert os.path.isdir(str(tmp_path / "nested" / "dir"))

    def test_open_and_close_are_idempotent(self, db_path):
        database = Database(db_path)
        database.open()
        engine = database.engine
        database.open()
        assert database.engine is engine

        database.close()
        database.close()
        assert not database.is_open

    def test_closed_database_raises(self, db_path):
        database = Database(db_path)
        with pytest.raises(RuntimeError):
            database.engine
        with pytest.raises(RuntimeError):
            with database.session():
                pass

    def test_wal_journal_mode(self, database):
        with database.connect() as conn:
            assert conn.exec_driver_sql("PRAGMA journal_mode").scalar() == "wal"

    def test_session_rolls_back_on_error(self, database):
        with pytest.raises(ValueError):
            with database.session() as session:
                session.add(Category(name="Beef", type="material"))
                session.flush()
                raise ValueError("boom")

        with database.session() as session:
            assert session.query(Category).count() == 0

    def test_initialize_twice_keeps_data(self, db_path):
        database = initialize_database(db_path)
        make_material(database, "Beef Chuck")
        database.close()

        database = initialize_database(db_path)
        try:
            assert [m["name"] for m in materials.get_all_materials(database)] == ["Beef Chuck"]
        finally:
            database.close()

    def test_initialize_closes_on_migration_failure(self, db_path, monkeypatch):
        def fail(database):
            raise MigrationError(1, "initial_schema", "disk full")

        monkeypatch.setattr("butchercalc.migrations.run_migrations", fail)
        with pytest.raises(MigrationError):
            initialize_database(db_path)


class TestConfig:

    def test_env_database_path(self, monkeypatch):
        monkeypatch.setenv("BUTCHERCALC_DATABASE_PATH", "/tmp/custom.db")
        assert get_database_path() == "/tmp/custom.db"

    def test_default_path_in_user_data_dir(self, monkeypatch):
        monkeypatch.delenv("BUTCHERCALC_DATABASE_PATH", raising=False)
        assert get_database_path().endswith("butchercalculator.db")

    def test_overrides_win(self, monkeypatch):
        monkeypatch.setenv("BUTCHERCALC_PORT", "9000")
        config = load_config({"HOST": "0.0.0.0"})
        assert config["PORT"] == 9000
        assert config["HOST"] == "0.0.0.0"
