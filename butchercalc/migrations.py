"""
Forward-only schema migrations for the local store.

Each migration is applied once, inside its own transaction, together with the
row that records it in schema_migrations. The tracking table is the only
source of truth for what has been applied.
"""

import logging
from dataclasses import dataclass
from typing import Callable

from sqlalchemy import text

from .errors import MigrationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Migration:
    id: int
    name: str
    up: Callable


def execute_statements(conn, statements):
    for sql in statements:
        conn.exec_driver_sql(sql)


# ----------------------------
# Migration 1: initial schema
# ----------------------------
INITIAL_SCHEMA = [
    """
    CREATE TABLE IF NOT EXISTS categories (
      id TEXT PRIMARY KEY,
      name TEXT NOT NULL,
      type TEXT NOT NULL CHECK(type IN ('material', 'recipe')),
      color TEXT
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_categories_type ON categories(type)",

    """
    CREATE TABLE IF NOT EXISTS source_materials (
      id TEXT PRIMARY KEY,
      name TEXT NOT NULL UNIQUE COLLATE NOCASE,
      category_id TEXT REFERENCES categories(id),
      current_price REAL NOT NULL CHECK(current_price >= 0),
      unit_of_measure TEXT NOT NULL CHECK(unit_of_measure IN ('kg', 'g')),
      supplier TEXT,
      sku TEXT,
      notes TEXT,
      created_at TEXT NOT NULL,
      updated_at TEXT NOT NULL,
      is_archived INTEGER DEFAULT 0 CHECK(is_archived IN (0, 1))
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_source_materials_name ON source_materials(name COLLATE NOCASE)",
    "CREATE INDEX IF NOT EXISTS idx_source_materials_category ON source_materials(category_id)",
    "CREATE INDEX IF NOT EXISTS idx_source_materials_archived ON source_materials(is_archived)",

    """
    CREATE TABLE IF NOT EXISTS recipes (
      id TEXT PRIMARY KEY,
      name TEXT NOT NULL UNIQUE COLLATE NOCASE,
      description TEXT,
      category_id TEXT REFERENCES categories(id),
      yield_quantity REAL NOT NULL CHECK(yield_quantity > 0),
      yield_unit TEXT NOT NULL,
      prep_time_minutes INTEGER CHECK(prep_time_minutes IS NULL OR prep_time_minutes >= 0),
      instructions TEXT,
      profit_margin REAL CHECK(profit_margin IS NULL OR (profit_margin >= 0 AND profit_margin <= 100)),
      waste_percentage REAL CHECK(waste_percentage IS NULL OR (waste_percentage >= 0 AND waste_percentage <= 100)),
      vat_percentage REAL CHECK(vat_percentage IS NULL OR (vat_percentage >= 0 AND vat_percentage <= 100)),
      created_at TEXT NOT NULL,
      updated_at TEXT NOT NULL,
      is_archived INTEGER DEFAULT 0 CHECK(is_archived IN (0, 1)),
      is_favorite INTEGER DEFAULT 0 CHECK(is_favorite IN (0, 1))
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_recipes_name ON recipes(name COLLATE NOCASE)",
    "CREATE INDEX IF NOT EXISTS idx_recipes_category ON recipes(category_id)",
    "CREATE INDEX IF NOT EXISTS idx_recipes_archived ON recipes(is_archived)",
    "CREATE INDEX IF NOT EXISTS idx_recipes_favorite ON recipes(is_favorite)",

    """
    CREATE TABLE IF NOT EXISTS recipe_ingredients (
      id TEXT PRIMARY KEY,
      recipe_id TEXT NOT NULL REFERENCES recipes(id) ON DELETE CASCADE,
      material_id TEXT NOT NULL REFERENCES source_materials(id) ON DELETE RESTRICT,
      quantity REAL NOT NULL CHECK(quantity > 0),
      unit TEXT NOT NULL CHECK(unit IN ('kg', 'g')),
      sort_order INTEGER NOT NULL,
      notes TEXT,
      UNIQUE(recipe_id, material_id)
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_recipe_ingredients_recipe ON recipe_ingredients(recipe_id)",
    "CREATE INDEX IF NOT EXISTS idx_recipe_ingredients_material ON recipe_ingredients(material_id)",
    "CREATE INDEX IF NOT EXISTS idx_recipe_ingredients_sort ON recipe_ingredients(recipe_id, sort_order)",

    """
    CREATE TABLE IF NOT EXISTS packaging_materials (
      id TEXT PRIMARY KEY,
      name TEXT NOT NULL UNIQUE COLLATE NOCASE,
      unit_price REAL NOT NULL CHECK(unit_price >= 0),
      unit_type TEXT NOT NULL CHECK(unit_type IN ('piece', 'meter', 'roll', 'sheet', 'box', 'bag')),
      supplier TEXT,
      sku TEXT,
      notes TEXT,
      created_at TEXT NOT NULL,
      updated_at TEXT NOT NULL,
      is_archived INTEGER DEFAULT 0 CHECK(is_archived IN (0, 1))
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_packaging_materials_name ON packaging_materials(name COLLATE NOCASE)",
    "CREATE INDEX IF NOT EXISTS idx_packaging_materials_archived ON packaging_materials(is_archived)",

    """
    CREATE TABLE IF NOT EXISTS recipe_packaging (
      id TEXT PRIMARY KEY,
      recipe_id TEXT NOT NULL REFERENCES recipes(id) ON DELETE CASCADE,
      packaging_material_id TEXT NOT NULL REFERENCES packaging_materials(id) ON DELETE RESTRICT,
      quantity REAL NOT NULL CHECK(quantity > 0),
      sort_order INTEGER NOT NULL,
      notes TEXT,
      UNIQUE(recipe_id, packaging_material_id)
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_recipe_packaging_recipe ON recipe_packaging(recipe_id)",
    "CREATE INDEX IF NOT EXISTS idx_recipe_packaging_material ON recipe_packaging(packaging_material_id)",
    "CREATE INDEX IF NOT EXISTS idx_recipe_packaging_sort ON recipe_packaging(recipe_id, sort_order)",

    """
    CREATE TABLE IF NOT EXISTS settings (
      id TEXT PRIMARY KEY,
      key TEXT NOT NULL UNIQUE,
      value TEXT NOT NULL,
      setting_type TEXT NOT NULL CHECK(setting_type IN ('string', 'number', 'boolean')),
      created_at TEXT NOT NULL,
      updated_at TEXT NOT NULL
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_settings_key ON settings(key)",

    """
    CREATE TABLE IF NOT EXISTS price_history (
      id TEXT PRIMARY KEY,
      material_id TEXT NOT NULL REFERENCES source_materials(id),
      price REAL NOT NULL CHECK(price >= 0),
      effective_date TEXT NOT NULL,
      notes TEXT
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_price_history_material ON price_history(material_id)",
    "CREATE INDEX IF NOT EXISTS idx_price_history_date ON price_history(effective_date)",
    "CREATE INDEX IF NOT EXISTS idx_price_history_material_date ON price_history(material_id, effective_date DESC)",
]


def _initial_schema(conn):
    execute_statements(conn, INITIAL_SCHEMA)


# All migrations in ascending id order. Never edit an applied entry; append a new one.
MIGRATIONS = (
    Migration(id=1, name='initial_schema', up=_initial_schema),
)


# ----------------------------
# Tracking table
# ----------------------------
def _create_migrations_table(conn):
    conn.exec_driver_sql("""
        CREATE TABLE IF NOT EXISTS schema_migrations (
          id INTEGER PRIMARY KEY,
          name TEXT NOT NULL,
          applied_at TEXT NOT NULL DEFAULT (datetime('now'))
        )
    """)
    conn.exec_driver_sql(
        'CREATE INDEX IF NOT EXISTS idx_schema_migrations_id ON schema_migrations(id)'
    )


def _record_migration(conn, migration):
    conn.execute(
        text("INSERT INTO schema_migrations (id, name, applied_at) VALUES (:id, :name, datetime('now'))"),
        {'id': migration.id, 'name': migration.name}
    )


def _check_ordering(migrations):
    ids = [m.id for m in migrations]
    if ids != sorted(set(ids)):
        raise ValueError(f'Migration ids must be unique and ascending: {ids}')


def get_applied_migrations(database):
    """Ids recorded in the tracking table, ascending"""
    with database.connect() as conn:
        _create_migrations_table(conn)
        rows = conn.exec_driver_sql('SELECT id FROM schema_migrations ORDER BY id').fetchall()
    return [row[0] for row in rows]


def get_pending_migrations(database, migrations=MIGRATIONS):
    applied = set(get_applied_migrations(database))
    return [m for m in migrations if m.id not in applied]


def run_migrations(database, migrations=MIGRATIONS):
    """
    Apply every migration whose id is not yet recorded, in ascending order.

    Each unit runs in its own transaction with its tracking row. The first
    failure rolls that unit back, stops the run and raises MigrationError.
    Returns the ids applied by this call.
    """
    _check_ordering(migrations)

    applied = get_applied_migrations(database)
    logger.info('Applied migrations: %s', ', '.join(str(i) for i in applied) or 'none')

    applied_ids = set(applied)
    pending = [m for m in migrations if m.id not in applied_ids]
    if not pending:
        logger.info('No pending migrations to run')
        return []

    logger.info('Running %d pending migration(s): %s',
                len(pending), ', '.join(m.name for m in pending))

    completed = []
    for migration in pending:
        logger.info('Applying migration %d: %s', migration.id, migration.name)
        try:
            with database.connect() as conn:
                migration.up(conn)
                _record_migration(conn, migration)
        except Exception as e:
            logger.error('Migration %d (%s) failed: %s', migration.id, migration.name, e)
            raise MigrationError(migration.id, migration.name, e) from e
        completed.append(migration.id)
        logger.info('Migration %d: %s completed', migration.id, migration.name)

    logger.info('All migrations completed successfully')
    return completed


def get_current_schema_version(database):
    """Highest applied migration id, or 0 when nothing has been applied"""
    with database.connect() as conn:
        _create_migrations_table(conn)
        version = conn.exec_driver_sql('SELECT MAX(id) FROM schema_migrations').scalar()
    return version or 0


def get_total_migrations(migrations=MIGRATIONS):
    return len(migrations)
