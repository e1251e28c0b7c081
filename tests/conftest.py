"""
Shared pytest fixtures for the butchercalc test suite.

Every test gets its own migrated store in a temporary directory, so tests
never share rows and can run in any order.
"""

import pytest

from butchercalc import create_app
from butchercalc.database import initialize_database
from butchercalc.repositories import ingredients, materials, packaging, recipe_packaging, recipes


# ---------------------------------------------------------------------------
# Store fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def db_path(tmp_path):
    return str(tmp_path / "data" / "butchercalculator.db")


@pytest.fixture
def database(db_path):
    """Migrated and seeded store; closed after the test."""
    database = initialize_database(db_path)
    yield database
    database.close()


# ---------------------------------------------------------------------------
# Record factories
# ---------------------------------------------------------------------------

def make_material(database, name="Beef Chuck", price=10.0, unit="kg", **extra):
    data = {"name": name, "current_price": price, "unit_of_measure": unit}
    data.update(extra)
    return materials.create_material(database, data)


def make_packaging(database, name="Vacuum Bag", price=0.30, unit_type="bag", **extra):
    data = {"name": name, "unit_price": price, "unit_type": unit_type}
    data.update(extra)
    return packaging.create_packaging(database, data)


def make_recipe(database, name="Sausage", yield_quantity=10, yield_unit="kg", **extra):
    data = {"name": name, "yield_quantity": yield_quantity, "yield_unit": yield_unit}
    data.update(extra)
    return recipes.create_recipe(database, data)


def add_ingredient(database, recipe_id, material_id, quantity=500, unit="g"):
    return ingredients.add_ingredient(database, {
        "recipe_id": recipe_id,
        "material_id": material_id,
        "quantity": quantity,
        "unit": unit,
    })


def add_packaging(database, recipe_id, packaging_material_id, quantity=1):
    return recipe_packaging.add_recipe_packaging(database, {
        "recipe_id": recipe_id,
        "packaging_material_id": packaging_material_id,
        "quantity": quantity,
    })


# ---------------------------------------------------------------------------
# Flask boundary
# ---------------------------------------------------------------------------

@pytest.fixture
def app(db_path):
    app = create_app({"TESTING": True, "DATABASE_PATH": db_path})
    yield app
    app.extensions["butchercalc.database"].close()


@pytest.fixture
def client(app):
    return app.test_client()
