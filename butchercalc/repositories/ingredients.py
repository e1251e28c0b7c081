import logging

from sqlalchemy import select

from ..errors import (IngredientAlreadyExistsError, MaterialNotFoundError, NotFoundError,
                      RecipeNotFoundError)
from ..models import MASS_UNITS, Recipe, RecipeIngredient, SourceMaterial
from .utils import (apply_sort_order, clean_text, close_sort_gap, is_record_id, next_sort_order,
                    require_choice, require_number)

logger = logging.getLogger(__name__)


# ----------------------------
# Recipe Ingredients
# ----------------------------
def add_ingredient(database, data):
    """Append a material to a recipe; the new row goes last in sort order"""
    quantity = require_number(data, 'quantity', minimum=0, exclusive_minimum=True)
    unit = require_choice(data, 'unit', MASS_UNITS)

    with database.session() as session:
        recipe_id = data.get('recipe_id')
        material_id = data.get('material_id')

        if not is_record_id(recipe_id) or session.get(Recipe, recipe_id) is None:
            raise RecipeNotFoundError()
        if not is_record_id(material_id) or session.get(SourceMaterial, material_id) is None:
            raise MaterialNotFoundError()

        existing = session.execute(
            select(RecipeIngredient.id).where(
                RecipeIngredient.recipe_id == recipe_id,
                RecipeIngredient.material_id == material_id
            )
        ).first()
        if existing:
            raise IngredientAlreadyExistsError()

        ingredient = RecipeIngredient(
            recipe_id=recipe_id,
            material_id=material_id,
            quantity=quantity,
            unit=unit,
            sort_order=next_sort_order(session, RecipeIngredient, recipe_id),
            notes=clean_text(data.get('notes'))
        )
        session.add(ingredient)
        session.flush()
        logger.info('Ingredient %s added to recipe %s at position %d',
                    material_id, recipe_id, ingredient.sort_order)
        return ingredient.to_dict()


def update_ingredient(database, ingredient_id, data):
    """Partial update: only quantity, unit and notes present in data change"""
    with database.session() as session:
        ingredient = session.get(RecipeIngredient, ingredient_id)
        if not ingredient:
            raise NotFoundError()

        if data.get('quantity') is not None:
            ingredient.quantity = require_number(data, 'quantity', minimum=0, exclusive_minimum=True)
        if data.get('unit') is not None:
            ingredient.unit = require_choice(data, 'unit', MASS_UNITS)
        if 'notes' in data:
            ingredient.notes = clean_text(data['notes'])

        session.flush()
        return ingredient.to_dict()


def remove_ingredient(database, ingredient_id):
    """Delete an ingredient and close the gap it leaves in the sort order"""
    with database.session() as session:
        ingredient = session.get(RecipeIngredient, ingredient_id)
        if not ingredient:
            raise NotFoundError()

        recipe_id, sort_order = ingredient.recipe_id, ingredient.sort_order
        session.delete(ingredient)
        session.flush()
        close_sort_gap(session, RecipeIngredient, recipe_id, sort_order)
        logger.info('Ingredient %s removed from recipe %s', ingredient_id, recipe_id)


def reorder_ingredients(database, recipe_id, ingredient_ids):
    """Set sort order from a full list of the recipe's ingredient ids, all or nothing"""
    with database.session() as session:
        if not is_record_id(recipe_id) or session.get(Recipe, recipe_id) is None:
            raise RecipeNotFoundError()
        apply_sort_order(session, RecipeIngredient, recipe_id, ingredient_ids, 'ingredient_ids')
        logger.info('Ingredients reordered for recipe %s', recipe_id)
