import logging

from sqlalchemy import select

from ..errors import (NotFoundError, PackagingAlreadyExistsError, PackagingNotFoundError,
                      RecipeNotFoundError)
from ..models import PackagingMaterial, Recipe, RecipePackaging
from .utils import (apply_sort_order, clean_text, close_sort_gap, is_record_id, next_sort_order,
                    require_number)

logger = logging.getLogger(__name__)


# ----------------------------
# Recipe Packaging
# ----------------------------
def add_recipe_packaging(database, data):
    quantity = require_number(data, 'quantity', minimum=0, exclusive_minimum=True)

    with database.session() as session:
        recipe_id = data.get('recipe_id')
        packaging_material_id = data.get('packaging_material_id')

        if not is_record_id(recipe_id) or session.get(Recipe, recipe_id) is None:
            raise RecipeNotFoundError()
        if not is_record_id(packaging_material_id) or session.get(PackagingMaterial, packaging_material_id) is None:
            raise PackagingNotFoundError()

        existing = session.execute(
            select(RecipePackaging.id).where(
                RecipePackaging.recipe_id == recipe_id,
                RecipePackaging.packaging_material_id == packaging_material_id
            )
        ).first()
        if existing:
            raise PackagingAlreadyExistsError()

        item = RecipePackaging(
            recipe_id=recipe_id,
            packaging_material_id=packaging_material_id,
            quantity=quantity,
            sort_order=next_sort_order(session, RecipePackaging, recipe_id),
            notes=clean_text(data.get('notes'))
        )
        session.add(item)
        session.flush()
        logger.info('Packaging %s added to recipe %s at position %d',
                    packaging_material_id, recipe_id, item.sort_order)
        return item.to_dict()


def update_recipe_packaging(database, recipe_packaging_id, data):
    with database.session() as session:
        item = session.get(RecipePackaging, recipe_packaging_id)
        if not item:
            raise NotFoundError()

        if data.get('quantity') is not None:
            item.quantity = require_number(data, 'quantity', minimum=0, exclusive_minimum=True)
        if 'notes' in data:
            item.notes = clean_text(data['notes'])

        session.flush()
        return item.to_dict()


def remove_recipe_packaging(database, recipe_packaging_id):
    with database.session() as session:
        item = session.get(RecipePackaging, recipe_packaging_id)
        if not item:
            raise NotFoundError()

        recipe_id, sort_order = item.recipe_id, item.sort_order
        session.delete(item)
        session.flush()
        close_sort_gap(session, RecipePackaging, recipe_id, sort_order)
        logger.info('Packaging row %s removed from recipe %s', recipe_packaging_id, recipe_id)


def reorder_recipe_packaging(database, recipe_id, recipe_packaging_ids):
    with database.session() as session:
        if not is_record_id(recipe_id) or session.get(Recipe, recipe_id) is None:
            raise RecipeNotFoundError()
        apply_sort_order(session, RecipePackaging, recipe_id, recipe_packaging_ids, 'recipe_packaging_ids')
        logger.info('Packaging reordered for recipe %s', recipe_id)
