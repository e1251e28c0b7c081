import logging

from sqlalchemy import select
from sqlalchemy.orm import selectinload

from ..costing import calculate_price_breakdown, calculate_recipe_costs
from ..errors import DuplicateNameError, InvalidValueError, NameRequiredError, NotFoundError
from ..models import Recipe, RecipeIngredient, RecipePackaging, utc_timestamp
from ..seed import get_default_vat_rate, get_labor_rate_per_hour
from .utils import (clean_text, name_taken, require_name, require_number, require_percentage,
                    resolve_category_id)

logger = logging.getLogger(__name__)

# Loads everything the cost aggregation reads
_WITH_COMPONENTS = (
    selectinload(Recipe.ingredients).selectinload(RecipeIngredient.material),
    selectinload(Recipe.packaging).selectinload(RecipePackaging.packaging_material),
)


def _get_recipe_or_raise(session, recipe_id, *options):
    recipe = session.get(Recipe, recipe_id, options=list(options))
    if not recipe:
        raise NotFoundError()
    return recipe


def _recipe_fields(session, data):
    yield_unit = clean_text(data.get('yield_unit'))
    if not yield_unit:
        raise InvalidValueError('yield_unit', 'yield_unit is required')

    return {
        'description': clean_text(data.get('description')),
        'category_id': resolve_category_id(session, data.get('category_id')),
        'yield_quantity': require_number(data, 'yield_quantity', minimum=0, exclusive_minimum=True),
        'yield_unit': yield_unit,
        'prep_time_minutes': require_number(data, 'prep_time_minutes', minimum=0, optional=True, integer=True),
        'instructions': clean_text(data.get('instructions')),
        'profit_margin': require_percentage(data, 'profit_margin'),
        'waste_percentage': require_percentage(data, 'waste_percentage'),
        'vat_percentage': require_percentage(data, 'vat_percentage'),
    }


# ----------------------------
# Queries
# ----------------------------
def get_all_recipes(database, include_archived=False):
    """All recipes with current costs; favorites first, then by name"""
    query = select(Recipe).options(*_WITH_COMPONENTS)
    if not include_archived:
        query = query.where(Recipe.is_archived.is_(False))
    query = query.order_by(Recipe.is_favorite.desc(), Recipe.name.collate('NOCASE'))

    with database.session() as session:
        results = []
        for recipe in session.execute(query).scalars():
            data = recipe.to_dict()
            data.update(calculate_recipe_costs(recipe.ingredients, recipe.packaging))
            data['ingredient_count'] = len(recipe.ingredients)
            data['packaging_count'] = len(recipe.packaging)
            results.append(data)
        return results


def get_recipe(database, recipe_id):
    """Recipe with its ingredients and packaging in sort order, plus costs"""
    with database.session() as session:
        recipe = session.get(Recipe, recipe_id, options=_WITH_COMPONENTS)
        if not recipe:
            return None

        data = recipe.to_dict()
        data['ingredients'] = [i.to_dict(with_material=True) for i in recipe.ingredients]
        data['packaging'] = [p.to_dict(with_material=True) for p in recipe.packaging]
        data.update(calculate_recipe_costs(recipe.ingredients, recipe.packaging))
        return data


def get_recipe_pricing(database, recipe_id):
    """Selling-price breakdown using the labor rate and default VAT settings"""
    labor_rate = get_labor_rate_per_hour(database)
    default_vat = get_default_vat_rate(database)

    with database.session() as session:
        recipe = _get_recipe_or_raise(session, recipe_id, *_WITH_COMPONENTS)
        costs = calculate_recipe_costs(recipe.ingredients, recipe.packaging)
        breakdown = calculate_price_breakdown(recipe, costs, labor_rate, default_vat)
        breakdown['recipe_id'] = recipe.id
        return breakdown


def check_recipe_name_available(database, name):
    trimmed = clean_text(name)
    if not trimmed:
        return False
    with database.session() as session:
        return not name_taken(session, Recipe, trimmed)


# ----------------------------
# Mutations
# ----------------------------
def create_recipe(database, data):
    name = require_name(data.get('name'))

    with database.session() as session:
        if name_taken(session, Recipe, name):
            logger.info('Recipe name already exists: %s', name)
            raise DuplicateNameError()

        recipe = Recipe(name=name, **_recipe_fields(session, data))
        session.add(recipe)
        session.flush()
        logger.info('Recipe created: %s (%s)', recipe.name, recipe.id)
        return recipe.to_dict()


def update_recipe(database, recipe_id, data):
    with database.session() as session:
        recipe = _get_recipe_or_raise(session, recipe_id)

        name = require_name(data.get('name'))
        if name_taken(session, Recipe, name, exclude_id=recipe_id):
            logger.info('Recipe name already exists: %s', name)
            raise DuplicateNameError()

        recipe.name = name
        for key, value in _recipe_fields(session, data).items():
            setattr(recipe, key, value)
        recipe.updated_at = utc_timestamp()
        session.flush()
        logger.info('Recipe updated: %s', recipe.id)
        return recipe.to_dict()


def _set_flag(database, recipe_id, flag, value=None):
    with database.session() as session:
        recipe = _get_recipe_or_raise(session, recipe_id)
        if value is None:
            value = not getattr(recipe, flag)
        setattr(recipe, flag, value)
        recipe.updated_at = utc_timestamp()
        session.flush()
        return recipe.to_dict()


def archive_recipe(database, recipe_id):
    return _set_flag(database, recipe_id, 'is_archived', True)


def unarchive_recipe(database, recipe_id):
    return _set_flag(database, recipe_id, 'is_archived', False)


def toggle_favorite_recipe(database, recipe_id):
    return _set_flag(database, recipe_id, 'is_favorite')


def delete_recipe(database, recipe_id):
    """Remove a recipe; its ingredient and packaging rows go with it"""
    with database.session() as session:
        recipe = _get_recipe_or_raise(session, recipe_id)
        session.delete(recipe)
        logger.info('Recipe deleted: %s', recipe.name)


# ----------------------------
# Duplication
# ----------------------------
def _suggest_copy_name(session, name):
    copy_name = f'{name} (Copy)'
    counter = 1
    while name_taken(session, Recipe, copy_name):
        counter += 1
        copy_name = f'{name} (Copy {counter})'
    return copy_name


def get_suggested_duplicate_name(database, recipe_id):
    with database.session() as session:
        recipe = _get_recipe_or_raise(session, recipe_id)
        return _suggest_copy_name(session, recipe.name)


def duplicate_recipe(database, recipe_id, new_name=None):
    """
    Copy a recipe with all its ingredients and packaging.

    Without new_name the copy is named "<name> (Copy)", "<name> (Copy 2)", ...
    The copy is never a favorite and never archived.
    """
    with database.session() as session:
        recipe = _get_recipe_or_raise(session, recipe_id, *_WITH_COMPONENTS)

        if new_name is None:
            name = _suggest_copy_name(session, recipe.name)
        else:
            name = clean_text(new_name)
            if not name:
                raise NameRequiredError()
            if name_taken(session, Recipe, name):
                logger.info('Recipe name already exists: %s', name)
                raise DuplicateNameError()

        duplicate = Recipe(
            name=name,
            description=recipe.description,
            category_id=recipe.category_id,
            yield_quantity=recipe.yield_quantity,
            yield_unit=recipe.yield_unit,
            prep_time_minutes=recipe.prep_time_minutes,
            instructions=recipe.instructions,
            profit_margin=recipe.profit_margin,
            waste_percentage=recipe.waste_percentage,
            vat_percentage=recipe.vat_percentage,
            is_favorite=False,
            is_archived=False,
        )
        for ingredient in recipe.ingredients:
            duplicate.ingredients.append(RecipeIngredient(
                material_id=ingredient.material_id,
                quantity=ingredient.quantity,
                unit=ingredient.unit,
                sort_order=ingredient.sort_order,
                notes=ingredient.notes,
            ))
        for item in recipe.packaging:
            duplicate.packaging.append(RecipePackaging(
                packaging_material_id=item.packaging_material_id,
                quantity=item.quantity,
                sort_order=item.sort_order,
                notes=item.notes,
            ))

        session.add(duplicate)
        session.flush()
        logger.info('Recipe %s duplicated as %s (%s)', recipe.id, duplicate.name, duplicate.id)
        return duplicate.to_dict()
