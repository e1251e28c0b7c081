from flask import Blueprint, request

from ..errors import InvalidValueError, NotFoundError
from ..repositories import ingredients, recipe_packaging, recipes
from .utils import arg_flag, get_database, json_body, success

recipes_blueprint = Blueprint('recipes', __name__, url_prefix='/api/recipes')


def _id_list(data, field):
    ids = data.get(field)
    if not isinstance(ids, list) or not all(isinstance(i, str) for i in ids):
        raise InvalidValueError(field, f'{field} must be a list of ids')
    return ids


# ----------------------------
# Recipes
# ----------------------------
@recipes_blueprint.route('', methods=['GET'])
def list_recipes():
    include_archived = arg_flag('include_archived')
    return success(recipes.get_all_recipes(get_database(), include_archived))


@recipes_blueprint.route('/<recipe_id>', methods=['GET'])
def get_recipe(recipe_id):
    recipe = recipes.get_recipe(get_database(), recipe_id)
    if recipe is None:
        raise NotFoundError('Recipe not found')
    return success(recipe)


@recipes_blueprint.route('/<recipe_id>/pricing', methods=['GET'])
def get_recipe_pricing(recipe_id):
    return success(recipes.get_recipe_pricing(get_database(), recipe_id))


@recipes_blueprint.route('/name-available', methods=['GET'])
def check_name_available():
    available = recipes.check_recipe_name_available(get_database(), request.args.get('name'))
    return success({'available': available})


@recipes_blueprint.route('', methods=['POST'])
def create_recipe():
    return success(recipes.create_recipe(get_database(), json_body()), 201)


@recipes_blueprint.route('/<recipe_id>', methods=['PUT'])
def update_recipe(recipe_id):
    return success(recipes.update_recipe(get_database(), recipe_id, json_body()))


@recipes_blueprint.route('/<recipe_id>/archive', methods=['POST'])
def archive_recipe(recipe_id):
    return success(recipes.archive_recipe(get_database(), recipe_id))


@recipes_blueprint.route('/<recipe_id>/unarchive', methods=['POST'])
def unarchive_recipe(recipe_id):
    return success(recipes.unarchive_recipe(get_database(), recipe_id))


@recipes_blueprint.route('/<recipe_id>/favorite', methods=['POST'])
def toggle_favorite(recipe_id):
    return success(recipes.toggle_favorite_recipe(get_database(), recipe_id))


@recipes_blueprint.route('/<recipe_id>/duplicate-name', methods=['GET'])
def suggested_duplicate_name(recipe_id):
    name = recipes.get_suggested_duplicate_name(get_database(), recipe_id)
    return success({'name': name})


@recipes_blueprint.route('/<recipe_id>/duplicate', methods=['POST'])
def duplicate_recipe(recipe_id):
    new_name = json_body().get('name')
    return success(recipes.duplicate_recipe(get_database(), recipe_id, new_name), 201)


@recipes_blueprint.route('/<recipe_id>', methods=['DELETE'])
def delete_recipe(recipe_id):
    recipes.delete_recipe(get_database(), recipe_id)
    return success()


# ----------------------------
# Recipe Ingredients
# ----------------------------
@recipes_blueprint.route('/<recipe_id>/ingredients', methods=['POST'])
def add_ingredient(recipe_id):
    data = dict(json_body(), recipe_id=recipe_id)
    return success(ingredients.add_ingredient(get_database(), data), 201)


@recipes_blueprint.route('/ingredients/<ingredient_id>', methods=['PATCH'])
def update_ingredient(ingredient_id):
    return success(ingredients.update_ingredient(get_database(), ingredient_id, json_body()))


@recipes_blueprint.route('/ingredients/<ingredient_id>', methods=['DELETE'])
def remove_ingredient(ingredient_id):
    ingredients.remove_ingredient(get_database(), ingredient_id)
    return success()


@recipes_blueprint.route('/<recipe_id>/ingredients/order', methods=['PUT'])
def reorder_ingredients(recipe_id):
    ids = _id_list(json_body(), 'ingredient_ids')
    ingredients.reorder_ingredients(get_database(), recipe_id, ids)
    return success()


# ----------------------------
# Recipe Packaging
# ----------------------------
@recipes_blueprint.route('/<recipe_id>/packaging', methods=['POST'])
def add_packaging(recipe_id):
    data = dict(json_body(), recipe_id=recipe_id)
    return success(recipe_packaging.add_recipe_packaging(get_database(), data), 201)


@recipes_blueprint.route('/packaging/<recipe_packaging_id>', methods=['PATCH'])
def update_packaging(recipe_packaging_id):
    data = json_body()
    return success(recipe_packaging.update_recipe_packaging(get_database(), recipe_packaging_id, data))


@recipes_blueprint.route('/packaging/<recipe_packaging_id>', methods=['DELETE'])
def remove_packaging(recipe_packaging_id):
    recipe_packaging.remove_recipe_packaging(get_database(), recipe_packaging_id)
    return success()


@recipes_blueprint.route('/<recipe_id>/packaging/order', methods=['PUT'])
def reorder_packaging(recipe_id):
    ids = _id_list(json_body(), 'recipe_packaging_ids')
    recipe_packaging.reorder_recipe_packaging(get_database(), recipe_id, ids)
    return success()
