from flask import Blueprint, request

from ..errors import NotFoundError
from ..repositories import categories
from .utils import get_database, json_body, success

categories_blueprint = Blueprint('categories', __name__, url_prefix='/api/categories')


# ----------------------------
# Categories Management
# ----------------------------
@categories_blueprint.route('', methods=['GET'])
def list_categories():
    return success(categories.get_all_categories(get_database(), request.args.get('type')))


@categories_blueprint.route('/<category_id>', methods=['GET'])
def get_category(category_id):
    category = categories.get_category(get_database(), category_id)
    if category is None:
        raise NotFoundError('Category not found')
    return success(category)


@categories_blueprint.route('', methods=['POST'])
def create_category():
    return success(categories.create_category(get_database(), json_body()), 201)


@categories_blueprint.route('/<category_id>', methods=['PUT'])
def update_category(category_id):
    return success(categories.update_category(get_database(), category_id, json_body()))


@categories_blueprint.route('/<category_id>', methods=['DELETE'])
def delete_category(category_id):
    categories.delete_category(get_database(), category_id)
    return success()
