from flask import Blueprint

from ..errors import NotFoundError
from ..repositories import packaging
from .utils import arg_flag, get_database, json_body, success

packaging_blueprint = Blueprint('packaging', __name__, url_prefix='/api/packaging')


# ----------------------------
# Packaging Materials
# ----------------------------
@packaging_blueprint.route('', methods=['GET'])
def list_packaging():
    include_archived = arg_flag('include_archived')
    return success(packaging.get_all_packaging(get_database(), include_archived))


@packaging_blueprint.route('/<packaging_id>', methods=['GET'])
def get_packaging(packaging_id):
    item = packaging.get_packaging(get_database(), packaging_id)
    if item is None:
        raise NotFoundError('Packaging material not found')
    return success(item)


@packaging_blueprint.route('', methods=['POST'])
def create_packaging():
    return success(packaging.create_packaging(get_database(), json_body()), 201)


@packaging_blueprint.route('/<packaging_id>', methods=['PUT'])
def update_packaging(packaging_id):
    return success(packaging.update_packaging(get_database(), packaging_id, json_body()))


@packaging_blueprint.route('/<packaging_id>/archive', methods=['POST'])
def archive_packaging(packaging_id):
    return success(packaging.archive_packaging(get_database(), packaging_id))


@packaging_blueprint.route('/<packaging_id>/unarchive', methods=['POST'])
def unarchive_packaging(packaging_id):
    return success(packaging.unarchive_packaging(get_database(), packaging_id))


@packaging_blueprint.route('/<packaging_id>', methods=['DELETE'])
def delete_packaging(packaging_id):
    packaging.delete_packaging(get_database(), packaging_id)
    return success()
