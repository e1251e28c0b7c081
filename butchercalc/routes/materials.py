from flask import Blueprint

from ..errors import NotFoundError
from ..repositories import materials
from .utils import arg_flag, get_database, json_body, success

materials_blueprint = Blueprint('materials', __name__, url_prefix='/api/materials')


# ----------------------------
# Source Materials
# ----------------------------
@materials_blueprint.route('', methods=['GET'])
def list_materials():
    include_archived = arg_flag('include_archived')
    return success(materials.get_all_materials(get_database(), include_archived))


@materials_blueprint.route('/<material_id>', methods=['GET'])
def get_material(material_id):
    material = materials.get_material(get_database(), material_id)
    if material is None:
        raise NotFoundError('Material not found')
    return success(material)


@materials_blueprint.route('', methods=['POST'])
def create_material():
    return success(materials.create_material(get_database(), json_body()), 201)


@materials_blueprint.route('/<material_id>', methods=['PUT'])
def update_material(material_id):
    return success(materials.update_material(get_database(), material_id, json_body()))


@materials_blueprint.route('/<material_id>/archive', methods=['POST'])
def archive_material(material_id):
    return success(materials.archive_material(get_database(), material_id))


@materials_blueprint.route('/<material_id>/unarchive', methods=['POST'])
def unarchive_material(material_id):
    return success(materials.unarchive_material(get_database(), material_id))


@materials_blueprint.route('/<material_id>', methods=['DELETE'])
def delete_material(material_id):
    materials.delete_material(get_database(), material_id)
    return success()
