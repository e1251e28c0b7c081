import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from ..errors import DuplicateNameError, MaterialInUseError, NotFoundError
from ..models import MASS_UNITS, Recipe, RecipeIngredient, SourceMaterial, utc_timestamp
from .utils import clean_text, name_taken, require_choice, require_name, require_number, resolve_category_id

logger = logging.getLogger(__name__)


# ----------------------------
# Source Materials
# ----------------------------
def get_all_materials(database, include_archived=False):
    """All materials ordered by name, case-insensitive"""
    query = select(SourceMaterial)
    if not include_archived:
        query = query.where(SourceMaterial.is_archived.is_(False))
    query = query.order_by(SourceMaterial.name.collate('NOCASE'))

    with database.session() as session:
        return [m.to_dict() for m in session.execute(query).scalars()]


def get_material(database, material_id):
    with database.session() as session:
        material = session.get(SourceMaterial, material_id)
        return material.to_dict() if material else None


def _material_fields(session, data):
    return {
        'category_id': resolve_category_id(session, data.get('category_id')),
        'current_price': require_number(data, 'current_price', minimum=0),
        'unit_of_measure': require_choice(data, 'unit_of_measure', MASS_UNITS),
        'supplier': clean_text(data.get('supplier')),
        'sku': clean_text(data.get('sku')),
        'notes': clean_text(data.get('notes')),
    }


def create_material(database, data):
    name = require_name(data.get('name'))

    with database.session() as session:
        if name_taken(session, SourceMaterial, name):
            logger.info('Material name already exists: %s', name)
            raise DuplicateNameError()

        material = SourceMaterial(name=name, **_material_fields(session, data))
        session.add(material)
        session.flush()
        logger.info('Material created: %s (%s)', material.name, material.id)
        return material.to_dict()


def update_material(database, material_id, data):
    with database.session() as session:
        material = session.get(SourceMaterial, material_id)
        if not material:
            raise NotFoundError()

        name = require_name(data.get('name'))
        if name_taken(session, SourceMaterial, name, exclude_id=material_id):
            logger.info('Material name already exists: %s', name)
            raise DuplicateNameError()

        fields = _material_fields(session, data)
        material.name = name
        for key, value in fields.items():
            setattr(material, key, value)
        material.updated_at = utc_timestamp()
        session.flush()
        logger.info('Material updated: %s', material.id)
        return material.to_dict()


def _set_archived(database, material_id, archived):
    with database.session() as session:
        material = session.get(SourceMaterial, material_id)
        if not material:
            raise NotFoundError()
        material.is_archived = archived
        material.updated_at = utc_timestamp()
        session.flush()
        return material.to_dict()


def archive_material(database, material_id):
    return _set_archived(database, material_id, True)


def unarchive_material(database, material_id):
    return _set_archived(database, material_id, False)


def get_recipes_using_material(database, material_id):
    """Names of recipes that list the material as an ingredient"""
    query = (
        select(Recipe.name)
        .join(RecipeIngredient, RecipeIngredient.recipe_id == Recipe.id)
        .where(RecipeIngredient.material_id == material_id)
        .order_by(Recipe.name.collate('NOCASE'))
    )
    with database.session() as session:
        return list(session.execute(query).scalars())


def delete_material(database, material_id):
    """
    Permanently remove a material.
    The ingredients foreign key (ON DELETE RESTRICT) blocks the delete while
    any recipe uses the material; that is reported as MaterialInUseError.
    """
    try:
        with database.session() as session:
            material = session.get(SourceMaterial, material_id)
            if not material:
                raise NotFoundError()
            name = material.name
            session.delete(material)
            session.flush()
    except IntegrityError as e:
        recipe_names = get_recipes_using_material(database, material_id)
        if not recipe_names:
            logger.error('Material %s delete rejected by the store: %s', material_id, e)
            raise
        logger.info('Material in use by recipes: %s', recipe_names)
        raise MaterialInUseError(recipe_names) from e

    logger.info('Material deleted: %s', name)
