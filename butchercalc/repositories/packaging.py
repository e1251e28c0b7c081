import logging

from sqlalchemy import select

from ..errors import DuplicateNameError, NotFoundError, PackagingInUseError
from ..models import PACKAGING_UNIT_TYPES, PackagingMaterial, Recipe, RecipePackaging, utc_timestamp
from .utils import clean_text, name_taken, require_choice, require_name, require_number

logger = logging.getLogger(__name__)


# ----------------------------
# Packaging Materials
# ----------------------------
def get_all_packaging(database, include_archived=False):
    """All packaging materials ordered by name, case-insensitive"""
    query = select(PackagingMaterial)
    if not include_archived:
        query = query.where(PackagingMaterial.is_archived.is_(False))
    query = query.order_by(PackagingMaterial.name.collate('NOCASE'))

    with database.session() as session:
        return [p.to_dict() for p in session.execute(query).scalars()]


def get_packaging(database, packaging_id):
    with database.session() as session:
        packaging = session.get(PackagingMaterial, packaging_id)
        return packaging.to_dict() if packaging else None


def _packaging_fields(data):
    return {
        'unit_price': require_number(data, 'unit_price', minimum=0),
        'unit_type': require_choice(data, 'unit_type', PACKAGING_UNIT_TYPES),
        'supplier': clean_text(data.get('supplier')),
        'sku': clean_text(data.get('sku')),
        'notes': clean_text(data.get('notes')),
    }


def create_packaging(database, data):
    name = require_name(data.get('name'))
    fields = _packaging_fields(data)

    with database.session() as session:
        if name_taken(session, PackagingMaterial, name):
            logger.info('Packaging name already exists: %s', name)
            raise DuplicateNameError()

        packaging = PackagingMaterial(name=name, **fields)
        session.add(packaging)
        session.flush()
        logger.info('Packaging created: %s (%s)', packaging.name, packaging.id)
        return packaging.to_dict()


def update_packaging(database, packaging_id, data):
    with database.session() as session:
        packaging = session.get(PackagingMaterial, packaging_id)
        if not packaging:
            raise NotFoundError()

        name = require_name(data.get('name'))
        if name_taken(session, PackagingMaterial, name, exclude_id=packaging_id):
            logger.info('Packaging name already exists: %s', name)
            raise DuplicateNameError()

        packaging.name = name
        for key, value in _packaging_fields(data).items():
            setattr(packaging, key, value)
        packaging.updated_at = utc_timestamp()
        session.flush()
        logger.info('Packaging updated: %s', packaging.id)
        return packaging.to_dict()


def _set_archived(database, packaging_id, archived):
    with database.session() as session:
        packaging = session.get(PackagingMaterial, packaging_id)
        if not packaging:
            raise NotFoundError()
        packaging.is_archived = archived
        packaging.updated_at = utc_timestamp()
        session.flush()
        return packaging.to_dict()


def archive_packaging(database, packaging_id):
    return _set_archived(database, packaging_id, True)


def unarchive_packaging(database, packaging_id):
    return _set_archived(database, packaging_id, False)


def delete_packaging(database, packaging_id):
    """Permanently remove a packaging material that no recipe uses"""
    with database.session() as session:
        packaging = session.get(PackagingMaterial, packaging_id)
        if not packaging:
            raise NotFoundError()

        recipe_names = list(session.execute(
            select(Recipe.name)
            .join(RecipePackaging, RecipePackaging.recipe_id == Recipe.id)
            .where(RecipePackaging.packaging_material_id == packaging_id)
            .order_by(Recipe.name.collate('NOCASE'))
        ).scalars())
        if recipe_names:
            logger.info('Packaging in use by recipes: %s', recipe_names)
            raise PackagingInUseError(recipe_names)

        session.delete(packaging)
        logger.info('Packaging deleted: %s', packaging.name)
