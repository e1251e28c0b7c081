import logging

from sqlalchemy import select, update

from ..errors import DuplicateNameError, NotFoundError
from ..models import CATEGORY_TYPES, Category, Recipe, SourceMaterial, utc_timestamp
from .utils import clean_text, name_taken, require_choice, require_name

logger = logging.getLogger(__name__)


# ----------------------------
# Categories
# ----------------------------
def get_all_categories(database, type=None):
    query = select(Category)
    if type is not None:
        query = query.where(Category.type == type)
    query = query.order_by(Category.type, Category.name.collate('NOCASE'))

    with database.session() as session:
        return [c.to_dict() for c in session.execute(query).scalars()]


def get_category(database, category_id):
    with database.session() as session:
        category = session.get(Category, category_id)
        return category.to_dict() if category else None


def create_category(database, data):
    name = require_name(data.get('name'))
    category_type = require_choice(data, 'type', CATEGORY_TYPES)

    with database.session() as session:
        if name_taken(session, Category, name, criteria=(Category.type == category_type,)):
            logger.info('Category name already exists: %s (%s)', name, category_type)
            raise DuplicateNameError()

        category = Category(name=name, type=category_type, color=clean_text(data.get('color')))
        session.add(category)
        session.flush()
        logger.info('Category created: %s (%s)', category.name, category.id)
        return category.to_dict()


def update_category(database, category_id, data):
    with database.session() as session:
        category = session.get(Category, category_id)
        if not category:
            raise NotFoundError()

        name = require_name(data.get('name'))
        category_type = require_choice(data, 'type', CATEGORY_TYPES)
        if name_taken(session, Category, name, exclude_id=category_id,
                      criteria=(Category.type == category_type,)):
            logger.info('Category name already exists: %s (%s)', name, category_type)
            raise DuplicateNameError()

        category.name = name
        category.type = category_type
        category.color = clean_text(data.get('color'))
        session.flush()
        logger.info('Category updated: %s', category.id)
        return category.to_dict()


def delete_category(database, category_id):
    """Remove a category; materials and recipes that used it become uncategorised"""
    with database.session() as session:
        category = session.get(Category, category_id)
        if not category:
            raise NotFoundError()

        now = utc_timestamp()
        for model in (SourceMaterial, Recipe):
            session.execute(
                update(model)
                .where(model.category_id == category_id)
                .values(category_id=None, updated_at=now)
                .execution_options(synchronize_session=False)
            )
        session.delete(category)
        logger.info('Category deleted: %s', category.name)
