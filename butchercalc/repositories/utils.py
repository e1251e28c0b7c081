import math

from sqlalchemy import func, select, update

from ..errors import CategoryNotFoundError, InvalidValueError, NameRequiredError
from ..models import Category


# ----------------------------
# Input cleaning
# ----------------------------
def clean_text(value):
    """Trimmed string, or None when missing or blank"""
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def require_name(value):
    name = clean_text(value)
    if not name:
        raise NameRequiredError()
    return name


def require_number(data, field, minimum=None, maximum=None, exclusive_minimum=False,
                   optional=False, integer=False):
    value = data.get(field)
    if value is None:
        if optional:
            return None
        raise InvalidValueError(field, f'{field} is required')

    # bool is an int subclass; a checkbox value is never a valid amount
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidValueError(field, f'{field} must be a number')
    try:
        finite = math.isfinite(value)
    except OverflowError:
        finite = False
    if not finite:
        raise InvalidValueError(field, f'{field} must be a finite number')
    if integer and int(value) != value:
        raise InvalidValueError(field, f'{field} must be a whole number')

    if minimum is not None:
        if exclusive_minimum and value <= minimum:
            raise InvalidValueError(field, f'{field} must be greater than {minimum}')
        if not exclusive_minimum and value < minimum:
            raise InvalidValueError(field, f'{field} must be at least {minimum}')
    if maximum is not None and value > maximum:
        raise InvalidValueError(field, f'{field} must be at most {maximum}')

    return int(value) if integer else value


def require_choice(data, field, choices):
    value = clean_text(data.get(field))
    if value not in choices:
        raise InvalidValueError(field, f"{field} must be one of: {', '.join(choices)}")
    return value


def require_percentage(data, field):
    return require_number(data, field, minimum=0, maximum=100, optional=True)


# ----------------------------
# Lookups
# ----------------------------
def is_record_id(value):
    return isinstance(value, str) and bool(value)


def name_taken(session, model, name, exclude_id=None, criteria=()):
    """Case-insensitive name collision check within one table"""
    query = select(model.id).where(model.name.collate('NOCASE') == name, *criteria)
    if exclude_id is not None:
        query = query.where(model.id != exclude_id)
    return session.execute(query.limit(1)).first() is not None


def resolve_category_id(session, category_id):
    category_id = clean_text(category_id)
    if category_id is None:
        return None
    if session.get(Category, category_id) is None:
        raise CategoryNotFoundError()
    return category_id


# ----------------------------
# Sort order helpers
# ----------------------------
def next_sort_order(session, model, recipe_id):
    """Current maximum sort order + 1, or 0 for the first row"""
    current = session.execute(
        select(func.max(model.sort_order)).where(model.recipe_id == recipe_id)
    ).scalar()
    return 0 if current is None else current + 1


def close_sort_gap(session, model, recipe_id, removed_sort_order):
    """Shift every row after a removed one down by one"""
    session.execute(
        update(model)
        .where(model.recipe_id == recipe_id, model.sort_order > removed_sort_order)
        .values(sort_order=model.sort_order - 1)
        .execution_options(synchronize_session=False)
    )


def apply_sort_order(session, model, recipe_id, ordered_ids, field):
    """
    Assign sort_order = position for a full ordering of a recipe's rows.
    ordered_ids must be a permutation of the recipe's current row ids.
    """
    rows = session.execute(select(model).where(model.recipe_id == recipe_id)).scalars().all()
    by_id = {row.id: row for row in rows}

    ordered_ids = list(ordered_ids)
    if not all(is_record_id(row_id) for row_id in ordered_ids):
        raise InvalidValueError(field, f'{field} must contain only string ids')
    if len(ordered_ids) != len(set(ordered_ids)) or set(ordered_ids) != set(by_id):
        raise InvalidValueError(field, f'{field} must list every row of the recipe exactly once')

    for position, row_id in enumerate(ordered_ids):
        by_id[row_id].sort_order = position
