import logging
import math

from sqlalchemy import select

from ..errors import InvalidValueError, NotFoundError
from ..models import Setting, utc_timestamp

logger = logging.getLogger(__name__)


def get_all_settings(database):
    with database.session() as session:
        query = select(Setting).order_by(Setting.key)
        return [s.to_dict() for s in session.execute(query).scalars()]


def get_setting(database, key):
    with database.session() as session:
        setting = session.execute(select(Setting).where(Setting.key == key)).scalar_one_or_none()
        return setting.to_dict() if setting else None


def encode_setting_value(value, setting_type):
    """String form of value for the declared type; raises InvalidValueError"""
    if setting_type == 'boolean':
        if isinstance(value, bool):
            return 'true' if value else 'false'
        if isinstance(value, str) and value.strip().lower() in ('true', 'false'):
            return value.strip().lower()
        raise InvalidValueError('value', 'value must be true or false')

    if setting_type == 'number':
        if isinstance(value, bool):
            raise InvalidValueError('value', 'value must be a number')
        if isinstance(value, str):
            try:
                number = float(value.strip())
            except ValueError:
                raise InvalidValueError('value', 'value must be a number')
            if math.isfinite(number):
                return value.strip()
        elif isinstance(value, (int, float)) and math.isfinite(value):
            return str(value)
        raise InvalidValueError('value', 'value must be a number')

    if value is None:
        raise InvalidValueError('value', 'value is required')
    return str(value)


def update_setting(database, key, value):
    with database.session() as session:
        setting = session.execute(select(Setting).where(Setting.key == key)).scalar_one_or_none()
        if not setting:
            raise NotFoundError()

        setting.value = encode_setting_value(value, setting.setting_type)
        setting.updated_at = utc_timestamp()
        session.flush()
        logger.info('Setting updated: %s = %s', key, setting.value)
        return setting.to_dict()
