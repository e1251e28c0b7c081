import logging

from sqlalchemy import func, select

from .models import Setting

logger = logging.getLogger(__name__)

DEFAULT_LABOR_RATE_PER_HOUR = 25.0
DEFAULT_VAT_RATE = 21.0

# key -> (encoded value, type tag)
DEFAULT_SETTINGS = {
    'labor_rate_per_hour': ('25.00', 'number'),
    'default_vat_rate': ('21', 'number'),
}


def seed_defaults(database):
    """Insert the default settings, only when the settings table is empty"""
    with database.session() as session:
        count = session.execute(select(func.count(Setting.id))).scalar()
        if count:
            logger.debug('Settings already present (%d), skipping seed', count)
            return False

        for key, (value, setting_type) in DEFAULT_SETTINGS.items():
            session.add(Setting(key=key, value=value, setting_type=setting_type))
        logger.info('Seeded default settings: %s', ', '.join(DEFAULT_SETTINGS))
        return True


def _get_number_setting(database, key, fallback):
    with database.session() as session:
        value = session.execute(select(Setting.value).where(Setting.key == key)).scalar()

    if value is None:
        return fallback
    try:
        return float(value)
    except ValueError:
        logger.warning('Setting %s is not a number: %r, using %s', key, value, fallback)
        return fallback


def get_labor_rate_per_hour(database):
    return _get_number_setting(database, 'labor_rate_per_hour', DEFAULT_LABOR_RATE_PER_HOUR)


def get_default_vat_rate(database):
    return _get_number_setting(database, 'default_vat_rate', DEFAULT_VAT_RATE)
