import logging
import os
import sys

APP_NAME = 'ButcherCalculator'
DATABASE_FILENAME = 'butchercalculator.db'


def get_user_data_dir():
    """Per-user application data directory for the current platform"""
    if sys.platform.startswith('win'):
        base = os.getenv('APPDATA') or os.path.join(os.path.expanduser('~'), 'AppData', 'Roaming')
        return os.path.join(base, APP_NAME)
    if sys.platform == 'darwin':
        return os.path.join(os.path.expanduser('~'), 'Library', 'Application Support', APP_NAME)
    base = os.getenv('XDG_DATA_HOME') or os.path.join(os.path.expanduser('~'), '.local', 'share')
    return os.path.join(base, APP_NAME.lower())


def get_database_path():
    """Store file location. BUTCHERCALC_DATABASE_PATH wins over the user data dir."""
    path = os.getenv('BUTCHERCALC_DATABASE_PATH')
    if path:
        return path
    return os.path.join(get_user_data_dir(), DATABASE_FILENAME)


def load_config(overrides=None):
    config = {
        'DATABASE_PATH': get_database_path(),
        'LOG_LEVEL': os.getenv('BUTCHERCALC_LOG_LEVEL', 'INFO'),
        'HOST': os.getenv('BUTCHERCALC_HOST', '127.0.0.1'),
        'PORT': int(os.getenv('BUTCHERCALC_PORT', '8080')),
    }
    if overrides:
        config.update(overrides)
    return config


def configure_logging(level='INFO'):
    """Install a single stdout handler on the root logger"""
    root = logging.getLogger()
    root.setLevel(getattr(logging, str(level).upper(), logging.INFO))

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(
        '%(asctime)s [%(name)s] %(levelname)s: %(message)s'
    ))
    root.handlers = [handler]

    # Engine echo is too chatty for normal runs
    logging.getLogger('sqlalchemy.engine').setLevel(logging.WARNING)
