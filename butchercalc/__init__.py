import logging

from flask import Flask, jsonify, request

from .config import configure_logging, load_config
from .database import initialize_database
from .errors import CostingError

logger = logging.getLogger(__name__)


def create_app(config=None):
    """
    Application factory for the local JSON boundary.

    Opens the store at DATABASE_PATH, applies pending migrations and seeds the
    default settings. A MigrationError propagates so startup halts. The store
    handle lives in app.extensions and is closed by whoever owns the process.
    """
    app = Flask(__name__)
    app.config.update(load_config(config))

    if not app.config.get('TESTING'):
        configure_logging(app.config['LOG_LEVEL'])

    database = initialize_database(app.config['DATABASE_PATH'])
    app.extensions['butchercalc.database'] = database

    @app.errorhandler(CostingError)
    def handle_costing_error(e):
        logger.info('%s %s failed with %s: %s (%s)', request.method, request.path, e.status, e.code.value, e.message)
        return jsonify(e.to_dict()), e.status

    # Register blueprints
    from .routes import (categories_blueprint, materials_blueprint, packaging_blueprint,
                         recipes_blueprint, settings_blueprint)
    app.register_blueprint(materials_blueprint)
    app.register_blueprint(packaging_blueprint)
    app.register_blueprint(recipes_blueprint)
    app.register_blueprint(categories_blueprint)
    app.register_blueprint(settings_blueprint)

    return app
