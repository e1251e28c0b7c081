from flask import Blueprint

from ..errors import InvalidValueError, NotFoundError
from ..repositories import settings
from .utils import get_database, json_body, success

settings_blueprint = Blueprint('settings', __name__, url_prefix='/api/settings')


@settings_blueprint.route('', methods=['GET'])
def list_settings():
    return success(settings.get_all_settings(get_database()))


@settings_blueprint.route('/<key>', methods=['GET'])
def get_setting(key):
    setting = settings.get_setting(get_database(), key)
    if setting is None:
        raise NotFoundError('Setting not found')
    return success(setting)


@settings_blueprint.route('/<key>', methods=['PUT'])
def update_setting(key):
    data = json_body()
    if 'value' not in data:
        raise InvalidValueError('value', 'value is required')
    return success(settings.update_setting(get_database(), key, data['value']))
