from flask import current_app, jsonify, request

from ..errors import InvalidValueError

TRUE_VALUES = ('1', 'true', 'yes', 'on')


def get_database():
    return current_app.extensions['butchercalc.database']


def json_body():
    """Request JSON object, or an empty dict when the body is empty"""
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise InvalidValueError('body', 'Request body must be a JSON object')
    return data


def arg_flag(name, default=False):
    value = request.args.get(name)
    if value is None:
        return default
    return value.strip().lower() in TRUE_VALUES


def success(data=None, status=200):
    return jsonify({'success': True, 'data': data}), status
