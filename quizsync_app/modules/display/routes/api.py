# File: quizsync_app/modules/display/routes/api.py
from flask import current_app, jsonify, request

from quizsync_app.core.error_handlers import ValidationError, success_response

from .. import blueprint
from ..interface import DisplayInterface


def _json_body() -> dict:
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError('Request body must be a JSON object')
    return data


def _int_field(data: dict, key: str, required: bool = False):
    value = data.get(key)
    if value is None:
        if required:
            raise ValidationError(f"'{key}' is required", errors={key: 'required'})
        return None
    if isinstance(value, bool):
        raise ValidationError(f"'{key}' must be an integer", errors={key: 'invalid'})
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"'{key}' must be an integer", errors={key: 'invalid'})
    if number < 0:
        raise ValidationError(f"'{key}' must be non-negative", errors={key: 'invalid'})
    return number


@blueprint.route('/api/sessions', methods=['POST'])
def api_create_session():
    """Create a display session from a list of question dicts and load the first one."""
    data = _json_body()
    questions = data.get('questions')
    if not isinstance(questions, list) or not questions:
        raise ValidationError("'questions' must be a non-empty list", errors={'questions': 'invalid'})
    if not all(isinstance(q, dict) for q in questions):
        raise ValidationError("Each question must be an object", errors={'questions': 'invalid'})

    start_index = _int_field(data, 'start_index') or 0
    if start_index >= len(questions):
        raise ValidationError("'start_index' is out of range", errors={'start_index': 'out_of_range'})

    managed = DisplayInterface.open_session(questions, start_index=start_index)
    with managed.lock:
        payload = managed.session.snapshot()
    current_app.logger.info(f"[DISPLAY] Session {managed.session.session_id} opened")
    return jsonify(success_response(payload)), 201


@blueprint.route('/api/sessions/<session_id>', methods=['GET'])
def api_get_session(session_id):
    """Current display text and engine state."""
    with DisplayInterface.get_registry().acquire(session_id) as managed:
        return jsonify(success_response(managed.session.snapshot()))


@blueprint.route('/api/sessions/<session_id>/navigate', methods=['POST'])
def api_navigate(session_id):
    data = _json_body()
    index = _int_field(data, 'index', required=True)
    with DisplayInterface.get_registry().acquire(session_id) as managed:
        if index >= len(managed.source):
            raise ValidationError("'index' is out of range", errors={'index': 'out_of_range'})
        generation = managed.session.navigate(index)
        payload = managed.session.snapshot()
    payload['navigation_generation'] = generation
    return jsonify(success_response(payload))


@blueprint.route('/api/sessions/<session_id>/answer', methods=['POST'])
def api_answer(session_id):
    """Mark the question answered and request its explanation."""
    data = _json_body()
    index = _int_field(data, 'index')
    with DisplayInterface.get_registry().acquire(session_id) as managed:
        managed.session.answer(index)
        managed.pump()
        return jsonify(success_response(managed.session.snapshot()))


@blueprint.route('/api/sessions/<session_id>/mode', methods=['POST'])
def api_set_mode(session_id):
    data = _json_body()
    try:
        mode = DisplayInterface.parse_mode(data.get('mode'))
    except ValueError as exc:
        raise ValidationError(str(exc), errors={'mode': 'invalid'})
    with DisplayInterface.get_registry().acquire(session_id) as managed:
        managed.session.set_display_mode(mode)
        return jsonify(success_response(managed.session.snapshot()))


@blueprint.route('/api/sessions/<session_id>', methods=['DELETE'])
def api_delete_session(session_id):
    DisplayInterface.get_registry().remove(session_id)
    return jsonify(success_response(message=f'Session {session_id} closed'))
