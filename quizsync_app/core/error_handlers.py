"""
Error taxonomy and JSON error envelopes for the Quizsync HTTP layer.

Every API failure renders as::

    {"success": false, "message": "...", "code": "...", "details": {...}}
"""

from typing import Any, Dict, Optional

from flask import current_app, jsonify, request


class QuizSyncError(Exception):
    """Base exception class for Quizsync; carries its HTTP status and error code."""

    def __init__(
        self,
        message: str,
        code: str = 'UNKNOWN_ERROR',
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict:
        return {
            'success': False,
            'message': self.message,
            'code': self.code,
            'details': self.details
        }


class NotFoundError(QuizSyncError):
    def __init__(self, message: str = 'Resource not found', resource: str = None):
        super().__init__(message, 'NOT_FOUND', 404, {'resource': resource} if resource else None)


class ValidationError(QuizSyncError):
    def __init__(self, message: str = 'Validation failed', errors: Dict = None):
        super().__init__(message, 'VALIDATION_ERROR', 400, {'errors': errors} if errors else None)


class CapacityError(QuizSyncError):
    """Too many live sessions."""

    def __init__(self, message: str = 'Session capacity exceeded', limit: int = None):
        super().__init__(message, 'CAPACITY_EXCEEDED', 503, {'limit': limit} if limit else None)


def success_response(data: Any = None, message: str = None) -> dict:
    """``{"success": true, "data": ..., "message": ...}`` with empty keys left out."""
    response = {'success': True}
    if data is not None:
        response['data'] = data
    if message:
        response['message'] = message
    return response


def _is_api_request() -> bool:
    return '/api/' in request.path


def register_error_handlers(app):
    """Register error handlers with Flask app."""

    @app.errorhandler(QuizSyncError)
    def handle_quizsync_error(error):
        current_app.logger.warning(f"{error.code}: {error.message}")
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(404)
    def handle_not_found(error):
        if _is_api_request():
            return handle_quizsync_error(NotFoundError('Endpoint not found'))
        return error

    @app.errorhandler(500)
    def handle_internal_error(error):
        current_app.logger.exception('Internal server error')
        if _is_api_request():
            failure = QuizSyncError('Internal server error', 'SERVER_ERROR', 500)
            return jsonify(failure.to_dict()), 500
        return error
