# flask_app/utils/errors.py
"""
API error taxonomy and the handlers that render it as JSON envelopes.
"""

from flask import current_app, jsonify
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import HTTPException

from flask_app.models import db


class ApiError(Exception):
    """Base class for errors that map to an HTTP status and envelope."""

    status_code = 500
    error_code = "internal"
    default_message = "An unexpected error occurred"

    def __init__(self, message=None, errors=None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message
        self.errors = list(errors) if errors else []

    def to_response(self):
        body = {"success": False, "message": self.message, "data": None}
        if self.errors:
            body["errors"] = self.errors
        return jsonify(body), self.status_code


class Unauthenticated(ApiError):
    status_code = 401
    error_code = "unauthenticated"
    default_message = "Authentication required"


class Forbidden(ApiError):
    status_code = 403
    error_code = "forbidden"
    default_message = "You do not have permission to perform this action"


class NotFound(ApiError):
    status_code = 404
    error_code = "not_found"
    default_message = "Resource not found"


class Conflict(ApiError):
    status_code = 409
    error_code = "conflict"
    default_message = "The request conflicts with the current state of the resource"


class ValidationFailed(ApiError):
    status_code = 400
    error_code = "validation_failed"
    default_message = "Invalid request data"


class InternalError(ApiError):
    status_code = 500
    error_code = "internal"


def register_error_handlers(app):
    """Render ApiError, framework HTTP errors and unexpected failures as envelopes"""

    @app.errorhandler(ApiError)
    def handle_api_error(error):
        if error.status_code >= 500:
            db.session.rollback()
            current_app.logger.error(f"{error.error_code}: {error.message}")
        return error.to_response()

    @app.errorhandler(HTTPException)
    def handle_http_exception(error):
        body = {"success": False, "message": error.description or error.name, "data": None}
        return jsonify(body), error.code

    @app.errorhandler(SQLAlchemyError)
    def handle_database_error(error):
        db.session.rollback()
        current_app.logger.error(f"Database error: {str(error)}", exc_info=True)
        return InternalError().to_response()

    @app.errorhandler(Exception)
    def handle_unexpected_error(error):
        db.session.rollback()
        current_app.logger.error(f"Unhandled error: {str(error)}", exc_info=True)
        return InternalError().to_response()
