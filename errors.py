# ==========================================================
#                  API EXCEPTIONS
# ==========================================================

from flask import jsonify
from werkzeug.exceptions import HTTPException

from extensions import db



class ApiError(Exception):
    """Base API exception, rendered as {"error": message}"""
    status_code = 400

    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ValidationError(ApiError):
    status_code = 400

class DuplicateError(ApiError):
    status_code = 400

class BusinessRuleError(ApiError):
    status_code = 400

class AuthError(ApiError):
    status_code = 401

class ForbiddenError(ApiError):
    status_code = 403

class NotFoundError(ApiError):
    status_code = 404


def register_error_handlers(app):

    @app.errorhandler(ApiError)
    def handle_api_error(error):
        return jsonify({"error": error.message}), error.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(error):
        return jsonify({"error": error.description or error.name}), error.code

    @app.errorhandler(Exception)
    def handle_unexpected_error(error):
        db.session.rollback()
        app.logger.error(f"Unhandled error: {error}", exc_info=True)
        return jsonify({"error": "Server error"}), 500
