# expense_api/errors.py
"""
Application errors and the single place that turns them into responses.

Every handler raises; nothing below the blueprints builds error payloads
itself. `register_error_handlers` maps the recognised shapes (validation,
duplicate key, authentication, not found) to their status codes and lets
everything else fall through to a generic 500.
"""

import logging
import re
import sqlite3
import traceback

from flask import current_app, request
from werkzeug.exceptions import HTTPException

from .responses import failure

logger = logging.getLogger("expense-api")

_UNIQUE_RE = re.compile(r"UNIQUE constraint failed: \w+\.(\w+)")


class AppError(Exception):
    status_code = 500

    def __init__(self, message, status_code=None, error=None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.error = error


class ValidationError(AppError):
    status_code = 400

    def __init__(self, errors, message="Validation failed"):
        super().__init__(message)
        self.errors = list(errors)


class AuthenticationError(AppError):
    status_code = 401

    def __init__(self, message="Unauthorized: Authentication failed", reason=None):
        super().__init__(message, error=reason)


class NotFoundError(AppError):
    status_code = 404


class ConflictError(AppError):
    status_code = 400


def field_error(field, message, value=None):
    return {"field": field, "message": message, "value": value}


def _debug_details(exc):
    if current_app.config.get("APP_ENV") == "production":
        return None
    return {
        "stack": "".join(traceback.format_exception(type(exc), exc, exc.__traceback__)),
        "details": repr(exc),
    }


def register_error_handlers(app):

    @app.errorhandler(ValidationError)
    def handle_validation_error(exc):
        logger.info(f"Validation failed on {request.method} {request.path}: {exc.errors}")
        return failure(exc.message, exc.status_code, errors=exc.errors)

    @app.errorhandler(AppError)
    def handle_app_error(exc):
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.path} failed: {exc.message}")
        return failure(exc.message, exc.status_code, error=exc.error)

    @app.errorhandler(sqlite3.IntegrityError)
    def handle_integrity_error(exc):
        match = _UNIQUE_RE.search(str(exc))
        if match:
            field = match.group(1)
            return failure(f"{field[:1].upper()}{field[1:]} already exists", 400)
        logger.warning(f"Integrity error on {request.path}: {exc}")
        return failure("Invalid data", 400, error=str(exc))

    @app.errorhandler(HTTPException)
    def handle_http_error(exc):
        if exc.code == 404:
            return failure(f"Route not found - {request.path}", 404)
        return failure(exc.description or exc.name, exc.code)

    @app.errorhandler(Exception)
    def handle_unexpected_error(exc):
        logger.exception(f"Unhandled error on {request.method} {request.path}")
        details = _debug_details(exc)
        message = (str(exc) if details else "") or "Internal Server Error"
        return failure(message, 500, error=details)
