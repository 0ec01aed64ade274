from __future__ import annotations

import logging

from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException

from ..core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    BusinessRuleError,
    ConflictError,
    NotFoundError,
    ValidationError,
)

logger = logging.getLogger(__name__)

# Business-rule rejections keep the 200-with-message convention clients rely on.
STATUS_BY_ERROR = (
    (ValidationError, 400),
    (AuthenticationError, 401),
    (AuthorizationError, 403),
    (NotFoundError, 404),
    (ConflictError, 409),
    (BusinessRuleError, 200),
)


def _fail(message: str, status: int):
    return jsonify({"success": False, "message": message}), status


def register_error_handlers(app: Flask) -> None:
    for exc_type, status in STATUS_BY_ERROR:

        def handler(e, _status=status):
            return _fail(str(e), _status)

        app.register_error_handler(exc_type, handler)

    @app.errorhandler(HTTPException)
    def http_error(e: HTTPException):
        return _fail(e.description or e.name, e.code or 500)

    @app.errorhandler(Exception)
    def unexpected_error(e: Exception):
        logger.exception("Unhandled error")
        if bool(app.config.get("DEBUG", False)):
            return _fail(f"Internal server error: {e}", 500)
        return _fail("Internal server error", 500)
