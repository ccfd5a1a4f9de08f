from __future__ import annotations

from typing import Any

from flask import Flask, jsonify, request
from werkzeug.exceptions import HTTPException

from ..core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    DomainError,
    IdentityProviderError,
    NotFoundError,
    ValidationError,
)
from ..core.logger import get_logger

logger = get_logger(__name__)

STATUS_BY_ERROR = (
    (ValidationError, 400),
    (AuthenticationError, 401),
    (AuthorizationError, 403),
    (NotFoundError, 404),
    (ConflictError, 409),
    (IdentityProviderError, 502),
)


def status_for(error: DomainError) -> int:
    for error_type, status in STATUS_BY_ERROR:
        if isinstance(error, error_type):
            return status
    return 400


def json_body() -> dict[str, Any]:
    body = request.get_json(silent=True)
    if body is None:
        return {}
    if not isinstance(body, dict):
        raise ValidationError("Request body must be a JSON object")
    return body


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(e: DomainError):
        status = status_for(e)
        if status >= 500:
            logger.error("{} {} -> {}: {}", request.method, request.path, status, e)
        return jsonify({"error": str(e)}), status

    @app.errorhandler(HTTPException)
    def handle_http_error(e: HTTPException):
        return jsonify({"error": e.description or e.name}), e.code

    @app.errorhandler(Exception)
    def handle_unexpected(e: Exception):
        logger.opt(exception=e).error("Unhandled error on {} {}", request.method, request.path)
        return jsonify({"error": "Internal server error"}), 500
